import logging.config
from pathlib import Path

from pg_inserter.settings import get_settings


FORMATTERS = {
    "detailed": {
        "format": "%(asctime)s.%(msecs)03d - [%(levelname)s] - %(name)s : %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    },
}


def setup_logging(log_file_path: str = None, error_log_file_path: str = None):
    handlers = {
        "console": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "formatter": "detailed",
        },
    }

    if log_file_path is not None:
        handlers["file_all"] = {
            "level": "DEBUG",
            "class": "logging.FileHandler",
            "filename": log_file_path,
            "formatter": "detailed",
        }
    if error_log_file_path is not None:
        handlers["file_error"] = {
            "level": "ERROR",
            "class": "logging.FileHandler",
            "filename": error_log_file_path,
            "formatter": "detailed",
        }

    LOGGING_CONFIG = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": FORMATTERS,
        "handlers": handlers,
        "loggers": {
            "": {  # root logger
                "handlers": list(handlers),
                "level": "DEBUG",
                "propagate": True,
            }
        },
    }

    logging.config.dictConfig(LOGGING_CONFIG)


def setup_logger_settings():
    settings = get_settings()

    if "logs_dir" not in settings:
        setup_logging()
        return

    logs_dir = settings["logs_dir"]
    dir_path = Path(logs_dir)
    dir_path.mkdir(parents=True, exist_ok=True)

    setup_logging(logs_dir + "/logs.log", logs_dir + "/error_logs.log")
