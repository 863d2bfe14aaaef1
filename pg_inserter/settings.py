import json
import logging
import typing

from pg_inserter.errors import ConfigurationError


logger = logging.getLogger(__name__)

SETTINGS = dict()

CONNECTION_KEYS = ("host", "port", "database", "username", "password")

TIMESTAMP = "timestamp"
BIGTABLE = "bigtable"
MAIN_TABLES = "main-tables"
WAL_SWITCHER = "wal-switcher"

# JSON key under "inserter" -> category name
CATEGORY_KEYS = {
    "timestamp_inserts": TIMESTAMP,
    "bigtable_inserts": BIGTABLE,
    "main_tables_inserts": MAIN_TABLES,
    "wal_switcher": WAL_SWITCHER,
}

GIBBERISH_MODE = "gibberish-data"
REALISTIC_MODE = "realistic-data"
VALID_MODES = (GIBBERISH_MODE, REALISTIC_MODE)


class CategorySettings(typing.NamedTuple):
    enabled: bool = False
    interval_seconds: typing.Optional[int] = None
    retry_after_seconds: typing.Optional[int] = None
    mode: str = GIBBERISH_MODE


def load_settings(path: str):
    try:
        with open(path, "r") as f:
            settings = json.load(f)
    except OSError as err:
        raise ConfigurationError(f"cannot open config file: {err}") from err
    except json.JSONDecodeError as err:
        raise ConfigurationError(f"cannot parse config file: {err}") from err

    if not isinstance(settings, dict):
        raise ConfigurationError("config file must contain a JSON object")

    missing = [key for key in CONNECTION_KEYS if key not in settings]
    if missing:
        raise ConfigurationError(f"missing connection settings: {', '.join(missing)}")

    global SETTINGS
    SETTINGS = settings
    return SETTINGS


def get_settings():
    return SETTINGS


def get_inserter_settings():
    return SETTINGS.get("inserter") or {}


def _non_negative_int(category: str, name: str, value):
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{category}.{name} must be an integer, got {value!r}")
    if value < 0:
        raise ConfigurationError(f"{category}.{name} must not be negative, got {value}")
    return value


def parse_category(category: str, raw) -> CategorySettings:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{category} settings must be an object")

    mode = raw.get("mode", GIBBERISH_MODE)
    if not isinstance(mode, str) or mode.lower() not in VALID_MODES:
        raise ConfigurationError(
            f"invalid {category}.mode '{mode}', must be one of {list(VALID_MODES)}"
        )

    return CategorySettings(
        enabled=raw.get("enabled") is True,
        interval_seconds=_non_negative_int(
            category, "every_n_seconds", raw.get("every_n_seconds")
        ),
        retry_after_seconds=_non_negative_int(
            category, "retry_after_seconds", raw.get("retry_after_seconds")
        ),
        mode=mode.lower(),
    )


def get_inserter_configuration(inserter_settings=None) -> typing.Dict[str, CategorySettings]:
    if inserter_settings is None:
        inserter_settings = get_inserter_settings()

    configuration = {category: CategorySettings() for category in CATEGORY_KEYS.values()}

    for key, raw in inserter_settings.items():
        category = CATEGORY_KEYS.get(key)
        if category is None:
            logger.warning(f"Unknown inserter setting '{key}' ignored")
            continue
        configuration[category] = parse_category(key, raw)

    return configuration
