import argparse
import logging
import signal
import sys
import threading

from pg_inserter import log_config
from pg_inserter.errors import ConfigurationError, ConnectivityError, ExecutionError
from pg_inserter.monitoring.metrics import MetricsCollectorFactory
from pg_inserter.preparations import preparations
from pg_inserter.settings import load_settings, get_settings, get_inserter_configuration
from pg_inserter.utils.db_connector import DatabaseConnector
from pg_inserter.workers import supervisor


logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Create, seed and continuously populate a demo PostgreSQL schema."
    )
    parser.add_argument("--config", type=str, required=True, help="Path to config file")
    parser.add_argument("--env", type=str, default=None, help="Path to a .env file")

    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument("--insert", action="store_true", help="Insert data")
    actions.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables without inserting data",
    )
    actions.add_argument("--drop-tables", action="store_true", help="Drop all tables")
    actions.add_argument(
        "--recreate",
        action="store_true",
        help="Drop and recreate all tables and insert data",
    )
    actions.add_argument(
        "--validate",
        action="store_true",
        help="Validate database connection and config",
    )
    return parser


def install_signal_handlers(stop_event: threading.Event):
    def handler(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, stopping workers...")
        stop_event.set()

    signal.signal(signal.SIGINT, handler)
    signal.signal(signal.SIGTERM, handler)


def run_validate(pool):
    try:
        pool.ping()
    except ConnectivityError as err:
        logger.error(f"Validation failed: {err}")
        return 1
    logger.info("Validation successful: config is valid and database connection established.")
    return 0


def run_insert(pool, configuration, stop_event=None):
    if stop_event is None:
        stop_event = threading.Event()
        install_signal_handlers(stop_event)

    logger.info("Running insert...")
    supervisor.run(configuration, pool, stop_event)
    return 0


def run_drop_tables(pool, input_func=input):
    if not preparations.confirm(
        "Are you sure you want to drop all tables? (yes/no): ", input_func
    ):
        logger.info("Aborted. No tables were dropped.")
        return 0

    logger.info("Dropping all tables...")
    preparations.drop_tables(pool)
    return 0


def run_recreate(pool):
    logger.info("Recreating all tables...")
    preparations.recreate_tables(pool)
    logger.info("Recreation completed successfully.")
    return 0


def run_create_tables(pool):
    logger.info("Creating tables without inserting data...")
    preparations.create_tables(pool)
    logger.info("Tables created successfully.")
    return 0


def process(args, configuration, connector_cls=DatabaseConnector):
    connector = connector_cls(get_settings(), args.env)
    try:
        pool = connector.get_pool()
    except ConnectivityError as err:
        logger.error(f"Database connection failed: {err}")
        return 1

    try:
        if args.validate:
            return run_validate(pool)
        if args.insert:
            return run_insert(pool, configuration)
        if args.drop_tables:
            return run_drop_tables(pool)
        if args.recreate:
            return run_recreate(pool)
        if args.create_tables:
            return run_create_tables(pool)
    except ExecutionError as err:
        logger.error(f"Error during execution: {err}")
        return 1
    finally:
        connector.close()

    return 0


def main(argv=None, connector_cls=DatabaseConnector):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        load_settings(args.config)
        configuration = get_inserter_configuration()
    except ConfigurationError as err:
        parser.error(f"error loading config: {err}")

    log_config.setup_logger_settings()
    MetricsCollectorFactory.initialize()
    logger.info("Config loaded successfully")

    return process(args, configuration, connector_cls)


if __name__ == "__main__":
    sys.exit(main())
