import logging
import typing
from pathlib import Path

from pg_inserter import names
from pg_inserter.errors import ExecutionError
from pg_inserter.utils import utils


logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).parent / "sql"


def read_sql_file(file_name: str) -> str:
    try:
        return (SQL_DIR / file_name).read_text(encoding="utf-8")
    except OSError as err:
        raise ExecutionError(f"error reading SQL file {file_name}: {err}") from err


def execute_sql_files(pool, sql_files: typing.Sequence[str]):
    for file_name in sql_files:
        content = read_sql_file(file_name)
        try:
            pool.execute_script(content)
        except ExecutionError as err:
            logger.error(f"Error executing SQL file {file_name}: {err}")
            raise ExecutionError(f"error executing SQL file {file_name}: {err}") from err
        logger.info(f"Executed SQL file {file_name} successfully.")


def create_tables(pool):
    execute_sql_files(pool, [names.CREATE_TABLES_FILE])


def recreate_tables(pool):
    drop_tables(pool)
    execute_sql_files(pool, [names.CREATE_TABLES_FILE, names.INSERT_DATA_FILE])


def drop_tables(pool, tables: typing.Sequence[str] = names.DEMO_TABLES):
    for table in tables:
        query = f"DROP TABLE IF EXISTS {utils.quote_ident(table)} CASCADE"
        try:
            pool.execute_script(query)
        except ExecutionError as err:
            logger.error(f"Dropping table {table} failed: {err}")
            raise ExecutionError(f"dropping table {table} failed: {err}", table) from err
        logger.info(f"Dropped table {table} (if existed)")


def confirm(prompt: str, input_func: typing.Callable[[str], str] = input) -> bool:
    try:
        answer = input_func(prompt)
    except EOFError:
        return False
    return answer.strip().lower() in ("yes", "y")
