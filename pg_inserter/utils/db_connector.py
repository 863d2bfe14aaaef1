import contextlib
import logging
import os
import re
import threading
import typing

import psycopg2
import psycopg2.extensions
import psycopg2.pool
from dotenv import load_dotenv

from pg_inserter.errors import ConnectivityError, ExecutionError

logger = logging.getLogger(__name__)

CONN_STRING_ENV = "PG_INSERTER_CONN_STRING"

MIN_CONNS = 1
MAX_CONNS = 5
CONNECT_TIMEOUT_S = 3
DEFAULT_TIMEOUT_S = 5


def build_conn_string(settings: dict) -> str:
    return psycopg2.extensions.make_dsn(
        host=settings["host"],
        port=settings["port"],
        dbname=settings["database"],
        user=settings["username"],
        password=settings["password"],
        connect_timeout=CONNECT_TIMEOUT_S,
    )


def _extract_host(dsn):
    match = re.search(r"host=([^ ]+)", dsn)
    if match:
        return "host=" + match.group(1)
    return None


class ConnectionPool:
    """Thread-safe pool shared by all insert workers.

    psycopg2's ThreadedConnectionPool raises PoolError once every connection
    is checked out, so a bounded semaphore sized to maxconn sits in front of
    it: callers past the limit wait for a free slot (up to their deadline)
    instead of failing.
    """

    def __init__(self, conn_string: str, minconn: int = MIN_CONNS, maxconn: int = MAX_CONNS):
        self.host = _extract_host(conn_string)
        try:
            self.pool = psycopg2.pool.ThreadedConnectionPool(minconn, maxconn, conn_string)
        except psycopg2.Error as err:
            logger.error(f"Error occurred while connecting to database: {err}")
            raise ConnectivityError(f"cannot connect to database ({self.host}): {err}") from err

        self.slots = threading.BoundedSemaphore(maxconn)
        self.closed = False
        logger.info(f"Connection pool opened ({self.host}, max {maxconn} connections)")

    @contextlib.contextmanager
    def connection(
        self,
        timeout_s: typing.Optional[float] = None,
        table_name: typing.Optional[str] = None,
    ):
        if not self.slots.acquire(timeout=timeout_s):
            raise ExecutionError(f"no free connection within {timeout_s}s", table_name)

        try:
            try:
                conn = self.pool.getconn()
            except psycopg2.Error as err:
                raise ExecutionError(f"cannot acquire connection: {err}", table_name) from err

            broken = False
            try:
                conn.autocommit = True
                yield conn
            except (psycopg2.OperationalError, psycopg2.InterfaceError):
                broken = True
                raise
            finally:
                self.pool.putconn(conn, close=broken or bool(conn.closed))
        finally:
            self.slots.release()

    def execute(
        self,
        query: str,
        params: typing.Optional[typing.Sequence] = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        table_name: typing.Optional[str] = None,
    ) -> int:
        """Run one parameterized statement bound to a deadline; returns the row count."""
        try:
            with self.connection(timeout_s, table_name) as conn:
                with conn.cursor() as cur:
                    cur.execute("SET statement_timeout = %s", (int(timeout_s * 1000),))
                    cur.execute(query, params)
                    return cur.rowcount
        except psycopg2.Error as err:
            raise ExecutionError(str(err).strip(), table_name) from err

    def execute_script(self, sql: str):
        try:
            with self.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SET statement_timeout = 0")
                    cur.execute(sql)
        except psycopg2.Error as err:
            raise ExecutionError(str(err).strip()) from err

    def ping(self, timeout_s: float = DEFAULT_TIMEOUT_S):
        try:
            self.execute("SELECT 1", timeout_s=timeout_s)
        except ExecutionError as err:
            raise ConnectivityError(f"could not connect to database: {err}") from err

    def close(self):
        if self.closed:
            return
        self.pool.closeall()
        self.closed = True
        logger.info(f"Connection pool closed ({self.host})")


class DatabaseConnector:
    def __init__(self, settings: dict, env_file: typing.Optional[str] = None):
        load_dotenv(env_file)

        self.conn_string = os.getenv(CONN_STRING_ENV) or build_conn_string(settings)
        self.pools: typing.List[ConnectionPool] = []

    def get_pool(self, minconn: int = MIN_CONNS, maxconn: int = MAX_CONNS) -> ConnectionPool:
        pool = ConnectionPool(self.conn_string, minconn, maxconn)
        self.pools.append(pool)
        return pool

    def close(self):
        for pool in self.pools:
            pool.close()
        self.pools = []

    def __del__(self):
        self.close()
