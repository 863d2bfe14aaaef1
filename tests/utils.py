import json
import threading
import time
import typing

from pg_inserter.errors import ExecutionError


def load_json(filepath):
    with open(filepath, "r", encoding="utf-8") as file:
        return json.load(file)


def dump_json(filepath, data):
    with open(filepath, "w", encoding="utf-8") as file:
        json.dump(data, file, ensure_ascii=False, indent=4)


def wait_until(predicate, timeout_s=2.0, poll_s=0.005):
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(poll_s)
    return predicate()


class Call(typing.NamedTuple):
    table_name: str
    query: str
    params: typing.Optional[list]
    timeout_s: float
    at: float


class FakePool:
    """In-memory stand-in for ConnectionPool; fails every call for fail_tables."""

    def __init__(self, fail_tables=(), delay_s=0.0):
        self.fail_tables = set(fail_tables)
        self.delay_s = delay_s
        self.lock = threading.Lock()
        self.calls: typing.List[Call] = []
        self.scripts: typing.List[str] = []
        self.fail_scripts = False
        self.ping_error = None

    def execute(self, query, params=None, timeout_s=5, table_name=None):
        if self.delay_s:
            time.sleep(self.delay_s)
        if table_name in self.fail_tables:
            raise ExecutionError(f"forced failure for {table_name}", table_name)
        with self.lock:
            self.calls.append(Call(table_name, query, params, timeout_s, time.monotonic()))
        return 1

    def execute_script(self, sql):
        if self.fail_scripts:
            raise ExecutionError("relation does not exist")
        with self.lock:
            self.scripts.append(sql)

    def ping(self, timeout_s=5):
        if self.ping_error is not None:
            raise self.ping_error

    def count(self, table_name):
        with self.lock:
            return sum(1 for call in self.calls if call.table_name == table_name)

    def times(self, table_name):
        with self.lock:
            return [call.at for call in self.calls if call.table_name == table_name]


class FakeConnector:
    def __init__(self, pool=None, pool_error=None):
        self.pool = pool if pool is not None else FakePool()
        self.pool_error = pool_error
        self.closed = False

    def __call__(self, settings, env_file=None):
        self.settings = settings
        self.env_file = env_file
        return self

    def get_pool(self):
        if self.pool_error is not None:
            raise self.pool_error
        return self.pool

    def close(self):
        self.closed = True
