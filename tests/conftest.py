import copy
import threading

import pytest

import utils
from pg_inserter import settings
from pg_inserter.monitoring.metrics import MetricsCollectorFactory


SETTINGS = {
    "host": "localhost",
    "port": "5432",
    "database": "demo",
    "username": "postgres",
    "password": "postgres",
    "inserter": {
        "timestamp_inserts": {"enabled": True, "every_n_seconds": 2},
        "bigtable_inserts": {"enabled": False, "every_n_seconds": 0},
        "main_tables_inserts": {"enabled": True, "every_n_seconds": 0},
    },
}


@pytest.fixture(autouse=True)
def reset_state():
    MetricsCollectorFactory.db_path = None
    MetricsCollectorFactory.disable_metrics = True
    settings.SETTINGS = dict()
    yield
    MetricsCollectorFactory.db_path = None
    MetricsCollectorFactory.disable_metrics = True
    settings.SETTINGS = dict()


@pytest.fixture
def settings_dict():
    return copy.deepcopy(SETTINGS)


@pytest.fixture
def write_settings(tmp_path):
    def _write(data, name="settings.json"):
        path = tmp_path / name
        utils.dump_json(path, data)
        return str(path)

    return _write


@pytest.fixture
def fake_pool():
    return utils.FakePool()


@pytest.fixture
def stop_event():
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture
def run_in_thread():
    threads = []

    def _run(target, *args):
        result = {}

        def _target():
            result["value"] = target(*args)

        thread = threading.Thread(target=_target, daemon=True)
        thread.start()
        threads.append(thread)
        return thread, result

    yield _run

    for thread in threads:
        thread.join(5)
