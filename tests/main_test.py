import argparse
import signal
import threading

import pytest

import main
import utils
from pg_inserter import settings
from pg_inserter.errors import ConnectivityError


def make_args(action, env=None):
    args = argparse.Namespace(
        config="settings.json",
        env=env,
        insert=False,
        create_tables=False,
        drop_tables=False,
        recreate=False,
        validate=False,
    )
    setattr(args, action, True)
    return args


@pytest.fixture
def configuration(write_settings, settings_dict):
    settings.load_settings(write_settings(settings_dict))
    return settings.get_inserter_configuration()


def test_parser_requires_one_action():
    parser = main.build_parser()

    with pytest.raises(SystemExit):
        parser.parse_args(["--config", "settings.json"])
    with pytest.raises(SystemExit):
        parser.parse_args(["--config", "settings.json", "--insert", "--validate"])
    with pytest.raises(SystemExit):
        parser.parse_args(["--insert"])

    args = parser.parse_args(["--config", "c.json", "--drop-tables", "--env", "x.env"])
    assert args.drop_tables and args.env == "x.env"


def test_main_rejects_bad_config(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[]")

    with pytest.raises(SystemExit) as exc_info:
        main.main(["--config", str(path), "--validate"])
    assert exc_info.value.code == 2


def test_main_rejects_invalid_cadence(write_settings, settings_dict):
    settings_dict["inserter"]["timestamp_inserts"]["every_n_seconds"] = -2

    with pytest.raises(SystemExit) as exc_info:
        main.main(["--config", write_settings(settings_dict), "--insert"])
    assert exc_info.value.code == 2


def test_main_parses_configuration_once(monkeypatch, write_settings, settings_dict):
    calls = []

    def counting(*args, **kwargs):
        calls.append(args)
        return settings.get_inserter_configuration(*args, **kwargs)

    monkeypatch.setattr(main, "get_inserter_configuration", counting)
    monkeypatch.setattr(main.log_config, "setup_logger_settings", lambda: None)
    connector = utils.FakeConnector()

    assert main.main(["--config", write_settings(settings_dict), "--validate"], connector) == 0
    assert len(calls) == 1
    assert connector.closed


def test_validate(configuration):
    connector = utils.FakeConnector()
    assert main.process(make_args("validate", env="x.env"), configuration, connector) == 0
    assert connector.closed
    assert connector.env_file == "x.env"
    assert connector.settings["host"] == "localhost"


def test_validate_failure(configuration):
    connector = utils.FakeConnector()
    connector.pool.ping_error = ConnectivityError("could not connect to database")
    assert main.process(make_args("validate"), configuration, connector) == 1


def test_connection_failure_is_fatal(configuration):
    connector = utils.FakeConnector(pool_error=ConnectivityError("refused"))
    assert main.process(make_args("insert"), configuration, connector) == 1


def test_create_tables(configuration):
    connector = utils.FakeConnector()
    assert main.process(make_args("create_tables"), configuration, connector) == 0
    assert len(connector.pool.scripts) == 1


def test_recreate_failure(configuration):
    connector = utils.FakeConnector()
    connector.pool.fail_scripts = True
    assert main.process(make_args("recreate"), configuration, connector) == 1
    assert connector.closed


@pytest.mark.parametrize("answer,dropped", [("yes", True), ("no", False)])
def test_drop_tables_prompt(fake_pool, answer, dropped):
    assert main.run_drop_tables(fake_pool, lambda prompt: answer) == 0
    assert bool(fake_pool.scripts) is dropped


def test_run_insert_with_nothing_enabled(fake_pool, stop_event):
    configuration = settings.get_inserter_configuration({})
    assert main.run_insert(fake_pool, configuration, stop_event) == 0
    assert fake_pool.calls == []


def test_run_insert_until_cancelled(fake_pool, stop_event, run_in_thread):
    configuration = settings.get_inserter_configuration(
        {"timestamp_inserts": {"enabled": True, "every_n_seconds": 1}}
    )
    thread, result = run_in_thread(main.run_insert, fake_pool, configuration, stop_event)

    assert utils.wait_until(lambda: fake_pool.count("timestamp") == 1)
    stop_event.set()
    thread.join(2)

    assert not thread.is_alive()
    assert result["value"] == 0


def test_signal_sets_stop_event():
    previous = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
    stop_event = threading.Event()
    try:
        main.install_signal_handlers(stop_event)
        signal.raise_signal(signal.SIGINT)
        assert stop_event.is_set()
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
