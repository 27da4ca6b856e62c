import json
from argparse import Namespace

from randfocus_app import cli
from randfocus_app.persistence.kv_store import JsonFileKeyValueStore
from randfocus_app.persistence.session_store import SessionStore


def _quiet(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("RANDFOCUS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("RANDFOCUS_SOUND", "0")
    monkeypatch.setenv("RANDFOCUS_NOTIFY", "off")


def _start_args(**overrides) -> Namespace:
    values = {
        "description": "draft",
        "focus": "45",
        "no_break_start": None,
        "no_break_end": None,
        "min_interval": None,
        "max_interval": None,
    }
    values.update(overrides)
    return Namespace(**values)


def test_cli_config_reflects_env(monkeypatch, capsys, tmp_path) -> None:
    _quiet(monkeypatch, tmp_path)
    monkeypatch.setenv("RANDFOCUS_POLL_SECONDS", "not-a-number")
    rc = cli._cmd_config(None)
    payload = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert payload["data_dir"] == str(tmp_path)
    assert payload["sound_enabled"] is False
    assert payload["notify_enabled"] is False
    assert payload["poll_seconds"] == 30


def test_cli_start_status_stop_flow(monkeypatch, capsys, tmp_path) -> None:
    _quiet(monkeypatch, tmp_path)

    assert cli._cmd_start(_start_args()) == 0
    assert "Focus session started (45 min)" in capsys.readouterr().out

    assert cli._cmd_start(_start_args(description="second")) == 1
    assert "already running" in capsys.readouterr().err

    assert cli._cmd_status(None) == 0
    status = json.loads(capsys.readouterr().out)
    assert status["active"] is True
    assert status["focus_minutes"] == 45
    assert status["description"] == "draft"
    assert status["today"]["sessions"] == 0

    assert cli._cmd_stop(None) == 0
    capsys.readouterr()
    assert cli._cmd_stop(None) == 1

    store = SessionStore(JsonFileKeyValueStore(tmp_path))
    assert store.load_session() is None
    assert len(store.load_history()) == 1


def test_cli_history_and_show(monkeypatch, capsys, tmp_path) -> None:
    _quiet(monkeypatch, tmp_path)
    cli._cmd_start(_start_args(description="essay"))
    cli._cmd_stop(None)
    capsys.readouterr()

    assert cli._cmd_history(Namespace(n=5)) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0].startswith("Today: 1 sessions")
    assert "essay" in lines[1]

    record_id = SessionStore(JsonFileKeyValueStore(tmp_path)).load_history()[0].id
    assert cli._cmd_show(Namespace(record_id=record_id)) == 0
    assert "# essay" in capsys.readouterr().out
    assert cli._cmd_show(Namespace(record_id="missing")) == 1


def test_cli_watch_iterations(monkeypatch, capsys, tmp_path) -> None:
    _quiet(monkeypatch, tmp_path)
    rc = cli._cmd_watch(Namespace(interval=0.001, iterations=2))
    out = capsys.readouterr().out.strip().splitlines()
    assert rc == 0
    assert len(out) == 2
    assert all(json.loads(line)["title"] == "Idle" for line in out)


def test_cli_main_dispatches(monkeypatch, capsys, tmp_path) -> None:
    _quiet(monkeypatch, tmp_path)
    assert cli.main(["today"]) == 0
    assert json.loads(capsys.readouterr().out) == {"sessions": 0, "minutes": 0}
