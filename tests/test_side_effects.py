import subprocess

from randfocus_app.services import side_effects
from randfocus_app.services.side_effects import SystemNotifier, SystemSoundPlayer


def test_sound_player_uses_afplay_on_macos(monkeypatch) -> None:
    calls: list[list[str]] = []
    monkeypatch.setattr(side_effects.sys, "platform", "darwin")
    monkeypatch.setattr(side_effects.subprocess, "Popen", lambda args, **_kw: calls.append(args))

    SystemSoundPlayer().play("/System/Library/Sounds/Ping.aiff")
    assert calls == [["afplay", "/System/Library/Sounds/Ping.aiff"]]


def test_sound_player_swallows_spawn_errors(monkeypatch) -> None:
    def _boom(*_args, **_kwargs):
        raise FileNotFoundError("afplay")

    monkeypatch.setattr(side_effects.sys, "platform", "darwin")
    monkeypatch.setattr(side_effects.subprocess, "Popen", _boom)
    SystemSoundPlayer().play("/nope.aiff")


def test_notifier_escapes_applescript(monkeypatch) -> None:
    calls: list[list[str]] = []
    monkeypatch.setattr(side_effects.sys, "platform", "darwin")
    monkeypatch.setattr(side_effects.subprocess, "Popen", lambda args, **_kw: calls.append(args))

    SystemNotifier(title="Focus").notify('say "hi"')
    assert calls[0][:2] == ["osascript", "-e"]
    assert calls[0][2] == 'display notification "say \\"hi\\"" with title "Focus"'


def test_notifier_falls_back_to_stderr(monkeypatch, capsys) -> None:
    def _boom(*_args, **_kwargs):
        raise subprocess.SubprocessError("denied")

    monkeypatch.setattr(side_effects.sys, "platform", "linux")
    monkeypatch.setattr(side_effects.shutil, "which", lambda _name: "/usr/bin/notify-send")
    monkeypatch.setattr(side_effects.subprocess, "Popen", _boom)

    SystemNotifier(title="Focus").notify("Break opportunity")
    assert "[Focus] Break opportunity" in capsys.readouterr().err
