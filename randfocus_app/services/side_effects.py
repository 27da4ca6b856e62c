from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from abc import ABC, abstractmethod

LOGGER = logging.getLogger(__name__)

SOUND_FILES = (
    "/System/Library/Sounds/Ping.aiff",
    "/System/Library/Sounds/Pop.aiff",
    "/System/Library/Sounds/Submarine.aiff",
    "/System/Library/Sounds/Hero.aiff",
    "/System/Library/Sounds/Sosumi.aiff",
)
END_SOUND = "/System/Library/Sounds/Glass.aiff"

NOTIFY_TITLE = "Random Focus"


def _spawn(args: list[str]) -> None:
    subprocess.Popen(
        args,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
    )


class SoundPlayer(ABC):
    @abstractmethod
    def play(self, sound: str) -> None:
        raise NotImplementedError


class Notifier(ABC):
    @abstractmethod
    def notify(self, message: str) -> None:
        raise NotImplementedError


class SystemSoundPlayer(SoundPlayer):
    """Fire-and-forget playback through the platform's command line player."""

    def play(self, sound: str) -> None:
        try:
            if sys.platform == "darwin":
                _spawn(["afplay", sound])
                return
            if sys.platform.startswith("win"):
                escaped = sound.replace("'", "''")
                ps = (
                    "Add-Type -AssemblyName presentationCore; "
                    "$p = New-Object System.Windows.Media.MediaPlayer; "
                    f"$p.Open([Uri]'{escaped}'); "
                    "$p.Play(); "
                    "Start-Sleep -Milliseconds 3000; "
                    "$p.Close();"
                )
                _spawn(["powershell", "-NoProfile", "-Command", ps])
                return
            if shutil.which("paplay"):
                _spawn(["paplay", sound])
                return
            LOGGER.debug("no sound player available sound=%s", sound)
        except (OSError, subprocess.SubprocessError) as exc:
            LOGGER.warning("sound playback failed sound=%s error=%s", sound, exc)


class SystemNotifier(Notifier):
    def __init__(self, title: str = NOTIFY_TITLE) -> None:
        self.title = title

    def notify(self, message: str) -> None:
        try:
            if sys.platform == "darwin":
                script = f"display notification {_applescript_str(message)} with title {_applescript_str(self.title)}"
                _spawn(["osascript", "-e", script])
                return
            if shutil.which("notify-send"):
                _spawn(["notify-send", self.title, message])
                return
        except (OSError, subprocess.SubprocessError) as exc:
            LOGGER.warning("notification failed error=%s", exc)
        print(f"[{self.title}] {message}", file=sys.stderr)


class SilentSoundPlayer(SoundPlayer):
    def play(self, sound: str) -> None:
        LOGGER.debug("sound muted sound=%s", sound)


class SilentNotifier(Notifier):
    def notify(self, message: str) -> None:
        LOGGER.debug("notification muted message=%s", message)


def _applescript_str(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
