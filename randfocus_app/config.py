from __future__ import annotations

import os
import platform
from dataclasses import dataclass
from pathlib import Path

_TRUTHY = {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY


def _default_data_dir() -> Path:
    override = os.getenv("RANDFOCUS_DATA_DIR", "").strip()
    if override:
        return Path(override)

    system = platform.system().lower()
    if system == "windows":
        appdata = os.getenv("APPDATA", "").strip()
        if appdata:
            return Path(appdata) / "randfocus"
    return Path.home() / ".randfocus"


@dataclass(frozen=True)
class RandFocusConfig:
    data_dir: Path
    store_fsync: bool
    sound_enabled: bool
    notify_enabled: bool
    poll_seconds: int
    log_level: str

    @classmethod
    def from_env(cls) -> "RandFocusConfig":
        log_level = os.getenv("RANDFOCUS_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
        return cls(
            data_dir=_default_data_dir(),
            store_fsync=_env_flag("RANDFOCUS_STORE_FSYNC", False),
            sound_enabled=_env_flag("RANDFOCUS_SOUND", True),
            notify_enabled=_env_flag("RANDFOCUS_NOTIFY", True),
            poll_seconds=max(1, _env_int("RANDFOCUS_POLL_SECONDS", 30)),
            log_level=log_level,
        )
