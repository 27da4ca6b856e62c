from __future__ import annotations

import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from tempfile import NamedTemporaryFile

_SAFE_KEY = re.compile(r"^[A-Za-z0-9._-]+$")


class KeyValueStore(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = str(value)

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """One file per key under data_dir, replaced atomically on every write."""

    def __init__(self, data_dir: str | Path, fsync_writes: bool = False) -> None:
        self.data_dir = Path(data_dir)
        self.fsync_writes = bool(fsync_writes)

    def path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"unsupported store key: {key!r}")
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile("w", delete=False, encoding="utf-8", dir=str(path.parent)) as handle:
            tmp_path = Path(handle.name)
            try:
                handle.write(value)
                handle.flush()
                if self.fsync_writes:
                    os.fsync(handle.fileno())
            except OSError:
                handle.close()
                tmp_path.unlink(missing_ok=True)
                raise
        try:
            os.replace(tmp_path, path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)
