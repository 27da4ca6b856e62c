from __future__ import annotations

import json
import logging

from randfocus_app.core.models import SessionRecord, SessionState, decode_state, encode_history, encode_state
from randfocus_app.persistence.kv_store import KeyValueStore

LOGGER = logging.getLogger(__name__)

SESSION_KEY = "random-focus-session-state"
HISTORY_KEY = "random-focus-session-history"


class SessionStore:
    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv
        self._last_read_bad_records = 0

    def _read(self, key: str) -> str | None:
        try:
            return self.kv.get(key)
        except UnicodeDecodeError as exc:
            LOGGER.warning("stored value undecodable, treating as absent key=%s error=%s", key, exc.reason)
            return None

    def load_session(self) -> SessionState | None:
        raw = self._read(SESSION_KEY)
        if not raw:
            return None
        try:
            return decode_state(raw)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, OverflowError) as exc:
            LOGGER.warning("session state unreadable, treating as absent error=%s", exc)
            return None

    def save_session(self, state: SessionState | None) -> None:
        if state is None:
            self.kv.remove(SESSION_KEY)
            return
        self.kv.set(SESSION_KEY, encode_state(state))

    def clear_session(self) -> None:
        self.save_session(None)

    def load_history(self) -> list[SessionRecord]:
        self._last_read_bad_records = 0
        raw = self._read(HISTORY_KEY)
        if not raw:
            return []
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            LOGGER.warning("history unreadable, treating as empty error=%s", exc.msg)
            return []
        if not isinstance(payload, list):
            LOGGER.warning("history has unexpected shape type=%s", type(payload).__name__)
            return []

        history: list[SessionRecord] = []
        for index, item in enumerate(payload):
            try:
                history.append(SessionRecord.from_dict(item))
            except (KeyError, TypeError, ValueError, OverflowError) as exc:
                self._last_read_bad_records += 1
                LOGGER.warning("history bad record index=%s error=%s", index, exc)
        return history

    def save_history(self, history: list[SessionRecord]) -> None:
        self.kv.set(HISTORY_KEY, encode_history(history))

    def append_history(self, record: SessionRecord) -> None:
        # Read-modify-write; only one process writes at a time.
        history = self.load_history()
        history.append(record)
        self.save_history(history)
        LOGGER.debug("history appended id=%s total=%s", record.id, len(history))

    def last_read_stats(self) -> dict[str, int]:
        return {"bad_records_skipped": self._last_read_bad_records}
