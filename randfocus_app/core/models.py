from __future__ import annotations

import json
import time
from dataclasses import dataclass, field, replace
from typing import Any

MS_PER_MINUTE = 60_000


def now_ms() -> int:
    return int(time.time() * 1000)


def diff_minutes(from_ms: int, to_ms: int) -> int:
    return (int(to_ms) - int(from_ms)) // MS_PER_MINUTE


def _int_list(value: Any, name: str) -> list[int]:
    if not isinstance(value, list):
        raise ValueError(f"{name} must be a list")
    return [int(item) for item in value]


@dataclass
class SessionState:
    active: bool
    started_at: int
    focus_duration_minutes: int
    break_schedule_minutes: list[int] = field(default_factory=list)
    triggered_break_minutes: set[int] = field(default_factory=set)
    used_sounds: list[str] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "active": bool(self.active),
            "started_at": int(self.started_at),
            "focus_duration_minutes": int(self.focus_duration_minutes),
            "break_schedule_minutes": list(self.break_schedule_minutes),
            "triggered_break_minutes": sorted(self.triggered_break_minutes),
            "used_sounds": list(self.used_sounds),
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "SessionState":
        if not isinstance(payload, dict):
            raise ValueError("session payload must be an object")
        active = payload.get("active", False)
        if not isinstance(active, bool):
            raise ValueError("active must be a boolean")
        return cls(
            active=active,
            started_at=int(payload["started_at"]),
            focus_duration_minutes=int(payload["focus_duration_minutes"]),
            break_schedule_minutes=_int_list(payload.get("break_schedule_minutes", []), "break_schedule_minutes"),
            triggered_break_minutes=set(
                _int_list(payload.get("triggered_break_minutes", []), "triggered_break_minutes")
            ),
            used_sounds=[str(s) for s in payload.get("used_sounds") or []],
            description=str(payload.get("description") or ""),
        )

    def deactivated(self) -> "SessionState":
        return replace(
            self,
            active=False,
            break_schedule_minutes=list(self.break_schedule_minutes),
            triggered_break_minutes=set(self.triggered_break_minutes),
            used_sounds=list(self.used_sounds),
        )


@dataclass(frozen=True)
class SessionRecord:
    id: str
    started_at: int
    ended_at: int
    planned_duration_minutes: int
    actual_duration_minutes: int
    break_schedule_minutes: tuple[int, ...] = ()
    description: str = ""

    @classmethod
    def close_out(cls, state: SessionState, ended_at: int, record_id: str) -> "SessionRecord":
        # Clock skew can put ended_at before started_at; never report negative focus.
        actual = max(0, diff_minutes(state.started_at, ended_at))
        return cls(
            id=record_id,
            started_at=int(state.started_at),
            ended_at=int(ended_at),
            planned_duration_minutes=int(state.focus_duration_minutes),
            actual_duration_minutes=actual,
            break_schedule_minutes=tuple(state.break_schedule_minutes),
            description=state.description,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "started_at": int(self.started_at),
            "ended_at": int(self.ended_at),
            "planned_duration_minutes": int(self.planned_duration_minutes),
            "actual_duration_minutes": int(self.actual_duration_minutes),
            "break_schedule_minutes": list(self.break_schedule_minutes),
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "SessionRecord":
        if not isinstance(payload, dict):
            raise ValueError("record payload must be an object")
        record_id = str(payload.get("id", "") or "").strip()
        if not record_id:
            raise ValueError("record id missing")
        return cls(
            id=record_id,
            started_at=int(payload["started_at"]),
            ended_at=int(payload["ended_at"]),
            planned_duration_minutes=int(payload["planned_duration_minutes"]),
            actual_duration_minutes=max(0, int(payload["actual_duration_minutes"])),
            break_schedule_minutes=tuple(
                _int_list(payload.get("break_schedule_minutes", []), "break_schedule_minutes")
            ),
            description=str(payload.get("description") or ""),
        )


def encode_state(state: SessionState) -> str:
    return json.dumps(state.to_dict(), ensure_ascii=True)


def decode_state(raw: str) -> SessionState:
    return SessionState.from_dict(json.loads(raw))


def encode_record(record: SessionRecord) -> str:
    return json.dumps(record.to_dict(), ensure_ascii=True)


def decode_record(raw: str) -> SessionRecord:
    return SessionRecord.from_dict(json.loads(raw))


def encode_history(history: list[SessionRecord]) -> str:
    return json.dumps([record.to_dict() for record in history], ensure_ascii=True)


def decode_history(raw: str) -> list[SessionRecord]:
    payload = json.loads(raw)
    if not isinstance(payload, list):
        raise ValueError("history payload must be a list")
    return [SessionRecord.from_dict(item) for item in payload]
