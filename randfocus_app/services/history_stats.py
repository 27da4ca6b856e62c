from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from randfocus_app.core.models import SessionRecord, now_ms


@dataclass(frozen=True)
class TodayStats:
    sessions: int
    minutes: int


def _utc_day(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).date().isoformat()


def today_stats(history: list[SessionRecord], now: int | None = None) -> TodayStats:
    if not history:
        return TodayStats(sessions=0, minutes=0)
    today = _utc_day(now_ms() if now is None else now)

    sessions = 0
    minutes = 0
    for record in history:
        if _utc_day(record.started_at) == today:
            sessions += 1
            minutes += record.actual_duration_minutes
    return TodayStats(sessions=sessions, minutes=minutes)


def sorted_history(history: list[SessionRecord]) -> list[SessionRecord]:
    return sorted(history, key=lambda r: r.started_at, reverse=True)


def format_timestamp(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).astimezone().strftime("%b %d %H:%M")


def format_record_line(record: SessionRecord) -> str:
    title = record.description or "Focus session"
    return f"{record.id}  {title} - {record.actual_duration_minutes} min - {format_timestamp(record.started_at)}"


def format_record_detail(record: SessionRecord) -> str:
    schedule = ", ".join(str(m) for m in record.break_schedule_minutes) or "none"
    return "\n".join(
        [
            f"# {record.description or 'Focus session'}",
            "",
            f"- Started: {format_timestamp(record.started_at)}",
            f"- Ended: {format_timestamp(record.ended_at)}",
            f"- Planned: {record.planned_duration_minutes} min",
            f"- Actual: {record.actual_duration_minutes} min",
            f"- Break schedule: {schedule}",
        ]
    )
