from datetime import datetime, timezone

from randfocus_app.core.models import SessionRecord
from randfocus_app.services.history_stats import format_record_detail, sorted_history, today_stats


def _ms(year: int, month: int, day: int, hour: int = 12) -> int:
    return int(datetime(year, month, day, hour, tzinfo=timezone.utc).timestamp() * 1000)


def _record(record_id: str, started_at: int, minutes: int, description: str = "") -> SessionRecord:
    return SessionRecord(
        id=record_id,
        started_at=started_at,
        ended_at=started_at + minutes * 60_000,
        planned_duration_minutes=90,
        actual_duration_minutes=minutes,
        break_schedule_minutes=(30, 55),
        description=description,
    )


def test_today_stats_counts_only_current_utc_day() -> None:
    now = _ms(2026, 3, 4, 18)
    history = [
        _record("a", _ms(2026, 3, 4, 9), 90),
        _record("b", _ms(2026, 3, 4, 14), 25),
        _record("c", _ms(2026, 3, 3, 23), 60),
    ]
    stats = today_stats(history, now=now)
    assert stats.sessions == 2
    assert stats.minutes == 115
    assert today_stats([], now=now).sessions == 0


def test_sorted_history_newest_first() -> None:
    history = [_record("old", 1000, 5), _record("new", 9000, 5), _record("mid", 5000, 5)]
    assert [r.id for r in sorted_history(history)] == ["new", "mid", "old"]


def test_record_detail_lists_schedule_and_defaults_title() -> None:
    detail = format_record_detail(_record("x", _ms(2026, 3, 4), 42))
    assert detail.startswith("# Focus session")
    assert "- Actual: 42 min" in detail
    assert "- Planned: 90 min" in detail
    assert "- Break schedule: 30, 55" in detail

    bare = SessionRecord("y", 0, 0, 10, 0, (), "reading")
    assert "# reading" in format_record_detail(bare)
    assert "- Break schedule: none" in format_record_detail(bare)
