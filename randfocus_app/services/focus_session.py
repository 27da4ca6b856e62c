from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Sequence
from uuid import uuid4

from randfocus_app.core.break_schedule import schedule_for_config
from randfocus_app.core.models import SessionRecord, SessionState, diff_minutes, now_ms
from randfocus_app.core.session_config import SessionConfig, normalize_config
from randfocus_app.persistence.session_store import SessionStore
from randfocus_app.services.side_effects import END_SOUND, SOUND_FILES, Notifier, SoundPlayer

LOGGER = logging.getLogger(__name__)


@dataclass
class SessionView:
    active: bool
    elapsed_minutes: int
    focus_minutes: int
    description: str
    breaks_taken: int
    title: str
    tooltip: str


class FocusSessionService:
    """Lifecycle of the single randomized focus session.

    Nothing is kept in memory between calls: every entry point works on a
    state loaded from (or handed back to) the store, so the service can be
    rebuilt on each invocation. Sound and notification failures are logged
    and swallowed; store failures propagate to the caller.
    """

    def __init__(
        self,
        store: SessionStore,
        sound_player: SoundPlayer,
        notifier: Notifier,
        rng: random.Random | None = None,
        now: Callable[[], int] | None = None,
        sound_files: Sequence[str] = SOUND_FILES,
        end_sound: str = END_SOUND,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.store = store
        self.sound_player = sound_player
        self.notifier = notifier
        self._rng = rng or random.Random()
        self._now = now or now_ms
        self.sound_files = tuple(sound_files)
        self.end_sound = end_sound
        self._id_factory = id_factory or self._new_record_id

    def _new_record_id(self) -> str:
        return f"{self._now()}-{uuid4().hex[:12]}"

    def _play(self, sound: str) -> None:
        try:
            self.sound_player.play(sound)
        except Exception as exc:
            LOGGER.warning("sound side effect failed sound=%s error=%s", sound, exc)

    def _notify(self, message: str) -> None:
        try:
            self.notifier.notify(message)
        except Exception as exc:
            LOGGER.warning("notify side effect failed message=%s error=%s", message, exc)

    def _pick_unused_sound(self, used: Sequence[str]) -> str | None:
        available = [s for s in self.sound_files if s not in used]
        if not available:
            return None
        return self._rng.choice(available)

    def current_session(self) -> SessionState | None:
        return self.store.load_session()

    def history(self) -> list[SessionRecord]:
        return self.store.load_history()

    def start(
        self,
        description: str = "",
        config_input: Mapping[str, Any] | SessionConfig | None = None,
    ) -> SessionState | None:
        current = self.store.load_session()
        if current is not None and current.active:
            LOGGER.info("start rejected, session already active started_at=%s", current.started_at)
            return None

        config = normalize_config(config_input)
        schedule = schedule_for_config(config, rand_int=self._rng.randint)
        state = SessionState(
            active=True,
            started_at=self._now(),
            focus_duration_minutes=config.focus_duration_min,
            break_schedule_minutes=schedule,
            triggered_break_minutes=set(),
            used_sounds=[],
            description=(description or "").strip(),
        )
        LOGGER.debug(
            "generated break schedule focus=%s schedule=%s description=%r",
            config.focus_duration_min,
            schedule,
            state.description,
        )

        self.store.save_session(state)
        self._notify(f"Focus session started ({config.focus_duration_min} min)")
        return state

    def poll(self, state: SessionState | None, now: int) -> SessionState | None:
        """Advance one session to `now`.

        Pass the state returned by the previous call, or use `tick` to reload
        it; replaying a stale active state past the planned duration would
        close the session out a second time.
        """
        if state is None or not state.active:
            return state
        elapsed = diff_minutes(state.started_at, now)
        if elapsed >= state.focus_duration_minutes:
            self.complete(state, now)
            return state.deactivated()
        return self.check_breaks(state, elapsed)

    def tick(self, now: int | None = None) -> SessionState | None:
        return self.poll(self.store.load_session(), self._now() if now is None else now)

    def check_breaks(self, state: SessionState, elapsed_minutes: int) -> SessionState:
        newly_due = [
            m
            for m in state.break_schedule_minutes
            if m <= elapsed_minutes and m not in state.triggered_break_minutes
        ]
        if not newly_due:
            return state

        used_sounds = list(state.used_sounds)
        sound = self._pick_unused_sound(used_sounds)
        if sound is not None:
            self._play(sound)
            used_sounds.append(sound)
        else:
            LOGGER.debug("sound pool exhausted, break fires silently due=%s", newly_due)
        self._notify(f"Break opportunity - you've focused {elapsed_minutes} min")

        updated = replace(
            state,
            break_schedule_minutes=list(state.break_schedule_minutes),
            triggered_break_minutes=set(state.triggered_break_minutes) | set(newly_due),
            used_sounds=used_sounds,
        )
        self.store.save_session(updated)
        LOGGER.debug("breaks triggered due=%s elapsed=%s", newly_due, elapsed_minutes)
        return updated

    def complete(self, state: SessionState, now: int) -> SessionRecord:
        record = SessionRecord.close_out(state, ended_at=now, record_id=self._id_factory())
        self.store.append_history(record)
        # The inactive copy is left for display only; history is the real record.
        self.store.save_session(state.deactivated())
        self._play(self.end_sound)
        self._notify("Focus session complete! Take a real break")
        LOGGER.info("session complete id=%s actual=%s", record.id, record.actual_duration_minutes)
        return record

    def stop_early(self, state: SessionState) -> SessionRecord:
        record = SessionRecord.close_out(state, ended_at=self._now(), record_id=self._id_factory())
        self.store.append_history(record)
        self.store.clear_session()
        self._play(self.end_sound)
        self._notify("Focus session stopped")
        LOGGER.info("session stopped id=%s actual=%s", record.id, record.actual_duration_minutes)
        return record

    def stop_current(self) -> SessionRecord | None:
        current = self.store.load_session()
        if current is None or not current.active:
            return None
        return self.stop_early(current)

    def view(self, now: int | None = None) -> SessionView:
        state = self.store.load_session()
        if state is None or not state.active:
            return SessionView(
                active=False,
                elapsed_minutes=0,
                focus_minutes=0,
                description="",
                breaks_taken=0,
                title="Idle",
                tooltip="Random focus session (not running)",
            )
        current = self._now() if now is None else now
        elapsed = max(0, min(diff_minutes(state.started_at, current), state.focus_duration_minutes))
        return SessionView(
            active=True,
            elapsed_minutes=elapsed,
            focus_minutes=state.focus_duration_minutes,
            description=state.description,
            breaks_taken=len(state.triggered_break_minutes),
            title=f"* {elapsed}m",
            tooltip=f"Random focus session - {elapsed}/{state.focus_duration_minutes} min",
        )
