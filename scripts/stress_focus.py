from __future__ import annotations

import argparse
import json
import random
import shutil
import sys
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from randfocus_app.core.models import MS_PER_MINUTE
from randfocus_app.persistence.kv_store import JsonFileKeyValueStore
from randfocus_app.persistence.session_store import SessionStore
from randfocus_app.services.focus_session import FocusSessionService
from randfocus_app.services.side_effects import END_SOUND, Notifier, SoundPlayer


class SimClock:
    def __init__(self, wall_start_ms: int = 1_700_000_000_000) -> None:
        self.wall_ms = wall_start_ms

    def now(self) -> int:
        return self.wall_ms

    def advance(self, seconds: float) -> None:
        self.wall_ms += int(seconds * 1000)


class RecordingSound(SoundPlayer):
    def __init__(self) -> None:
        self.played: list[str] = []

    def play(self, sound: str) -> None:
        self.played.append(sound)


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)


@dataclass
class Metrics:
    sessions_started: int = 0
    start_rejections: int = 0
    sessions_completed: int = 0
    sessions_stopped: int = 0
    polls: int = 0
    restarts: int = 0
    break_notifications: int = 0
    breaks_scheduled: int = 0
    breaks_triggered: int = 0
    invariant_violations: int = 0
    violation_samples: list[str] = field(default_factory=list)

    def violation(self, sample: str) -> None:
        self.invariant_violations += 1
        if len(self.violation_samples) < 8:
            self.violation_samples.append(sample)


def _check_state(service: FocusSessionService, metrics: Metrics) -> None:
    state = service.current_session()
    if state is None:
        return
    schedule = state.break_schedule_minutes
    if any(b <= a for a, b in zip(schedule, schedule[1:])):
        metrics.violation(f"schedule not increasing {schedule}")
    if not state.triggered_break_minutes.issubset(set(schedule)):
        metrics.violation("triggered break outside schedule")
    if len(set(state.used_sounds)) != len(state.used_sounds):
        metrics.violation("sound repeated within session")


def run_stress_focus(args: argparse.Namespace) -> int:
    random.seed(args.seed)

    workdir = Path(args.workdir).resolve()
    if args.clean and workdir.exists():
        shutil.rmtree(workdir)
    workdir.mkdir(parents=True, exist_ok=True)
    (workdir / "logs").mkdir(parents=True, exist_ok=True)

    clock = SimClock()
    sound = RecordingSound()
    notifier = RecordingNotifier()
    store = SessionStore(JsonFileKeyValueStore(workdir / "store", fsync_writes=False))
    metrics = Metrics()

    def build() -> FocusSessionService:
        return FocusSessionService(
            store=store,
            sound_player=sound,
            notifier=notifier,
            rng=random.Random(random.random()),
            now=clock.now,
        )

    service = build()
    total_steps = max(1, int(args.hours * 3600) // max(1, int(args.step_seconds)))
    t0 = time.monotonic()

    for _step in range(total_steps):
        state = service.current_session()
        if state is None or not state.active:
            if random.random() < args.start_rate:
                started = service.start(
                    "stress",
                    {
                        "focusDurationMin": random.randint(args.min_focus, args.max_focus),
                        "noBreakAtStartMin": random.randint(0, 20),
                        "noBreakAtEndMin": random.randint(0, 15),
                        "minBreakIntervalMin": random.randint(1, 10),
                        "maxBreakIntervalMin": random.randint(1, 30),
                    },
                )
                if started is None:
                    metrics.violation("start rejected while idle")
                else:
                    metrics.sessions_started += 1
                    metrics.breaks_scheduled += len(started.break_schedule_minutes)
        else:
            if service.start("again") is not None:
                metrics.violation("second start accepted while active")
            else:
                metrics.start_rejections += 1
            if random.random() < args.stop_rate:
                service.stop_early(state)
                metrics.sessions_stopped += 1
                metrics.breaks_triggered += len(state.triggered_break_minutes)

        history_before = len(store.load_history())
        notes_before = len(notifier.messages)
        before = service.current_session()
        polls = 1 + (random.randint(1, 3) if random.random() < args.repoll_rate else 0)
        for _ in range(polls):
            service.tick()
            metrics.polls += 1
        after = service.current_session()

        history_delta = len(store.load_history()) - history_before
        break_notes = [m for m in notifier.messages[notes_before:] if m.startswith("Break opportunity")]
        metrics.break_notifications += len(break_notes)
        if len(break_notes) > 1:
            metrics.violation("repeated polls fired more than one break notification")
        if before is not None and before.active and after is not None and not after.active:
            metrics.sessions_completed += 1
            metrics.breaks_triggered += len(after.triggered_break_minutes)
            if history_delta != 1:
                metrics.violation(f"completion appended {history_delta} records")
        elif history_delta != 0:
            metrics.violation(f"poll appended {history_delta} records without completion")

        _check_state(service, metrics)

        if random.random() < args.restart_rate:
            metrics.restarts += 1
            service = build()

        clock.advance(args.step_seconds)
        if random.random() < args.time_jump_rate:
            clock.advance(args.time_jump_minutes * MS_PER_MINUTE / 1000)

    history = store.load_history()
    closed = metrics.sessions_completed + metrics.sessions_stopped
    fail_reasons: list[str] = []
    if len(history) != closed:
        fail_reasons.append(f"history size {len(history)} != closed sessions {closed}")
    if sound.played.count(END_SOUND) != closed:
        fail_reasons.append("end sound count does not match closed sessions")
    if any(r.actual_duration_minutes < 0 for r in history):
        fail_reasons.append("negative actual duration recorded")
    if metrics.invariant_violations > 0:
        fail_reasons.append("session invariant violation detected")

    status = "PASS" if not fail_reasons else "FAIL"
    summary = {
        "status": status,
        "seed": args.seed,
        "runtime_simulated_seconds": int(args.hours * 3600),
        "runtime_wall_seconds": round(time.monotonic() - t0, 3),
        "metrics": {
            "sessions_started": metrics.sessions_started,
            "sessions_completed": metrics.sessions_completed,
            "sessions_stopped": metrics.sessions_stopped,
            "start_rejections": metrics.start_rejections,
            "polls": metrics.polls,
            "restarts": metrics.restarts,
            "breaks_scheduled": metrics.breaks_scheduled,
            "breaks_triggered": metrics.breaks_triggered,
            "break_notifications": metrics.break_notifications,
            "invariant_violations": metrics.invariant_violations,
        },
        "fail_reasons": fail_reasons,
        "samples": metrics.violation_samples,
        "workdir": str(workdir),
    }

    stamp = datetime.now(tz=timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    out_path = workdir / "logs" / f"stress_focus_{stamp}.json"
    out_path.write_text(json.dumps(summary, ensure_ascii=False, indent=2), encoding="utf-8")

    print(json.dumps(summary, ensure_ascii=False, indent=2))
    print(f"log_saved={out_path}")
    return 0 if status == "PASS" else 2


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Random focus session black-box stress harness")
    parser.add_argument("--hours", type=float, default=12.0, help="simulated hours")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--workdir", default=".stress_focus")
    parser.add_argument("--clean", action="store_true")
    parser.add_argument("--step-seconds", type=int, default=30)

    parser.add_argument("--min-focus", type=int, default=5)
    parser.add_argument("--max-focus", type=int, default=120)
    parser.add_argument("--start-rate", type=float, default=0.05)
    parser.add_argument("--stop-rate", type=float, default=0.002)
    parser.add_argument("--repoll-rate", type=float, default=0.2)
    parser.add_argument("--restart-rate", type=float, default=0.02)
    parser.add_argument("--time-jump-rate", type=float, default=0.01)
    parser.add_argument("--time-jump-minutes", type=int, default=7)
    return parser.parse_args()


if __name__ == "__main__":
    raise SystemExit(run_stress_focus(parse_args()))
