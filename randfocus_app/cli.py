from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from dataclasses import asdict

from randfocus_app.config import RandFocusConfig
from randfocus_app.persistence.kv_store import JsonFileKeyValueStore
from randfocus_app.persistence.session_store import SessionStore
from randfocus_app.services.focus_session import FocusSessionService
from randfocus_app.services.history_stats import (
    format_record_detail,
    format_record_line,
    sorted_history,
    today_stats,
)
from randfocus_app.services.side_effects import (
    SilentNotifier,
    SilentSoundPlayer,
    SystemNotifier,
    SystemSoundPlayer,
)


def _build_service(cfg: RandFocusConfig | None = None) -> FocusSessionService:
    cfg = cfg or RandFocusConfig.from_env()
    store = SessionStore(JsonFileKeyValueStore(cfg.data_dir, fsync_writes=cfg.store_fsync))
    return FocusSessionService(
        store=store,
        sound_player=SystemSoundPlayer() if cfg.sound_enabled else SilentSoundPlayer(),
        notifier=SystemNotifier() if cfg.notify_enabled else SilentNotifier(),
    )


def _status_payload(service: FocusSessionService) -> dict:
    service.tick()
    payload = asdict(service.view())
    stats = today_stats(service.history())
    payload["today"] = {"sessions": stats.sessions, "minutes": stats.minutes}
    return payload


def _cmd_start(args: argparse.Namespace) -> int:
    service = _build_service()
    config_input = {
        "focus_duration_min": getattr(args, "focus", None),
        "no_break_at_start_min": getattr(args, "no_break_start", None),
        "no_break_at_end_min": getattr(args, "no_break_end", None),
        "min_break_interval_min": getattr(args, "min_interval", None),
        "max_break_interval_min": getattr(args, "max_interval", None),
    }
    state = service.start(getattr(args, "description", "") or "", config_input)
    if state is None:
        print("Session already running: stop the current session first.", file=sys.stderr)
        return 1
    print(f"Focus session started ({state.focus_duration_minutes} min)")
    if state.description:
        print(f"Task: {state.description}")
    return 0


def _cmd_status(_args: argparse.Namespace) -> int:
    print(json.dumps(_status_payload(_build_service()), ensure_ascii=False, indent=2))
    return 0


def _cmd_watch(args: argparse.Namespace) -> int:
    cfg = RandFocusConfig.from_env()
    service = _build_service(cfg)
    interval = getattr(args, "interval", None)
    interval = max(0.001, float(interval if interval is not None else cfg.poll_seconds))
    iterations = int(getattr(args, "iterations", 0))

    count = 0
    try:
        while True:
            print(json.dumps(_status_payload(service), ensure_ascii=False))
            count += 1
            if iterations > 0 and count >= iterations:
                break
            time.sleep(interval)
    except KeyboardInterrupt:
        return 0
    return 0


def _cmd_stop(_args: argparse.Namespace) -> int:
    record = _build_service().stop_current()
    if record is None:
        print("No active session.", file=sys.stderr)
        return 1
    print(f"Focus session stopped after {record.actual_duration_minutes} min")
    return 0


def _cmd_history(args: argparse.Namespace) -> int:
    history = sorted_history(_build_service().history())
    limit = int(getattr(args, "n", 20))
    stats = today_stats(history)
    print(f"Today: {stats.sessions} sessions - {stats.minutes} min")
    for record in history[: max(0, limit)]:
        print(format_record_line(record))
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    history = _build_service().history()
    record = next((r for r in history if r.id == args.record_id), None)
    if record is None:
        print(f"No session with id {args.record_id}", file=sys.stderr)
        return 1
    print(format_record_detail(record))
    return 0


def _cmd_today(_args: argparse.Namespace) -> int:
    stats = today_stats(_build_service().history())
    print(json.dumps({"sessions": stats.sessions, "minutes": stats.minutes}, ensure_ascii=False, indent=2))
    return 0


def _cmd_config(_args: argparse.Namespace) -> int:
    cfg = RandFocusConfig.from_env()
    payload = {
        "data_dir": str(cfg.data_dir),
        "store_fsync": cfg.store_fsync,
        "sound_enabled": cfg.sound_enabled,
        "notify_enabled": cfg.notify_enabled,
        "poll_seconds": cfg.poll_seconds,
        "log_level": cfg.log_level,
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="python -m randfocus_app.cli")
    subparsers = parser.add_subparsers(dest="cmd", required=True)

    p_start = subparsers.add_parser("start", help="Start a focus session with random breaks")
    p_start.add_argument("--description", default="", help="what you will focus on")
    p_start.add_argument("--focus", help="focus duration in minutes (default 90)")
    p_start.add_argument("--no-break-start", help="break-free minutes at start (default 20)")
    p_start.add_argument("--no-break-end", help="break-free minutes at end (default 15)")
    p_start.add_argument("--min-interval", help="minimum minutes between breaks (default 10)")
    p_start.add_argument("--max-interval", help="maximum minutes between breaks (default 30)")
    p_start.set_defaults(func=_cmd_start)

    p_status = subparsers.add_parser("status", help="Poll the session once and show it")
    p_status.set_defaults(func=_cmd_status)

    p_watch = subparsers.add_parser("watch", help="Poll the session repeatedly")
    p_watch.add_argument("--interval", type=float, default=None, help="poll interval in seconds")
    p_watch.add_argument(
        "--iterations",
        type=int,
        default=0,
        help="poll loop count (0 = infinite; useful for tests)",
    )
    p_watch.set_defaults(func=_cmd_watch)

    p_stop = subparsers.add_parser("stop", help="Stop the running session early")
    p_stop.set_defaults(func=_cmd_stop)

    p_history = subparsers.add_parser("history", help="List past sessions, newest first")
    p_history.add_argument("--n", type=int, default=20)
    p_history.set_defaults(func=_cmd_history)

    p_show = subparsers.add_parser("show", help="Show one past session")
    p_show.add_argument("record_id")
    p_show.set_defaults(func=_cmd_show)

    p_today = subparsers.add_parser("today", help="Show today's session count and minutes")
    p_today.set_defaults(func=_cmd_today)

    p_config = subparsers.add_parser("config", help="Show effective config")
    p_config.set_defaults(func=_cmd_config)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, RandFocusConfig.from_env().log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
