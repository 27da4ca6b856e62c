from __future__ import annotations

import random
from typing import Callable

from randfocus_app.core.session_config import SessionConfig

RandInt = Callable[[int, int], int]


def generate_break_schedule(
    focus_duration: int,
    no_break_at_start: int,
    no_break_at_end: int,
    min_interval: int,
    max_interval: int,
    rand_int: RandInt | None = None,
) -> list[int]:
    """Random break offsets, in minutes from session start.

    Offsets are strictly increasing and stay inside
    [no_break_at_start, focus_duration - no_break_at_end]. Each gap is drawn
    uniformly from [min_interval, max_interval], capped by the room left
    before the end of the window. A break landing exactly on the last
    eligible minute is kept.
    """
    draw = rand_int or random.randint
    start = int(no_break_at_start)
    end = int(focus_duration) - int(no_break_at_end)
    if start >= end:
        return []

    breaks: list[int] = []
    current = start
    while current + min_interval <= end:
        max_delta = min(max_interval, end - current)
        if max_delta < min_interval:
            break

        current += draw(min_interval, max_delta)
        if current <= end:
            breaks.append(current)
        else:
            break
    return breaks


def schedule_for_config(config: SessionConfig, rand_int: RandInt | None = None) -> list[int]:
    return generate_break_schedule(
        config.focus_duration_min,
        config.no_break_at_start_min,
        config.no_break_at_end_min,
        config.min_break_interval_min,
        config.max_break_interval_min,
        rand_int=rand_int,
    )
