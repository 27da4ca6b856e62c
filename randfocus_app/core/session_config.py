from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class SessionConfig:
    focus_duration_min: int = 90
    no_break_at_start_min: int = 20
    no_break_at_end_min: int = 15
    min_break_interval_min: int = 10
    max_break_interval_min: int = 30

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


DEFAULT_CONFIG = SessionConfig()

# Form fields arrive camelCase; python callers use the dataclass names.
_FIELD_ALIASES = {
    "focus_duration_min": "focusDurationMin",
    "no_break_at_start_min": "noBreakAtStartMin",
    "no_break_at_end_min": "noBreakAtEndMin",
    "min_break_interval_min": "minBreakIntervalMin",
    "max_break_interval_min": "maxBreakIntervalMin",
}


def _parse_minutes(value: Any, fallback: int, minimum: int) -> int:
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return fallback
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return max(minimum, math.floor(number))


def _lookup(raw: Mapping[str, Any], name: str) -> Any:
    if name in raw:
        return raw[name]
    return raw.get(_FIELD_ALIASES[name])


def normalize_config(config: Mapping[str, Any] | SessionConfig | None = None) -> SessionConfig:
    """Turn loosely typed user input into a consistent SessionConfig.

    Unparseable or non-finite values fall back to DEFAULT_CONFIG, every field
    is floored and clamped to its minimum, and the max break interval is
    raised to the min interval. Never raises.
    """
    if isinstance(config, SessionConfig):
        raw: Mapping[str, Any] = config.to_dict()
    elif isinstance(config, Mapping):
        raw = config
    else:
        raw = {}

    defaults = DEFAULT_CONFIG
    focus_duration_min = _parse_minutes(_lookup(raw, "focus_duration_min"), defaults.focus_duration_min, 1)
    min_break_interval_min = _parse_minutes(
        _lookup(raw, "min_break_interval_min"), defaults.min_break_interval_min, 1
    )
    max_break_interval_min = max(
        min_break_interval_min,
        _parse_minutes(_lookup(raw, "max_break_interval_min"), defaults.max_break_interval_min, 1),
    )

    return SessionConfig(
        focus_duration_min=focus_duration_min,
        no_break_at_start_min=_parse_minutes(
            _lookup(raw, "no_break_at_start_min"), defaults.no_break_at_start_min, 0
        ),
        no_break_at_end_min=_parse_minutes(_lookup(raw, "no_break_at_end_min"), defaults.no_break_at_end_min, 0),
        min_break_interval_min=min_break_interval_min,
        max_break_interval_min=max_break_interval_min,
    )
