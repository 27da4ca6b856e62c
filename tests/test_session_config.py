from randfocus_app.core.session_config import DEFAULT_CONFIG, SessionConfig, normalize_config


def test_normalize_defaults_when_absent() -> None:
    assert normalize_config(None) == DEFAULT_CONFIG
    assert normalize_config({}) == SessionConfig(90, 20, 15, 10, 30)


def test_normalize_accepts_numeric_strings_and_camel_case_keys() -> None:
    cfg = normalize_config(
        {
            "focusDurationMin": "45",
            "noBreakAtStartMin": " 5 ",
            "noBreakAtEndMin": 3.9,
            "minBreakIntervalMin": "7.5",
            "maxBreakIntervalMin": 12,
        }
    )
    assert cfg == SessionConfig(
        focus_duration_min=45,
        no_break_at_start_min=5,
        no_break_at_end_min=3,
        min_break_interval_min=7,
        max_break_interval_min=12,
    )


def test_normalize_falls_back_on_garbage_and_non_finite() -> None:
    cfg = normalize_config(
        {
            "focus_duration_min": "abc",
            "no_break_at_start_min": float("nan"),
            "no_break_at_end_min": "inf",
            "min_break_interval_min": "",
            "max_break_interval_min": [1, 2],
        }
    )
    assert cfg == DEFAULT_CONFIG
    cfg = normalize_config(
        {
            "focusDurationMin": 10**400,
            "minBreakIntervalMin": -(10**400),
        }
    )
    assert cfg == DEFAULT_CONFIG


def test_normalize_clamps_to_minimums() -> None:
    cfg = normalize_config(
        {
            "focus_duration_min": 0,
            "no_break_at_start_min": -5,
            "no_break_at_end_min": "-1",
            "min_break_interval_min": -3,
            "max_break_interval_min": 0,
        }
    )
    assert cfg.focus_duration_min == 1
    assert cfg.no_break_at_start_min == 0
    assert cfg.no_break_at_end_min == 0
    assert cfg.min_break_interval_min == 1
    assert cfg.max_break_interval_min == 1


def test_max_interval_raised_to_min_interval() -> None:
    cfg = normalize_config({"min_break_interval_min": 25, "max_break_interval_min": 5})
    assert cfg.min_break_interval_min == 25
    assert cfg.max_break_interval_min == 25


def test_normalize_is_idempotent() -> None:
    inputs = [
        None,
        {"focusDurationMin": "12.7", "maxBreakIntervalMin": 2},
        {"focus_duration_min": -10, "no_break_at_start_min": "x", "min_break_interval_min": 40},
    ]
    for raw in inputs:
        once = normalize_config(raw)
        assert normalize_config(once) == once
        assert normalize_config(once.to_dict()) == once
