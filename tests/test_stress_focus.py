import argparse

from scripts.stress_focus import run_stress_focus


def test_stress_focus_smoke(tmp_path) -> None:
    args = argparse.Namespace(
        hours=4.0,
        seed=7,
        workdir=str(tmp_path / ".stress_focus"),
        clean=True,
        step_seconds=60,
        min_focus=5,
        max_focus=60,
        start_rate=0.2,
        stop_rate=0.01,
        repoll_rate=0.3,
        restart_rate=0.05,
        time_jump_rate=0.02,
        time_jump_minutes=7,
    )
    rc = run_stress_focus(args)
    assert rc == 0
