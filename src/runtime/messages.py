"""Human-readable and status-bar text builders for timer snapshots."""

from __future__ import annotations

import json

from pomodoro import Phase, RunState, TimerSnapshot

PHASE_LABELS: dict[Phase, str] = {
    Phase.POMODORO: "Pomodoro",
    Phase.SHORT_BREAK: "Short break",
    Phase.LONG_BREAK: "Long break",
}


def format_duration(seconds: int) -> str:
    """Format a duration in seconds as `MM:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"


def status_line(snapshot: TimerSnapshot) -> str:
    """Build the console status line for the current snapshot."""
    label = PHASE_LABELS[snapshot.phase]
    suffix = ""
    if snapshot.run_state != RunState.RUNNING:
        suffix = f" [{snapshot.run_state.value.lower()}]"
    return (
        f"{label} | elapsed {format_duration(snapshot.elapsed_whole_seconds)}"
        f" | remaining {format_duration(snapshot.remaining_seconds)}"
        f" | cycle {snapshot.cycle}{suffix}"
    )


def status_bar_json(snapshot: TimerSnapshot) -> str:
    """Build a one-line JSON status for waybar-style custom modules."""
    return json.dumps(
        {
            "elapsed_time": format_duration(snapshot.elapsed_whole_seconds),
            "text": format_duration(snapshot.remaining_seconds),
            "class": snapshot.phase.value,
            "alt": snapshot.run_state.value,
        }
    )
