"""Phase, run-state, command, and reason constants used by the timer engine."""

from __future__ import annotations

from enum import Enum


class Phase(str, Enum):
    """One segment of the Pomodoro cycle."""

    POMODORO = "Pomodoro"
    SHORT_BREAK = "ShortBreak"
    LONG_BREAK = "LongBreak"


class RunState(str, Enum):
    """Whether the timer is counting, paused, or stopped."""

    RUNNING = "Running"
    PAUSED = "Paused"
    STOPPED = "Stopped"


class Command(str, Enum):
    """Control commands accepted from the command channel."""

    START = "start"
    PAUSE = "pause"
    TOGGLE = "toggle"
    STOP = "stop"


DEFAULT_POMODORO_SECONDS = 25 * 60
DEFAULT_SHORT_BREAK_SECONDS = 5 * 60
DEFAULT_LONG_BREAK_SECONDS = 15 * 60
DEFAULT_POMODOROS_PER_LONG_BREAK = 4

REASON_STARTED = "started"
REASON_RESUMED = "resumed"
REASON_ALREADY_RUNNING = "already_running"
REASON_PAUSED = "paused"
REASON_ALREADY_PAUSED = "already_paused"
REASON_STOPPED = "stopped"
REASON_NOT_ACTIVE = "not_active"
REASON_UNSUPPORTED_COMMAND = "unsupported_command"


def parse_command(text: str) -> Command | None:
    """Map raw command text to a `Command`, or `None` when unrecognized."""
    normalized = text.strip().lower()
    try:
        return Command(normalized)
    except ValueError:
        return None
