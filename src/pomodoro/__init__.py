from .constants import Command, Phase, RunState, parse_command
from .service import (
    CommandResult,
    StatePersister,
    TickResult,
    TimerDurations,
    TimerEngine,
    TimerSnapshot,
)
from .store import PersistedState, StateStore

__all__ = [
    "Command",
    "CommandResult",
    "Phase",
    "PersistedState",
    "RunState",
    "StatePersister",
    "StateStore",
    "TickResult",
    "TimerDurations",
    "TimerEngine",
    "TimerSnapshot",
    "parse_command",
]
