"""Thread-safe in-memory pomodoro cycle state machine."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union

from .constants import (
    DEFAULT_LONG_BREAK_SECONDS,
    DEFAULT_POMODORO_SECONDS,
    DEFAULT_POMODOROS_PER_LONG_BREAK,
    DEFAULT_SHORT_BREAK_SECONDS,
    REASON_ALREADY_PAUSED,
    REASON_ALREADY_RUNNING,
    REASON_NOT_ACTIVE,
    REASON_PAUSED,
    REASON_RESUMED,
    REASON_STARTED,
    REASON_STOPPED,
    REASON_UNSUPPORTED_COMMAND,
    Command,
    Phase,
    RunState,
    parse_command,
)


@dataclass(frozen=True)
class TimerDurations:
    """Configured phase lengths in seconds and the long-break cadence."""
    pomodoro_seconds: int = DEFAULT_POMODORO_SECONDS
    short_break_seconds: int = DEFAULT_SHORT_BREAK_SECONDS
    long_break_seconds: int = DEFAULT_LONG_BREAK_SECONDS
    pomodoros_per_long_break: int = DEFAULT_POMODOROS_PER_LONG_BREAK

    def __post_init__(self) -> None:
        for name in (
            "pomodoro_seconds",
            "short_break_seconds",
            "long_break_seconds",
            "pomodoros_per_long_break",
        ):
            if int(getattr(self, name)) <= 0:
                raise ValueError(f"{name} must be greater than zero")

    def for_phase(self, phase: Phase) -> int:
        if phase == Phase.POMODORO:
            return self.pomodoro_seconds
        if phase == Phase.SHORT_BREAK:
            return self.short_break_seconds
        return self.long_break_seconds


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable timer state exposed to the console, store, and status feed."""
    phase: Phase
    run_state: RunState
    elapsed_seconds: float
    duration_seconds: int
    cycle: int

    @property
    def elapsed_whole_seconds(self) -> int:
        return min(self.duration_seconds, int(self.elapsed_seconds))

    @property
    def remaining_seconds(self) -> int:
        return self.duration_seconds - self.elapsed_whole_seconds

    @property
    def is_running(self) -> bool:
        return self.run_state == RunState.RUNNING

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "state": self.run_state.value,
            "elapsed": self.elapsed_whole_seconds,
            "remaining": self.remaining_seconds,
            "cycle": self.cycle,
        }


@dataclass(frozen=True)
class TickResult:
    """Tick outcome; `completed_phase` is set when a transition fired."""
    snapshot: TimerSnapshot
    completed_phase: Optional[Phase] = None

    @property
    def transitioned(self) -> bool:
        return self.completed_phase is not None

    @property
    def next_phase(self) -> Optional[Phase]:
        if self.completed_phase is None:
            return None
        return self.snapshot.phase


@dataclass(frozen=True)
class CommandResult:
    """Result envelope returned after applying a control command."""
    command: Optional[Command]
    accepted: bool
    reason: str
    snapshot: TimerSnapshot


class StatePersister(Protocol):
    def save(self, snapshot: TimerSnapshot) -> bool:
        ...


class TimerEngine:
    """Pomodoro cycle state machine advanced by explicit ticks.

    All state lives behind a single lock so the ticker and the command
    listener can call in from different threads. Saves also run under that
    lock, so a write always reflects the state at the moment it is made and
    an older snapshot can never land on disk after a newer one.
    """

    def __init__(
        self,
        *,
        durations: Optional[TimerDurations] = None,
        initial_run_state: RunState = RunState.STOPPED,
        persister: Optional[StatePersister] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._durations = durations or TimerDurations()
        self._persister = persister
        self._logger = logger or logging.getLogger("pomodoro")
        self._lock = threading.Lock()

        self._phase = Phase.POMODORO
        self._run_state = initial_run_state
        self._elapsed_seconds = 0.0
        self._cycle = 0

    @property
    def durations(self) -> TimerDurations:
        return self._durations

    def snapshot(self) -> TimerSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def persist(self) -> bool:
        """Save the current state; returns False when no persister is configured."""
        if self._persister is None:
            return False
        with self._lock:
            return self._persister.save(self._snapshot_locked())

    def restore(self, phase: Phase, elapsed_seconds: float, cycle: int) -> TimerSnapshot:
        """Load phase, elapsed time, and cycle count from persisted state."""
        with self._lock:
            duration = self._durations.for_phase(phase)
            self._phase = phase
            # A restored phase that is already complete transitions on the next tick.
            self._elapsed_seconds = max(0.0, min(float(duration), float(elapsed_seconds)))
            self._cycle = max(0, int(cycle))
            self._logger.info(
                "Timer restored: phase=%s elapsed=%ss cycle=%s",
                self._phase.value,
                int(self._elapsed_seconds),
                self._cycle,
            )
            return self._snapshot_locked()

    def tick(self, dt: float) -> TickResult:
        if dt < 0:
            raise ValueError("dt must not be negative")

        with self._lock:
            if self._run_state != RunState.RUNNING:
                return TickResult(snapshot=self._snapshot_locked())

            duration = self._durations.for_phase(self._phase)
            self._elapsed_seconds = min(float(duration), self._elapsed_seconds + dt)
            if self._elapsed_seconds < duration:
                return TickResult(snapshot=self._snapshot_locked())

            completed = self._phase
            self._advance_phase_locked()
            return TickResult(snapshot=self._snapshot_locked(), completed_phase=completed)

    def apply_command(self, command: Union[Command, str]) -> CommandResult:
        parsed = command if isinstance(command, Command) else parse_command(command)
        if parsed is None:
            self._logger.warning("Ignoring unrecognized command: %r", command)
            return CommandResult(
                command=None,
                accepted=False,
                reason=REASON_UNSUPPORTED_COMMAND,
                snapshot=self.snapshot(),
            )

        with self._lock:
            result = self._apply_locked(parsed)
            if parsed == Command.STOP and self._persister is not None:
                self._persister.save(result.snapshot)
        return result

    def _apply_locked(self, command: Command) -> CommandResult:
        if command == Command.START:
            return self._run_locked(command)

        if command == Command.PAUSE:
            return self._pause_locked(command)

        if command == Command.TOGGLE:
            if self._run_state == RunState.RUNNING:
                return self._pause_locked(command)
            if self._run_state == RunState.PAUSED:
                return self._run_locked(command)
            return self._result_locked(command, False, REASON_NOT_ACTIVE)

        self._run_state = RunState.STOPPED
        self._logger.info(
            "Timer stopped: phase=%s elapsed=%ss cycle=%s",
            self._phase.value,
            int(self._elapsed_seconds),
            self._cycle,
        )
        return self._result_locked(command, True, REASON_STOPPED)

    def _run_locked(self, command: Command) -> CommandResult:
        previous = self._run_state
        if previous == RunState.RUNNING:
            return self._result_locked(command, True, REASON_ALREADY_RUNNING)

        self._run_state = RunState.RUNNING
        reason = REASON_RESUMED if previous == RunState.PAUSED else REASON_STARTED
        self._logger.info(
            "Timer %s: phase=%s remaining=%ss",
            reason,
            self._phase.value,
            self._snapshot_locked().remaining_seconds,
        )
        return self._result_locked(command, True, reason)

    def _pause_locked(self, command: Command) -> CommandResult:
        if self._run_state == RunState.PAUSED:
            return self._result_locked(command, True, REASON_ALREADY_PAUSED)

        self._run_state = RunState.PAUSED
        self._logger.info(
            "Timer paused: phase=%s remaining=%ss",
            self._phase.value,
            self._snapshot_locked().remaining_seconds,
        )
        return self._result_locked(command, True, REASON_PAUSED)

    def _advance_phase_locked(self) -> None:
        completed = self._phase
        if completed == Phase.POMODORO:
            self._cycle += 1
            if self._cycle % self._durations.pomodoros_per_long_break == 0:
                self._phase = Phase.LONG_BREAK
            else:
                self._phase = Phase.SHORT_BREAK
        else:
            self._phase = Phase.POMODORO
        self._elapsed_seconds = 0.0
        self._logger.info(
            "Phase completed: %s -> %s (cycle=%s)",
            completed.value,
            self._phase.value,
            self._cycle,
        )

    def _result_locked(self, command: Command, accepted: bool, reason: str) -> CommandResult:
        return CommandResult(
            command=command,
            accepted=accepted,
            reason=reason,
            snapshot=self._snapshot_locked(),
        )

    def _snapshot_locked(self) -> TimerSnapshot:
        return TimerSnapshot(
            phase=self._phase,
            run_state=self._run_state,
            elapsed_seconds=self._elapsed_seconds,
            duration_seconds=self._durations.for_phase(self._phase),
            cycle=self._cycle,
        )
