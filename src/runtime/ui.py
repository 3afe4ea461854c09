from __future__ import annotations

from typing import Any, Optional, Protocol

from pomodoro import CommandResult, TickResult, TimerSnapshot
from server.events import EVENT_COMMAND, EVENT_STATUS, EVENT_TRANSITION


class StatusServerLike(Protocol):
    def publish_snapshot(self, event_type: str, snapshot: TimerSnapshot, **payload: Any) -> None:
        ...


class RuntimeStatusPublisher:
    """Forwards timer updates to the status feed when one is running."""

    def __init__(self, status_server: Optional[StatusServerLike]):
        self._status_server = status_server

    def publish_status(self, snapshot: TimerSnapshot) -> None:
        if self._status_server:
            self._status_server.publish_snapshot(EVENT_STATUS, snapshot)

    def publish_transition(self, tick: TickResult) -> None:
        if self._status_server and tick.completed_phase is not None:
            self._status_server.publish_snapshot(
                EVENT_TRANSITION,
                tick.snapshot,
                completed_phase=tick.completed_phase.value,
            )

    def publish_command(self, result: CommandResult) -> None:
        if not self._status_server:
            return
        payload: dict[str, Any] = {
            "accepted": result.accepted,
            "reason": result.reason,
        }
        if result.command is not None:
            payload["command"] = result.command.value
        self._status_server.publish_snapshot(EVENT_COMMAND, result.snapshot, **payload)
