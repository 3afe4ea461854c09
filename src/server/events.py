"""Status feed event names and JSON serialization helpers."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable

from pomodoro import TimerSnapshot

EVENT_HELLO = "hello"
EVENT_STATUS = "status"
EVENT_TRANSITION = "transition"
EVENT_COMMAND = "command"


def snapshot_payload(snapshot: TimerSnapshot) -> dict[str, Any]:
    """Flatten a snapshot into the persisted-state shape plus its duration."""
    return {**snapshot.to_dict(), "duration": snapshot.duration_seconds}


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event payload with type and timestamp for websocket delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )
