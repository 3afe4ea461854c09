from __future__ import annotations

import sys
import threading
from typing import Optional, TextIO

from pomodoro import TimerSnapshot

from .messages import status_bar_json, status_line

CONSOLE_TEXT = "text"
CONSOLE_JSON = "json"
CONSOLE_NONE = "none"


class ConsoleStatus:
    """Writes one status line per snapshot to a text stream."""

    def __init__(self, output_format: str = CONSOLE_TEXT, stream: Optional[TextIO] = None):
        if output_format not in (CONSOLE_TEXT, CONSOLE_JSON, CONSOLE_NONE):
            raise ValueError(f"Unsupported console format: {output_format}")
        self._format = output_format
        self._stream = stream
        self._lock = threading.Lock()

    def show(self, snapshot: TimerSnapshot) -> None:
        if self._format == CONSOLE_NONE:
            return

        line = status_bar_json(snapshot) if self._format == CONSOLE_JSON else status_line(snapshot)
        stream = self._stream or sys.stdout
        with self._lock:
            stream.write(line + "\n")
            stream.flush()
