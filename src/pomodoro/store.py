"""JSON state file persistence for timer snapshots."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .constants import Phase
from .service import TimerSnapshot


@dataclass(frozen=True)
class PersistedState:
    """Timer fields recovered from a previously written state file."""
    phase: Phase
    elapsed_seconds: int
    cycle: int


class StateStore:
    """Writes snapshots to a JSON file; failures are logged, never raised."""

    def __init__(
        self,
        path: str | Path,
        logger: Optional[logging.Logger] = None,
    ):
        self._path = Path(path)
        self._logger = logger or logging.getLogger("pomodoro.store")

    @property
    def path(self) -> Path:
        return self._path

    def save(self, snapshot: TimerSnapshot) -> bool:
        payload = json.dumps(snapshot.to_dict())
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=directory,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                    fh.write("\n")
                os.replace(temp_name, self._path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as error:
            self._logger.error("Failed to write state file %s: %s", self._path, error)
            return False

        self._logger.debug("State saved to %s: %s", self._path, payload)
        return True

    def load(self) -> Optional[PersistedState]:
        if not self._path.exists():
            return None

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as error:
            self._logger.warning("Ignoring unreadable state file %s: %s", self._path, error)
            return None

        try:
            return _parse_state(raw)
        except ValueError as error:
            self._logger.warning("Ignoring malformed state file %s: %s", self._path, error)
            return None


def _parse_state(raw: Any) -> PersistedState:
    if not isinstance(raw, Mapping):
        raise ValueError("root must be a JSON object")

    try:
        phase = Phase(raw.get("phase"))
    except ValueError as error:
        raise ValueError(f"unknown phase: {error}") from error

    elapsed = raw.get("elapsed", 0)
    cycle = raw.get("cycle", 0)
    if isinstance(elapsed, bool) or not isinstance(elapsed, (int, float)) or elapsed < 0:
        raise ValueError("elapsed must be a non-negative number")
    if isinstance(cycle, bool) or not isinstance(cycle, int) or cycle < 0:
        raise ValueError("cycle must be a non-negative integer")

    return PersistedState(
        phase=phase,
        elapsed_seconds=int(elapsed),
        cycle=cycle,
    )
