"""Desktop notifications sent through a notify-send compatible command."""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

from pomodoro import Phase


class NotificationError(Exception):
    """Raised when a notification or sound cannot be delivered."""


@dataclass(frozen=True)
class PhaseNotice:
    message: str
    icon: str


PHASE_NOTICES: dict[Phase, PhaseNotice] = {
    Phase.POMODORO: PhaseNotice("Time for a Pomodoro session!", "tomato"),
    Phase.SHORT_BREAK: PhaseNotice("Take a short break.", "coffee"),
    Phase.LONG_BREAK: PhaseNotice("Take a long break.", "rest"),
}

DEFAULT_NOTIFY_COMMAND = "dunstify"


class DesktopNotifier:
    """Announces the phase that just began."""

    def __init__(
        self,
        command: str = DEFAULT_NOTIFY_COMMAND,
        timeout_seconds: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        self._command = shlex.split(command)
        if not self._command:
            raise NotificationError("Notification command cannot be empty")
        self._timeout_seconds = timeout_seconds
        self._logger = logger or logging.getLogger("notify")

    def build_args(self, phase: Phase) -> list[str]:
        notice = PHASE_NOTICES[phase]
        return [*self._command, "-i", notice.icon, notice.message]

    def notify(self, phase: Phase) -> bool:
        args = self.build_args(phase)
        try:
            completed = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self._timeout_seconds,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as error:
            self._logger.error("Failed to send notification: %s", error)
            return False

        if completed.returncode != 0:
            self._logger.error(
                "Failed to send notification: %s",
                _describe_failure(args, completed.returncode, completed.stderr),
            )
            return False
        return True


def _describe_failure(args: Sequence[str], returncode: int, stderr: str) -> str:
    detail = (stderr or "").strip()
    if detail:
        return f"{args[0]} exited with {returncode}: {detail}"
    return f"{args[0]} exited with {returncode}"
