"""Named-pipe command channel: FIFO setup and a background line reader."""

from __future__ import annotations

import contextlib
import logging
import os
import stat
import threading
import time
from pathlib import Path
from typing import Callable, Optional


class CommandChannelError(Exception):
    """Raised when the command FIFO cannot be created or opened."""


def ensure_fifo(path: str | Path) -> Path:
    """Create the FIFO at `path` unless one already exists there."""
    fifo_path = Path(path)
    try:
        mode = fifo_path.stat().st_mode
    except FileNotFoundError:
        mode = None
    except OSError as error:
        raise CommandChannelError(f"Cannot inspect command FIFO {fifo_path}: {error}") from error

    if mode is not None:
        if not stat.S_ISFIFO(mode):
            raise CommandChannelError(f"Command path exists and is not a FIFO: {fifo_path}")
        return fifo_path

    try:
        fifo_path.parent.mkdir(parents=True, exist_ok=True)
        os.mkfifo(fifo_path, 0o600)
    except (OSError, AttributeError) as error:
        raise CommandChannelError(f"Cannot create command FIFO {fifo_path}: {error}") from error
    return fifo_path


class CommandListener:
    """Reads whole-line commands from a FIFO on a daemon thread.

    Each writer session is read until EOF, then the FIFO is reopened for the
    next writer. Lines are stripped; empty lines are skipped, everything else
    is handed to `handler` unparsed.
    """

    def __init__(
        self,
        path: str | Path,
        handler: Callable[[str], None],
        logger: Optional[logging.Logger] = None,
    ):
        self._path = Path(path)
        self._handler = handler
        self._logger = logger or logging.getLogger("command_channel")
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            self._logger.warning("Command listener is already running")
            return

        if not os.access(self._path, os.R_OK):
            raise CommandChannelError(f"Command FIFO is not readable: {self._path}")

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="command-listener",
        )
        self._thread.start()
        self._logger.info("Listening for commands on %s", self._path)

    def stop(self, timeout_seconds: float = 1.0) -> None:
        if self._thread is None:
            return

        self._stop_event.set()
        deadline = time.monotonic() + timeout_seconds
        while self._thread.is_alive() and time.monotonic() < deadline:
            self._wake_reader()
            self._thread.join(timeout=0.05)
        if self._thread.is_alive():
            self._logger.debug("Command listener still blocked; leaving daemon thread")
        self._thread = None

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                with open(self._path, "r", encoding="utf-8", errors="replace") as fifo:
                    for line in fifo:
                        if self._stop_event.is_set():
                            return
                        self._dispatch(line)
            except OSError as error:
                if not self._stop_event.is_set():
                    self._logger.error("Command FIFO read failed: %s", error)
                return

    def _dispatch(self, line: str) -> None:
        text = line.strip()
        if not text:
            return
        try:
            self._handler(text)
        except Exception as error:
            self._logger.error("Command handler failed for %r: %s", text, error, exc_info=True)

    def _wake_reader(self) -> None:
        # Opening for write unblocks a reader waiting in open(); ENXIO means nobody waits.
        with contextlib.suppress(OSError):
            fd = os.open(self._path, os.O_WRONLY | os.O_NONBLOCK)
            os.close(fd)
