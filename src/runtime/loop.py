"""Runtime orchestration: ticker loop, command handling, and shutdown."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from command_channel import CommandListener
from notify import DesktopNotifier
from pomodoro import Command, CommandResult, TimerEngine
from server import StatusServer

from .console import ConsoleStatus
from .ticks import SoundCue, TickDependencies, TickProcessor
from .ui import RuntimeStatusPublisher


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    engine: TimerEngine
    console: ConsoleStatus
    command_listener_factory: Callable[[Callable[[str], None]], CommandListener]
    tick_interval_seconds: float = 1.0
    exit_on_stop: bool = True
    persist_on_tick: bool = False
    notifier: Optional[DesktopNotifier] = None
    sound: Optional[SoundCue] = None
    status_server: Optional[StatusServer] = None
    clock: Callable[[], float] = time.monotonic


class RuntimeEngine:
    """Drives the timer from a periodic ticker and the command listener."""
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._engine = bootstrap.engine
        self._shutdown_event = threading.Event()
        self._listener: Optional[CommandListener] = None

        self._ui = RuntimeStatusPublisher(bootstrap.status_server)
        self._tick_processor = TickProcessor(
            TickDependencies(
                logger=self._logger,
                console=bootstrap.console,
                ui=self._ui,
                persist=self._engine.persist,
                notifier=bootstrap.notifier,
                sound=bootstrap.sound,
                persist_on_tick=bootstrap.persist_on_tick,
            )
        )

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    def request_shutdown(self) -> None:
        self._shutdown_event.set()

    def run(self) -> int:
        """Run until `stop` (when configured to exit) or a shutdown request."""
        try:
            self._listener = self._bootstrap.command_listener_factory(self.handle_command)
            self._listener.start()
            self._bootstrap.console.show(self._engine.snapshot())

            interval = self._bootstrap.tick_interval_seconds
            last = self._bootstrap.clock()
            while not self._shutdown_event.wait(interval):
                now = self._bootstrap.clock()
                self.tick(max(0.0, now - last))
                last = now
            return 0
        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        finally:
            self._shutdown()

    def tick(self, dt: float) -> None:
        tick = self._engine.tick(dt)
        self._tick_processor.handle_tick(tick)

    def handle_command(self, text: str) -> CommandResult:
        result = self._engine.apply_command(text)
        self._ui.publish_command(result)
        if result.command is None:
            return result

        self._logger.info(
            "Command %s: accepted=%s reason=%s",
            result.command.value,
            result.accepted,
            result.reason,
        )
        self._bootstrap.console.show(result.snapshot)
        if result.command == Command.STOP and self._bootstrap.exit_on_stop:
            self.request_shutdown()
        return result

    def _shutdown(self) -> None:
        listener = self._listener
        if listener is not None:
            self._logger.debug("Stopping command listener...")
            listener.stop()
            self._listener = None

        self._engine.persist()

        status_server = self._bootstrap.status_server
        if status_server is not None:
            self._logger.info("Stopping status server...")
            try:
                status_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping status server: %s", error, exc_info=True)
