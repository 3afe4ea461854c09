"""Tick handlers that publish status and announce phase transitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from notify import DesktopNotifier
from pomodoro import TickResult

from .console import ConsoleStatus
from .ui import RuntimeStatusPublisher


class SoundCue(Protocol):
    def play_async(self) -> object:
        ...


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for processing timer tick results."""
    logger: logging.Logger
    console: ConsoleStatus
    ui: RuntimeStatusPublisher
    persist: Optional[Callable[[], bool]]
    notifier: Optional[DesktopNotifier] = None
    sound: Optional[SoundCue] = None
    persist_on_tick: bool = False


class TickProcessor:
    """Handles tick side effects: console, status feed, notifications, state file."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies

    def handle_tick(self, tick: TickResult) -> None:
        deps = self._dependencies
        deps.console.show(tick.snapshot)

        if tick.transitioned:
            self._handle_transition(tick)
        else:
            deps.ui.publish_status(tick.snapshot)
            if deps.persist_on_tick and deps.persist is not None and tick.snapshot.is_running:
                deps.persist()

    def _handle_transition(self, tick: TickResult) -> None:
        deps = self._dependencies
        next_phase = tick.snapshot.phase
        deps.logger.info(
            "Now in %s (cycle %s)",
            next_phase.value,
            tick.snapshot.cycle,
        )
        deps.ui.publish_transition(tick)

        if deps.notifier is not None:
            deps.notifier.notify(next_phase)
        if deps.sound is not None:
            deps.sound.play_async()
        # Writes the live engine state, so a stop issued during notify stays on disk.
        if deps.persist is not None:
            deps.persist()
