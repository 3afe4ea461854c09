"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class TimerSettings:
    """Phase lengths and startup behavior from `[timer]`."""
    pomodoro_minutes: float = 25.0
    short_break_minutes: float = 5.0
    long_break_minutes: float = 15.0
    pomodoros_per_long_break: int = 4
    tick_interval_seconds: float = 1.0
    autostart: bool = False


@dataclass(frozen=True)
class CommandChannelSettings:
    """Named-pipe location from `[command_channel]`."""
    path: str = "pomodoro_fifo"


@dataclass(frozen=True)
class StateSettings:
    """State file persistence settings from `[state]`."""
    path: str = "pomodoro_state.json"
    restore_on_start: bool = True
    persist_on_tick: bool = False


@dataclass(frozen=True)
class ConsoleSettings:
    """Per-tick console status output from `[console]`."""
    format: str = "text"


@dataclass(frozen=True)
class NotificationSettings:
    """Phase-change notification settings from `[notifications]`."""
    enabled: bool = True
    command: str = "dunstify"
    sound_file: str = ""
    output_device: Optional[int] = None


@dataclass(frozen=True)
class StatusServerSettings:
    """Websocket status feed settings from `[status_server]`."""
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass(frozen=True)
class RuntimeSettings:
    """Process lifecycle settings from `[runtime]`."""
    exit_on_stop: bool = True


@dataclass(frozen=True)
class LoggingSettings:
    """Logging verbosity from `[logging]`."""
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    timer: TimerSettings
    command_channel: CommandChannelSettings
    state: StateSettings
    console: ConsoleSettings
    notifications: NotificationSettings
    status_server: StatusServerSettings
    runtime: RuntimeSettings
    logging: LoggingSettings
    source_file: str
