"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    CommandChannelSettings,
    ConsoleSettings,
    LoggingSettings,
    NotificationSettings,
    RuntimeSettings,
    StateSettings,
    StatusServerSettings,
    TimerSettings,
)

_ALLOWED_CONSOLE_FORMATS = {"text", "json", "none"}
_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        timer=_parse_timer_settings(_section(raw, "timer")),
        command_channel=_parse_command_channel_settings(
            _section(raw, "command_channel"),
            base_dir=base_dir,
        ),
        state=_parse_state_settings(_section(raw, "state"), base_dir=base_dir),
        console=_parse_console_settings(_section(raw, "console")),
        notifications=_parse_notification_settings(
            _section(raw, "notifications"),
            base_dir=base_dir,
        ),
        status_server=_parse_status_server_settings(_section(raw, "status_server")),
        runtime=_parse_runtime_settings(_section(raw, "runtime")),
        logging=_parse_logging_settings(_section(raw, "logging")),
        source_file=source_file,
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    settings = TimerSettings(
        pomodoro_minutes=_as_float(
            section.get("pomodoro_minutes", 25.0),
            "timer.pomodoro_minutes",
        ),
        short_break_minutes=_as_float(
            section.get("short_break_minutes", 5.0),
            "timer.short_break_minutes",
        ),
        long_break_minutes=_as_float(
            section.get("long_break_minutes", 15.0),
            "timer.long_break_minutes",
        ),
        pomodoros_per_long_break=_as_int(
            section.get("pomodoros_per_long_break", 4),
            "timer.pomodoros_per_long_break",
        ),
        tick_interval_seconds=_as_float(
            section.get("tick_interval_seconds", 1.0),
            "timer.tick_interval_seconds",
        ),
        autostart=_as_bool(section.get("autostart", False), "timer.autostart"),
    )
    for field in (
        "pomodoro_minutes",
        "short_break_minutes",
        "long_break_minutes",
        "pomodoros_per_long_break",
        "tick_interval_seconds",
    ):
        if getattr(settings, field) <= 0:
            raise AppConfigurationError(f"timer.{field} must be greater than zero.")
    return settings


def _parse_command_channel_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> CommandChannelSettings:
    path = _as_str(section.get("path", "pomodoro_fifo"), "command_channel.path")
    if not path:
        raise AppConfigurationError("command_channel.path is required.")
    return CommandChannelSettings(path=_resolve_path(base_dir, path))


def _parse_state_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> StateSettings:
    path = _as_str(section.get("path", "pomodoro_state.json"), "state.path")
    if not path:
        raise AppConfigurationError("state.path is required.")
    return StateSettings(
        path=_resolve_path(base_dir, path),
        restore_on_start=_as_bool(
            section.get("restore_on_start", True),
            "state.restore_on_start",
        ),
        persist_on_tick=_as_bool(
            section.get("persist_on_tick", False),
            "state.persist_on_tick",
        ),
    )


def _parse_console_settings(section: Mapping[str, Any]) -> ConsoleSettings:
    name = _as_str(section.get("format", "text"), "console.format").lower()
    if name not in _ALLOWED_CONSOLE_FORMATS:
        allowed = ", ".join(sorted(_ALLOWED_CONSOLE_FORMATS))
        raise AppConfigurationError(f"console.format must be one of: {allowed}.")
    return ConsoleSettings(format=name)


def _parse_notification_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> NotificationSettings:
    sound_file = _as_str(section.get("sound_file", ""), "notifications.sound_file")
    return NotificationSettings(
        enabled=_as_bool(section.get("enabled", True), "notifications.enabled"),
        command=(
            _as_str(section.get("command", "dunstify"), "notifications.command")
            or "dunstify"
        ),
        sound_file=_resolve_path(base_dir, sound_file) if sound_file else "",
        output_device=_as_optional_int(
            section.get("output_device"),
            "notifications.output_device",
        ),
    )


def _parse_status_server_settings(section: Mapping[str, Any]) -> StatusServerSettings:
    return StatusServerSettings(
        enabled=_as_bool(section.get("enabled", False), "status_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "status_server.host"),
        port=_as_int(section.get("port", 8765), "status_server.port"),
    )


def _parse_runtime_settings(section: Mapping[str, Any]) -> RuntimeSettings:
    return RuntimeSettings(
        exit_on_stop=_as_bool(section.get("exit_on_stop", True), "runtime.exit_on_stop"),
    )


def _parse_logging_settings(section: Mapping[str, Any]) -> LoggingSettings:
    level = _as_str(section.get("level", "INFO"), "logging.level").upper()
    if level not in _ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(_ALLOWED_LOG_LEVELS))
        raise AppConfigurationError(f"logging.level must be one of: {allowed}.")
    return LoggingSettings(level=level)


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_optional_int(value: Any, field: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return _as_int(value, field)


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
