"""Configuration model for the websocket status feed."""

from __future__ import annotations

from dataclasses import dataclass


class StatusServerConfigurationError(Exception):
    """Raised when status server configuration is invalid."""


WEBSOCKET_PATH = "/ws"
STATE_PATH = "/state"
HEALTHZ_PATH = "/healthz"


@dataclass(frozen=True)
class StatusServerConfig:
    """Validated status server configuration derived from app settings."""
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8765

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise StatusServerConfigurationError("status_server.host cannot be empty")

        if not 1 <= self.port <= 65535:
            raise StatusServerConfigurationError(
                f"status_server.port must be in [1, 65535], got: {self.port}"
            )

    @property
    def websocket_path(self) -> str:
        return WEBSOCKET_PATH

    @classmethod
    def from_settings(cls, settings) -> "StatusServerConfig":
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host,
            port=settings.port,
        )
