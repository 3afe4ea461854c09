"""Websocket status feed for external displays."""

from .config import StatusServerConfig, StatusServerConfigurationError
from .service import StatusServer

__all__ = [
    "StatusServer",
    "StatusServerConfig",
    "StatusServerConfigurationError",
]
