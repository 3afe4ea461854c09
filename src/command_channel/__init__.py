"""FIFO command channel exports."""

from .fifo import CommandChannelError, CommandListener, ensure_fifo

__all__ = [
    "CommandChannelError",
    "CommandListener",
    "ensure_fifo",
]
