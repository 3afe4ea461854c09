"""Public exports for phase-change notifications."""

from .desktop import PHASE_NOTICES, DesktopNotifier, NotificationError, PhaseNotice

__all__ = [
    "PHASE_NOTICES",
    "DesktopNotifier",
    "NotificationError",
    "PhaseNotice",
]
