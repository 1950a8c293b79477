"""
Host integration: overlay process control and reload notifications
"""

from .base import OverlayHost
from .command import CommandOverlayHost
from .notifier import (
    NOTIFY_RELOAD_HUD,
    CommandReloadNotifier,
    NullReloadNotifier,
    ReloadNotifier,
)

__all__ = [
    "OverlayHost",
    "CommandOverlayHost",
    "ReloadNotifier",
    "NullReloadNotifier",
    "CommandReloadNotifier",
    "NOTIFY_RELOAD_HUD",
]
