"""
Reload notifications telling the overlay renderer to re-read its preferences.
"""

import logging
import subprocess
from abc import ABC, abstractmethod

from ..utils.errors import error_boundary

logger = logging.getLogger(__name__)

NOTIFY_RELOAD_HUD = "com.helium.notification.hud.reload"


class ReloadNotifier(ABC):
    """
    Fire-and-forget "configuration changed" signal.

    Senders never wait for or verify delivery.
    """

    name: str = NOTIFY_RELOAD_HUD

    @abstractmethod
    def notify(self) -> None:
        """Signal the renderer. Must not raise."""
        pass


class NullReloadNotifier(ReloadNotifier):
    """Notifier for setups without a running renderer."""

    def notify(self) -> None:
        logger.debug(f"Reload requested ({self.name}), no renderer attached")


class CommandReloadNotifier(ReloadNotifier):
    """
    Deliver the signal by launching a shell command.

    The command may reference the notification name as ``{name}``, e.g.
    ``notifyutil -p {name}``.
    """

    def __init__(self, command: str):
        """
        Initialize the notifier.

        Args:
            command: Shell command to launch on every notification
        """
        self.command = command

    def notify(self) -> None:
        self._launch()

    @error_boundary(default_return=False)
    def _launch(self) -> bool:
        command = self.command.replace("{name}", self.name)
        logger.debug(f"Posting reload notification: {command}")
        # Not waited on; delivery is best effort
        subprocess.Popen(command, shell=True)
        return True
