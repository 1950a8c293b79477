"""
Base abstraction for the process hosting the overlay
"""

import logging
import subprocess
from abc import ABC, abstractmethod

from ..utils.errors import PlatformError

logger = logging.getLogger(__name__)


class OverlayHost(ABC):
    """Controls whether the overlay renderer is running"""

    name: str = "base"

    @abstractmethod
    def is_enabled(self) -> bool:
        """
        Check whether the overlay is currently shown

        Returns:
            True if the overlay is enabled
        """
        pass

    @abstractmethod
    def set_enabled(self, enabled: bool) -> bool:
        """
        Show or hide the overlay

        Args:
            enabled: Desired state

        Returns:
            True if the change was applied
        """
        pass

    def restart(self) -> bool:
        """
        Force the renderer to rebuild by toggling it off and on

        Returns:
            True if the overlay was enabled and has been toggled

        Raises:
            PlatformError: If the running overlay could not be stopped
        """
        if not self.is_enabled():
            return False
        logger.info(f"Restarting overlay via {self.name} host")
        if not self.set_enabled(False):
            raise PlatformError(f"Could not stop overlay via {self.name} host")
        return self.set_enabled(True)

    def execute_command(self, command: str) -> bool:
        """
        Execute a shell command

        Args:
            command: Command to execute

        Returns:
            True if successful
        """
        try:
            result = subprocess.run(command, shell=True, capture_output=True, text=True, timeout=5)
            return result.returncode == 0
        except Exception as e:
            logger.error(f"Command execution failed: {e}")
            return False
