"""
Overlay host driven by user supplied shell commands
"""

import logging
from typing import Optional

from .base import OverlayHost

logger = logging.getLogger(__name__)


class CommandOverlayHost(OverlayHost):
    """
    Overlay host backed by shell commands.

    The status command's exit code reports the state (0 means enabled).

    Example:
        >>> host = CommandOverlayHost(
        ...     status_command="pgrep -x HeliumHUD",
        ...     enable_command="launchctl start com.helium.hud",
        ...     disable_command="launchctl stop com.helium.hud",
        ... )
    """

    name = "command"

    def __init__(
        self,
        status_command: str,
        enable_command: str,
        disable_command: Optional[str] = None,
    ):
        self.status_command = status_command
        self.enable_command = enable_command
        self.disable_command = disable_command

    def is_enabled(self) -> bool:
        return self.execute_command(self.status_command)

    def set_enabled(self, enabled: bool) -> bool:
        command = self.enable_command if enabled else self.disable_command
        if not command:
            logger.warning(f"No command configured to {'enable' if enabled else 'disable'} overlay")
            return False

        if not self.execute_command(command):
            logger.error(f"Failed to {'enable' if enabled else 'disable'} overlay: {command}")
            return False
        return True
