"""
App-wide preferences shared by the overlay and its configuration tools.
"""

import logging
from dataclasses import dataclass, fields
from typing import Optional

from ..platforms.notifier import ReloadNotifier
from ..utils.errors import PersistenceError
from .gateway import DEFAULT_PREFERENCES_PATH, PersistenceGateway

logger = logging.getLogger(__name__)

SUPPORTED_LOCALES = ["en_US", "zh_CN"]

# attribute -> persisted key
_KEYS = {
    "date_locale": "dateLocale",
    "api_key": "apiKey",
    "hide_save_confirmation": "hideSaveConfirmation",
    "debug_border": "debugBorder",
    "hide_widgets_in_screenshot": "hideWidgetsInScreenshot",
}


@dataclass
class AppSettings:
    """
    Scalar preferences read by previews and the weather lookup.

    Passed explicitly to whatever needs them instead of being read from the
    preferences medium ad hoc.
    """

    date_locale: str = "en_US"
    api_key: str = ""
    hide_save_confirmation: bool = False
    debug_border: bool = False
    hide_widgets_in_screenshot: bool = False

    @classmethod
    def load(
        cls, gateway: PersistenceGateway, path: str = DEFAULT_PREFERENCES_PATH
    ) -> "AppSettings":
        """
        Load settings, keeping the default for any missing or mistyped value.

        Args:
            gateway: Preferences medium
            path: Namespaced preferences path

        Returns:
            Fully populated settings
        """
        settings = cls()
        for field in fields(cls):
            value = gateway.get(path, _KEYS[field.name])
            if value is None:
                continue
            default = getattr(settings, field.name)
            if type(value) is not type(default):
                logger.warning(
                    f"Ignoring setting {_KEYS[field.name]}={value!r}: "
                    f"expected {type(default).__name__}"
                )
                continue
            setattr(settings, field.name, value)
        return settings

    def save(
        self,
        gateway: PersistenceGateway,
        path: str = DEFAULT_PREFERENCES_PATH,
        notifier: Optional[ReloadNotifier] = None,
    ) -> None:
        """
        Persist every setting and tell the renderer to reload.

        Raises:
            PersistenceError: If the preferences medium cannot be written
        """
        for field in fields(self):
            gateway.set(path, _KEYS[field.name], getattr(self, field.name))
        logger.info(f"Saved app settings to {path}")
        if notifier is not None:
            notifier.notify()

    @staticmethod
    def key_for(attribute: str) -> str:
        """Persisted key for a settings attribute."""
        return _KEYS[attribute]


def reset_user_data(gateway: PersistenceGateway, path: str = DEFAULT_PREFERENCES_PATH) -> None:
    """
    Delete every stored preference, widget sets included.

    Raises:
        PersistenceError: With a message suitable for showing to the user
    """
    try:
        gateway.reset(path)
    except PersistenceError as e:
        logger.error(f"Failed to reset user data at {path}: {e}")
        raise PersistenceError(f"Failed to delete user data: {e}") from e
    logger.info(f"Deleted user data at {path}")
