"""
Base classes for all widget types.
"""

import logging
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Dict, Optional, Sequence, Tuple

from ..config.settings import AppSettings

logger = logging.getLogger(__name__)


class WidgetModule(IntEnum):
    """
    Closed set of widget kinds.

    The integer values are persisted as ``widgetID`` and must never be
    renumbered.
    """

    DATE = 1
    NETWORK = 2
    TEMPERATURE = 3
    BATTERY = 4
    TIME = 5
    TEXT = 6
    CURRENT_CAPACITY = 7
    CHARGE_SYMBOL = 8
    WEATHER = 9
    WEB_PAGE = 10

    @classmethod
    def from_tag(cls, tag: Any) -> Optional["WidgetModule"]:
        """
        Look up a module by its persisted tag.

        Returns:
            The module, or None for unknown or non-integer tags
        """
        if isinstance(tag, bool) or not isinstance(tag, int):
            return None
        try:
            return cls(tag)
        except ValueError:
            return None

    @classmethod
    def from_name(cls, name: str) -> "WidgetModule":
        """
        Parse a module from a user-facing name like ``web-page`` or ``webPage``.

        Raises:
            ValueError: If no module matches
        """
        normalized = name.strip().replace("-", "").replace("_", "").lower()
        for module in cls:
            if module.name.replace("_", "").lower() == normalized:
                return module
        raise ValueError(f"Unknown widget module: {name}")


def _matches_type(value: Any, default: Any) -> bool:
    """Check a stored option against the type of its default."""
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, (int, float)):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, type(default))


class BaseWidget(ABC):
    """
    Base class for all overlay widgets.

    A widget wraps the sparse config map of one widget instance. Absent keys
    are never filled in the map itself; ``option`` applies the documented
    default on read instead.

    Class Attributes:
        module: The WidgetModule this class handles
        defaults: Option key -> default value
        text_options: Keys deleted from the map when saved empty
        choices: Integer option key -> labels of its values, by index

    Example:
        >>> class MyWidget(BaseWidget):
        ...     module = WidgetModule.TEXT
        ...     defaults = {"text": ""}
        ...     text_options = ("text",)
        ...
        ...     def render_preview(self, settings):
        ...         return self.option("text") or "Unknown"
    """

    module: WidgetModule = None

    defaults: Dict[str, Any] = {}

    text_options: Tuple[str, ...] = ()

    choices: Dict[str, Sequence[str]] = {}

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize widget with its config map.

        Args:
            config: Sparse option map of the widget instance

        Raises:
            ValueError: If module is not defined
        """
        if self.module is None:
            raise ValueError(f"{self.__class__.__name__} must define module")

        self.config = dict(config or {})

    def option(self, key: str) -> Any:
        """
        Read an option, falling back to its default.

        A stored value whose type does not match the default is ignored.

        Args:
            key: Option key

        Returns:
            Stored value or documented default (None for undocumented keys)
        """
        default = self.defaults.get(key)
        value = self.config.get(key)
        if value is None:
            return default
        if default is not None and not _matches_type(value, default):
            logger.debug(
                f"Ignoring {self.module.name} option {key}={value!r}, using default {default!r}"
            )
            return default
        return value

    @classmethod
    def normalize_config(cls, config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Produce the minimal map to store for a widget instance.

        Keys set to None are removed, and text options set to an empty string
        are removed so their default applies. Numeric and boolean options are
        always kept.

        Args:
            config: Config map as edited by the caller

        Returns:
            New, minimized config map
        """
        normalized = {}
        for key, value in (config or {}).items():
            if value is None:
                continue
            if key in cls.text_options and value == "":
                continue
            normalized[key] = value
        return normalized

    @abstractmethod
    def render_preview(self, settings: AppSettings) -> str:
        """
        Produce the sample text shown while configuring the widget.

        Args:
            settings: App settings (locale etc.)

        Returns:
            Preview text
        """
        pass

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<{self.__class__.__name__}(module={self.module.name}, config={self.config})>"
