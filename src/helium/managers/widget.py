"""
Registry of widget option classes, keyed by widget module.
"""

import logging
from typing import Dict, Optional, Type

from ..widgets.base import BaseWidget, WidgetModule

logger = logging.getLogger(__name__)


class WidgetRegistry:
    """
    Registry for auto-discovering widget types.

    Maps each WidgetModule to the BaseWidget subclass that knows its option
    defaults and preview.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._widgets: Dict[WidgetModule, Type[BaseWidget]] = {}

    def register(self, widget_class: type) -> None:
        """
        Register a widget class.

        Args:
            widget_class: Widget class to register

        Raises:
            TypeError: If widget_class doesn't inherit from BaseWidget
            ValueError: If module is not defined
        """
        if not isinstance(widget_class, type) or not issubclass(widget_class, BaseWidget):
            raise TypeError(f"{widget_class} must inherit from BaseWidget")

        module = widget_class.module

        if module is None:
            raise ValueError(f"{widget_class.__name__} must define module class attribute")

        if module in self._widgets:
            logger.warning(f"Overwriting existing widget type: {module.name}")

        self._widgets[module] = widget_class
        logger.debug(f"Registered widget type: {module.name}")

    def get_widget_class(self, module: WidgetModule) -> Optional[Type[BaseWidget]]:
        """
        Get widget class by module.

        Args:
            module: Widget module

        Returns:
            Widget class or None if not found
        """
        if not self._widgets:
            self.auto_discover()
        return self._widgets.get(module)

    def create(self, module: WidgetModule, config: Optional[Dict] = None) -> Optional[BaseWidget]:
        """
        Instantiate the widget class for a module.

        Returns:
            Widget wrapping the config, or None for unregistered modules
        """
        widget_class = self.get_widget_class(module)
        if widget_class is None:
            logger.error(f"No widget class registered for {module.name}")
            return None
        return widget_class(config)

    def normalize_config(self, module: WidgetModule, config: Optional[Dict]) -> Dict:
        """
        Minimize a config map the way the module's widget class defines.

        Unregistered modules only get None values removed.
        """
        widget_class = self.get_widget_class(module) or BaseWidget
        return widget_class.normalize_config(config)

    def list_widgets(self) -> list:
        """
        List all registered widget modules.

        Returns:
            List of WidgetModule values
        """
        return list(self._widgets.keys())

    def auto_discover(self) -> None:
        """Auto-discover and register all widget modules."""
        import importlib
        import pkgutil

        import helium.widgets as widgets_pkg

        for _importer, modname, _ispkg in pkgutil.iter_modules(widgets_pkg.__path__):
            if modname in ["base", "catalog", "__init__"]:
                continue

            try:
                module = importlib.import_module(f"helium.widgets.{modname}")

                # Find all BaseWidget subclasses
                for attr_name in dir(module):
                    attr = getattr(module, attr_name)
                    if (
                        isinstance(attr, type)
                        and issubclass(attr, BaseWidget)
                        and attr is not BaseWidget
                        and attr.module is not None
                        and attr.__module__ == module.__name__
                    ):
                        self.register(attr)
                        logger.debug(f"Auto-registered widget: {attr.module.name}")

            except Exception as e:
                logger.error(f"Failed to load widget module {modname}: {e}")


# Global registry instance
registry = WidgetRegistry()
