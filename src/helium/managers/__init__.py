"""
Managers for the widget-set configuration.

- WidgetSetStore: Authoritative widget-set list, persistence and edits
- WidgetRegistry: Widget option classes keyed by module
"""

from .widget import WidgetRegistry, registry
from .widget_set import WIDGET_PROPERTIES_KEY, WidgetSetStore

__all__ = [
    "WidgetSetStore",
    "WidgetRegistry",
    "registry",
    "WIDGET_PROPERTIES_KEY",
]
