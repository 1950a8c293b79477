"""
Widget system for the overlay.

Each widget module (date, time, network, battery, ...) has an option class
here that knows the module's config keys, their defaults and how to preview
them. Option classes are auto-discovered by the widget registry.
"""

from .base import BaseWidget, WidgetModule
from .catalog import describe

__all__ = ["BaseWidget", "WidgetModule", "describe"]
