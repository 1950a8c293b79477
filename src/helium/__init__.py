"""
Helium - widget-set configuration store for a status-bar overlay
"""

__version__ = "0.1.0"

from .managers.widget_set import WidgetSetStore

__all__ = ["WidgetSetStore"]
