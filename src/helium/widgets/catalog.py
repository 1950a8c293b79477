"""
Display names and example text for every widget module.
"""

from typing import Dict, Tuple

from .base import WidgetModule

_CATALOG: Dict[WidgetModule, Tuple[str, str]] = {
    WidgetModule.DATE: ("Date", "Mon Oct 16"),
    WidgetModule.NETWORK: ("Network", "▲ 0 KB/s"),
    WidgetModule.TEMPERATURE: ("Device Temperature", "29.34ºC"),
    WidgetModule.BATTERY: ("Battery Details", "25 W"),
    WidgetModule.TIME: ("Time", "14:57:05"),
    WidgetModule.TEXT: ("Text Label", "Example"),
    WidgetModule.CURRENT_CAPACITY: ("Battery Capacity", "50%"),
    WidgetModule.CHARGE_SYMBOL: ("Charging Symbol", "⚡️"),
    WidgetModule.WEATHER: ("Weather", "🌤 20℃"),
    WidgetModule.WEB_PAGE: ("Web Page", "https://example.com"),
}


def describe(module: WidgetModule) -> Tuple[str, str]:
    """
    Human-readable name and example display text for a widget module.

    Raises:
        KeyError: If the module has no catalog entry
    """
    return _CATALOG[WidgetModule(module)]


def widget_name(module: WidgetModule) -> str:
    return describe(module)[0]


def widget_example(module: WidgetModule) -> str:
    return describe(module)[1]
