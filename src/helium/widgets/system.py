"""
Device status widgets: network speed, battery, temperature and charging.
"""

import logging

import psutil

from ..config.settings import AppSettings
from .base import BaseWidget, WidgetModule

logger = logging.getLogger(__name__)

SPEED_UNITS = ["b", "Kb", "Mb", "Gb"]

BATTERY_VALUE_TYPES = ["Watts", "Charging Current", "Amperage", "Charge Cycles"]

# Preview text per BATTERY_VALUE_TYPES entry
_BATTERY_PREVIEWS = ["0 W", "0 mA", "0 mA", "25"]


class NetworkWidget(BaseWidget):
    """
    Upload or download speed.

    Configuration:
        isUp: Show upload instead of download (default: False)
        speedIcon: 0 for triangle arrows, 1 for plain arrows (default: 0)
        minUnit: Smallest unit shown, index into SPEED_UNITS (default: 1, Kb)
        hideSpeedWhenZero: Hide the widget while idle (default: False)
    """

    module = WidgetModule.NETWORK
    defaults = {"isUp": False, "speedIcon": 0, "minUnit": 1, "hideSpeedWhenZero": False}
    choices = {"minUnit": SPEED_UNITS}

    def arrow(self) -> str:
        """Direction symbol for the configured direction and icon style."""
        if self.option("isUp"):
            return "▲" if self.option("speedIcon") == 0 else "↑"
        return "▼" if self.option("speedIcon") == 0 else "↓"

    def render_preview(self, settings: AppSettings) -> str:
        return f"{self.arrow()} 30 KB/s"


class TemperatureWidget(BaseWidget):
    """
    Device temperature.

    Configuration:
        useFahrenheit: Show °F instead of °C (default: False)
    """

    module = WidgetModule.TEMPERATURE
    defaults = {"useFahrenheit": False}

    def render_preview(self, settings: AppSettings) -> str:
        return "78.84ºF" if self.option("useFahrenheit") else "26.02ºC"


class BatteryWidget(BaseWidget):
    """
    Battery detail value.

    Configuration:
        batteryValueType: Index into BATTERY_VALUE_TYPES (default: 0, watts)
    """

    module = WidgetModule.BATTERY
    defaults = {"batteryValueType": 0}
    choices = {"batteryValueType": BATTERY_VALUE_TYPES}

    def render_preview(self, settings: AppSettings) -> str:
        value_type = self.option("batteryValueType")
        if not 0 <= value_type < len(BATTERY_VALUE_TYPES):
            return "???"
        return _BATTERY_PREVIEWS[value_type]


class CurrentCapacityWidget(BaseWidget):
    """
    Battery charge percentage.

    Configuration:
        showPercentage: Append a % sign (default: True)
    """

    module = WidgetModule.CURRENT_CAPACITY
    defaults = {"showPercentage": True}

    # Shown when the host has no battery to read
    FALLBACK_PERCENT = 50

    def fetch_data(self) -> int:
        """Get the host battery percentage, or the fallback value."""
        try:
            battery = psutil.sensors_battery()
        except Exception as e:
            logger.debug(f"Cannot read battery: {e}")
            return self.FALLBACK_PERCENT
        if battery is None:
            return self.FALLBACK_PERCENT
        return int(round(battery.percent))

    def render_preview(self, settings: AppSettings) -> str:
        suffix = "%" if self.option("showPercentage") else ""
        return f"{self.fetch_data()}{suffix}"


class ChargeSymbolWidget(BaseWidget):
    """
    Charging indicator.

    Configuration:
        filled: Use the filled bolt (default: True)
    """

    module = WidgetModule.CHARGE_SYMBOL
    defaults = {"filled": True}

    def render_preview(self, settings: AppSettings) -> str:
        return "⚡" if self.option("filled") else "ϟ"
