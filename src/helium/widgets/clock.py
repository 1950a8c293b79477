"""
Date and time widgets.

Formats are stored as ICU date patterns (``E MMM dd``, ``hh:mm a``) so the
overlay renderer can use them unchanged; previews interpret the common
pattern letters here.
"""

import logging
import re
from datetime import datetime
from typing import Dict, List

from ..config.settings import AppSettings
from .base import BaseWidget, WidgetModule

logger = logging.getLogger(__name__)

TIME_FORMATS: List[str] = [
    "hh:mm",
    "hh:mm a",
    "hh:mm:ss",
    "hh",
    "HH:mm",
    "HH:mm:ss",
    "HH",
    "mm",
    "ss",
]

DEFAULT_DATE_FORMATS: Dict[str, str] = {
    "en_US": "E MMM dd",
    "zh_CN": "M月d日 E",
}

_NAMES = {
    "en_US": {
        "weekdays": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
        "weekdays_short": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
        "months": [
            "January", "February", "March", "April", "May", "June",
            "July", "August", "September", "October", "November", "December",
        ],
        "months_short": [
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        ],
        "am_pm": ["AM", "PM"],
    },
    "zh_CN": {
        "weekdays": ["星期一", "星期二", "星期三", "星期四", "星期五", "星期六", "星期日"],
        "weekdays_short": ["周一", "周二", "周三", "周四", "周五", "周六", "周日"],
        "months": [
            "一月", "二月", "三月", "四月", "五月", "六月",
            "七月", "八月", "九月", "十月", "十一月", "十二月",
        ],
        "months_short": [f"{m}月" for m in range(1, 13)],
        "am_pm": ["上午", "下午"],
    },
}

# Quoted literal, a run of one pattern letter, or any other single character
_TOKEN = re.compile(r"'(?:[^']|'')*'|([A-Za-z])\1*|.", re.DOTALL)


def _format_field(token: str, moment: datetime, names: Dict[str, List[str]]) -> str:
    letter, width = token[0], len(token)

    if letter == "y":
        return f"{moment.year % 100:02d}" if width == 2 else str(moment.year).zfill(width)
    if letter in "ML":
        if width >= 4:
            return names["months"][moment.month - 1]
        if width == 3:
            return names["months_short"][moment.month - 1]
        return str(moment.month).zfill(width)
    if letter == "d":
        return str(moment.day).zfill(width)
    if letter in "Ec":
        if width == 4:
            return names["weekdays"][moment.weekday()]
        if width >= 5:
            return names["weekdays_short"][moment.weekday()][:1]
        return names["weekdays_short"][moment.weekday()]
    if letter == "H":
        return str(moment.hour).zfill(width)
    if letter == "h":
        return str(moment.hour % 12 or 12).zfill(width)
    if letter == "m":
        return str(moment.minute).zfill(width)
    if letter == "s":
        return str(moment.second).zfill(width)
    if letter == "a":
        return names["am_pm"][0 if moment.hour < 12 else 1]

    # Unsupported pattern letters are shown verbatim
    return token


def format_icu_pattern(pattern: str, moment: datetime, locale: str = "en_US") -> str:
    """
    Format a datetime with an ICU date pattern.

    Supports the y, M/L, d, E, H, h, m, s and a pattern letters plus quoted
    literals. Names come from en_US or zh_CN; other locales use en_US.

    Args:
        pattern: ICU pattern, e.g. ``E MMM dd`` or ``HH:mm:ss``
        moment: Time to format
        locale: Locale identifier

    Returns:
        Formatted text
    """
    names = _NAMES.get(locale, _NAMES["en_US"])
    parts = []
    for match in _TOKEN.finditer(pattern):
        token = match.group(0)
        if token.startswith("'"):
            literal = token[1:-1].replace("''", "'")
            parts.append(literal if token != "''" else "'")
        elif match.group(1):
            parts.append(_format_field(token, moment, names))
        else:
            parts.append(token)
    return "".join(parts)


class DateWidget(BaseWidget):
    """
    Current date.

    Configuration:
        dateFormat: ICU pattern (default: the locale's pattern, "E MMM dd" for en_US)
    """

    module = WidgetModule.DATE
    defaults = {"dateFormat": DEFAULT_DATE_FORMATS["en_US"]}
    text_options = ("dateFormat",)

    def fetch_data(self) -> datetime:
        """Get current date/time."""
        return datetime.now()

    def pattern(self, settings: AppSettings) -> str:
        if "dateFormat" in self.config:
            return self.option("dateFormat")
        return DEFAULT_DATE_FORMATS.get(settings.date_locale, self.defaults["dateFormat"])

    def render_preview(self, settings: AppSettings) -> str:
        text = format_icu_pattern(self.pattern(settings), self.fetch_data(), settings.date_locale)
        # An empty result means the pattern produced nothing visible
        return text if text.strip() else "ERROR"


class TimeWidget(DateWidget):
    """
    Current time.

    Configuration:
        dateFormat: One of TIME_FORMATS (default: "hh:mm")
    """

    module = WidgetModule.TIME
    defaults = {"dateFormat": TIME_FORMATS[0]}
    text_options = ()

    def pattern(self, settings: AppSettings) -> str:
        return self.option("dateFormat")

    def format_index(self) -> int:
        """Position of the configured format in TIME_FORMATS (0 if not listed)."""
        try:
            return TIME_FORMATS.index(self.option("dateFormat"))
        except ValueError:
            return 0
