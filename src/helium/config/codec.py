"""
Conversion between widget sets and their persisted form.

The persisted form is a list of plain mappings (scalars, nested mappings and
lists of mappings) suitable for any key-value preferences medium:

    - isEnabled: true
      title: Main
      widgetIDs:
        - widgetID: 2
          isUp: true
      blurDetails: {hasBlur: false, cornerRadius: 4, styleDark: true, alpha: 1.0}
      colorDetails: {usesCustomColor: false, color: !!binary /////w==}
      ...

Decoding never fails on individual fields: anything missing or of the wrong
type takes its documented default.
"""

import logging
import math
from typing import Any, Dict, List, Sequence

from ..widgets.base import WidgetModule
from .models import (
    WHITE,
    BlurDetails,
    ColorDetails,
    WidgetInstance,
    WidgetSet,
    decode_color,
    encode_color,
)

logger = logging.getLogger(__name__)

WIDGET_ID_KEY = "widgetID"

# (attribute, persisted key, type) in persisted order; widgetIDs and the
# nested details are handled separately
_LEADING_SCALARS = [
    ("is_enabled", "isEnabled", bool),
    ("orientation_mode", "orientationMode", int),
    ("title", "title", str),
    ("update_interval", "updateInterval", float),
    ("anchor", "anchor", int),
    ("anchor_y", "anchorY", int),
    ("offset_px", "offsetPX", float),
    ("offset_py", "offsetPY", float),
    ("offset_lx", "offsetLX", float),
    ("offset_ly", "offsetLY", float),
    ("auto_resizes", "autoResizes", bool),
    ("scale", "scale", float),
    ("scale_y", "scaleY", float),
]

_TRAILING_SCALARS = [
    ("font_name", "fontName", str),
    ("text_bold", "textBold", bool),
    ("text_italic", "textItalic", bool),
    ("text_alignment", "textAlignment", int),
    ("font_size", "fontSize", float),
    ("text_alpha", "textAlpha", float),
]

_BLUR_FIELDS = [
    ("has_blur", "hasBlur", bool),
    ("corner_radius", "cornerRadius", float),
    ("style_dark", "styleDark", bool),
    ("alpha", "alpha", float),
]


def _coerce(value: Any, kind: type) -> Any:
    """
    Return value as kind, or None if it is not of that type.

    Booleans never pass as numbers. Integers pass as floats. Floats must be
    finite.
    """
    if kind is bool:
        return value if isinstance(value, bool) else None
    if isinstance(value, bool):
        return None
    if kind is float:
        if not isinstance(value, (int, float)):
            return None
        try:
            value = float(value)
        except OverflowError:
            return None
        return value if math.isfinite(value) else None
    if kind is int:
        return value if isinstance(value, int) else None
    return value if isinstance(value, kind) else None


def _read(source: Dict[str, Any], key: str, kind: type, default: Any) -> Any:
    if key not in source or source[key] is None:
        return default
    value = _coerce(source[key], kind)
    if value is None:
        logger.warning(
            f"Persisted {key}={source[key]!r} is not {kind.__name__}, using default {default!r}"
        )
        return default
    return value


def _truncate(value: float, default: float) -> int:
    """Integer part of a finite value; non-finite values write the default."""
    if not math.isfinite(value):
        logger.warning(f"Cannot store non-finite value {value!r}, writing {default!r}")
        value = default
    return int(value)


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


class ConfigCodec:
    """Encodes and decodes the persisted widget-set list."""

    def decode(self, raw: Any) -> List[WidgetSet]:
        """
        Build widget sets from persisted data.

        Args:
            raw: Value read from the preferences medium (None if never saved)

        Returns:
            Fully populated widget sets with fresh identities
        """
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning(f"Persisted widget sets are {type(raw).__name__}, not a list; ignoring")
            return []

        sets = []
        for i, entry in enumerate(raw):
            if not isinstance(entry, dict):
                logger.warning(f"Skipping persisted widget set #{i}: not a mapping")
                continue
            sets.append(self._decode_set(entry))

        logger.debug(f"Decoded {len(sets)} widget set(s)")
        return sets

    def _decode_set(self, entry: Dict[str, Any]) -> WidgetSet:
        defaults = WidgetSet()
        values = {}
        for attribute, key, kind in _LEADING_SCALARS + _TRAILING_SCALARS:
            values[attribute] = _read(entry, key, kind, getattr(defaults, attribute))
        values["dynamic_color"] = _read(entry, "dynamicColor", bool, defaults.dynamic_color)

        return WidgetSet(
            widget_ids=self._decode_widgets(entry.get("widgetIDs")),
            blur_details=self._decode_blur(_mapping(entry.get("blurDetails"))),
            color_details=self._decode_color(_mapping(entry.get("colorDetails"))),
            **values,
        )

    def _decode_widgets(self, raw: Any) -> List[WidgetInstance]:
        if not isinstance(raw, list):
            return []

        widgets = []
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            module = WidgetModule.from_tag(entry.get(WIDGET_ID_KEY))
            if module is None:
                # Unknown (newer) widget kinds are dropped, not fatal
                logger.warning(f"Dropping widget with unknown {WIDGET_ID_KEY}: {entry.get(WIDGET_ID_KEY)!r}")
                continue
            config = {k: v for k, v in entry.items() if k != WIDGET_ID_KEY}
            widgets.append(WidgetInstance(module=module, config=config))
        return widgets

    def _decode_blur(self, raw: Dict[str, Any]) -> BlurDetails:
        defaults = BlurDetails()
        return BlurDetails(
            **{
                attribute: _read(raw, key, kind, getattr(defaults, attribute))
                for attribute, key, kind in _BLUR_FIELDS
            }
        )

    def _decode_color(self, raw: Dict[str, Any]) -> ColorDetails:
        color = decode_color(raw.get("color"))
        if color is None:
            if "color" in raw:
                logger.warning("Undecodable color blob, using white")
            color = WHITE
        return ColorDetails(
            uses_custom_color=_read(raw, "usesCustomColor", bool, False),
            color=color,
        )

    def encode(self, sets: Sequence[WidgetSet]) -> List[Dict[str, Any]]:
        """
        Build the persisted form of widget sets.

        Every set attribute is written, defaults included. Each widget is
        flattened into one mapping holding its module tag under ``widgetID``
        next to its config keys.

        Args:
            sets: Widget sets in display order

        Returns:
            List of mappings; empty when there are no sets
        """
        return [self._encode_set(s) for s in sets]

    def _encode_set(self, s: WidgetSet) -> Dict[str, Any]:
        encoded: Dict[str, Any] = {}
        for attribute, key, kind in _LEADING_SCALARS:
            encoded[key] = kind(getattr(s, attribute))

        encoded["widgetIDs"] = [self._encode_widget(w) for w in s.widget_ids]

        encoded["blurDetails"] = {
            "hasBlur": s.blur_details.has_blur,
            "cornerRadius": _truncate(s.blur_details.corner_radius, BlurDetails().corner_radius),
            "styleDark": s.blur_details.style_dark,
            "alpha": float(s.blur_details.alpha),
        }

        encoded["dynamicColor"] = s.dynamic_color
        encoded["colorDetails"] = {
            "usesCustomColor": s.color_details.uses_custom_color,
            "color": encode_color(s.color_details.color),
        }

        for attribute, key, kind in _TRAILING_SCALARS:
            encoded[key] = kind(getattr(s, attribute))
        return encoded

    def _encode_widget(self, widget: WidgetInstance) -> Dict[str, Any]:
        encoded: Dict[str, Any] = {WIDGET_ID_KEY: int(widget.module)}
        encoded.update(widget.config)
        return encoded
