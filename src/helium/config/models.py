"""
In-memory model of widget sets and widget instances.
"""

import uuid
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple

from PIL import ImageColor

from ..widgets.base import WidgetModule

RGBA = Tuple[int, int, int, int]

WHITE: RGBA = (255, 255, 255, 255)


class Anchor(IntEnum):
    """Horizontal corner a widget set is pinned to."""

    LEFT = 0
    CENTER = 1
    RIGHT = 2


class TextAlignment(IntEnum):
    LEFT = 0
    CENTER = 1
    RIGHT = 2


def parse_color(value: str) -> RGBA:
    """
    Parse a CSS-style color ("white", "#ff8800", "rgb(1,2,3)").

    Raises:
        ValueError: If Pillow does not recognize the color
    """
    rgb = ImageColor.getcolor(value, "RGBA")
    return tuple(rgb)  # type: ignore[return-value]


def encode_color(color: RGBA) -> bytes:
    """Encode a color as the opaque blob stored in preferences."""
    return bytes(max(0, min(255, int(c))) for c in color)


def decode_color(blob: Any) -> Optional[RGBA]:
    """
    Decode a stored color blob.

    Returns:
        RGBA tuple, or None if the blob is absent or not a color
    """
    if not isinstance(blob, (bytes, bytearray)):
        return None
    if len(blob) == 4:
        return tuple(blob)  # type: ignore[return-value]
    if len(blob) == 3:
        return (blob[0], blob[1], blob[2], 255)
    return None


@dataclass(eq=False)
class WidgetInstance:
    """
    One configured widget occurrence inside a widget set.

    Equality is by ``identity`` only; two instances with identical config are
    still different widgets.
    """

    module: WidgetModule
    config: Dict[str, Any] = field(default_factory=dict)
    # Unsaved edits pending; never persisted
    modified: bool = False
    identity: uuid.UUID = field(default_factory=uuid.uuid4)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WidgetInstance):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)


@dataclass
class BlurDetails:
    has_blur: bool = False
    # Persisted truncated to an integer
    corner_radius: float = 4.0
    style_dark: bool = True
    alpha: float = 1.0


@dataclass
class ColorDetails:
    uses_custom_color: bool = False
    color: RGBA = WHITE


@dataclass(eq=False)
class WidgetSet:
    """
    A named, positioned and styled group of widgets rendered together.

    Every attribute carries the default applied when it is missing from
    persisted data, so a loaded set is always fully populated. Equality is by
    ``identity`` only.
    """

    is_enabled: bool = True
    orientation_mode: int = 0
    title: str = "Untitled"
    update_interval: float = 1.0

    anchor: int = Anchor.LEFT.value
    anchor_y: int = 0
    offset_px: float = 0.0
    offset_py: float = 0.0
    offset_lx: float = 0.0
    offset_ly: float = 0.0

    auto_resizes: bool = False
    scale: float = 100.0
    scale_y: float = 12.0

    widget_ids: List[WidgetInstance] = field(default_factory=list)

    blur_details: BlurDetails = field(default_factory=BlurDetails)

    dynamic_color: bool = True
    color_details: ColorDetails = field(default_factory=ColorDetails)

    font_name: str = "System Font"
    text_bold: bool = False
    text_italic: bool = False
    text_alignment: int = TextAlignment.CENTER.value
    font_size: float = 10.0
    text_alpha: float = 1.0

    identity: uuid.UUID = field(default_factory=uuid.uuid4)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WidgetSet):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def index_of(self, widget: WidgetInstance) -> Optional[int]:
        """Position of a widget in this set by identity, or None."""
        for i, w in enumerate(self.widget_ids):
            if w == widget:
                return i
        return None


# Attributes that editing a set copies over; widgets are managed separately
EDITABLE_SET_ATTRIBUTES = [
    "is_enabled",
    "orientation_mode",
    "title",
    "update_interval",
    "anchor",
    "anchor_y",
    "offset_px",
    "offset_py",
    "offset_lx",
    "offset_ly",
    "auto_resizes",
    "scale",
    "scale_y",
    "blur_details",
    "dynamic_color",
    "color_details",
    "font_name",
    "text_bold",
    "text_italic",
    "text_alignment",
    "font_size",
    "text_alpha",
]
