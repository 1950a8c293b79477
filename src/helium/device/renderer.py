"""
Preview rendering for widgets
"""

import io
import logging
import os
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..config.models import WHITE, TextAlignment, WidgetInstance, WidgetSet
from ..config.settings import AppSettings
from ..managers.widget import WidgetRegistry, registry

logger = logging.getLogger(__name__)

BACKGROUND_COLOR = (28, 28, 30, 255)

SYSTEM_FONT = "System Font"


class PreviewRenderer:
    """
    Renders the preview image of one widget.

    The preview text comes from the widget's option class; font, size, color
    and alignment come from the widget set it belongs to.

    Attributes:
        font_cache: Dictionary mapping font keys to loaded ImageFont objects
    """

    def __init__(self, widget_registry: Optional[WidgetRegistry] = None):
        """Initialize the renderer with an empty font cache."""
        self.font_cache = {}
        self.widget_registry = widget_registry or registry

    def preview_text(self, instance: WidgetInstance, settings: Optional[AppSettings] = None) -> str:
        """Preview text of a widget instance ("???" for unknown modules)."""
        widget = self.widget_registry.create(instance.module, instance.config)
        if widget is None:
            return "???"
        return widget.render_preview(settings or AppSettings())

    def render(
        self,
        instance: WidgetInstance,
        widget_set: Optional[WidgetSet] = None,
        settings: Optional[AppSettings] = None,
        size: Tuple[int, int] = (125, 50),
    ) -> Image.Image:
        """
        Render a widget preview.

        Clears the instance's ``modified`` flag, since the preview now
        reflects its current config.

        Args:
            instance: Widget to preview
            widget_set: Set supplying font and color (default: set defaults)
            settings: App settings (default: AppSettings())
            size: Image size in pixels

        Returns:
            RGBA image
        """
        widget_set = widget_set or WidgetSet()
        text = self.preview_text(instance, settings)

        image = Image.new("RGBA", size, BACKGROUND_COLOR)
        draw = ImageDraw.Draw(image)
        self._draw_text(draw, text, widget_set, size)

        instance.modified = False
        return image

    def _text_color(self, widget_set: WidgetSet) -> Tuple[int, int, int, int]:
        color = widget_set.color_details.color if widget_set.color_details.uses_custom_color else WHITE
        alpha = max(0.0, min(1.0, widget_set.text_alpha))
        return (color[0], color[1], color[2], int(color[3] * alpha))

    def _draw_text(
        self,
        draw: ImageDraw.ImageDraw,
        text: str,
        widget_set: WidgetSet,
        image_size: tuple,
    ) -> None:
        """
        Draw preview text vertically centered.

        Args:
            draw: PIL ImageDraw object to draw on
            text: Text to render. Use '\\n' for multi-line text
            widget_set: Supplies font name, font size, color and alignment
            image_size: Image dimensions as (width, height) tuple in pixels
        """
        font = self._load_font(widget_set.font_name, max(1, int(round(widget_set.font_size))))
        fill = self._text_color(widget_set)
        margin = 4

        lines = text.split("\n")
        line_bboxes = [draw.textbbox((0, 0), line, font=font) for line in lines]

        line_spacing = 2
        total_text_height = sum(bbox[3] - bbox[1] for bbox in line_bboxes)
        total_text_height += (len(lines) - 1) * line_spacing

        y_offset = (image_size[1] - total_text_height) // 2
        for line, bbox in zip(lines, line_bboxes):
            line_width = bbox[2] - bbox[0]
            if widget_set.text_alignment == TextAlignment.LEFT:
                text_x = margin
            elif widget_set.text_alignment == TextAlignment.RIGHT:
                text_x = image_size[0] - line_width - margin
            else:
                text_x = (image_size[0] - line_width) // 2

            # bbox[1] can be negative for tall ascenders
            draw.text((text_x, y_offset - bbox[1]), line, font=font, fill=fill)
            y_offset += (bbox[3] - bbox[1]) + line_spacing

    def _load_font(self, font_name: str, font_size: int):
        """Load a font with caching"""
        cache_key = f"{font_name}_{font_size}"

        if cache_key in self.font_cache:
            return self.font_cache[cache_key]

        font = None

        if font_name != SYSTEM_FONT:
            if "/" in font_name or font_name.endswith((".ttf", ".otf")):
                font_path = os.path.expanduser(font_name)
                try:
                    font = ImageFont.truetype(font_path, font_size)
                except OSError as e:
                    logger.warning(f"Failed to load font from path '{font_path}': {e}")
            else:
                font = self._find_system_font(font_name, font_size)

        if not font:
            if font_name != SYSTEM_FONT:
                logger.warning(f"Failed to load font '{font_name}', using default")
            font = ImageFont.load_default(size=font_size)

        self.font_cache[cache_key] = font
        return font

    def _find_system_font(self, font_name: str, font_size: int):
        """Search the system font directories for a font file matching the name."""
        font_dirs = [
            "/usr/share/fonts",
            "/usr/local/share/fonts",
            os.path.expanduser("~/.fonts"),
            os.path.expanduser("~/.local/share/fonts"),
        ]
        wanted = font_name.lower().replace(" ", "")

        for font_dir in font_dirs:
            if not os.path.exists(font_dir):
                continue

            for root, _dirs, files in os.walk(font_dir):
                for file in files:
                    if not file.endswith((".ttf", ".otf")):
                        continue
                    if wanted not in file.lower().replace(" ", ""):
                        continue
                    font_path = os.path.join(root, file)
                    try:
                        font = ImageFont.truetype(font_path, font_size)
                        logger.debug(f"Loaded font: {font_path}")
                        return font
                    except OSError as e:
                        logger.debug(f"Cannot load font {font_path}: {e}")

        return None


def to_png_bytes(image: Image.Image) -> bytes:
    """Serialize a preview image as PNG."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
