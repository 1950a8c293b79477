"""
Device capability probe and preview rendering
"""

from .renderer import PreviewRenderer, to_png_bytes
from .scale import NotchSize, get_device_name, get_notch_size

__all__ = ["PreviewRenderer", "to_png_bytes", "NotchSize", "get_device_name", "get_notch_size"]
