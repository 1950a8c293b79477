"""
Device model probe used to pick layout presets.
"""

import logging
import os
import platform
from enum import IntEnum
from typing import Optional

logger = logging.getLogger(__name__)


class NotchSize(IntEnum):
    """Status-bar cutout of the device."""

    NONE = 0
    SMALL = 1
    LARGE = 2
    DYNAMIC_ISLAND = 3


_SMALL_NOTCH = ("iPhone14",)
_LARGE_NOTCH = ("iPhone10,3", "iPhone10,6", "iPhone11", "iPhone12", "iPhone13")
_DYNAMIC_ISLAND = ("iPhone15", "iPhone16")


def get_device_name() -> str:
    """
    Hardware model identifier, e.g. ``iPhone14,2``.

    A simulator reports the model it emulates through
    ``SIMULATOR_MODEL_IDENTIFIER``; otherwise the machine name is used.
    """
    simulated = os.environ.get("SIMULATOR_MODEL_IDENTIFIER")
    if simulated:
        return simulated
    return platform.machine()


def get_notch_size(model: Optional[str] = None) -> NotchSize:
    """
    Classify the device's status-bar cutout.

    Args:
        model: Model identifier (default: the current device)

    Returns:
        NotchSize for the model; NONE for anything unrecognized
    """
    if model is None:
        model = get_device_name()

    if model.startswith(_SMALL_NOTCH):
        size = NotchSize.SMALL
    elif model.startswith(_LARGE_NOTCH):
        size = NotchSize.LARGE
    elif model.startswith(_DYNAMIC_ISLAND):
        size = NotchSize.DYNAMIC_ISLAND
    else:
        size = NotchSize.NONE

    logger.debug(f"Device {model!r} has notch size {size.name}")
    return size
