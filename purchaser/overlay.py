"""Marker icons blitted into the bottom-right corner of a purchase sprite.

At most one marker is drawn per unit, chosen by priority: the car count
(``x3`` and so on), then "second power car", then "double headed".
"""

import logging
from typing import Optional

import cv2
import numpy as np

from purchaser.config import (
    DOUBLE_HEADED_MARKER,
    SECOND_POWER_CAR_MARKER,
    TRANSPARENT_INDEX,
)
from purchaser.extractor import Canvas
from purchaser.sprites import PaletteImage
from purchaser.units import UnitSpec

logger = logging.getLogger(__name__)


def select_marker(unit: UnitSpec) -> Optional[str]:
    """Name of the marker icon for ``unit``, or None."""
    if unit.car_count > 0 and not unit.has_override_length:
        return f"x{unit.car_count}"
    if unit.requires_second_power_car:
        return SECOND_POWER_CAR_MARKER
    if unit.double_headed:
        return DOUBLE_HEADED_MARKER
    return None


def upscale_marker(marker: PaletteImage, scale: int) -> np.ndarray:
    """Nearest-neighbour upscale of the marker's palette indices."""
    if scale == 1:
        return marker.indices
    h, w = marker.indices.shape
    return cv2.resize(marker.indices.copy(), (w * scale, h * scale),
                      interpolation=cv2.INTER_NEAREST)


def blit_marker(canvas: Canvas, marker: PaletteImage, cursor: int, scale: int) -> None:
    """Draw ``marker`` right-aligned to ``cursor`` on the bottom row of ``canvas``.

    Non-zero marker pixels replace whatever is underneath; zero pixels leave
    the canvas untouched.  Parts falling outside the canvas are dropped.
    """
    scaled = upscale_marker(marker, scale)
    mh, mw = scaled.shape
    top = canvas.height - 1 - mh
    left = cursor - 1 - mw

    # clip the marker rectangle to the canvas
    y0, x0 = max(0, -top), max(0, -left)
    y1 = min(mh, canvas.height - top)
    x1 = min(mw, canvas.width - left)
    if y0 >= y1 or x0 >= x1:
        logger.debug("Marker %s falls outside the canvas", marker.path)
        return

    src = scaled[y0:y1, x0:x1]
    dst = canvas.pixels[top + y0:top + y1, left + x0:left + x1]
    mask = src != TRANSPARENT_INDEX
    dst[mask] = src[mask]
