"""Column extraction: build the purchase canvas from a unit's sprite sheets.

For every sprite of a unit, a fixed horizontal window of the sheet (the
side-on view of the vehicle) is scanned column by column.  Columns that hold
any drawable pixel are copied into the canvas at the cursor, which then
advances by one.  Empty columns are dropped, so longer vehicles contribute
more columns than short ones.

After the first sprite the cursor is clamped to the unit's declared length,
and per-sprite override lengths replace the measured cursor entirely.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np

from purchaser.config import (
    DEFAULT_START_CURSOR,
    LENGTH_UNIT_PIXELS,
    MASK_INDEX,
    TRANSPARENT_INDEX,
    LayoutConfig,
    PurchaserConfig,
    SheetLayout,
)
from purchaser.sprites import PaletteImage, load_palette_image
from purchaser.units import UnitSpec

logger = logging.getLogger(__name__)


@dataclass
class Canvas:
    """Output buffer for one unit at one scale."""
    pixels: np.ndarray                  # (H, W) uint8 palette indices
    palette: Tuple[int, ...]
    transparency: Optional[Union[int, bytes]] = None

    @classmethod
    def blank(cls, width: int, height: int, palette: Tuple[int, ...] = (),
              transparency: Optional[Union[int, bytes]] = None) -> "Canvas":
        pixels = np.full((height, width), TRANSPARENT_INDEX, dtype=np.uint8)
        return cls(pixels, tuple(palette), transparency)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


@dataclass
class UnitLayoutState:
    """Sheet layout chosen by the first sprite of a unit."""
    layout_decided: bool = False
    sheet: Optional[SheetLayout] = None
    mixed_layout: bool = False

    @property
    def active_row_height(self) -> int:
        return self.sheet.row_height if self.sheet else 0

    def decide(self, sheet: SheetLayout, unit_id: str = "", sprite_id: str = "") -> SheetLayout:
        """Fix the layout on the first call; later calls only report mismatches."""
        if not self.layout_decided:
            self.sheet = sheet
            self.layout_decided = True
        elif sheet.name != self.sheet.name:
            self.mixed_layout = True
            logger.warning(
                "Unit %s mixes sheet layouts: sprite %s is %s, using %s window",
                unit_id, sprite_id, sheet.name, self.sheet.name,
            )
        return self.sheet


@dataclass
class DrawResult:
    """Canvas and bookkeeping handed on to the overlay and writer stages."""
    canvas: Canvas
    cursor: int
    newest_input: float
    layout: UnitLayoutState
    inputs: List[str] = field(default_factory=list)


def initial_cursor(unit: UnitSpec, scale: int, layout: LayoutConfig) -> Tuple[int, int]:
    """Starting cursor and centring offset for a unit.

    Single vehicles (``car_count <= 1``) with declared articulated lengths are
    centred on the canvas; everything else starts at the left edge.
    """
    total = sum(unit.articulated_lengths) * LENGTH_UNIT_PIXELS * scale
    if unit.car_count > 1 or total <= 0:
        return DEFAULT_START_CURSOR, 0

    cursor = layout.canvas_width_for(scale) // 2 - total // 2
    if cursor <= 0:
        cursor = DEFAULT_START_CURSOR
    return cursor, cursor


def clamp_bound(unit: UnitSpec, scale: int, start: int) -> int:
    """Furthest the cursor may be after the first sprite, counted from where it started."""
    return start + scale * (1 + unit.base_length_pixels)


def _drawable(indices: np.ndarray) -> np.ndarray:
    return (indices != TRANSPARENT_INDEX) & (indices != MASK_INDEX)


def extract_columns(
    image: PaletteImage,
    window: Tuple[int, int],
    cursor: int,
    canvas: Canvas,
    overlay: Optional[PaletteImage] = None,
    copy_background: bool = False,
) -> Tuple[int, bool]:
    """Copy the occupied columns of ``image[start_x:end_x]`` into ``canvas``.

    Returns the advanced cursor and whether the canvas filled up.
    Raises ValueError for a negative cursor.
    """
    if cursor < 0:
        raise ValueError(f"cursor {cursor} is left of the canvas")
    start_x, end_x = window
    end_x = min(end_x, image.width)
    rows = min(image.height, canvas.height)

    if cursor >= canvas.width:
        return cursor, True

    for x in range(start_x, end_x):
        column = image.indices[:, x]
        merged = column
        if overlay is not None and x < overlay.width:
            extra = np.zeros_like(column)
            overlap = min(overlay.height, image.height)
            extra[:overlap] = overlay.indices[:overlap, x]
            merged = np.where(_drawable(extra), extra, column)

        target = canvas.pixels[:rows, cursor]
        if copy_background:
            target[:] = merged[:rows]
        else:
            mask = _drawable(merged[:rows])
            target[mask] = merged[:rows][mask]

        if np.any(_drawable(column)):
            cursor += 1
            if cursor >= canvas.width:
                return cursor, True

    return cursor, False


def find_animation_overlay(sprite_id: str, scale: int, config: PurchaserConfig) -> Optional[PaletteImage]:
    """Load the highest-priority animation overlay that exists for a sprite."""
    for path in config.animation_overlay_paths(sprite_id, scale):
        if path.is_file():
            logger.debug("Using animation overlay %s", path)
            return load_palette_image(path)
    return None


def draw_unit(unit: UnitSpec, scale: int, config: PurchaserConfig) -> DrawResult:
    """Scan every sprite of ``unit`` into a fresh canvas.

    Raises SpriteLoadError if any sprite or overlay cannot be loaded; the
    partially drawn canvas is discarded by the caller.
    """
    sprites = unit.resolved_sprites()
    if not sprites:
        raise ValueError(f"unit {unit.unit_id} has no sprites")

    cursor, _ = initial_cursor(unit, scale, config.layout)
    start_cursor = cursor
    width = config.layout.canvas_width_for(scale)
    state = UnitLayoutState()
    canvas = None
    newest = 0.0
    inputs = []

    for idx, sprite_id in enumerate(sprites):
        image = load_palette_image(config.sprite_path(sprite_id, scale))
        newest = max(newest, image.mtime)
        inputs.append(str(image.path))

        overlay = find_animation_overlay(sprite_id, scale, config)
        if overlay is not None:
            newest = max(newest, overlay.mtime)
            inputs.append(str(overlay.path))

        sheet = state.decide(config.layout.sheet_for(image.width, scale), unit.unit_id, sprite_id)
        if canvas is None:
            canvas = Canvas.blank(width, sheet.row_height, image.palette, image.transparency)

        start = cursor
        cursor, filled = extract_columns(
            image, sheet.window, cursor, canvas,
            overlay=overlay, copy_background=config.copy_background,
        )
        logger.debug("%s: sprite %s window %s, columns %d -> %d",
                     unit.unit_id, sprite_id, sheet.window, start, cursor)

        override = unit.override_at(idx)
        if override:
            cursor = max(0, min((idx + 1) * override * scale, canvas.width))
        elif idx == 0:
            cursor = min(cursor, clamp_bound(unit, scale, start_cursor))

        if filled or cursor >= canvas.width:
            break

    return DrawResult(canvas, cursor, newest, state, inputs)
