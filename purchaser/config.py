"""Purchaser configuration: sheet layouts, reserved palette indices, file names."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple


# ---------------------------------------------------------------------------
# Reserved palette indices
# ---------------------------------------------------------------------------
TRANSPARENT_INDEX = 0
MASK_INDEX = 255

# Declared vehicle lengths are in game length units, 4 pixels each at 1x
LENGTH_UNIT_PIXELS = 4

# Cursor position for units that are not centred
DEFAULT_START_CURSOR = 2

DEFAULT_SCALES = (1, 2)


# ---------------------------------------------------------------------------
# File name patterns (relative to the project root)
# ---------------------------------------------------------------------------
SPRITE_PATTERN = "{scale}x/{sprite}_8bpp.png"
OUTPUT_PATTERN = "{scale}x/{unit}_purchase.png"
MARKER_DIR = "purchase_sprites"

# Animation overlays, highest priority first
ANIMATION_OVERLAY_PATTERNS = [
    "{scale}x/{sprite}_purchase_overlay_8bpp.png",
    "{scale}x/{sprite}_anim_1_8bpp.png",
    "{scale}x/{sprite}_pan_up_8bpp.png",
]

SECOND_POWER_CAR_MARKER = "second_power_car"
DOUBLE_HEADED_MARKER = "double_headed"


class TemplateKind(str, Enum):
    NORMAL = "normal"
    NOT_APPLICABLE = "na"
    TENDER = "tender"

    @classmethod
    def from_cell(cls, value: str) -> "TemplateKind":
        value = (value or "").strip().lower()
        if value == cls.NOT_APPLICABLE.value:
            return cls.NOT_APPLICABLE
        if value == cls.TENDER.value:
            return cls.TENDER
        return cls.NORMAL


@dataclass(frozen=True)
class SheetLayout:
    """Column window and row height of one source sheet layout, already scaled."""
    name: str                   # "large" or "small"
    window: Tuple[int, int]     # [start_x, end_x) in source pixels
    row_height: int             # canvas height in pixels


@dataclass(frozen=True)
class LayoutConfig:
    """Known sprite sheet layouts, in 1x pixels.

    Sprite sheets render the vehicle at several viewing angles on a wide
    canvas; the purchase icon only takes the side-on slice, whose offset
    depends on how wide the sheet is.
    """
    large_window: Tuple[int, int] = (756, 818)
    small_window: Tuple[int, int] = (180, 216)
    large_row_height: int = 17
    small_row_height: int = 14
    canvas_width: int = 64

    def canvas_width_for(self, scale: int) -> int:
        return self.canvas_width * scale

    def sheet_for(self, image_width: int, scale: int) -> SheetLayout:
        """Pick the layout for a sheet of the given width.

        Sheets narrower than the start of the large window use the small one.
        """
        start_x, end_x = self.large_window
        if image_width < start_x * scale:
            start_x, end_x = self.small_window
            return SheetLayout("small", (start_x * scale, end_x * scale),
                               self.small_row_height * scale)
        return SheetLayout("large", (start_x * scale, end_x * scale),
                           self.large_row_height * scale)


@dataclass
class PurchaserConfig:
    """Top-level run configuration."""
    root: Path = Path(".")      # sprite, marker and output paths are relative to this
    scales: Tuple[int, ...] = DEFAULT_SCALES
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    # Copy every scanned pixel, background included, instead of only drawable ones
    copy_background: bool = False

    # Ignore the timestamp cache and always rewrite outputs
    force: bool = False

    def sprite_path(self, sprite_id: str, scale: int) -> Path:
        return self.root / SPRITE_PATTERN.format(scale=scale, sprite=sprite_id)

    def animation_overlay_paths(self, sprite_id: str, scale: int) -> List[Path]:
        return [
            self.root / pattern.format(scale=scale, sprite=sprite_id)
            for pattern in ANIMATION_OVERLAY_PATTERNS
        ]

    def marker_path(self, name: str) -> Path:
        return self.root / MARKER_DIR / f"{name}.png"

    def output_path(self, unit_id: str, scale: int) -> Path:
        return self.root / OUTPUT_PATTERN.format(scale=scale, unit=unit_id)


def parse_scales(text: Optional[str]) -> Tuple[int, ...]:
    """Parse a comma-separated scale list such as ``"1,2"``."""
    if not text:
        return DEFAULT_SCALES
    scales = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        scale = int(part)
        if scale < 1:
            raise ValueError(f"scale must be a positive integer, got {scale}")
        if scale not in scales:
            scales.append(scale)
    if not scales:
        raise ValueError(f"no scales in {text!r}")
    return tuple(scales)
