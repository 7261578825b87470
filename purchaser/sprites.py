"""Indexed sprite loading.

Sprites are 8bpp palette PNGs.  Each load produces an immutable
``PaletteImage``; nothing is cached between units.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image

from purchaser.errors import SpriteLoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaletteImage:
    """A decoded indexed image."""
    indices: np.ndarray                 # (H, W) uint8 palette indices, read-only
    palette: Tuple[int, ...]            # flat [r, g, b, r, g, b, ...]
    path: Path
    mtime: float = 0.0
    transparency: Optional[Union[int, bytes]] = None

    @property
    def width(self) -> int:
        return int(self.indices.shape[1])

    @property
    def height(self) -> int:
        return int(self.indices.shape[0])

    def index_at(self, x: int, y: int) -> int:
        return int(self.indices[y, x])

    @classmethod
    def from_array(
        cls,
        indices: np.ndarray,
        palette: Tuple[int, ...] = (),
        path: Union[str, Path] = "",
        mtime: float = 0.0,
        transparency: Optional[Union[int, bytes]] = None,
    ) -> "PaletteImage":
        frozen = np.array(indices, dtype=np.uint8, copy=True)
        frozen.setflags(write=False)
        return cls(frozen, tuple(palette), Path(path), mtime, transparency)


def file_mtime(path: Path) -> Optional[float]:
    """Modification time of ``path``, or None if it does not exist.

    Other stat errors (permissions and the like) propagate.
    """
    try:
        return Path(path).stat().st_mtime
    except (FileNotFoundError, NotADirectoryError):
        return None


def load_palette_image(path: Union[str, Path]) -> PaletteImage:
    """Open an indexed PNG and return its pixel indices and palette.

    Raises SpriteLoadError if the file is missing, cannot be decoded, or is
    not a palette image.
    """
    path = Path(path)
    try:
        with Image.open(path) as pil:
            pil.load()
            if pil.mode != "P":
                raise SpriteLoadError(path, f"expected an indexed image, got mode {pil.mode}")
            indices = np.array(pil, dtype=np.uint8)
            palette = tuple(pil.getpalette() or ())
            transparency = pil.info.get("transparency")
        mtime = path.stat().st_mtime
    except (OSError, ValueError) as exc:
        raise SpriteLoadError(path, str(exc)) from exc

    logger.debug("Loaded %s (%dx%d)", path, indices.shape[1], indices.shape[0])
    return PaletteImage.from_array(indices, palette, path, mtime, transparency)
