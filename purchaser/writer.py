"""Write finished canvases as indexed PNGs, skipping outputs that are current.

The cache is timestamp-only: an output is considered up to date when its
modification time is strictly later than the newest input that went into it.
"""

import logging
from pathlib import Path

from PIL import Image

from purchaser.extractor import Canvas
from purchaser.sprites import file_mtime

logger = logging.getLogger(__name__)


def output_is_current(path: Path, newest_input: float) -> bool:
    """True if ``path`` exists and is strictly newer than ``newest_input``.

    An output that cannot be stat'ed is left alone and counts as current.
    """
    try:
        mtime = file_mtime(path)
    except OSError as e:
        logger.warning("Cannot check %s, leaving it alone: %s", path, e)
        return True
    if mtime is None:
        return False
    return mtime > newest_input


def canvas_to_image(canvas: Canvas) -> Image.Image:
    img = Image.frombytes("P", (canvas.width, canvas.height), canvas.pixels.tobytes())
    if canvas.palette:
        img.putpalette(list(canvas.palette))
    return img


def write_canvas(canvas: Canvas, path: Path, newest_input: float, force: bool = False) -> bool:
    """Save ``canvas`` to ``path`` unless the existing file is newer than its inputs.

    Returns True if the file was written, False if it was already up to date.
    Raises OSError if the file cannot be written.
    """
    path = Path(path)
    if not force and output_is_current(path, newest_input):
        logger.debug("%s is up to date", path)
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    img = canvas_to_image(canvas)
    params = {}
    if canvas.transparency is not None:
        params["transparency"] = canvas.transparency
    img.save(path, format="PNG", **params)
    logger.debug("Wrote %s (%dx%d)", path, canvas.width, canvas.height)
    return True
