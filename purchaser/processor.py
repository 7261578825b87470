"""Batch driver: turn a unit table into purchase sprites at every scale.

Each unit is processed independently at each configured scale:

    draw sprites -> blit marker -> write (unless up to date)

A missing or broken sprite only abandons that unit; a broken table aborts
the whole run.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from purchaser.config import PurchaserConfig
from purchaser.errors import SpriteLoadError
from purchaser.extractor import draw_unit
from purchaser.overlay import blit_marker, select_marker
from purchaser.sprites import load_palette_image
from purchaser.units import UnitSpec, read_units
from purchaser.writer import write_canvas

logger = logging.getLogger(__name__)


class UnitOutcome(str, Enum):
    WRITTEN = "written"
    UP_TO_DATE = "up_to_date"
    SKIPPED = "skipped"         # template excluded (na / tender)
    FAILED = "failed"


@dataclass
class BatchSummary:
    """Outcome counts for one batch run."""
    written: int = 0
    up_to_date: int = 0
    skipped: int = 0
    failed: int = 0
    failures: List[Tuple[str, int]] = field(default_factory=list)   # (unit id, scale)

    def record(self, unit_id: str, scale: int, outcome: UnitOutcome) -> None:
        if outcome == UnitOutcome.WRITTEN:
            self.written += 1
        elif outcome == UnitOutcome.UP_TO_DATE:
            self.up_to_date += 1
        elif outcome == UnitOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
            self.failures.append((unit_id, scale))

    def merge(self, other: "BatchSummary") -> None:
        self.written += other.written
        self.up_to_date += other.up_to_date
        self.skipped += other.skipped
        self.failed += other.failed
        self.failures.extend(other.failures)

    @property
    def total(self) -> int:
        return self.written + self.up_to_date + self.skipped + self.failed

    def to_dict(self) -> Dict[str, int]:
        return {
            "written": self.written,
            "up_to_date": self.up_to_date,
            "skipped": self.skipped,
            "failed": self.failed,
        }


def process_unit(unit: UnitSpec, scale: int, config: PurchaserConfig) -> UnitOutcome:
    """Build and write the purchase sprite of one unit at one scale."""
    if unit.is_excluded:
        logger.debug("Skipping %s (template %r)", unit.unit_id,
                     unit.template_name or unit.template.value)
        return UnitOutcome.SKIPPED

    try:
        drawn = draw_unit(unit, scale, config)
        logger.debug("%s at %dx drawn from %s", unit.unit_id, scale, ", ".join(drawn.inputs))

        newest = drawn.newest_input
        marker_name = select_marker(unit)
        if marker_name:
            marker = load_palette_image(config.marker_path(marker_name))
            newest = max(newest, marker.mtime)
            blit_marker(drawn.canvas, marker, drawn.cursor, scale)
    except (SpriteLoadError, ValueError) as e:
        logger.warning("Error processing %s at %dx: %s", unit.unit_id, scale, e)
        return UnitOutcome.FAILED

    output = config.output_path(unit.unit_id, scale)
    try:
        written = write_canvas(drawn.canvas, output, newest, force=config.force)
    except OSError as e:
        logger.error("Could not write image for unit %s: %s", unit.unit_id, e)
        return UnitOutcome.FAILED

    return UnitOutcome.WRITTEN if written else UnitOutcome.UP_TO_DATE


def process_units(units: Iterable[UnitSpec], config: PurchaserConfig) -> BatchSummary:
    """Process units in order, every scale for a unit before the next unit."""
    summary = BatchSummary()
    for unit in units:
        for scale in config.scales:
            outcome = process_unit(unit, scale, config)
            summary.record(unit.unit_id, scale, outcome)
    return summary


def process_table(path: Path, config: PurchaserConfig) -> BatchSummary:
    """Read a unit table and process every unit in it.

    TableError propagates: an unreadable table or bad header is fatal.
    """
    units = read_units(Path(path))
    summary = process_units(units, config)
    logger.info(
        "%s: %d written, %d up to date, %d skipped, %d failed",
        Path(path).name, summary.written, summary.up_to_date,
        summary.skipped, summary.failed,
    )
    return summary
