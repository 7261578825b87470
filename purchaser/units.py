"""Unit records: one normalised row of the rolling-stock table.

The table is a delimited file with a header row.  Five columns are required
(``id``, ``cars``, ``layout``, ``template``, ``ttd_len``); the rest are
optional and default to empty.
"""

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from purchaser.config import LENGTH_UNIT_PIXELS, TemplateKind
from purchaser.errors import SchemaError, TableError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["template", "id", "cars", "ttd_len", "layout"]
OPTIONAL_COLUMNS = [
    "tender",
    "reuse_sprites",
    "requires_second_power_car",
    "double_headed",
    "articulated_lengths",
    "purchase_length",
]

# CSVs found in the wild may carry a byte-order mark in the header line
_HEADER_STRIP = " \ufeff"


@dataclass
class UnitSpec:
    """Everything the compositor needs to know about one unit."""
    unit_id: str
    sprites: List[str]
    car_count: int = 0
    requires_second_power_car: bool = False
    double_headed: bool = False
    reuse_sprites_from: Optional[str] = None
    template: TemplateKind = TemplateKind.NORMAL
    base_length_pixels: int = 0                 # declared length * 4
    articulated_lengths: List[int] = field(default_factory=list)
    override_lengths: List[int] = field(default_factory=list)
    template_name: str = ""                     # raw template cell

    @property
    def is_excluded(self) -> bool:
        return self.template in (TemplateKind.NOT_APPLICABLE, TemplateKind.TENDER)

    @property
    def has_override_length(self) -> bool:
        return any(self.override_lengths)

    def override_at(self, index: int) -> int:
        """Forced cursor length for sprite ``index``, 0 when there is none."""
        if 0 <= index < len(self.override_lengths):
            return self.override_lengths[index]
        return 0

    def resolved_sprites(self) -> List[str]:
        """Sprite list with ``reuse_sprites_from`` in the first slot."""
        sprites = list(self.sprites)
        if self.reuse_sprites_from:
            if sprites:
                sprites[0] = self.reuse_sprites_from
            else:
                sprites.append(self.reuse_sprites_from)
        return sprites


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except (AttributeError, ValueError):
        return 0


def _split_list(text: str) -> List[str]:
    return [part.strip() for part in (text or "").split(",") if part.strip()]


def _parse_lengths(text: str) -> List[int]:
    """Comma-separated integers; entries that do not parse are dropped."""
    lengths = []
    for part in _split_list(text):
        try:
            lengths.append(int(part))
        except ValueError:
            logger.debug("Ignoring non-numeric length %r", part)
    return lengths


def parse_header(row: Sequence[str], source: str = "<table>") -> List[str]:
    """Normalise header names and check the required columns are present."""
    fields = [name.strip(_HEADER_STRIP) for name in row]
    missing = [name for name in REQUIRED_COLUMNS if name not in fields]
    if missing:
        logger.debug("CSV headers: %s", fields)
        raise SchemaError(source, missing, REQUIRED_COLUMNS)
    unknown = [name for name in fields if name not in REQUIRED_COLUMNS + OPTIONAL_COLUMNS]
    if unknown:
        logger.debug("%s: ignoring columns %s", source, unknown)
    return fields


def unit_from_row(values: Dict[str, str]) -> UnitSpec:
    """Build a UnitSpec from a header -> cell mapping."""
    def get(name: str) -> str:
        return (values.get(name) or "").strip()

    unit_id = get("id")
    if get("tender"):
        sprites = [unit_id, get("tender")]
    elif get("layout"):
        sprites = _split_list(get("layout"))
    else:
        sprites = [unit_id]

    ttd_len = _to_int(get("ttd_len"))
    articulated = _parse_lengths(get("articulated_lengths") or get("ttd_len"))

    return UnitSpec(
        unit_id=unit_id,
        sprites=sprites,
        car_count=_to_int(get("cars")),
        requires_second_power_car=bool(get("requires_second_power_car")),
        double_headed=bool(get("double_headed")),
        reuse_sprites_from=get("reuse_sprites") or None,
        template=TemplateKind.from_cell(get("template")),
        base_length_pixels=ttd_len * LENGTH_UNIT_PIXELS,
        articulated_lengths=articulated,
        override_lengths=[max(0, _to_int(p)) for p in _split_list(get("purchase_length"))],
        template_name=get("template"),
    )


def iter_units(lines, source: str = "<table>") -> Iterator[UnitSpec]:
    """Yield units from an iterable of CSV text lines.

    The header is validated before the first unit is produced.
    """
    reader = csv.reader(lines)
    header = None
    for row in reader:
        if not row:
            continue
        if header is None:
            header = parse_header(row, source)
            continue
        if len(row) != len(header):
            raise TableError(
                f"{source}:{reader.line_num}: expected {len(header)} fields, got {len(row)}"
            )
        yield unit_from_row(dict(zip(header, row)))

    if header is None:
        raise SchemaError(source, REQUIRED_COLUMNS, REQUIRED_COLUMNS)


def read_units(path: Path) -> List[UnitSpec]:
    """Read every unit from a table file.

    Raises TableError (or SchemaError) before any image is touched.
    """
    path = Path(path)
    try:
        with path.open(newline="", encoding="utf-8") as handle:
            units = list(iter_units(handle, source=str(path)))
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise TableError(f"could not read {path}: {exc}") from exc
    logger.info("Read %d units from %s", len(units), path.name)
    return units
