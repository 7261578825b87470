"""Purchase-list sprite builder for rolling stock.

Slices the side-on view out of each unit's sprite sheets, joins the slices
into a small indexed icon, and stamps a marker (car count, double heading,
second power car) in the corner.
"""

from __future__ import annotations

from .config import LayoutConfig, PurchaserConfig, TemplateKind
from .errors import PurchaserError, SchemaError, SpriteLoadError, TableError
from .processor import BatchSummary, UnitOutcome, process_table, process_unit, process_units
from .units import UnitSpec, read_units

__all__ = [
    "BatchSummary",
    "LayoutConfig",
    "PurchaserConfig",
    "PurchaserError",
    "SchemaError",
    "SpriteLoadError",
    "TableError",
    "TemplateKind",
    "UnitOutcome",
    "UnitSpec",
    "process_table",
    "process_unit",
    "process_units",
    "read_units",
]
