"""Exceptions raised by the purchase sprite builder."""

from pathlib import Path
from typing import Iterable, Union


class PurchaserError(Exception):
    """Base class for all purchaser errors."""


class TableError(PurchaserError):
    """The unit table could not be read. Fatal for the whole table."""


class SchemaError(TableError):
    """The unit table header lacks required columns."""

    def __init__(self, source: str, missing: Iterable[str], required: Iterable[str]):
        self.source = source
        self.missing = list(missing)
        self.required = list(required)
        super().__init__(
            f"{source}: missing required column(s): {', '.join(self.missing)} "
            f"(did not find {', '.join(self.required)} columns in csv file)"
        )


class SpriteLoadError(PurchaserError):
    """An indexed image could not be opened or decoded. Aborts one unit."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")
