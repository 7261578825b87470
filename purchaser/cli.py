"""Command line interface for the purchase sprite builder.

Usage:
    purchaser units.csv [more.csv ...] [--root DIR] [--scales 1,2] [--force]
    python -m purchaser.cli units.csv

Each table is processed in turn.  Sprite, marker and output paths are
resolved against ``--root`` (default: the current directory):

  {scale}x/{sprite}_8bpp.png          source sheets
  purchase_sprites/x{N}.png           marker icons
  {scale}x/{unit}_purchase.png        outputs
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from purchaser.config import PurchaserConfig, parse_scales
from purchaser.errors import TableError
from purchaser.processor import BatchSummary, process_table

logger = logging.getLogger("purchaser")


def _setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _scales_arg(text: str):
    try:
        return parse_scales(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="purchaser",
        description="Build purchase-list sprites for rolling stock from unit tables",
    )
    parser.add_argument("tables", nargs="+", help="Unit table CSV files")
    parser.add_argument("--root", default=".",
                        help="Directory holding the sprite folders (default: .)")
    parser.add_argument("--scales", type=_scales_arg, default=None,
                        help="Comma-separated output scales (default: 1,2)")
    parser.add_argument("--copy-background", action="store_true",
                        help="Copy background pixels of scanned columns too")
    parser.add_argument("--force", action="store_true",
                        help="Rewrite outputs even if they are up to date")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.debug)

    config = PurchaserConfig(
        root=Path(args.root),
        copy_background=args.copy_background,
        force=args.force,
    )
    if args.scales:
        config.scales = args.scales

    total = BatchSummary()
    for table in args.tables:
        logger.info("Processing %s", table)
        try:
            summary = process_table(Path(table), config)
        except TableError as e:
            logger.error("could not open file: %s", e)
            return 1
        total.merge(summary)

    logger.info("Total: %s", total.to_dict())
    for unit_id, scale in total.failures:
        logger.debug("  failed: %s at %dx", unit_id, scale)
    return 0


if __name__ == "__main__":
    sys.exit(main())
