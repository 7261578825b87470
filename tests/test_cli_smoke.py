"""
Smoke tests for the command line interface.

Runs the whole table -> sprite pipeline on a tiny synthetic project so
regressions in wiring or filesystem layout are caught early.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from purchaser.cli import build_parser, main as cli_main


GREY_PALETTE = [v for i in range(256) for v in (i, i, i)]


def _save_sheet(path: Path, scale: int) -> None:
    """Create an indexed sprite sheet with a 12 column vehicle."""
    path.parent.mkdir(parents=True, exist_ok=True)
    sheet = np.zeros((17 * scale, 820 * scale), dtype=np.uint8)
    sheet[5 * scale:14 * scale, 770 * scale:782 * scale] = 20
    img = Image.frombytes("P", (sheet.shape[1], sheet.shape[0]), sheet.tobytes())
    img.putpalette(GREY_PALETTE)
    img.save(path)


def test_cli_smoke(tmp_path):
    for scale in (1, 2):
        _save_sheet(tmp_path / f"{scale}x" / "loco1_8bpp.png", scale)
    table = tmp_path / "units.csv"
    table.write_text(
        "\ufeffid,cars,layout,template,ttd_len\n"
        "loco1,0,loco1,normal,8\n"
        "dummy,0,,na,8\n",
        encoding="utf-8",
    )

    status = cli_main([str(table), "--root", str(tmp_path)])

    assert status == 0
    with Image.open(tmp_path / "1x" / "loco1_purchase.png") as img:
        assert img.mode == "P"
        assert img.size == (64, 17)
    with Image.open(tmp_path / "2x" / "loco1_purchase.png") as img:
        assert img.size == (128, 34)
    assert not (tmp_path / "1x" / "dummy_purchase.png").exists()


def test_cli_single_scale(tmp_path):
    _save_sheet(tmp_path / "1x" / "loco1_8bpp.png", 1)
    table = tmp_path / "units.csv"
    table.write_text("id,cars,layout,template,ttd_len\nloco1,0,loco1,normal,8\n")

    assert cli_main([str(table), "--root", str(tmp_path), "--scales", "1"]) == 0
    assert (tmp_path / "1x" / "loco1_purchase.png").exists()
    assert not (tmp_path / "2x").exists()


def test_cli_missing_table_is_fatal(tmp_path):
    assert cli_main([str(tmp_path / "missing.csv"), "--root", str(tmp_path)]) == 1


def test_cli_bad_header_stops_run(tmp_path):
    _save_sheet(tmp_path / "1x" / "loco1_8bpp.png", 1)
    bad = tmp_path / "bad.csv"
    bad.write_text("id,cars,template,ttd_len\nloco1,0,normal,8\n")
    good = tmp_path / "good.csv"
    good.write_text("id,cars,layout,template,ttd_len\nloco1,0,loco1,normal,8\n")

    assert cli_main([str(bad), str(good), "--root", str(tmp_path), "--scales", "1"]) == 1
    assert not (tmp_path / "1x" / "loco1_purchase.png").exists()


def test_parser_rejects_bad_scales():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["units.csv", "--scales", "0"])
