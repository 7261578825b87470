"""Tests for marker selection and the bottom-right marker blit."""

from __future__ import annotations

import numpy as np
import pytest

from purchaser.extractor import Canvas
from purchaser.overlay import blit_marker, select_marker, upscale_marker
from purchaser.sprites import PaletteImage
from purchaser.units import UnitSpec


def _marker(height: int = 4, width: int = 5, color: int = 7) -> PaletteImage:
    indices = np.full((height, width), color, dtype=np.uint8)
    return PaletteImage.from_array(indices, path="x3.png")


class TestSelectMarker:
    def test_car_count(self):
        assert select_marker(UnitSpec(unit_id="u", sprites=["u"], car_count=3)) == "x3"

    def test_no_marker(self):
        assert select_marker(UnitSpec(unit_id="u", sprites=["u"])) is None

    def test_car_count_wins_over_flags(self):
        unit = UnitSpec(unit_id="u", sprites=["u"], car_count=2,
                        requires_second_power_car=True, double_headed=True)
        assert select_marker(unit) == "x2"

    def test_second_power_car_before_double_headed(self):
        unit = UnitSpec(unit_id="u", sprites=["u"],
                        requires_second_power_car=True, double_headed=True)
        assert select_marker(unit) == "second_power_car"

    def test_double_headed(self):
        unit = UnitSpec(unit_id="u", sprites=["u"], double_headed=True)
        assert select_marker(unit) == "double_headed"

    def test_override_length_suppresses_count(self):
        unit = UnitSpec(unit_id="u", sprites=["u"], car_count=3, override_lengths=[0, 10])
        assert select_marker(unit) is None
        unit.double_headed = True
        assert select_marker(unit) == "double_headed"


class TestBlitMarker:
    def test_bottom_right_placement(self):
        canvas = Canvas.blank(64, 17)
        blit_marker(canvas, _marker(), cursor=22, scale=1)
        # top = 17 - 1 - 4, left = 22 - 1 - 5
        assert np.all(canvas.pixels[12:16, 16:21] == 7)
        assert np.count_nonzero(canvas.pixels) == 20

    def test_zero_pixels_leave_canvas_alone(self):
        canvas = Canvas.blank(64, 17)
        canvas.pixels[:] = 3
        indices = np.array([[0, 9], [9, 0]], dtype=np.uint8)
        blit_marker(canvas, PaletteImage.from_array(indices), cursor=10, scale=1)
        # top = 14, left = 7
        assert canvas.pixels[14, 7] == 3
        assert canvas.pixels[14, 8] == 9
        assert canvas.pixels[15, 7] == 9
        assert canvas.pixels[15, 8] == 3
        assert np.count_nonzero(canvas.pixels == 9) == 2

    def test_marker_replaces_mask_and_content(self):
        canvas = Canvas.blank(64, 17)
        canvas.pixels[:] = 255
        blit_marker(canvas, _marker(color=4), cursor=30, scale=1)
        assert np.all(canvas.pixels[12:16, 24:29] == 4)

    def test_scale_two_replicates_pixels(self):
        indices = np.array([[1, 2], [3, 0]], dtype=np.uint8)
        up = upscale_marker(PaletteImage.from_array(indices), 2)
        expected = np.array([
            [1, 1, 2, 2],
            [1, 1, 2, 2],
            [3, 3, 0, 0],
            [3, 3, 0, 0],
        ], dtype=np.uint8)
        assert np.array_equal(up, expected)

        canvas = Canvas.blank(128, 34)
        blit_marker(canvas, PaletteImage.from_array(indices), cursor=40, scale=2)
        # top = 34 - 1 - 4, left = 40 - 1 - 4
        assert np.array_equal(canvas.pixels[29:33, 35:39], expected)

    def test_clipped_at_left_edge(self):
        canvas = Canvas.blank(64, 17)
        blit_marker(canvas, _marker(), cursor=3, scale=1)
        # left = -3: only the last two marker columns land on the canvas
        assert np.all(canvas.pixels[12:16, 0:2] == 7)
        assert np.count_nonzero(canvas.pixels) == 8

    @pytest.mark.parametrize("cursor", [-10, 0])
    def test_entirely_off_canvas(self, cursor):
        canvas = Canvas.blank(64, 17)
        blit_marker(canvas, _marker(), cursor=cursor, scale=1)
        assert not np.any(canvas.pixels)
