"""Tests for Hough line detection."""

import numpy as np
import pytest

from src.features.lines import (
    HoughFootConfig,
    HoughFootSubimageConfig,
    detect_lines_foot,
    detect_lines_foot_subimage,
    detect_lines_polar,
)
from src.raster.raster import Raster, SampleDomain


def _vertical_line_image(column: int, size: int = 100) -> Raster:
    samples = np.zeros((size, size), dtype=np.uint8)
    samples[:, column] = 255
    return Raster(samples, SampleDomain.U8)


def _vertical_lines_near(lines, x_min: float, x_max: float):
    return [
        line for line in lines
        if abs(line.slope_x) < 1e-6 and x_min <= line.x <= x_max
    ]


class TestHoughPolar:

    def test_finds_vertical_line(self) -> None:
        lines = detect_lines_polar(_vertical_line_image(15))
        assert lines
        assert _vertical_lines_near(lines, 13, 17)

    def test_foot_on_x_axis(self) -> None:
        lines = detect_lines_polar(_vertical_line_image(15))
        match = _vertical_lines_near(lines, 13, 17)[0]
        assert match.y == pytest.approx(0.0, abs=1e-6)
        assert abs(match.slope_y) == pytest.approx(1.0)

    def test_blank_image(self) -> None:
        assert detect_lines_polar(Raster.zeros(40, 40, SampleDomain.U8)) == []


class TestHoughFoot:

    def test_finds_vertical_line(self) -> None:
        lines = detect_lines_foot(_vertical_line_image(15))
        match = _vertical_lines_near(lines, 13, 17)
        assert match
        # Foot of the normal from the image centre
        assert match[0].y == pytest.approx(50.0, abs=1e-6)

    def test_line_through_centre_dropped(self) -> None:
        lines = detect_lines_foot(_vertical_line_image(50))
        assert not [line for line in lines if abs(line.slope_x) < 1e-6]

    def test_max_lines(self) -> None:
        samples = np.zeros((100, 100), dtype=np.uint8)
        for column in (10, 30, 70, 90):
            samples[:, column] = 255
        lines = detect_lines_foot(Raster(samples, SampleDomain.U8), HoughFootConfig(max_lines=2))
        assert len(lines) <= 2

    def test_blank_image(self) -> None:
        assert detect_lines_foot(Raster.zeros(40, 40, SampleDomain.F32)) == []


class TestHoughFootSubimage:

    def test_finds_vertical_line(self) -> None:
        lines = detect_lines_foot_subimage(_vertical_line_image(15))
        assert _vertical_lines_near(lines, 13, 17)

    def test_single_division_matches_foot(self) -> None:
        image = _vertical_line_image(15)
        config = HoughFootSubimageConfig(total_horizontal_divisions=1, total_vertical_divisions=1)
        assert detect_lines_foot_subimage(image, config) == detect_lines_foot(image)

    def test_invalid_divisions(self) -> None:
        config = HoughFootSubimageConfig(total_horizontal_divisions=0)
        with pytest.raises(ValueError):
            detect_lines_foot_subimage(_vertical_line_image(15), config)
