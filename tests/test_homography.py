"""Tests for homography estimation and coordinate mapping."""

import numpy as np
import pytest

from src.errors import DegenerateConfiguration
from src.geometry.homography import Homography, HomographyMapper, estimate_homography
from src.geometry.types import CorrespondencePair, Point2D


def _pairs(dst, src):
    return [CorrespondencePair(Point2D(*d), Point2D(*s)) for d, s in zip(dst, src)]


RECT_200x150 = [(0, 0), (199, 0), (199, 149), (0, 149)]
SKEWED_QUAD = [(12.5, 8.0), (180.0, 20.0), (170.0, 140.0), (5.0, 120.0)]


class TestEstimateHomography:
    """Test the four-point DLT solve."""

    def test_identity(self) -> None:
        corners = [(0, 0), (9, 0), (9, 9), (0, 9)]
        h = estimate_homography(_pairs(corners, corners))
        np.testing.assert_allclose(h.matrix, np.eye(3), atol=1e-9)

    def test_corner_round_trip(self) -> None:
        h = estimate_homography(_pairs(RECT_200x150, SKEWED_QUAD))
        for dst, src in zip(RECT_200x150, SKEWED_QUAD):
            mapped = h.apply(Point2D(*dst))
            assert mapped is not None
            np.testing.assert_allclose(mapped, src, atol=1e-8)

    def test_translation_and_scale(self) -> None:
        dst = [(0, 0), (10, 0), (10, 10), (0, 10)]
        src = [(5, 7), (25, 7), (25, 27), (5, 27)]
        h = estimate_homography(_pairs(dst, src))
        expected = np.array([[2.0, 0.0, 5.0], [0.0, 2.0, 7.0], [0.0, 0.0, 1.0]])
        np.testing.assert_allclose(h.matrix, expected, atol=1e-9)

    def test_normalized_bottom_right(self) -> None:
        h = estimate_homography(_pairs(RECT_200x150, SKEWED_QUAD))
        assert h.matrix[2, 2] == pytest.approx(1.0)

    def test_deterministic(self) -> None:
        a = estimate_homography(_pairs(RECT_200x150, SKEWED_QUAD))
        b = estimate_homography(_pairs(RECT_200x150, SKEWED_QUAD))
        assert np.array_equal(a.matrix, b.matrix)

    def test_too_few_pairs(self) -> None:
        with pytest.raises(DegenerateConfiguration, match="Exactly 4"):
            estimate_homography(_pairs(RECT_200x150[:3], SKEWED_QUAD[:3]))

    def test_too_many_pairs(self) -> None:
        dst = RECT_200x150 + [(100, 75)]
        src = SKEWED_QUAD + [(90, 70)]
        with pytest.raises(DegenerateConfiguration):
            estimate_homography(_pairs(dst, src))

    def test_collinear_destination(self) -> None:
        dst = [(0, 0), (5, 0), (10, 0), (0, 10)]
        with pytest.raises(DegenerateConfiguration, match="Destination points"):
            estimate_homography(_pairs(dst, SKEWED_QUAD))

    def test_nearly_collinear_destination(self) -> None:
        dst = [(0, 0), (5, 1e-12), (10, 0), (0, 10)]
        with pytest.raises(DegenerateConfiguration):
            estimate_homography(_pairs(dst, SKEWED_QUAD))

    def test_collinear_source(self) -> None:
        src = [(0, 0), (50, 50), (100, 100), (0, 100)]
        with pytest.raises(DegenerateConfiguration, match="Source points"):
            estimate_homography(_pairs(RECT_200x150, src))

    def test_coincident_points(self) -> None:
        dst = [(3, 3)] * 4
        with pytest.raises(DegenerateConfiguration, match="coincide"):
            estimate_homography(_pairs(dst, SKEWED_QUAD))

    def test_non_finite_coordinates(self) -> None:
        src = [(np.nan, 0)] + SKEWED_QUAD[1:]
        with pytest.raises(DegenerateConfiguration):
            estimate_homography(_pairs(RECT_200x150, src))


class TestHomography:
    """Test the Homography value type."""

    def test_rejects_singular(self) -> None:
        with pytest.raises(DegenerateConfiguration):
            Homography(np.array([[1.0, 2.0, 3.0], [2.0, 4.0, 6.0], [0.0, 0.0, 1.0]]))

    def test_rejects_zero(self) -> None:
        with pytest.raises(DegenerateConfiguration):
            Homography(np.zeros((3, 3)))

    def test_rejects_wrong_shape(self) -> None:
        with pytest.raises(ValueError):
            Homography(np.eye(2))

    def test_scale_invariant(self) -> None:
        m = np.array([[1.0, 0.2, 3.0], [0.1, 0.9, -2.0], [0.001, 0.002, 1.0]])
        np.testing.assert_allclose(Homography(m).matrix, Homography(5.0 * m).matrix)

    def test_read_only(self) -> None:
        h = Homography(np.eye(3))
        with pytest.raises(ValueError):
            h.matrix[0, 0] = 2.0

    def test_inverse(self) -> None:
        h = estimate_homography(_pairs(RECT_200x150, SKEWED_QUAD))
        point = Point2D(42.0, 17.0)
        back = h.inverse().apply(h.apply(point))
        np.testing.assert_allclose(back, point, atol=1e-8)


class TestHomographyMapper:
    """Test destination-to-source coordinate mapping."""

    @pytest.fixture
    def horizon_mapper(self) -> HomographyMapper:
        # w = 1 - u, so the column u = 1 maps to infinity
        return HomographyMapper(Homography(np.array([
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [-1.0, 0.0, 1.0],
        ])))

    def test_point_at_infinity(self, horizon_mapper: HomographyMapper) -> None:
        assert horizon_mapper.map_to_source(Point2D(1.0, 4.0)) is None

    def test_finite_point(self, horizon_mapper: HomographyMapper) -> None:
        mapped = horizon_mapper.map_to_source(Point2D(2.0, 4.0))
        assert mapped == pytest.approx((-2.0, -4.0))

    def test_map_grid_matches_single_points(self) -> None:
        h = estimate_homography(_pairs(RECT_200x150, SKEWED_QUAD))
        mapper = HomographyMapper(h)
        u, v = np.meshgrid(np.arange(0.0, 200.0, 37.0), np.arange(0.0, 150.0, 29.0))
        x, y, valid = mapper.map_grid(u, v)

        assert valid.all()
        for ui, vi, xi, yi in zip(u.ravel(), v.ravel(), x.ravel(), y.ravel()):
            expected = mapper.map_to_source(Point2D(ui, vi))
            assert (xi, yi) == pytest.approx(expected)

    def test_map_grid_flags_infinity(self, horizon_mapper: HomographyMapper) -> None:
        u, v = np.meshgrid(np.arange(4.0), np.arange(3.0))
        x, y, valid = horizon_mapper.map_grid(u, v)
        assert not valid[:, 1].any()
        assert valid[:, [0, 2, 3]].all()
        assert np.all(x[:, 1] == 0.0) and np.all(y[:, 1] == 0.0)


def _frame(width: float, height: float):
    return [(0, 0), (width - 1, 0), (width - 1, height - 1), (0, height - 1)]


def _shifted(points, dx: float, dy: float):
    return [(x + dx, y + dy) for x, y in points]


class TestScaleAndOffset:
    """Estimation does not depend on where the points sit or how large they are."""

    CASES = {
        "photo_frame": (
            _frame(4000, 3000),
            [(250.0, 160.0), (3600.0, 400.0), (3400.0, 2800.0), (100.0, 2400.0)],
        ),
        "zoom_into_offset_patch": (
            _frame(496, 496),
            [(3000, 2000), (3099, 2000), (3099, 2099), (3000, 2099)],
        ),
        "tiny_source_square": (
            _frame(3000, 3000),
            [(1.0, 1.0), (1.002, 1.0), (1.002, 1.002), (1.0, 1.002)],
        ),
        "offset_skewed_source": (
            RECT_200x150,
            _shifted(SKEWED_QUAD, 10000.0, 5000.0),
        ),
        "offset_destination": (
            _shifted(RECT_200x150, 10000.0, 10000.0),
            SKEWED_QUAD,
        ),
    }

    @pytest.mark.parametrize("name", sorted(CASES))
    def test_corner_round_trip(self, name: str) -> None:
        dst, src = self.CASES[name]
        h = estimate_homography(_pairs(dst, src))
        span = np.ptp(np.array(src, dtype=np.float64), axis=0).max()
        for d, s in zip(dst, src):
            mapped = h.apply(Point2D(*d))
            assert mapped is not None
            np.testing.assert_allclose(mapped, s, rtol=0, atol=1e-6 * span)

    @pytest.mark.parametrize("name", sorted(CASES))
    def test_inverse_round_trip(self, name: str) -> None:
        dst, src = self.CASES[name]
        inverse = estimate_homography(_pairs(dst, src)).inverse()
        span = np.ptp(np.array(dst, dtype=np.float64), axis=0).max()
        for d, s in zip(dst, src):
            mapped = inverse.apply(Point2D(*s))
            assert mapped is not None
            np.testing.assert_allclose(mapped, d, rtol=0, atol=1e-6 * span)

    def test_large_translation_accepted(self) -> None:
        m = np.array([[0.2, 0.0, 3000.0], [0.0, 0.2, 2000.0], [0.0, 0.0, 1.0]])
        np.testing.assert_allclose(Homography(m).matrix, m)
        np.testing.assert_allclose(Homography(m).inverse().matrix, np.linalg.inv(m))
