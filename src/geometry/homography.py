"""Homography estimation from four point correspondences.

The 3x3 projective transform is solved with the normalized Direct Linear
Transform: both point sets are translated to their centroid and scaled to a
mean distance of sqrt(2), each correspondence contributes two rows to an
8x9 coefficient matrix, and the homography is the right singular vector of
the smallest singular value. The result is denormalized so it maps raw
destination coordinates to raw source coordinates.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from src.errors import DegenerateConfiguration
from src.geometry.types import CorrespondencePair, Point2D

logger = logging.getLogger(__name__)

# Relative area below which three points count as collinear
COLLINEARITY_TOLERANCE = 1e-9

# Smallest / largest singular value ratio below which the solve is rank deficient
SINGULAR_VALUE_TOLERANCE = 1e-10

# |w| below which a mapped point is at infinity
MAPPING_EPSILON = 1e-10

REQUIRED_CORRESPONDENCES = 4


@dataclass(frozen=True, eq=False)
class Homography:
    """Nonsingular 3x3 projective map from destination to source coordinates.

    The matrix is normalized on construction: divided by its bottom-right
    entry when that entry is not near zero, otherwise scaled to unit
    Frobenius norm.

    Attributes:
        matrix: Read-only float64 array, shape (3, 3).
    """

    matrix: np.ndarray

    def __post_init__(self) -> None:
        matrix = np.array(self.matrix, dtype=np.float64, copy=True)

        if matrix.shape != (3, 3):
            raise ValueError(f"Homography must be 3x3, got shape {matrix.shape}")
        if not np.all(np.isfinite(matrix)):
            raise DegenerateConfiguration("Homography contains non-finite entries")

        norm = np.linalg.norm(matrix)
        if norm == 0.0:
            raise DegenerateConfiguration("Homography is the zero matrix")
        matrix /= norm

        # Numerical rank is relative to the largest singular value, so large
        # translations or tiny scales do not read as singular
        if np.linalg.matrix_rank(matrix) < 3:
            raise DegenerateConfiguration("Homography is singular")

        if abs(matrix[2, 2]) > 1e-8:
            matrix /= matrix[2, 2]

        matrix.setflags(write=False)
        object.__setattr__(self, "matrix", matrix)

    def apply(self, point: Point2D, epsilon: float = MAPPING_EPSILON) -> Optional[Point2D]:
        """Map a point, returning None when it lands at infinity."""
        x, y, w = self.matrix @ np.array([point[0], point[1], 1.0])
        if abs(w) < epsilon:
            return None
        return Point2D(float(x / w), float(y / w))

    def inverse(self) -> "Homography":
        return Homography(np.linalg.inv(self.matrix))


class HomographyMapper:
    """Maps destination pixel coordinates to continuous source coordinates."""

    def __init__(self, homography: Homography, epsilon: float = MAPPING_EPSILON) -> None:
        self.homography = homography
        self.epsilon = epsilon

    def map_to_source(self, point: Point2D) -> Optional[Point2D]:
        """Source coordinate for ``point``, or None if it maps to infinity."""
        return self.homography.apply(point, self.epsilon)

    def map_grid(
        self,
        u: np.ndarray,
        v: np.ndarray,
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Vectorized ``map_to_source`` over coordinate arrays.

        Args:
            u: Destination x coordinates.
            v: Destination y coordinates, same shape as ``u``.

        Returns:
            (x, y, valid) where ``valid`` is False for points at infinity.
            ``x`` and ``y`` are 0 wherever ``valid`` is False.
        """
        h = self.homography.matrix
        xh = h[0, 0] * u + h[0, 1] * v + h[0, 2]
        yh = h[1, 0] * u + h[1, 1] * v + h[1, 2]
        w = h[2, 0] * u + h[2, 1] * v + h[2, 2]

        valid = np.abs(w) >= self.epsilon
        safe_w = np.where(valid, w, 1.0)
        x = np.where(valid, xh / safe_w, 0.0)
        y = np.where(valid, yh / safe_w, 0.0)
        return x, y, valid


def estimate_homography(
    pairs: Sequence[CorrespondencePair],
    collinearity_tolerance: float = COLLINEARITY_TOLERANCE,
    singular_value_tolerance: float = SINGULAR_VALUE_TOLERANCE,
) -> Homography:
    """Estimate the homography taking each destination point to its source point.

    Args:
        pairs: Exactly four correspondences. No three destination points and
            no three source points may be collinear.
        collinearity_tolerance: Relative triangle area below which three
            points are treated as collinear.
        singular_value_tolerance: Ratio of the smallest to the largest
            singular value below which the system is rank deficient.

    Returns:
        Homography H with ``source ~ H @ [u, v, 1]``.

    Raises:
        DegenerateConfiguration: If the correspondences cannot determine a
            unique nonsingular homography.
    """
    if len(pairs) != REQUIRED_CORRESPONDENCES:
        raise DegenerateConfiguration(
            f"Exactly {REQUIRED_CORRESPONDENCES} correspondences are required, got {len(pairs)}"
        )

    dst = np.array([[p.destination[0], p.destination[1]] for p in pairs], dtype=np.float64)
    src = np.array([[p.source[0], p.source[1]] for p in pairs], dtype=np.float64)

    if not (np.all(np.isfinite(dst)) and np.all(np.isfinite(src))):
        raise DegenerateConfiguration("Correspondences contain non-finite coordinates")

    _check_not_collinear(dst, "destination", collinearity_tolerance)
    _check_not_collinear(src, "source", collinearity_tolerance)

    t_dst = _normalization_transform(dst)
    t_src = _normalization_transform(src)
    dst_n = _transform_points(t_dst, dst)
    src_n = _transform_points(t_src, src)

    a = _build_dlt_matrix(dst_n, src_n)
    _, singular_values, vt = np.linalg.svd(a)

    ratio = singular_values[-1] / singular_values[0]
    logger.debug(f"DLT singular values: {np.array2string(singular_values, precision=4)}")
    if ratio < singular_value_tolerance:
        raise DegenerateConfiguration(
            f"Ill-conditioned correspondences: singular value ratio {ratio:.3e} "
            f"below tolerance {singular_value_tolerance:.1e}"
        )

    h_normalized = vt[-1].reshape(3, 3)
    _check_well_conditioned(h_normalized, singular_value_tolerance)

    h = np.linalg.inv(t_src) @ h_normalized @ t_dst

    homography = Homography(h)
    logger.debug(f"Estimated homography:\n{homography.matrix}")
    return homography


def _build_dlt_matrix(dst: np.ndarray, src: np.ndarray) -> np.ndarray:
    """Stack two cross-product rows per correspondence into an 8x9 matrix."""
    rows = []
    for (u, v), (x, y) in zip(dst, src):
        rows.append([-u, -v, -1.0, 0.0, 0.0, 0.0, u * x, v * x, x])
        rows.append([0.0, 0.0, 0.0, -u, -v, -1.0, u * y, v * y, y])
    return np.array(rows, dtype=np.float64)


def _normalization_transform(points: np.ndarray) -> np.ndarray:
    """Similarity moving the centroid to the origin with mean distance sqrt(2)."""
    centroid = points.mean(axis=0)
    mean_distance = np.linalg.norm(points - centroid, axis=1).mean()
    scale = np.sqrt(2.0) / mean_distance
    return np.array([
        [scale, 0.0, -scale * centroid[0]],
        [0.0, scale, -scale * centroid[1]],
        [0.0, 0.0, 1.0],
    ])


def _transform_points(transform: np.ndarray, points: np.ndarray) -> np.ndarray:
    homogeneous = np.hstack([points, np.ones((len(points), 1))]) @ transform.T
    return homogeneous[:, :2] / homogeneous[:, 2:3]


def _check_not_collinear(points: np.ndarray, label: str, tolerance: float) -> None:
    """Raise if any three of the points are (nearly) collinear.

    Triangle area is compared against the squared span of the point set so
    the test does not depend on the coordinate scale.
    """
    span = max(
        np.linalg.norm(a - b) for a, b in itertools.combinations(points, 2)
    )
    if span == 0.0:
        raise DegenerateConfiguration(f"All {label} points coincide")

    for i, j, k in itertools.combinations(range(len(points)), 3):
        ab = points[j] - points[i]
        ac = points[k] - points[i]
        area = abs(ab[0] * ac[1] - ab[1] * ac[0])
        if area / (span * span) < tolerance:
            raise DegenerateConfiguration(
                f"{label.capitalize()} points {i}, {j}, {k} are collinear: "
                f"{points[i].tolist()}, {points[j].tolist()}, {points[k].tolist()}"
            )


def _check_well_conditioned(h_normalized: np.ndarray, tolerance: float) -> None:
    """Raise if the homography between the normalized point sets is near singular.

    Both point sets have unit scale here, so the singular value ratio is
    independent of where the points sit in pixel coordinates.
    """
    singular_values = np.linalg.svd(h_normalized, compute_uv=False)
    ratio = singular_values[-1] / singular_values[0]
    if ratio < tolerance:
        raise DegenerateConfiguration(
            f"Estimated homography is singular: singular value ratio {ratio:.3e}"
        )
