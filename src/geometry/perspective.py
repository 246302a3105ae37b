"""Perspective removal via homographic transform.

Takes four source-plane corners and warps the quadrilateral they bound to an
upright rectangle of the requested size.
"""

import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from src.errors import CornerOrderError, DegenerateConfiguration
from src.geometry.homography import (
    COLLINEARITY_TOLERANCE,
    MAPPING_EPSILON,
    SINGULAR_VALUE_TOLERANCE,
    HomographyMapper,
    estimate_homography,
)
from src.geometry.resample import warp
from src.geometry.types import BorderPolicy, CorrespondencePair, InterpolationMode, Point2D
from src.raster.raster import Raster

logger = logging.getLogger(__name__)


@dataclass
class RectificationConfig:
    """All tunable rectification parameters in one place."""

    # Resampling
    interpolation: InterpolationMode = InterpolationMode.BILINEAR
    border: BorderPolicy = BorderPolicy.SKIP
    workers: int = 1

    # Homography solve
    collinearity_tolerance: float = COLLINEARITY_TOLERANCE
    singular_value_tolerance: float = SINGULAR_VALUE_TOLERANCE
    mapping_epsilon: float = MAPPING_EPSILON

    # Reject corners that are not a clockwise convex quadrilateral
    enforce_clockwise: bool = True


def destination_corners(width: int, height: int) -> List[Point2D]:
    """Corners of a width x height raster, clockwise from the top-left."""
    return [
        Point2D(0.0, 0.0),
        Point2D(float(width - 1), 0.0),
        Point2D(float(width - 1), float(height - 1)),
        Point2D(0.0, float(height - 1)),
    ]


def remove_perspective(
    source: Raster,
    dest_width: int,
    dest_height: int,
    corners: Sequence[Tuple[float, float]],
    config: Optional[RectificationConfig] = None,
) -> Raster:
    """Remove perspective distortion from a quadrilateral region.

    Args:
        source: Raster to rectify. Not modified.
        dest_width: Width of the output raster.
        dest_height: Height of the output raster.
        corners: Four (x, y) points in ``source``, clockwise, matching the
            output's top-left, top-right, bottom-right and bottom-left corners.
        config: Rectification settings. Defaults to bilinear sampling with
            pixels outside the source left at zero. Corner order is
            validated by default, which is stricter than a plain
            corner-to-rectangle warp; set ``enforce_clockwise=False`` to
            accept any order and get a mirrored or rotated result.

    Returns:
        New raster of size dest_width x dest_height in the source's domain.

    Raises:
        DegenerateConfiguration: If the corners cannot define a homography.
        CornerOrderError: If ``config.enforce_clockwise`` is set and the
            corners are not a clockwise convex quadrilateral.
    """
    config = config or RectificationConfig()

    if dest_width <= 0 or dest_height <= 0:
        raise ValueError(f"Output size must be positive, got {dest_width}x{dest_height}")

    source_points = [Point2D(float(x), float(y)) for x, y in corners]
    if len(source_points) != 4:
        raise DegenerateConfiguration(
            f"Exactly 4 source corners are required, got {len(source_points)}"
        )
    if config.enforce_clockwise:
        _check_clockwise_convex(source_points)

    pairs = [
        CorrespondencePair(dst, src)
        for dst, src in zip(destination_corners(dest_width, dest_height), source_points)
    ]

    step_start = time.time()
    homography = estimate_homography(
        pairs,
        collinearity_tolerance=config.collinearity_tolerance,
        singular_value_tolerance=config.singular_value_tolerance,
    )
    estimate_time = time.time() - step_start

    mapper = HomographyMapper(homography, epsilon=config.mapping_epsilon)

    step_start = time.time()
    output = warp(
        source,
        dest_width,
        dest_height,
        mapper,
        interpolation=config.interpolation,
        border=config.border,
        workers=config.workers,
    )
    warp_time = time.time() - step_start

    logger.debug(f"Homography time: {estimate_time:.3f}s, warp time: {warp_time:.3f}s")
    logger.info(
        f"Perspective removed: {source.width}x{source.height} -> {dest_width}x{dest_height}"
    )
    return output


def _check_clockwise_convex(points: Sequence[Point2D]) -> None:
    """Raise unless the polygon turns clockwise (in image axes) at every corner.

    With y pointing down, a clockwise polygon has a positive cross product at
    each vertex. Mixed signs mean a self-intersecting or concave quad.
    """
    pts = np.array(points, dtype=np.float64)
    crosses = []
    for i in range(len(pts)):
        a = pts[i - 1]
        b = pts[i]
        c = pts[(i + 1) % len(pts)]
        ab = b - a
        bc = c - b
        crosses.append(ab[0] * bc[1] - ab[1] * bc[0])

    if any(c == 0.0 for c in crosses):
        # Collinear corners are reported by the homography estimator
        return
    if all(c < 0 for c in crosses):
        raise CornerOrderError(
            f"Corners are counter-clockwise, expected clockwise: {pts.tolist()}"
        )
    if not all(c > 0 for c in crosses):
        raise CornerOrderError(
            f"Corners do not form a convex quadrilateral: {pts.tolist()}"
        )
