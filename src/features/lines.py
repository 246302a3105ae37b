"""Straight line detection with Hough transforms.

Edges are pixels whose Sobel gradient magnitude exceeds a threshold. The
vote accumulator and peak search come from scikit-image. Three variants
are offered:

- polar: lines in (angle, distance) form relative to the image origin
- foot: lines reported by the foot of the normal from the image centre;
  lines passing too close to the centre are dropped since their foot
  point is ill-defined
- foot subimage: the foot variant run on a grid of subimages, which keeps
  short local lines from being drowned out by long global ones
"""

import logging
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple

import cv2
import numpy as np
from skimage.transform import hough_line, hough_line_peaks

from src.raster.raster import Raster

logger = logging.getLogger(__name__)


class LineParametric2D(NamedTuple):
    """Line through (x, y) with direction (slope_x, slope_y)."""

    x: float
    y: float
    slope_x: float
    slope_y: float


@dataclass
class HoughPolarConfig:
    local_max_radius: int = 2
    min_counts: int = 5
    resolution_range: float = 2.0  # widens peak suppression along distance
    num_bins_angle: int = 180
    threshold_edge: float = 25.0
    max_lines: int = 10


@dataclass
class HoughFootConfig:
    local_max_radius: int = 2
    min_counts: int = 5
    min_distance_from_origin: float = 5.0
    threshold_edge: float = 25.0
    max_lines: int = 10
    num_bins_angle: int = 180


@dataclass
class HoughFootSubimageConfig:
    local_max_radius: int = 2
    min_counts: int = 5
    min_distance_from_origin: float = 5.0
    threshold_edge: float = 25.0
    max_lines: int = 10
    num_bins_angle: int = 180
    total_horizontal_divisions: int = 2
    total_vertical_divisions: int = 2


# (votes, line)
_ScoredLine = Tuple[int, LineParametric2D]


def detect_lines_polar(raster: Raster, config: Optional[HoughPolarConfig] = None) -> List[LineParametric2D]:
    """Detect lines, strongest first, as points on the normal from (0, 0)."""
    config = config or HoughPolarConfig()
    edges = _edge_map(raster.samples, config.threshold_edge)

    min_distance = max(1, int(round(config.local_max_radius * config.resolution_range)))
    scored = []
    for votes, angle, distance in _hough_peaks(
        edges, config.num_bins_angle, min_distance, config.local_max_radius,
        config.min_counts, config.max_lines,
    ):
        normal = np.array([np.cos(angle), np.sin(angle)])
        foot = distance * normal
        scored.append((votes, _line(foot, angle)))

    return _strongest(scored, config.max_lines)


def detect_lines_foot(raster: Raster, config: Optional[HoughFootConfig] = None) -> List[LineParametric2D]:
    """Detect lines, strongest first, as feet of the normal from the image centre."""
    config = config or HoughFootConfig()
    edges = _edge_map(raster.samples, config.threshold_edge)
    scored = _foot_lines(edges, config, offset=(0.0, 0.0))
    return _strongest(scored, config.max_lines)


def detect_lines_foot_subimage(
    raster: Raster,
    config: Optional[HoughFootSubimageConfig] = None,
) -> List[LineParametric2D]:
    """Run the foot detector on a grid of subimages and merge the results."""
    config = config or HoughFootSubimageConfig()
    if config.total_horizontal_divisions < 1 or config.total_vertical_divisions < 1:
        raise ValueError("Subimage divisions must be at least 1")

    edges = _edge_map(raster.samples, config.threshold_edge)
    height, width = edges.shape
    col_edges = np.linspace(0, width, config.total_horizontal_divisions + 1).astype(int)
    row_edges = np.linspace(0, height, config.total_vertical_divisions + 1).astype(int)

    scored: List[_ScoredLine] = []
    for y0, y1 in zip(row_edges[:-1], row_edges[1:]):
        for x0, x1 in zip(col_edges[:-1], col_edges[1:]):
            if y1 <= y0 or x1 <= x0:
                continue
            scored.extend(_foot_lines(edges[y0:y1, x0:x1], config, offset=(x0, y0)))

    logger.debug(
        f"Foot subimage Hough: {len(scored)} candidate lines from "
        f"{config.total_horizontal_divisions}x{config.total_vertical_divisions} subimages"
    )
    return _strongest(scored, config.max_lines)


def _foot_lines(edges: np.ndarray, config, offset: Tuple[float, float]) -> List[_ScoredLine]:
    height, width = edges.shape
    centre = np.array([width / 2.0, height / 2.0])

    scored = []
    for votes, angle, distance in _hough_peaks(
        edges, config.num_bins_angle, config.local_max_radius, config.local_max_radius,
        config.min_counts, config.max_lines,
    ):
        normal = np.array([np.cos(angle), np.sin(angle)])
        centred_distance = distance - normal @ centre
        if abs(centred_distance) < config.min_distance_from_origin:
            continue
        foot = centre + centred_distance * normal + np.asarray(offset, dtype=np.float64)
        scored.append((votes, _line(foot, angle)))
    return scored


def _edge_map(samples: np.ndarray, threshold_edge: float) -> np.ndarray:
    image = samples.astype(np.float32)
    gx = cv2.Sobel(image, cv2.CV_32F, 1, 0, ksize=3, borderType=cv2.BORDER_REPLICATE)
    gy = cv2.Sobel(image, cv2.CV_32F, 0, 1, ksize=3, borderType=cv2.BORDER_REPLICATE)
    return cv2.magnitude(gx, gy) > threshold_edge


def _hough_peaks(
    edges: np.ndarray,
    num_bins_angle: int,
    min_distance: int,
    min_angle: int,
    min_counts: int,
    max_lines: int,
) -> List[Tuple[int, float, float]]:
    """Accumulator peaks as (votes, angle, distance) with x*cos + y*sin = distance."""
    if not edges.any():
        return []

    angles = np.linspace(-np.pi / 2, np.pi / 2, num_bins_angle, endpoint=False)
    accumulator, angles, distances = hough_line(edges, theta=angles)
    votes, peak_angles, peak_distances = hough_line_peaks(
        accumulator,
        angles,
        distances,
        min_distance=max(1, int(min_distance)),
        min_angle=max(1, int(min_angle)),
        threshold=min_counts,
        num_peaks=max_lines,
    )
    return [
        (int(v), float(a), float(d))
        for v, a, d in zip(votes, peak_angles, peak_distances)
    ]


def _line(foot: np.ndarray, angle: float) -> LineParametric2D:
    return LineParametric2D(
        x=float(foot[0]),
        y=float(foot[1]),
        slope_x=float(-np.sin(angle)),
        slope_y=float(np.cos(angle)),
    )


def _strongest(scored: List[_ScoredLine], max_lines: int) -> List[LineParametric2D]:
    ordered = sorted(scored, key=lambda item: -item[0])
    return [line for _, line in ordered[:max_lines]]
