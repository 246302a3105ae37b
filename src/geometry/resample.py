"""Inverse-warping resampler.

For every destination pixel the mapper gives a continuous source coordinate,
which is sampled with nearest-neighbour or bilinear interpolation. Pixels
whose coordinate falls outside the source raster are handled by a border
policy. Rows are processed in bands that read only the immutable source and
write disjoint slices of the output, so bands can run on a thread pool.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import List, Tuple

import numpy as np

from src.geometry.homography import HomographyMapper
from src.geometry.types import BorderPolicy, InterpolationMode
from src.raster.convert import clamp_to_u8
from src.raster.raster import Raster, SampleDomain

logger = logging.getLogger(__name__)

# Mapped coordinates this close to the source edge count as inside
IN_BOUNDS_TOLERANCE = 1e-6

# Keeps far-away coordinates representable as int64 indices
_COORDINATE_LIMIT = float(2 ** 40)


def warp(
    source: Raster,
    dest_width: int,
    dest_height: int,
    mapper: HomographyMapper,
    interpolation: InterpolationMode = InterpolationMode.BILINEAR,
    border: BorderPolicy = BorderPolicy.SKIP,
    workers: int = 1,
) -> Raster:
    """Resample ``source`` into a new raster through ``mapper``.

    Args:
        source: Source raster, never modified.
        dest_width: Output width in pixels.
        dest_height: Output height in pixels.
        mapper: Maps destination pixel coordinates to source coordinates.
        interpolation: NEAREST or BILINEAR sampling.
        border: Policy for coordinates outside [0, W-1] x [0, H-1].
            Points mapped to infinity are always written as zero.
        workers: Number of threads; rows are split into this many bands.

    Returns:
        New raster of size dest_width x dest_height in the source's domain.
    """
    if dest_width <= 0 or dest_height <= 0:
        raise ValueError(f"Destination size must be positive, got {dest_width}x{dest_height}")
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    start = time.time()
    output = source.new_buffer(dest_width, dest_height)
    source_values = source.samples.astype(np.float64)

    warp_band = partial(
        _warp_rows,
        source_values,
        source.domain,
        output,
        mapper,
        interpolation,
        border,
    )

    bands = _row_bands(dest_height, workers)
    if len(bands) < workers:
        logger.warning(
            f"Requested {workers} workers for {dest_height} rows, using {len(bands)}"
        )

    if len(bands) == 1:
        warp_band(bands[0])
    else:
        with ThreadPoolExecutor(max_workers=len(bands)) as executor:
            # Consume the iterator so worker exceptions propagate
            list(executor.map(warp_band, bands))

    logger.debug(
        f"Warped {source.width}x{source.height} -> {dest_width}x{dest_height} "
        f"({interpolation.value}, {border.value}, {len(bands)} band(s)) "
        f"in {time.time() - start:.3f}s"
    )
    return source.derive(output)


def _row_bands(height: int, workers: int) -> List[Tuple[int, int]]:
    """Split [0, height) into at most ``workers`` contiguous, non-empty bands."""
    count = min(workers, height)
    edges = np.linspace(0, height, count + 1).astype(int)
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:]) if b > a]


def _warp_rows(
    source: np.ndarray,
    domain: SampleDomain,
    output: np.ndarray,
    mapper: HomographyMapper,
    interpolation: InterpolationMode,
    border: BorderPolicy,
    band: Tuple[int, int],
) -> None:
    """Fill output rows ``band[0]:band[1]``."""
    row_start, row_stop = band
    src_h, src_w = source.shape
    dest_w = output.shape[1]

    u, v = np.meshgrid(
        np.arange(dest_w, dtype=np.float64),
        np.arange(row_start, row_stop, dtype=np.float64),
    )
    x, y, valid = mapper.map_grid(u, v)

    tol = IN_BOUNDS_TOLERANCE
    inside = (
        valid
        & (x >= -tol) & (x <= src_w - 1 + tol)
        & (y >= -tol) & (y <= src_h - 1 + tol)
    )

    # Snap in-bounds coordinates that overshoot the edge by rounding error
    x = np.where(inside, np.clip(x, 0.0, src_w - 1), np.clip(x, -_COORDINATE_LIMIT, _COORDINATE_LIMIT))
    y = np.where(inside, np.clip(y, 0.0, src_h - 1), np.clip(y, -_COORDINATE_LIMIT, _COORDINATE_LIMIT))

    if border is BorderPolicy.SKIP:
        sampled = inside
        index_policy = BorderPolicy.EXTEND
    else:
        sampled = valid
        index_policy = border

    if interpolation is InterpolationMode.NEAREST:
        values = _sample_nearest(source, x, y, index_policy)
    elif interpolation is InterpolationMode.BILINEAR:
        values = _sample_bilinear(source, x, y, index_policy)
    else:
        raise ValueError(f"Unknown interpolation mode: {interpolation}")

    values = np.where(sampled, values, domain.zero)

    if domain is SampleDomain.U8:
        output[row_start:row_stop] = clamp_to_u8(values)
    else:
        output[row_start:row_stop] = values.astype(output.dtype)


def _sample_nearest(
    source: np.ndarray,
    x: np.ndarray,
    y: np.ndarray,
    policy: BorderPolicy,
) -> np.ndarray:
    src_h, src_w = source.shape
    xi = _remap_index(np.floor(x + 0.5).astype(np.int64), src_w, policy)
    yi = _remap_index(np.floor(y + 0.5).astype(np.int64), src_h, policy)
    return source[yi, xi]


def _sample_bilinear(
    source: np.ndarray,
    x: np.ndarray,
    y: np.ndarray,
    policy: BorderPolicy,
) -> np.ndarray:
    src_h, src_w = source.shape

    x_floor = np.floor(x)
    y_floor = np.floor(y)
    fx = x - x_floor
    fy = y - y_floor

    x0 = x_floor.astype(np.int64)
    y0 = y_floor.astype(np.int64)
    x1 = _remap_index(x0 + 1, src_w, policy)
    y1 = _remap_index(y0 + 1, src_h, policy)
    x0 = _remap_index(x0, src_w, policy)
    y0 = _remap_index(y0, src_h, policy)

    return (
        source[y0, x0] * (1.0 - fx) * (1.0 - fy)
        + source[y0, x1] * fx * (1.0 - fy)
        + source[y1, x0] * (1.0 - fx) * fy
        + source[y1, x1] * fx * fy
    )


def _remap_index(index: np.ndarray, size: int, policy: BorderPolicy) -> np.ndarray:
    """Bring integer indices into [0, size) according to ``policy``."""
    if policy is BorderPolicy.WRAP:
        return np.mod(index, size)
    if policy is BorderPolicy.REFLECT:
        if size == 1:
            return np.zeros_like(index)
        period = 2 * (size - 1)
        folded = np.mod(index, period)
        return np.where(folded >= size, period - folded, folded)
    return np.clip(index, 0, size - 1)
