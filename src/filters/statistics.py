"""Scalar image statistics."""

import numpy as np

from src.raster.raster import Raster


def mean(raster: Raster) -> float:
    return float(raster.samples.mean(dtype=np.float64))


def max_value(raster: Raster) -> float:
    return float(raster.samples.max())


def max_abs(raster: Raster) -> float:
    """Largest absolute sample value."""
    return float(np.abs(raster.samples.astype(np.float64)).max())


def total(raster: Raster) -> float:
    """Sum of all samples."""
    return float(raster.samples.sum(dtype=np.float64))
