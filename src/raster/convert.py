"""Sample domain conversion.

Conversions never modify their input. They return a new raster, leaving
the caller free to drop the old one.
"""

import logging

import numpy as np

from src.errors import UnsupportedSampleType
from src.raster.raster import Raster, SampleDomain

logger = logging.getLogger(__name__)


def to_f32(raster: Raster) -> Raster:
    """Convert a raster to the F32 domain.

    Args:
        raster: Input raster, U8 or F32.

    Returns:
        The input itself when already F32, otherwise a new F32 raster with
        the same intensity values.
    """
    if raster.domain is SampleDomain.F32:
        return raster
    if raster.domain is SampleDomain.U8:
        return Raster(raster.samples.astype(np.float32), SampleDomain.F32)
    raise UnsupportedSampleType(f"Cannot convert {raster.domain} to F32")


def to_u8(raster: Raster) -> Raster:
    """Convert a raster to the U8 domain.

    F32 samples are rounded to the nearest integer and clamped to [0, 255].

    Args:
        raster: Input raster, U8 or F32.

    Returns:
        The input itself when already U8, otherwise a new U8 raster.
    """
    if raster.domain is SampleDomain.U8:
        return raster
    if raster.domain is SampleDomain.F32:
        samples = raster.samples
        low, high = float(samples.min()), float(samples.max())
        if low < 0.0 or high > 255.0:
            logger.debug(f"Clamping F32 range [{low:.3f}, {high:.3f}] to [0, 255]")
        return Raster(clamp_to_u8(samples), SampleDomain.U8)
    raise UnsupportedSampleType(f"Cannot convert {raster.domain} to U8")


def clamp_to_u8(values: np.ndarray) -> np.ndarray:
    """Round floating point samples and saturate them into uint8."""
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)
