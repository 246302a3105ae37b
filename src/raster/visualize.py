"""Render grayscale rasters as RGB images for display."""

import logging
from typing import Optional

import numpy as np

from src.errors import UnsupportedSampleType
from src.raster.raster import Raster, SampleDomain

logger = logging.getLogger(__name__)


def colorize_sign(raster: Raster, max_abs: Optional[float] = None) -> np.ndarray:
    """Color positive samples red and negative samples green.

    Intensity is scaled by the largest absolute sample so that ``max_abs``
    maps to 255. Useful for viewing signed data such as image gradients.

    Args:
        raster: U8 or F32 raster.
        max_abs: Global scale. Computed from the raster when omitted.

    Returns:
        uint8 RGB image, shape (height, width, 3).
    """
    if raster.domain not in (SampleDomain.U8, SampleDomain.F32):
        raise UnsupportedSampleType(f"No sign colorization rule for {raster.domain}")

    values = raster.samples.astype(np.float64)
    if max_abs is None:
        max_abs = float(np.abs(values).max())

    rgb = np.zeros((raster.height, raster.width, 3), dtype=np.uint8)
    if max_abs <= 0.0:
        logger.debug("All samples are zero, sign visualization is black")
        return rgb

    scaled = np.clip(values * (255.0 / max_abs), -255.0, 255.0).astype(np.int32)
    rgb[..., 0] = np.where(scaled > 0, scaled, 0)
    rgb[..., 1] = np.where(scaled < 0, -scaled, 0)
    return rgb


def to_rgb(raster: Raster) -> np.ndarray:
    """Broadcast gray samples into equal R, G and B channels.

    F32 samples are interpreted on the 0-255 scale and clamped.

    Returns:
        uint8 RGB image, shape (height, width, 3).
    """
    if raster.domain is SampleDomain.U8:
        gray = raster.samples
    elif raster.domain is SampleDomain.F32:
        gray = np.clip(raster.samples, 0.0, 255.0).astype(np.uint8)
    else:
        raise UnsupportedSampleType(f"No RGB conversion rule for {raster.domain}")

    return np.repeat(gray[:, :, np.newaxis], 3, axis=2)
