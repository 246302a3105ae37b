"""Smoothing filters. Output keeps the input's sample domain."""

import logging

import cv2
import numpy as np
from scipy.ndimage import median_filter

from src.raster.raster import Raster

logger = logging.getLogger(__name__)


def _kernel_size(radius: int) -> int:
    if radius < 0:
        raise ValueError(f"Blur radius must be non-negative, got {radius}")
    return 2 * radius + 1


def blur_mean(raster: Raster, radius: int) -> Raster:
    """Box filter over a (2*radius+1) square window.

    Args:
        raster: U8 or F32 raster.
        radius: Window radius in pixels.

    Returns:
        Blurred raster in the same domain.
    """
    size = _kernel_size(radius)
    blurred = cv2.blur(raster.to_array(), (size, size), borderType=cv2.BORDER_REFLECT)
    return raster.derive(blurred)


def blur_median(raster: Raster, radius: int) -> Raster:
    """Median filter over a (2*radius+1) square window."""
    size = _kernel_size(radius)
    filtered = median_filter(raster.to_array(), size=size, mode="nearest")
    return raster.derive(filtered)


def blur_gaussian(raster: Raster, sigma: float, radius: int) -> Raster:
    """Gaussian blur.

    Either parameter may be non-positive, in which case it is derived from
    the other one, but not both.

    Args:
        raster: U8 or F32 raster.
        sigma: Standard deviation in pixels.
        radius: Kernel radius in pixels.

    Returns:
        Blurred raster in the same domain.
    """
    if sigma <= 0 and radius <= 0:
        raise ValueError("Gaussian blur needs a positive sigma or a positive radius")

    size = 2 * radius + 1 if radius > 0 else 0
    blurred = cv2.GaussianBlur(
        raster.to_array(),
        (size, size),
        sigmaX=max(float(sigma), 0.0),
        borderType=cv2.BORDER_REFLECT,
    )
    logger.debug(f"Gaussian blur sigma={sigma}, kernel={size or 'auto'}")
    return raster.derive(np.asarray(blurred, dtype=raster.domain.dtype))
