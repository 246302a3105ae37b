"""Global and adaptive thresholding.

Every function returns a binary U8 raster holding 0 and 1. With
``down=True`` a pixel is set when its value is at or below the threshold,
otherwise when it is above.
"""

import logging
from typing import Union

import cv2
import numpy as np
from skimage.filters import threshold_li, threshold_otsu, threshold_sauvola

from src.raster.raster import Raster, SampleDomain

logger = logging.getLogger(__name__)


def _binary(values: np.ndarray, threshold: Union[float, np.ndarray], down: bool) -> Raster:
    mask = values <= threshold if down else values > threshold
    return Raster(mask.astype(np.uint8), SampleDomain.U8)


def _window(radius: int) -> int:
    if radius < 1:
        raise ValueError(f"Threshold radius must be at least 1, got {radius}")
    return 2 * radius + 1


def threshold(raster: Raster, level: float, down: bool) -> Raster:
    """Threshold against a fixed level."""
    return _binary(raster.samples, level, down)


def compute_otsu(raster: Raster) -> float:
    """Otsu's between-class-variance threshold."""
    return float(threshold_otsu(raster.to_array()))


def compute_entropy(raster: Raster) -> float:
    """Minimum cross-entropy threshold (Li's method)."""
    return float(threshold_li(raster.to_array()))


def threshold_otsu_binary(raster: Raster, down: bool) -> Raster:
    level = compute_otsu(raster)
    logger.debug(f"Otsu threshold: {level:.3f}")
    return _binary(raster.samples, level, down)


def threshold_entropy_binary(raster: Raster, down: bool) -> Raster:
    level = compute_entropy(raster)
    logger.debug(f"Entropy threshold: {level:.3f}")
    return _binary(raster.samples, level, down)


def threshold_local_mean(raster: Raster, radius: int, bias: float, down: bool) -> Raster:
    """Threshold each pixel against ``bias`` times the mean of its square window.

    Args:
        raster: U8 or F32 raster.
        radius: Window radius; the window is (2*radius+1) pixels wide.
        bias: Scale applied to the local mean. Values below 1 lower the
            threshold.
        down: Mark pixels at or below the threshold.
    """
    size = _window(radius)
    values = raster.samples.astype(np.float32)
    local_mean = cv2.blur(values, (size, size), borderType=cv2.BORDER_REFLECT)
    return _binary(values, local_mean * bias, down)


def threshold_local_gaussian(raster: Raster, radius: int, bias: float, down: bool) -> Raster:
    """Like ``threshold_local_mean`` with a Gaussian-weighted window."""
    size = _window(radius)
    values = raster.samples.astype(np.float32)
    local_mean = cv2.GaussianBlur(values, (size, size), 0, borderType=cv2.BORDER_REFLECT)
    return _binary(values, local_mean * bias, down)


def threshold_local_sauvola(raster: Raster, radius: int, k: float, down: bool) -> Raster:
    """Sauvola's adaptive threshold.

    Args:
        raster: U8 or F32 raster.
        radius: Window radius; the window is (2*radius+1) pixels wide.
        k: Positive tuning parameter, 0.3 is a good starting point.
        down: Mark pixels at or below the threshold.
    """
    size = _window(radius)
    values = raster.samples.astype(np.float64)
    # Dynamic range of the standard deviation for 8-bit data
    local = threshold_sauvola(values, window_size=size, k=k, r=128.0)
    return _binary(values, local, down)
