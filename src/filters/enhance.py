"""Histogram equalization and sharpening for 8-bit rasters."""

import logging

import cv2
import numpy as np
from skimage.filters import rank

from src.errors import InvalidImageType
from src.raster.raster import Raster, SampleDomain

logger = logging.getLogger(__name__)

_SHARPEN_4 = np.array([
    [0, -1, 0],
    [-1, 5, -1],
    [0, -1, 0],
], dtype=np.float32)

_SHARPEN_8 = np.array([
    [-1, -1, -1],
    [-1, 9, -1],
    [-1, -1, -1],
], dtype=np.float32)


def _require_u8(raster: Raster, operation: str) -> None:
    if raster.domain is not SampleDomain.U8:
        raise InvalidImageType(
            f"{operation} requires a U8 raster, got {raster.domain.value}"
        )


def histogram_equalize(raster: Raster) -> Raster:
    """Equalize the histogram across the entire image.

    Raises:
        InvalidImageType: If the raster is not U8.
    """
    _require_u8(raster, "Histogram equalization")
    return raster.derive(cv2.equalizeHist(raster.to_array()))


def histogram_equalize_local(raster: Raster, radius: int) -> Raster:
    """Equalize the histogram of each pixel's (2*radius+1) square neighbourhood.

    Raises:
        InvalidImageType: If the raster is not U8.
    """
    _require_u8(raster, "Local histogram equalization")
    if radius < 1:
        raise ValueError(f"Local equalization radius must be at least 1, got {radius}")

    footprint = np.ones((2 * radius + 1, 2 * radius + 1), dtype=np.uint8)
    equalized = rank.equalize(raster.to_array(), footprint=footprint)
    return raster.derive(equalized.astype(np.uint8))


def sharpen4(raster: Raster) -> Raster:
    """Sharpen with the 4-connected Laplacian, saturating to [0, 255]."""
    _require_u8(raster, "Sharpening")
    return raster.derive(
        cv2.filter2D(raster.to_array(), -1, _SHARPEN_4, borderType=cv2.BORDER_REPLICATE)
    )


def sharpen8(raster: Raster) -> Raster:
    """Sharpen with the 8-connected Laplacian, saturating to [0, 255]."""
    _require_u8(raster, "Sharpening")
    return raster.derive(
        cv2.filter2D(raster.to_array(), -1, _SHARPEN_8, borderType=cv2.BORDER_REPLICATE)
    )
