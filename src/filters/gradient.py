"""Image gradients. Derivatives are always returned as F32 rasters."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import cv2
import numpy as np

from src.raster.raster import Raster, SampleDomain

logger = logging.getLogger(__name__)


class GradientKernel(Enum):
    SOBEL = "sobel"
    PREWITT = "prewitt"
    THREE = "three"  # central difference
    TWO0 = "two0"  # forward difference, I[x+1] - I[x]
    TWO1 = "two1"  # backward difference, I[x] - I[x-1]


@dataclass(frozen=True)
class Gradient:
    """Derivatives along x (columns) and y (rows)."""

    dx: Raster
    dy: Raster


_PREWITT_X = np.array([[-1, 0, 1]] * 3, dtype=np.float32)
_THREE_X = np.array([[-1, 0, 1]], dtype=np.float32)
_TWO_X = np.array([[-1, 1]], dtype=np.float32)

# (x kernel, x anchor, y anchor); the y kernel is the transpose
_KERNELS = {
    GradientKernel.PREWITT: (_PREWITT_X, (-1, -1), (-1, -1)),
    GradientKernel.THREE: (_THREE_X, (-1, -1), (-1, -1)),
    GradientKernel.TWO0: (_TWO_X, (0, 0), (0, 0)),
    GradientKernel.TWO1: (_TWO_X, (1, 0), (0, 1)),
}


def compute_gradient(raster: Raster, kernel: GradientKernel = GradientKernel.SOBEL) -> Gradient:
    """Compute x and y derivatives with the given kernel family.

    Borders are handled by replicating the edge samples.
    """
    image = raster.to_array()

    if kernel is GradientKernel.SOBEL:
        dx = cv2.Sobel(image, cv2.CV_32F, 1, 0, ksize=3, borderType=cv2.BORDER_REPLICATE)
        dy = cv2.Sobel(image, cv2.CV_32F, 0, 1, ksize=3, borderType=cv2.BORDER_REPLICATE)
    elif kernel in _KERNELS:
        dx, dy = _apply_kernel(image, *_KERNELS[kernel])
    else:
        raise ValueError(f"Unknown gradient kernel: {kernel}")

    return Gradient(
        dx=Raster(dx, SampleDomain.F32),
        dy=Raster(dy, SampleDomain.F32),
    )


def _apply_kernel(
    image: np.ndarray,
    kernel_x: np.ndarray,
    anchor_x: Tuple[int, int],
    anchor_y: Tuple[int, int],
) -> Tuple[np.ndarray, np.ndarray]:
    dx = cv2.filter2D(
        image, cv2.CV_32F, kernel_x, anchor=anchor_x, borderType=cv2.BORDER_REPLICATE
    )
    dy = cv2.filter2D(
        image, cv2.CV_32F, np.ascontiguousarray(kernel_x.T), anchor=anchor_y,
        borderType=cv2.BORDER_REPLICATE,
    )
    return dx, dy
