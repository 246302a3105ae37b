"""High level interface for handling grayscale images."""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from src.features.lines import (
    HoughFootConfig,
    HoughFootSubimageConfig,
    HoughPolarConfig,
    LineParametric2D,
    detect_lines_foot,
    detect_lines_foot_subimage,
    detect_lines_polar,
)
from src.filters import blur, enhance, statistics
from src.filters.threshold import (
    threshold,
    threshold_entropy_binary,
    threshold_local_gaussian,
    threshold_local_mean,
    threshold_local_sauvola,
    threshold_otsu_binary,
)
from src.filters.gradient import Gradient, GradientKernel, compute_gradient
from src.geometry.perspective import RectificationConfig, remove_perspective
from src.raster.convert import to_f32, to_u8
from src.raster.raster import Raster, SampleDomain
from src.raster.visualize import colorize_sign, to_rgb

logger = logging.getLogger(__name__)


class GrayImage:
    """Grayscale image wrapper with a fluent set of pixel operations.

    The wrapped raster is immutable. Every operation returns a new
    ``GrayImage`` (or a scalar, gradient pair, line list or RGB array)
    and leaves this one untouched, so an instance can be shared freely.
    """

    def __init__(self, image: Raster) -> None:
        self._image = image

    @classmethod
    def from_array(cls, array: np.ndarray) -> "GrayImage":
        """Wrap a 2-D uint8 or float32 array."""
        return cls(Raster.from_array(array))

    @property
    def image(self) -> Raster:
        return self._image

    @property
    def domain(self) -> SampleDomain:
        return self._image.domain

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    def __repr__(self) -> str:
        return f"GrayImage({self._image!r})"

    # --- Blur ---

    def blur_mean(self, radius: int) -> "GrayImage":
        return GrayImage(blur.blur_mean(self._image, radius))

    def blur_median(self, radius: int) -> "GrayImage":
        return GrayImage(blur.blur_median(self._image, radius))

    def blur_gaussian(self, sigma: float, radius: int) -> "GrayImage":
        return GrayImage(blur.blur_gaussian(self._image, sigma, radius))

    # --- Enhancement ---

    def histogram_equalize(self) -> "GrayImage":
        """Equalize the histogram across the entire image.

        Raises:
            InvalidImageType: If the image is not U8.
        """
        return GrayImage(enhance.histogram_equalize(self._image))

    def histogram_equalize_local(self, radius: int) -> "GrayImage":
        """Equalize the local image histogram.

        Args:
            radius: Radius of the region used to localize.

        Raises:
            InvalidImageType: If the image is not U8.
        """
        return GrayImage(enhance.histogram_equalize_local(self._image, radius))

    def enhance_sharpen4(self) -> "GrayImage":
        """Sharpen with a connect-4 rule. U8 only."""
        return GrayImage(enhance.sharpen4(self._image))

    def enhance_sharpen8(self) -> "GrayImage":
        """Sharpen with a connect-8 rule. U8 only."""
        return GrayImage(enhance.sharpen8(self._image))

    # --- Lines ---

    def lines_hough_polar(self, config: Optional[HoughPolarConfig] = None) -> List[LineParametric2D]:
        return detect_lines_polar(self._image, config)

    def lines_hough_foot(self, config: Optional[HoughFootConfig] = None) -> List[LineParametric2D]:
        return detect_lines_foot(self._image, config)

    def lines_hough_foot_sub(
        self,
        config: Optional[HoughFootSubimageConfig] = None,
    ) -> List[LineParametric2D]:
        return detect_lines_foot_subimage(self._image, config)

    # --- Geometry ---

    def remove_perspective(
        self,
        out_width: int,
        out_height: int,
        corners: Sequence[Tuple[float, float]],
        config: Optional[RectificationConfig] = None,
    ) -> "GrayImage":
        """Remove perspective distortion.

        Args:
            out_width: Width of output image.
            out_height: Height of output image.
            corners: Four points in this image, in clockwise order, that map
                to the output's top-left, top-right, bottom-right and
                bottom-left corners.
            config: Optional rectification settings.

        Returns:
            Image with perspective distortion removed.
        """
        return GrayImage(remove_perspective(self._image, out_width, out_height, corners, config))

    # --- Threshold ---

    def threshold(self, level: float, down: bool) -> "GrayImage":
        return GrayImage(threshold(self._image, level, down))

    def threshold_otsu(self, down: bool) -> "GrayImage":
        return GrayImage(threshold_otsu_binary(self._image, down))

    def threshold_entropy(self, down: bool) -> "GrayImage":
        return GrayImage(threshold_entropy_binary(self._image, down))

    def threshold_square(self, radius: int, bias: float, down: bool) -> "GrayImage":
        return GrayImage(threshold_local_mean(self._image, radius, bias, down))

    def threshold_gaussian(self, radius: int, bias: float, down: bool) -> "GrayImage":
        return GrayImage(threshold_local_gaussian(self._image, radius, bias, down))

    def threshold_sauvola(self, radius: int, k: float, down: bool) -> "GrayImage":
        """Sauvola adaptive threshold.

        Args:
            radius: Radius of adaptive region.
            k: Positive parameter used to tune threshold. Try 0.3.
            down: Mark pixels at or below the threshold.
        """
        return GrayImage(threshold_local_sauvola(self._image, radius, k, down))

    # --- Gradient ---

    def gradient_sobel(self) -> Gradient:
        return compute_gradient(self._image, GradientKernel.SOBEL)

    def gradient_prewitt(self) -> Gradient:
        return compute_gradient(self._image, GradientKernel.PREWITT)

    def gradient_three(self) -> Gradient:
        return compute_gradient(self._image, GradientKernel.THREE)

    def gradient_two0(self) -> Gradient:
        return compute_gradient(self._image, GradientKernel.TWO0)

    def gradient_two1(self) -> Gradient:
        return compute_gradient(self._image, GradientKernel.TWO1)

    # --- Statistics ---

    def mean(self) -> float:
        return statistics.mean(self._image)

    def max(self) -> float:
        return statistics.max_value(self._image)

    def max_abs(self) -> float:
        return statistics.max_abs(self._image)

    def sum(self) -> float:
        return statistics.total(self._image)

    # --- Display and conversion ---

    def visualize_sign(self) -> np.ndarray:
        """RGB rendering with positive values red and negative values green."""
        return colorize_sign(self._image, self.max_abs())

    def convert(self) -> np.ndarray:
        """RGB rendering with the gray value copied into each channel."""
        return to_rgb(self._image)

    def to_f32(self) -> "GrayImage":
        """Return this image in the F32 domain."""
        return GrayImage(to_f32(self._image))

    def to_u8(self) -> "GrayImage":
        """Return this image in the U8 domain, rounding and clamping F32 values."""
        return GrayImage(to_u8(self._image))
