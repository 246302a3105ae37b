"""Pixel operations delegated to OpenCV, SciPy and scikit-image.

Every filter takes a Raster and returns a new Raster (or a scalar for the
statistics); inputs are never modified.
"""

from src.filters.blur import blur_gaussian, blur_mean, blur_median
from src.filters.enhance import (
    histogram_equalize,
    histogram_equalize_local,
    sharpen4,
    sharpen8,
)
from src.filters.gradient import Gradient, GradientKernel, compute_gradient
from src.filters.statistics import max_abs, max_value, mean, total
from src.filters.threshold import (
    compute_entropy,
    compute_otsu,
    threshold,
    threshold_entropy_binary,
    threshold_local_gaussian,
    threshold_local_mean,
    threshold_local_sauvola,
    threshold_otsu_binary,
)

__all__ = [
    # Blur
    "blur_gaussian",
    "blur_mean",
    "blur_median",
    # Enhancement
    "histogram_equalize",
    "histogram_equalize_local",
    "sharpen4",
    "sharpen8",
    # Gradient
    "Gradient",
    "GradientKernel",
    "compute_gradient",
    # Statistics
    "max_abs",
    "max_value",
    "mean",
    "total",
    # Threshold
    "compute_entropy",
    "compute_otsu",
    "threshold",
    "threshold_entropy_binary",
    "threshold_local_gaussian",
    "threshold_local_mean",
    "threshold_local_sauvola",
    "threshold_otsu_binary",
]
