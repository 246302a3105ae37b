"""Planar homography estimation, resampling and perspective removal."""

from src.geometry.types import BorderPolicy, CorrespondencePair, InterpolationMode, Point2D
from src.geometry.homography import Homography, HomographyMapper, estimate_homography
from src.geometry.resample import warp
from src.geometry.perspective import RectificationConfig, destination_corners, remove_perspective

__all__ = [
    "BorderPolicy",
    "CorrespondencePair",
    "InterpolationMode",
    "Point2D",
    "Homography",
    "HomographyMapper",
    "estimate_homography",
    "warp",
    "RectificationConfig",
    "destination_corners",
    "remove_perspective",
]
