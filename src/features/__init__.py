"""Feature detection."""

from src.features.lines import (
    HoughFootConfig,
    HoughFootSubimageConfig,
    HoughPolarConfig,
    LineParametric2D,
    detect_lines_foot,
    detect_lines_foot_subimage,
    detect_lines_polar,
)

__all__ = [
    "HoughFootConfig",
    "HoughFootSubimageConfig",
    "HoughPolarConfig",
    "LineParametric2D",
    "detect_lines_foot",
    "detect_lines_foot_subimage",
    "detect_lines_polar",
]
