"""Grayscale raster data model, domain conversion and display helpers."""

from src.raster.raster import Raster, SampleDomain
from src.raster.convert import to_f32, to_u8
from src.raster.visualize import colorize_sign, to_rgb

__all__ = [
    "Raster",
    "SampleDomain",
    "to_f32",
    "to_u8",
    "colorize_sign",
    "to_rgb",
]
