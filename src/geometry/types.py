"""Point, correspondence and sampling option types for geometric warps."""

from enum import Enum
from typing import NamedTuple


class Point2D(NamedTuple):
    """Real-valued 2D coordinate, x along columns and y along rows."""

    x: float
    y: float


class CorrespondencePair(NamedTuple):
    """One known sample of a mapping from a destination to a source plane."""

    destination: Point2D
    source: Point2D


class InterpolationMode(Enum):
    """How a continuous source coordinate is sampled."""

    NEAREST = "nearest"
    BILINEAR = "bilinear"


class BorderPolicy(Enum):
    """What to do with coordinates that fall outside the source raster."""

    SKIP = "skip"  # write the domain zero value
    EXTEND = "extend"  # clamp to the nearest edge sample
    WRAP = "wrap"  # periodic
    REFLECT = "reflect"  # mirror about the edge sample
