"""Error types raised by the grayscale image facade.

All failures are input errors: a malformed correspondence set or a raster
whose sample domain an operation cannot handle. They are raised before any
work is done, so no partial result is ever returned.
"""


class GrayImageError(Exception):
    """Base class for all errors raised by this package."""


class DegenerateConfiguration(GrayImageError, ValueError):
    """Correspondences cannot define a nonsingular homography.

    Raised for a wrong number of point pairs, collinear (or nearly
    collinear) points, or an ill-conditioned linear solve.
    """


class CornerOrderError(DegenerateConfiguration):
    """Source corners are not a clockwise, convex quadrilateral."""


class InvalidImageType(GrayImageError, TypeError):
    """Operation requires a sample domain the input raster does not have."""


class UnsupportedSampleType(GrayImageError, TypeError):
    """No conversion or visualization rule exists for a sample domain."""
