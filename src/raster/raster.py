"""Single-channel raster with an explicit sample domain tag."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np

from src.errors import InvalidImageType, UnsupportedSampleType

logger = logging.getLogger(__name__)


class SampleDomain(Enum):
    """Numeric domain of every sample in a raster."""

    U8 = "U8"  # 8-bit unsigned intensity
    F32 = "F32"  # 32-bit floating point intensity

    @property
    def dtype(self) -> np.dtype:
        if self is SampleDomain.U8:
            return np.dtype(np.uint8)
        if self is SampleDomain.F32:
            return np.dtype(np.float32)
        raise UnsupportedSampleType(f"No dtype for sample domain {self}")

    @property
    def zero(self) -> Union[int, float]:
        return 0 if self is SampleDomain.U8 else 0.0

    @classmethod
    def from_dtype(cls, dtype: np.dtype) -> "SampleDomain":
        """Look up the domain tag for a numpy dtype.

        Raises:
            UnsupportedSampleType: If the dtype has no matching domain.
        """
        dtype = np.dtype(dtype)
        if dtype == np.uint8:
            return cls.U8
        if dtype == np.float32:
            return cls.F32
        raise UnsupportedSampleType(
            f"Unsupported sample dtype {dtype}, expected uint8 or float32"
        )


@dataclass(frozen=True)
class Raster:
    """Immutable grayscale raster.

    Samples are stored as a read-only numpy array of shape (height, width)
    whose dtype matches ``domain``. The constructor copies its input, so
    later changes to the caller's array never reach the raster.

    Attributes:
        samples: Read-only sample buffer, shape (height, width).
        domain: Sample domain tag, fixed for the raster's lifetime.
    """

    samples: np.ndarray
    domain: SampleDomain

    def __post_init__(self) -> None:
        samples = np.asarray(self.samples)

        if samples.ndim != 2:
            raise InvalidImageType(
                f"Raster samples must be 2-D (height, width), got shape {samples.shape}"
            )
        if samples.shape[0] <= 0 or samples.shape[1] <= 0:
            raise ValueError(f"Raster dimensions must be positive, got {samples.shape}")
        if samples.dtype != self.domain.dtype:
            raise InvalidImageType(
                f"Samples of dtype {samples.dtype} do not match domain {self.domain.value}"
            )

        frozen = np.array(samples, copy=True, order="C")
        frozen.setflags(write=False)
        object.__setattr__(self, "samples", frozen)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Raster":
        """Build a raster, inferring the domain from the array dtype."""
        array = np.asarray(array)
        return cls(array, SampleDomain.from_dtype(array.dtype))

    @classmethod
    def zeros(cls, width: int, height: int, domain: SampleDomain) -> "Raster":
        return cls(np.zeros((height, width), dtype=domain.dtype), domain)

    @property
    def width(self) -> int:
        return int(self.samples.shape[1])

    @property
    def height(self) -> int:
        return int(self.samples.shape[0])

    def get(self, x: int, y: int) -> Union[int, float]:
        """Sample at column ``x``, row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} raster")
        return self.samples[y, x].item()

    def to_array(self) -> np.ndarray:
        """Writable copy of the samples, for handing to external libraries."""
        return self.samples.copy()

    def new_buffer(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> np.ndarray:
        """Allocate a zeroed, writable buffer in this raster's domain.

        Same shape by default; pass ``width`` and ``height`` for a new size.
        """
        width = self.width if width is None else width
        height = self.height if height is None else height
        if width <= 0 or height <= 0:
            raise ValueError(f"Buffer dimensions must be positive, got {width}x{height}")
        return np.zeros((height, width), dtype=self.domain.dtype)

    def derive(self, samples: np.ndarray) -> "Raster":
        """Wrap ``samples`` as a new raster in the same domain."""
        return Raster(samples, self.domain)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return self.domain is other.domain and np.array_equal(self.samples, other.samples)

    def __hash__(self) -> int:
        return hash((self.domain, self.samples.shape, self.samples.tobytes()))

    def __repr__(self) -> str:
        return f"Raster({self.width}x{self.height}, {self.domain.value})"
