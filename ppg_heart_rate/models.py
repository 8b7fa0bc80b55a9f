"""
Value types passed between the pipeline stages and returned to the host.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import numpy as np

from ppg_heart_rate.exceptions import InvalidFrame

BYTES_PER_PIXEL = 4   # RGBA

BufferLike = Union[bytes, bytearray, memoryview, np.ndarray]


# ---------------------------------------------------------------------------
# Input: raw camera pixels
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PixelBuffer:
    """
    Read-only view over decoded, row-major RGBA pixels.

    Equivalent to a canvas ``ImageData``; it does not care whether the bytes
    came from a browser, a native camera API or a test fixture.

    Parameters
    ----------
    width, height:
        Frame size in pixels.
    data:
        Raw bytes, 4 per pixel in R, G, B, A order.
    stride:
        Bytes per row.  Defaults to ``width * 4`` (tightly packed rows).
    """

    width:  int
    height: int
    data:   BufferLike
    stride: Optional[int] = None

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> "PixelBuffer":
        """Wrap an ``H × W × 4`` uint8 array."""
        if rgba.ndim != 3 or rgba.shape[2] != BYTES_PER_PIXEL:
            raise InvalidFrame(
                f"expected an H x W x 4 array, got shape {rgba.shape}",
                details={"shape": tuple(rgba.shape)},
            )
        height, width = rgba.shape[:2]
        flat = np.ascontiguousarray(rgba, dtype=np.uint8).reshape(-1)
        return cls(width=int(width), height=int(height), data=flat)

    @property
    def row_stride(self) -> int:
        return self.stride if self.stride is not None else self.width * BYTES_PER_PIXEL

    def as_array(self) -> np.ndarray:
        """
        Return an ``H × W × 4`` uint8 view of the pixels (no copy).

        Raises
        ------
        InvalidFrame
            If the geometry is empty or the buffer is shorter than declared.
        """
        if self.width <= 0 or self.height <= 0:
            raise InvalidFrame(
                f"frame has no pixels ({self.width}x{self.height})",
                details={"width": self.width, "height": self.height},
            )
        stride = self.row_stride
        if stride < self.width * BYTES_PER_PIXEL:
            raise InvalidFrame(
                f"row stride {stride} is smaller than one row of pixels",
                details={"stride": stride, "width": self.width},
            )
        flat = np.frombuffer(self.data, dtype=np.uint8)
        needed = stride * (self.height - 1) + self.width * BYTES_PER_PIXEL
        if flat.size < needed:
            raise InvalidFrame(
                f"buffer holds {flat.size} bytes, {needed} required",
                details={"size": int(flat.size), "required": needed},
            )
        return np.lib.stride_tricks.as_strided(
            flat,
            shape=(self.height, self.width, BYTES_PER_PIXEL),
            strides=(stride, BYTES_PER_PIXEL, 1),
            writeable=False,
        )


# ---------------------------------------------------------------------------
# Buffered observation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Sample:
    """Mean colour of the region of interest at one instant."""

    timestamp: float     # monotonic, milliseconds
    red:       float
    green:     float
    blue:      float

    @property
    def intensity(self) -> float:
        return (self.red + self.green + self.blue) / 3.0


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

class SignalQuality(Enum):
    POOR      = "POOR"
    FAIR      = "FAIR"
    GOOD      = "GOOD"
    EXCELLENT = "EXCELLENT"


@dataclass
class HeartRateResult:
    """
    Outcome of one scoring pass.

    ``heart_rate`` is ``None`` whenever no trustworthy number is available;
    ``confidence`` is then always 0.
    """

    heart_rate:      Optional[int]
    confidence:      float
    quality:         SignalQuality
    signal_strength: float
    noise_level:     float
    recommendations: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.heart_rate is not None

    @classmethod
    def insufficient_data(cls) -> "HeartRateResult":
        return cls(
            heart_rate=None,
            confidence=0.0,
            quality=SignalQuality.POOR,
            signal_strength=0.0,
            noise_level=1.0,
            recommendations=["Need at least 3 seconds of stable finger placement"],
        )

    @classmethod
    def processing_error(cls) -> "HeartRateResult":
        return cls(
            heart_rate=None,
            confidence=0.0,
            quality=SignalQuality.POOR,
            signal_strength=0.0,
            noise_level=1.0,
            recommendations=["Signal processing error - please try again"],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialisable form for crossing a process or network boundary."""
        return {
            "heart_rate": self.heart_rate,
            "confidence": float(self.confidence),
            "quality": self.quality.value,
            "signal_strength": float(self.signal_strength),
            "noise_level": float(self.noise_level),
            "recommendations": list(self.recommendations),
        }
