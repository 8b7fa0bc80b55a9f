"""
Frame sampler: reduce a full RGBA frame to one aggregate colour sample.

A finger pressed over the lens and flash covers the middle of the image, so
only a centred rectangle spanning ``fraction`` of the width and height is
averaged.
"""

from __future__ import annotations

import time
from typing import Optional, Tuple

import numpy as np

from ppg_heart_rate.config import ROI_FRACTION
from ppg_heart_rate.exceptions import InvalidFrame
from ppg_heart_rate.models import PixelBuffer, Sample


def monotonic_ms() -> float:
    """Current monotonic time in milliseconds (sub-millisecond precision)."""
    return time.perf_counter() * 1000.0


def region_of_interest(
    width: int,
    height: int,
    fraction: float = ROI_FRACTION,
) -> Tuple[int, int, int, int]:
    """
    Return ``(x, y, w, h)`` of the centred region of interest.

    Raises
    ------
    InvalidFrame
        If the frame is empty or the region rounds down to zero pixels.
    """
    if width <= 0 or height <= 0:
        raise InvalidFrame(
            f"frame has no pixels ({width}x{height})",
            details={"width": width, "height": height},
        )
    roi_w = int(np.floor(width * fraction))
    roi_h = int(np.floor(height * fraction))
    if roi_w < 1 or roi_h < 1:
        raise InvalidFrame(
            f"region of interest is empty for a {width}x{height} frame",
            details={"width": width, "height": height, "fraction": fraction},
        )
    x = int(np.floor(width / 2 - roi_w / 2))
    y = int(np.floor(height / 2 - roi_h / 2))
    return x, y, roi_w, roi_h


def roi_pixels(frame: PixelBuffer, fraction: float = ROI_FRACTION) -> np.ndarray:
    """
    Return the RGB pixels of the centred region of *frame* as an ``(h*w, 3)`` array.

    Raises
    ------
    InvalidFrame
        If the frame is empty, truncated, or the region is empty.
    """
    x, y, w, h = region_of_interest(frame.width, frame.height, fraction)
    return frame.as_array()[y:y + h, x:x + w, :3].reshape(-1, 3)


def sample_frame(
    frame: PixelBuffer,
    timestamp: Optional[float] = None,
    fraction: float = ROI_FRACTION,
) -> Sample:
    """
    Average red, green and blue over the centre of *frame*.

    Parameters
    ----------
    frame:
        Decoded RGBA pixels.
    timestamp:
        Capture time in milliseconds; defaults to :func:`monotonic_ms`.
    fraction:
        Side length of the region of interest relative to the frame.
    """
    means = roi_pixels(frame, fraction).mean(axis=0, dtype=np.float64)
    return Sample(
        timestamp=monotonic_ms() if timestamp is None else float(timestamp),
        red=float(means[0]),
        green=float(means[1]),
        blue=float(means[2]),
    )
