"""
Finger-on-lens detector.

When a finger covers the camera with the flash on, the centre of the frame
becomes:
  - Dominated by reddish tones (light through blood-filled tissue).
  - Darker than a normal scene.
  - Low in spatial variance (uniform colour, no edges).

The host uses this to restart the session when the finger is lifted, so
stale samples from an uncovered lens never reach the estimator.
"""

from __future__ import annotations

import numpy as np

from ppg_heart_rate.config import ROI_FRACTION
from ppg_heart_rate.frame_sampler import roi_pixels
from ppg_heart_rate.models import PixelBuffer


class FingerDetector:
    """
    Heuristic detector: is the camera lens covered by a finger?

    Parameters
    ----------
    brightness_threshold:
        Maximum allowed *mean* brightness (0 – 255) of the region of interest.
        Default: 100.
    variance_threshold:
        Maximum allowed *spatial variance* of the green channel.
        Default: 800.
    red_dominance:
        Minimum ratio ``mean_red / mean_green``.  Default: 1.05.
    fraction:
        Size of the centred region that is inspected.
    """

    def __init__(
        self,
        brightness_threshold: float = 100.0,
        variance_threshold: float = 800.0,
        red_dominance: float = 1.05,
        fraction: float = ROI_FRACTION,
    ) -> None:
        self.brightness_threshold = brightness_threshold
        self.variance_threshold = variance_threshold
        self.red_dominance = red_dominance
        self.fraction = fraction

    def is_finger(self, frame: PixelBuffer) -> bool:
        """
        Return *True* if the centre of *frame* looks like a covered lens.

        Raises
        ------
        InvalidFrame
            If the frame is empty or truncated.
        """
        pixels = roi_pixels(frame, self.fraction).astype(np.float64)
        red, green, _ = pixels.mean(axis=0)
        checks = (
            pixels.mean() < self.brightness_threshold,
            pixels[:, 1].var() < self.variance_threshold,
            red > 0.0 and red >= self.red_dominance * green,
        )
        return bool(all(checks))
