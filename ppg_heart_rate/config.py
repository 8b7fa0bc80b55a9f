"""
Tuning constants for the PPG heart-rate pipeline.

The module-level constants are the reference values; ``PPGConfig`` bundles
them so a processor can be built with a different window or band without
touching the algorithm code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

# Frame sampler
ROI_FRACTION = 0.3             # centre region, fraction of width and height

# Sample buffer
WINDOW_SECONDS = 5.0
NOMINAL_SAMPLE_RATE = 30.0     # Hz, only used to size the buffer
MIN_SAMPLES = 90               # ~3 s at 30 Hz

# Filter stage
HIGH_PASS_CUTOFF_HZ = 0.5      # baseline drift
LOW_PASS_CUTOFF_HZ = 4.0       # sensor / quantisation noise
SMOOTHING_WINDOW = 3

# Peak detector
PEAK_THRESHOLD_K = 0.5         # threshold = mean + k * std
MIN_PEAK_INTERVAL_S = 0.4      # 150 BPM ceiling on adjacent peaks

# Estimator
MIN_HEART_RATE = 50
MAX_HEART_RATE = 180
NORMAL_RANGE: Tuple[float, float] = (60.0, 100.0)
NORMAL_RANGE_BOOST = 1.1
STRENGTH_SCALE = 10.0
NOISE_SCALE = 20.0

# Quality breakpoints on strength * (1 - noise)
EXCELLENT_SCORE = 0.8
GOOD_SCORE = 0.6
FAIR_SCORE = 0.4

# Recommendation triggers
LOW_STRENGTH = 0.3
HIGH_NOISE = 0.6


@dataclass(frozen=True)
class PPGConfig:
    """
    Immutable parameter set for :class:`~ppg_heart_rate.PPGProcessor`.

    Every field defaults to the module constant of the same (upper-case)
    name.  Invalid combinations raise ``ValueError`` on construction.
    """

    roi_fraction:        float = ROI_FRACTION
    window_seconds:      float = WINDOW_SECONDS
    nominal_sample_rate: float = NOMINAL_SAMPLE_RATE
    min_samples:         int   = MIN_SAMPLES
    high_pass_cutoff_hz: float = HIGH_PASS_CUTOFF_HZ
    low_pass_cutoff_hz:  float = LOW_PASS_CUTOFF_HZ
    smoothing_window:    int   = SMOOTHING_WINDOW
    peak_threshold_k:    float = PEAK_THRESHOLD_K
    min_peak_interval_s: float = MIN_PEAK_INTERVAL_S
    min_heart_rate:      float = MIN_HEART_RATE
    max_heart_rate:      float = MAX_HEART_RATE

    def __post_init__(self) -> None:
        if not 0.0 < self.roi_fraction <= 1.0:
            raise ValueError(f"roi_fraction must be in (0, 1], got {self.roi_fraction}")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if self.nominal_sample_rate <= 0:
            raise ValueError("nominal_sample_rate must be positive")
        if self.min_samples < 2:
            raise ValueError("min_samples must be at least 2")
        if not 0.0 < self.high_pass_cutoff_hz < self.low_pass_cutoff_hz:
            raise ValueError(
                "cutoffs must satisfy 0 < high_pass_cutoff_hz < low_pass_cutoff_hz, "
                f"got {self.high_pass_cutoff_hz} / {self.low_pass_cutoff_hz}"
            )
        if self.smoothing_window < 1:
            raise ValueError("smoothing_window must be >= 1")
        if self.min_peak_interval_s <= 0:
            raise ValueError("min_peak_interval_s must be positive")
        if not 0 < self.min_heart_rate < self.max_heart_rate:
            raise ValueError("heart-rate bounds out of order")

    @property
    def window_ms(self) -> float:
        return self.window_seconds * 1000.0

    @property
    def capacity(self) -> int:
        """Expected number of samples in a full window at the nominal rate."""
        return int(self.window_seconds * self.nominal_sample_rate)
