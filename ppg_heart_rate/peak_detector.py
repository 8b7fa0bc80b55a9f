"""
Pulse peak detection on the filtered PPG signal.
"""

from __future__ import annotations

import math
from typing import List

import numpy as np

from ppg_heart_rate.config import MIN_PEAK_INTERVAL_S, PEAK_THRESHOLD_K


def dynamic_threshold(signal: np.ndarray, k: float = PEAK_THRESHOLD_K) -> float:
    """``mean + k * std`` of *signal* (population standard deviation)."""
    x = np.asarray(signal, dtype=np.float64)
    if x.size == 0:
        return 0.0
    return float(np.mean(x) + k * np.std(x))


def min_peak_distance(fs: float, min_interval_s: float = MIN_PEAK_INTERVAL_S) -> int:
    """Smallest allowed gap, in samples, between two accepted peaks."""
    # tolerance keeps 0.4 * 30.000000000000004 at 12, not 13
    return max(1, math.ceil(min_interval_s * fs - 1e-9))


def find_peaks(
    signal: np.ndarray,
    fs: float,
    min_interval_s: float = MIN_PEAK_INTERVAL_S,
    threshold_k: float = PEAK_THRESHOLD_K,
) -> List[int]:
    """
    Return the indices of plausible pulse peaks in *signal*, in order.

    A sample is a candidate when it is strictly greater than both neighbours
    and above :func:`dynamic_threshold`.  Candidates are accepted left to
    right; one that falls closer than :func:`min_peak_distance` to the last
    accepted peak is dropped.

    Parameters
    ----------
    signal:
        Filtered PPG waveform.
    fs:
        Effective sample rate in Hz.
    """
    x = np.asarray(signal, dtype=np.float64)
    if x.size < 3:
        return []

    threshold = dynamic_threshold(x, threshold_k)
    centre = x[1:-1]
    is_candidate = (centre > x[:-2]) & (centre > x[2:]) & (centre > threshold)
    candidates = np.flatnonzero(is_candidate) + 1

    distance = min_peak_distance(fs, min_interval_s)
    peaks: List[int] = []
    for idx in candidates:
        if not peaks or idx - peaks[-1] >= distance:
            peaks.append(int(idx))
    return peaks
