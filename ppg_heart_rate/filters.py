"""
Filter stage for the green-channel PPG signal.

Algorithm
---------
1. Remove the DC level (mean) of the finger's colour.
2. First-order high-pass (~0.5 Hz) to strip baseline drift caused by
   changing finger pressure or lighting.
3. First-order low-pass (~4 Hz) to strip sensor / quantisation noise.
4. Short centred moving average, with the window shrinking at the edges.

The recursive filters are run through ``scipy.signal.lfilter`` with an
initial state chosen so that ``y[0] == x[0]``.  The sample rate is always
derived from real timestamps, never assumed.
"""

from __future__ import annotations

import math

import numpy as np
from scipy.signal import lfilter

from ppg_heart_rate.config import HIGH_PASS_CUTOFF_HZ, LOW_PASS_CUTOFF_HZ, SMOOTHING_WINDOW
from ppg_heart_rate.exceptions import ProcessingFault


def _ensure_finite(signal: np.ndarray, stage: str) -> np.ndarray:
    if not np.all(np.isfinite(signal)):
        raise ProcessingFault(f"non-finite value after {stage}", stage=stage)
    return signal


def effective_sample_rate(timestamps_ms: np.ndarray) -> float:
    """
    Return the mean sampling rate in Hz of a run of timestamps (ms).

    Raises
    ------
    ProcessingFault
        With fewer than two timestamps or a span that is not positive.
    """
    ts = np.asarray(timestamps_ms, dtype=np.float64)
    if ts.size < 2:
        raise ProcessingFault("need at least two samples to derive a sample rate",
                              stage="sample_rate")
    span_s = (ts[-1] - ts[0]) / 1000.0
    if not math.isfinite(span_s) or span_s <= 0:
        raise ProcessingFault(f"sample timestamps span {span_s!r} s", stage="sample_rate")
    return (ts.size - 1) / span_s


def detrend(signal: np.ndarray) -> np.ndarray:
    """Subtract the mean."""
    x = np.asarray(signal, dtype=np.float64)
    if x.size == 0:
        return x.copy()
    return _ensure_finite(x - np.mean(x), "detrend")


def high_pass(signal: np.ndarray, cutoff_hz: float, fs: float) -> np.ndarray:
    """
    First-order RC high-pass: ``y[i] = a * (y[i-1] + x[i] - x[i-1])``.

    ``a = (fs / 2pi) / (cutoff + fs / 2pi)``, i.e. ``RC / (RC + dt)``.
    """
    x = np.asarray(signal, dtype=np.float64)
    if x.size == 0:
        return x.copy()
    rc = fs / (2.0 * math.pi)
    alpha = rc / (cutoff_hz + rc)
    y, _ = lfilter([alpha, -alpha], [1.0, -alpha], x, zi=[(1.0 - alpha) * x[0]])
    return _ensure_finite(y, "high_pass")


def low_pass(signal: np.ndarray, cutoff_hz: float, fs: float) -> np.ndarray:
    """
    First-order RC low-pass: ``y[i] = a * x[i] + (1 - a) * y[i-1]``.

    ``a = 2pi * cutoff / (fs + 2pi * cutoff)``.
    """
    x = np.asarray(signal, dtype=np.float64)
    if x.size == 0:
        return x.copy()
    w = 2.0 * math.pi * cutoff_hz
    alpha = w / (fs + w)
    y, _ = lfilter([alpha], [1.0, -(1.0 - alpha)], x, zi=[(1.0 - alpha) * x[0]])
    return _ensure_finite(y, "low_pass")


def moving_average(signal: np.ndarray, window: int = SMOOTHING_WINDOW) -> np.ndarray:
    """
    Centred moving average whose window shrinks at the boundaries.

    Index *i* averages ``signal[i - window // 2 : i + ceil(window / 2)]``
    clipped to the array, so no zero padding leaks into the edges.
    """
    x = np.asarray(signal, dtype=np.float64)
    n = x.size
    if n == 0:
        return x.copy()
    idx = np.arange(n)
    start = np.maximum(0, idx - window // 2)
    end = np.minimum(n, idx + (window + 1) // 2)
    csum = np.concatenate(([0.0], np.cumsum(x)))
    out = (csum[end] - csum[start]) / (end - start)
    return _ensure_finite(out, "moving_average")


def bandpass(
    signal: np.ndarray,
    fs: float,
    high_pass_cutoff_hz: float = HIGH_PASS_CUTOFF_HZ,
    low_pass_cutoff_hz: float = LOW_PASS_CUTOFF_HZ,
    smoothing_window: int = SMOOTHING_WINDOW,
) -> np.ndarray:
    """
    High-pass, low-pass, then smooth *signal*.  Output length equals input length.

    Parameters
    ----------
    signal:
        Detrended green-channel series.
    fs:
        Effective sample rate in Hz.
    """
    if not math.isfinite(fs) or fs <= 0:
        raise ProcessingFault(f"invalid sample rate {fs!r}", stage="bandpass")
    x = _ensure_finite(np.asarray(signal, dtype=np.float64), "input")
    x = high_pass(x, high_pass_cutoff_hz, fs)
    x = low_pass(x, low_pass_cutoff_hz, fs)
    return moving_average(x, smoothing_window)
