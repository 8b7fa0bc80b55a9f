"""
Heart-rate estimation and signal-quality scoring.

Peak spacing is turned into beats per minute with a median over all gaps,
so a single missed or spurious peak does not drag the estimate.  Quality,
confidence and recommendations are derived from the amplitude of the
filtered signal and from how much the filter had to remove.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

import numpy as np

from ppg_heart_rate import config
from ppg_heart_rate.models import HeartRateResult, SignalQuality

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Heart rate
# ---------------------------------------------------------------------------

def bpm_from_peaks(peaks: Sequence[int], fs: float) -> float:
    """
    Median instantaneous BPM over consecutive peak gaps.

    Returns 0.0 with fewer than two peaks.
    """
    if len(peaks) < 2:
        return 0.0
    gaps = np.diff(np.asarray(peaks, dtype=np.float64))
    rates = 60.0 / (gaps / fs)
    return float(np.median(rates))


def is_valid_heart_rate(
    bpm: float,
    low: float = config.MIN_HEART_RATE,
    high: float = config.MAX_HEART_RATE,
) -> bool:
    return math.isfinite(bpm) and low <= bpm <= high


# ---------------------------------------------------------------------------
# Signal metrics
# ---------------------------------------------------------------------------

def signal_strength(filtered: np.ndarray) -> float:
    """Pulsatile amplitude, ``min(1, std / 10)``."""
    x = np.asarray(filtered, dtype=np.float64)
    if x.size == 0:
        return 0.0
    return float(min(1.0, np.std(x) / config.STRENGTH_SCALE))


def noise_level(raw: np.ndarray, filtered: np.ndarray) -> float:
    """How much the filter removed, ``min(1, mean|raw - filtered| / 20)``."""
    r = np.asarray(raw, dtype=np.float64)
    f = np.asarray(filtered, dtype=np.float64)
    if r.size == 0:
        return 1.0
    return float(min(1.0, np.mean(np.abs(r - f)) / config.NOISE_SCALE))


def classify_quality(strength: float, noise: float) -> SignalQuality:
    score = strength * (1.0 - noise)
    if score >= config.EXCELLENT_SCORE:
        return SignalQuality.EXCELLENT
    if score >= config.GOOD_SCORE:
        return SignalQuality.GOOD
    if score >= config.FAIR_SCORE:
        return SignalQuality.FAIR
    return SignalQuality.POOR


def confidence(
    bpm: float,
    strength: float,
    noise: float,
    peak_count: int,
    duration_s: float,
    low: float = config.MIN_HEART_RATE,
    high: float = config.MAX_HEART_RATE,
) -> float:
    """
    Confidence in *bpm*, in [0, 1].

    Starts from the quality score, is scaled down when fewer peaks were found
    than the rate implies over *duration_s*, and gets a small boost inside
    the normal resting range.  Always 0 for an out-of-range rate.
    """
    if not is_valid_heart_rate(bpm, low, high):
        return 0.0

    value = strength * (1.0 - noise)

    expected_peaks = duration_s * (bpm / 60.0)
    value *= min(1.0, peak_count / max(1.0, expected_peaks))

    normal_low, normal_high = config.NORMAL_RANGE
    if normal_low <= bpm <= normal_high:
        value *= config.NORMAL_RANGE_BOOST

    return float(min(1.0, max(0.0, value)))


def recommendations(quality: SignalQuality, strength: float, noise: float) -> List[str]:
    """Actionable hints; the checks are independent and may all fire."""
    hints: List[str] = []

    if quality is SignalQuality.POOR:
        hints.append("Place finger completely over camera and flash")
        hints.append("Hold phone steady and avoid movement")
        hints.append("Ensure adequate lighting")

    if strength < config.LOW_STRENGTH:
        hints.append("Press finger more firmly against camera")

    if noise > config.HIGH_NOISE:
        hints.append("Try to minimize finger movement")
        hints.append("Clean camera lens if needed")

    if quality is SignalQuality.FAIR:
        hints.append("Continue measuring for better accuracy")

    return hints


# ---------------------------------------------------------------------------
# Full scoring pass
# ---------------------------------------------------------------------------

def score(
    raw: np.ndarray,
    filtered: np.ndarray,
    peaks: Sequence[int],
    fs: float,
    duration_s: float,
    low: float = config.MIN_HEART_RATE,
    high: float = config.MAX_HEART_RATE,
) -> HeartRateResult:
    """
    Build a :class:`HeartRateResult` from one window of signal.

    Parameters
    ----------
    raw:
        Detrended green series that entered the filter.
    filtered:
        Output of the filter stage, same length as *raw*.
    peaks:
        Indices from :func:`~ppg_heart_rate.peak_detector.find_peaks`.
    fs:
        Effective sample rate in Hz.
    duration_s:
        Length of the analysed window in seconds.
    """
    strength = signal_strength(filtered)
    noise = noise_level(raw, filtered)
    quality = classify_quality(strength, noise)

    bpm = bpm_from_peaks(peaks, fs)
    valid = is_valid_heart_rate(bpm, low, high)
    conf = confidence(bpm, strength, noise, len(peaks), duration_s, low, high)

    logger.debug(
        "score: fs=%.2f Hz peaks=%d bpm=%.1f strength=%.3f noise=%.3f quality=%s conf=%.2f",
        fs, len(peaks), bpm, strength, noise, quality.value, conf,
    )

    return HeartRateResult(
        heart_rate=int(math.floor(bpm + 0.5)) if valid else None,
        confidence=conf,
        quality=quality,
        signal_strength=strength,
        noise_level=noise,
        recommendations=recommendations(quality, strength, noise),
    )
