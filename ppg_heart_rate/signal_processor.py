"""
PPG heart-rate processor.

Algorithm
---------
1. Average the centre 30 % of each incoming RGBA frame into one colour
   sample (a finger over the lens and flash fills that region).
2. Keep a rolling buffer of the last ``window_seconds`` of samples, evicted
   by timestamp.
3. On demand, derive the real sample rate from the timestamps, remove the
   DC level of the green channel (green shows the strongest PPG modulation
   on phone sensors) and run it through a first-order high-pass (0.5 Hz),
   a first-order low-pass (4 Hz) and a 3-sample moving average.
4. Detect peaks above ``mean + 0.5 * std`` that are at least 0.4 s apart.
5. The median of the instantaneous rates between peaks is the heart rate;
   amplitude and filter residue give quality, confidence and hints.

Estimates are informational only.

References
----------
- Allen J., "Photoplethysmography and its application in clinical
  physiological measurement." Physiol. Meas., 2007.
- Verkruysse W. et al., "Remote plethysmographic imaging using ambient light."
  Opt Express, 2008.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import numpy as np

from ppg_heart_rate import estimator, filters
from ppg_heart_rate.config import PPGConfig
from ppg_heart_rate.exceptions import InsufficientData, ProcessingFault
from ppg_heart_rate.frame_sampler import monotonic_ms, sample_frame
from ppg_heart_rate.models import HeartRateResult, PixelBuffer, Sample
from ppg_heart_rate.peak_detector import find_peaks
from ppg_heart_rate.sample_buffer import SampleBuffer

logger = logging.getLogger(__name__)


class PPGProcessor:
    """
    Rolling PPG heart-rate estimator for one monitoring session.

    Parameters
    ----------
    config:
        Tuning parameters; defaults to :class:`~ppg_heart_rate.config.PPGConfig`.
    clock:
        Zero-argument callable returning the current time in milliseconds,
        on the same time base as the sample timestamps.  Defaults to
        :func:`~ppg_heart_rate.frame_sampler.monotonic_ms`.

    The buffer is the only state.  A single lock guards every method and
    property that touches it, so capture and scoring may run on different
    threads.
    """

    def __init__(
        self,
        config: Optional[PPGConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.config = config if config is not None else PPGConfig()
        self._clock = clock if clock is not None else monotonic_ms
        self._buffer = SampleBuffer(window_ms=self.config.window_ms)
        self._lock = threading.Lock()

        # Last computed result
        self._last_result: Optional[HeartRateResult] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def push_frame(self, frame: PixelBuffer, timestamp: Optional[float] = None) -> Sample:
        """
        Sample the centre of *frame* and append it to the buffer.

        Parameters
        ----------
        frame:
            Decoded RGBA pixels.
        timestamp:
            Capture time in milliseconds; defaults to the processor's clock.

        Raises
        ------
        InvalidFrame
            If the frame is empty or truncated.  Nothing is buffered and the
            caller should skip the frame.
        """
        if timestamp is None:
            timestamp = self._clock()
        sample = sample_frame(frame, timestamp=timestamp, fraction=self.config.roi_fraction)
        self.add_sample(sample)
        return sample

    def add_sample(self, sample: Sample) -> None:
        """Append a pre-computed sample; out-of-order or undated samples are dropped."""
        with self._lock:
            try:
                self._buffer.add(sample)
            except ValueError as exc:
                logger.warning("Dropping sample: %s", exc)

    def estimate(self, now: Optional[float] = None) -> HeartRateResult:
        """
        Age the buffer to *now* and score what is left.

        Parameters
        ----------
        now:
            Current time in milliseconds; defaults to the processor's clock.
            Samples older than ``now - window`` are discarded first, so a
            feed that stopped reports insufficient data again.

        Never raises: with too few samples, or when the signal cannot be
        processed, a result with ``heart_rate=None`` and ``confidence=0`` is
        returned instead.
        """
        with self._lock:
            self._age(now)
            try:
                result = self._score()
            except InsufficientData as exc:
                logger.debug("Estimate skipped: %s", exc)
                result = HeartRateResult.insufficient_data()
            except ProcessingFault as exc:
                logger.warning("PPG processing failed (%s): %s", exc.stage, exc)
                result = HeartRateResult.processing_error()
            self._last_result = result
            return result

    def clear(self) -> None:
        """Discard every buffered sample and the last result."""
        with self._lock:
            self._buffer.clear()
            self._last_result = None

    reset = clear

    @property
    def sample_count(self) -> int:
        with self._lock:
            return self._buffer.count()

    @property
    def buffer_fill_ratio(self) -> float:
        """How full the window is relative to its nominal capacity (0 – 1)."""
        with self._lock:
            return min(1.0, self._buffer.count() / max(1, self.config.capacity))

    @property
    def last_result(self) -> Optional[HeartRateResult]:
        with self._lock:
            return self._last_result

    def get_filtered_signal(self, now: Optional[float] = None) -> np.ndarray:
        """
        Return the current filtered PPG waveform (for plotting).
        Returns an empty array if there is insufficient data or it cannot be
        filtered.
        """
        with self._lock:
            self._age(now)
            if self._buffer.count() < self.config.min_samples:
                return np.array([])
            try:
                _, filtered, _ = self._filter()
            except ProcessingFault as exc:
                logger.warning("Could not filter signal: %s", exc)
                return np.array([])
            return filtered

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _age(self, now: Optional[float]) -> None:
        """Evict samples that fell out of the window by *now*.  Caller holds the lock."""
        now_ms = self._clock() if now is None else now
        removed = self._buffer.evict_older_than(now_ms)
        if removed:
            logger.debug("Aged out %d stale samples", removed)

    def _filter(self):
        """Return ``(detrended_green, filtered, fs)`` for the buffer."""
        fs = filters.effective_sample_rate(self._buffer.timestamps())
        raw = filters.detrend(self._buffer.channel("green"))
        filtered = filters.bandpass(
            raw,
            fs,
            high_pass_cutoff_hz=self.config.high_pass_cutoff_hz,
            low_pass_cutoff_hz=self.config.low_pass_cutoff_hz,
            smoothing_window=self.config.smoothing_window,
        )
        return raw, filtered, fs

    def _score(self) -> HeartRateResult:
        count = self._buffer.count()
        if count < self.config.min_samples:
            raise InsufficientData(count, self.config.min_samples)

        raw, filtered, fs = self._filter()
        peaks = find_peaks(
            filtered,
            fs,
            min_interval_s=self.config.min_peak_interval_s,
            threshold_k=self.config.peak_threshold_k,
        )
        return estimator.score(
            raw,
            filtered,
            peaks,
            fs,
            duration_s=count / fs,
            low=self.config.min_heart_rate,
            high=self.config.max_heart_rate,
        )
