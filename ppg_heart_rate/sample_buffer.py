"""
Time-windowed sample buffer.

Samples are kept in timestamp order; every append drops from the left the
samples that fell out of the window relative to the new sample's timestamp.
Readers age the buffer against the clock with :meth:`SampleBuffer.evict_older_than`
so a stalled camera cannot keep old signal alive.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Deque, Iterator

import numpy as np

from ppg_heart_rate.config import WINDOW_SECONDS
from ppg_heart_rate.models import Sample

_CHANNELS = ("red", "green", "blue", "intensity")


class SampleBuffer:
    """
    Rolling window of :class:`~ppg_heart_rate.models.Sample` objects.

    Parameters
    ----------
    window_ms:
        Samples older than ``newest.timestamp - window_ms`` are evicted.
    """

    def __init__(self, window_ms: float = WINDOW_SECONDS * 1000.0) -> None:
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        self.window_ms = float(window_ms)
        self._samples: Deque[Sample] = deque()

    def add(self, sample: Sample) -> None:
        """
        Append *sample* and evict everything outside the window.

        Raises
        ------
        ValueError
            If the timestamp is not finite or is older than the newest
            buffered sample.
        """
        if not math.isfinite(sample.timestamp):
            raise ValueError(f"sample timestamp {sample.timestamp!r} is not finite")
        if self._samples and sample.timestamp < self._samples[-1].timestamp:
            raise ValueError(
                f"sample at {sample.timestamp:.3f} ms is older than the newest "
                f"buffered sample at {self._samples[-1].timestamp:.3f} ms"
            )
        self._samples.append(sample)
        self.evict_older_than(sample.timestamp)

    def evict_older_than(self, now_ms: float) -> int:
        """
        Drop samples with ``timestamp < now_ms - window_ms``.

        Returns the number of samples removed.
        """
        cutoff = now_ms - self.window_ms
        removed = 0
        while self._samples and self._samples[0].timestamp < cutoff:
            self._samples.popleft()
            removed += 1
        return removed

    def count(self) -> int:
        return len(self._samples)

    def clear(self) -> None:
        self._samples.clear()

    @property
    def duration_ms(self) -> float:
        """Time spanned by the buffered samples (0 for fewer than two)."""
        if len(self._samples) < 2:
            return 0.0
        return self._samples[-1].timestamp - self._samples[0].timestamp

    def timestamps(self) -> np.ndarray:
        return np.fromiter((s.timestamp for s in self._samples), dtype=np.float64,
                           count=len(self._samples))

    def channel(self, name: str) -> np.ndarray:
        """Return one colour channel (or ``"intensity"``) as a float array."""
        if name not in _CHANNELS:
            raise ValueError(f"unknown channel {name!r}; expected one of {_CHANNELS}")
        return np.fromiter((getattr(s, name) for s in self._samples), dtype=np.float64,
                           count=len(self._samples))

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)
