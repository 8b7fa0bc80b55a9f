"""
Unit tests for heart-rate estimation and quality scoring.
Run with:  pytest tests/test_estimator.py
"""

from __future__ import annotations

import numpy as np
import pytest

from ppg_heart_rate import estimator
from ppg_heart_rate.models import HeartRateResult, SignalQuality


class TestHeartRate:

    def test_regular_peaks(self):
        assert estimator.bpm_from_peaks([0, 25, 50, 75], 30.0) == pytest.approx(72.0)

    def test_median_resists_spurious_peak(self):
        # gaps 25, 25, 10, 25 -> one 180 BPM outlier among 72s
        assert estimator.bpm_from_peaks([0, 25, 50, 60, 85], 30.0) == pytest.approx(72.0)

    def test_even_gap_count_averages_middle(self):
        assert estimator.bpm_from_peaks([0, 25, 55], 30.0) == pytest.approx(66.0)

    @pytest.mark.parametrize("peaks", [[], [12]])
    def test_fewer_than_two_peaks(self, peaks):
        assert estimator.bpm_from_peaks(peaks, 30.0) == 0.0

    @pytest.mark.parametrize("bpm,valid", [
        (0.0, False), (49.9, False), (50.0, True), (72.0, True),
        (180.0, True), (180.1, False), (float("nan"), False),
    ])
    def test_validity_band(self, bpm, valid):
        assert estimator.is_valid_heart_rate(bpm) is valid


class TestMetrics:

    def test_signal_strength(self):
        assert estimator.signal_strength(np.zeros(50)) == 0.0
        assert estimator.signal_strength(np.array([-5.0, 5.0])) == pytest.approx(0.5)
        assert estimator.signal_strength(np.array([-50.0, 50.0])) == 1.0

    def test_noise_level(self):
        x = np.linspace(0, 1, 10)
        assert estimator.noise_level(x, x) == 0.0
        assert estimator.noise_level(x, x + 5.0) == pytest.approx(0.25)
        assert estimator.noise_level(x, x + 100.0) == 1.0

    @pytest.mark.parametrize("strength,noise,quality", [
        (1.0, 0.1, SignalQuality.EXCELLENT),
        (0.7, 0.0, SignalQuality.GOOD),
        (1.0, 0.5, SignalQuality.FAIR),
        (0.3, 0.0, SignalQuality.POOR),
        (1.0, 1.0, SignalQuality.POOR),
    ])
    def test_quality_breakpoints(self, strength, noise, quality):
        assert estimator.classify_quality(strength, noise) is quality


class TestConfidence:

    def test_invalid_rate_has_zero_confidence(self):
        assert estimator.confidence(0.0, 1.0, 0.0, 6, 5.0) == 0.0
        assert estimator.confidence(200.0, 1.0, 0.0, 6, 5.0) == 0.0

    def test_normal_range_boost(self):
        assert estimator.confidence(72.0, 0.5, 0.0, 6, 5.0) == pytest.approx(0.55)
        assert estimator.confidence(110.0, 0.5, 0.0, 10, 5.0) == pytest.approx(0.5)

    def test_missing_peaks_lower_confidence(self):
        # 120 BPM over 5 s implies 10 peaks; only 5 found
        assert estimator.confidence(120.0, 0.5, 0.0, 5, 5.0) == pytest.approx(0.25)

    def test_clamped_to_one(self):
        assert estimator.confidence(72.0, 1.0, 0.0, 6, 5.0) == 1.0


class TestRecommendations:

    def test_excellent_has_none(self):
        assert estimator.recommendations(SignalQuality.EXCELLENT, 1.0, 0.1) == []

    def test_poor_weak_noisy_lists_everything_in_order(self):
        hints = estimator.recommendations(SignalQuality.POOR, 0.1, 0.9)
        assert hints == [
            "Place finger completely over camera and flash",
            "Hold phone steady and avoid movement",
            "Ensure adequate lighting",
            "Press finger more firmly against camera",
            "Try to minimize finger movement",
            "Clean camera lens if needed",
        ]

    def test_fair_suggests_longer_measurement(self):
        hints = estimator.recommendations(SignalQuality.FAIR, 1.0, 0.5)
        assert hints == ["Continue measuring for better accuracy"]


class TestScore:

    def _pulse(self):
        fs = 30.0
        t = np.arange(150) / fs
        filtered = 15.0 * np.sin(2 * np.pi * 1.2 * t)
        raw = filtered + 0.5
        return raw, filtered, fs

    def test_good_window(self):
        raw, filtered, fs = self._pulse()
        result = estimator.score(raw, filtered, [6, 31, 56, 81, 106, 131], fs, 5.0)
        assert isinstance(result, HeartRateResult)
        assert result.heart_rate == 72
        assert result.quality is SignalQuality.EXCELLENT
        assert result.noise_level == pytest.approx(0.025)
        assert 0.0 < result.confidence <= 1.0
        assert result.recommendations == []

    def test_implausible_rate_is_withheld(self):
        raw, filtered, fs = self._pulse()
        result = estimator.score(raw, filtered, [0, 5, 10, 15], fs, 5.0)   # 360 BPM
        assert result.heart_rate is None
        assert result.confidence == 0.0

    def test_slow_rate_is_withheld(self):
        raw, filtered, fs = self._pulse()
        result = estimator.score(raw, filtered, [0, 40, 80, 120], fs, 5.0)  # 45 BPM
        assert result.heart_rate is None
        assert result.confidence == 0.0

    def test_to_dict_shape(self):
        raw, filtered, fs = self._pulse()
        data = estimator.score(raw, filtered, [6, 31, 56], fs, 5.0).to_dict()
        assert set(data) == {"heart_rate", "confidence", "quality",
                             "signal_strength", "noise_level", "recommendations"}
        assert data["quality"] in {"POOR", "FAIR", "GOOD", "EXCELLENT"}
        assert isinstance(data["recommendations"], list)

    def test_degraded_shapes(self):
        for result in (HeartRateResult.insufficient_data(),
                       HeartRateResult.processing_error()):
            assert result.heart_rate is None
            assert not result.is_valid
            assert result.confidence == 0.0
            assert result.quality is SignalQuality.POOR
            assert len(result.recommendations) == 1
