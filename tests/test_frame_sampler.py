"""
Unit tests for the frame sampler and pixel buffer view.
Run with:  pytest tests/test_frame_sampler.py
"""

from __future__ import annotations

import numpy as np
import pytest

from ppg_heart_rate.exceptions import InvalidFrame
from ppg_heart_rate.frame_sampler import region_of_interest, roi_pixels, sample_frame
from ppg_heart_rate.models import PixelBuffer


class TestRegionOfInterest:

    def test_centred_thirty_percent(self):
        assert region_of_interest(100, 50) == (35, 17, 30, 15)

    def test_small_frame(self):
        assert region_of_interest(4, 4) == (1, 1, 1, 1)

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (0, 0), (-3, 5)])
    def test_empty_frame_is_invalid(self, width, height):
        with pytest.raises(InvalidFrame):
            region_of_interest(width, height)

    def test_region_rounding_to_zero_is_invalid(self):
        with pytest.raises(InvalidFrame):
            region_of_interest(3, 100)

    def test_roi_pixels_drop_alpha_and_border(self):
        frame = np.full((20, 20, 4), 255, dtype=np.uint8)
        frame[7:13, 7:13] = (200, 90, 30, 0)
        pixels = roi_pixels(PixelBuffer.from_array(frame))
        assert pixels.shape == (36, 3)
        assert np.all(pixels == (200, 90, 30))


class TestSampleFrame:

    def test_averages_only_the_centre(self):
        frame = np.zeros((20, 20, 4), dtype=np.uint8)
        frame[:, :] = (255, 255, 255, 255)           # bright border
        frame[7:13, 7:13] = (200, 90, 30, 255)      # covers the 6x6 ROI
        sample = sample_frame(PixelBuffer.from_array(frame), timestamp=12.5)
        assert sample.timestamp == 12.5
        assert sample.red == pytest.approx(200.0)
        assert sample.green == pytest.approx(90.0)
        assert sample.blue == pytest.approx(30.0)
        assert sample.intensity == pytest.approx((200 + 90 + 30) / 3)

    def test_alpha_is_ignored(self):
        frame = np.full((10, 10, 4), 100, dtype=np.uint8)
        frame[:, :, 3] = 0
        sample = sample_frame(PixelBuffer.from_array(frame), timestamp=0.0)
        assert sample.red == sample.green == sample.blue == pytest.approx(100.0)

    def test_mean_over_mixed_pixels(self):
        frame = np.zeros((10, 10, 4), dtype=np.uint8)
        frame[3:6, 3:6, 1] = np.arange(9, dtype=np.uint8).reshape(3, 3) * 10
        sample = sample_frame(PixelBuffer.from_array(frame), timestamp=0.0)
        assert sample.green == pytest.approx(40.0)

    def test_default_timestamp_is_monotonic(self):
        frame = PixelBuffer.from_array(np.zeros((10, 10, 4), dtype=np.uint8))
        first = sample_frame(frame)
        second = sample_frame(frame)
        assert second.timestamp >= first.timestamp

    def test_raw_bytes_with_row_padding(self):
        width, height, stride = 10, 10, 48          # 8 padding bytes per row
        raw = bytearray([7] * (stride * height))
        for y in range(height):
            for x in range(width):
                off = y * stride + x * 4
                raw[off:off + 4] = bytes((50, 100, 150, 255))
        frame = PixelBuffer(width=width, height=height, data=bytes(raw), stride=stride)
        sample = sample_frame(frame, timestamp=0.0)
        assert (sample.red, sample.green, sample.blue) == (50.0, 100.0, 150.0)

    def test_zero_width_buffer_is_invalid(self):
        with pytest.raises(InvalidFrame):
            sample_frame(PixelBuffer(width=0, height=480, data=b""))

    def test_zero_height_array_is_invalid(self):
        with pytest.raises(InvalidFrame):
            sample_frame(PixelBuffer.from_array(np.zeros((0, 640, 4), dtype=np.uint8)))

    def test_truncated_buffer_is_invalid(self):
        with pytest.raises(InvalidFrame):
            sample_frame(PixelBuffer(width=10, height=10, data=bytes(100)))

    def test_rgb_array_is_rejected(self):
        with pytest.raises(InvalidFrame):
            PixelBuffer.from_array(np.zeros((10, 10, 3), dtype=np.uint8))
