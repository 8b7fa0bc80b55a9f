"""
PPG Heart Rate — camera-based pulse estimation.
Place a finger over the camera lens and flash; the estimator averages the
centre of each frame, filters the green-channel photoplethysmography (PPG)
signal and converts the spacing of its peaks into beats per minute.

The estimate is informational only and must never be the sole basis of a
medical decision.
"""

from ppg_heart_rate.config import PPGConfig
from ppg_heart_rate.exceptions import (
    InsufficientData,
    InvalidFrame,
    PPGError,
    ProcessingFault,
)
from ppg_heart_rate.models import HeartRateResult, PixelBuffer, Sample, SignalQuality
from ppg_heart_rate.signal_processor import PPGProcessor

__version__ = "0.1.0"
__author__ = "ppg_heart_rate"

__all__ = [
    "HeartRateResult",
    "InsufficientData",
    "InvalidFrame",
    "PixelBuffer",
    "PPGConfig",
    "PPGError",
    "PPGProcessor",
    "ProcessingFault",
    "Sample",
    "SignalQuality",
]
