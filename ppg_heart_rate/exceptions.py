"""
Exception hierarchy for the PPG pipeline.

``InvalidFrame`` is the only one that reaches callers: the sampler raises it
and the host drops the frame.  ``InsufficientData`` and ``ProcessingFault``
are raised inside a scoring pass and converted by the processor into a
degraded :class:`~ppg_heart_rate.models.HeartRateResult`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class PPGError(Exception):
    """Base exception for all PPG pipeline errors."""

    def __init__(
        self,
        message: str,
        code: str = "PPG_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidFrame(PPGError, ValueError):
    """Pixel buffer is empty, truncated or yields no region of interest."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="INVALID_FRAME", details=details)


class InsufficientData(PPGError):
    """Too few buffered samples to attempt an estimate."""

    def __init__(self, available: int, required: int) -> None:
        super().__init__(
            f"{available} samples buffered, {required} required",
            code="INSUFFICIENT_DATA",
            details={"available": available, "required": required},
        )
        self.available = available
        self.required = required


class ProcessingFault(PPGError, ArithmeticError):
    """A filtering or scoring step produced a non-finite or unusable value."""

    def __init__(self, message: str, stage: str = "unknown") -> None:
        super().__init__(message, code="PROCESSING_FAULT", details={"stage": stage})
        self.stage = stage
