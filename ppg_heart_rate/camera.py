"""
Camera source for the host demo.

Wraps OpenCV ``VideoCapture`` and hands out frames as RGBA
:class:`~ppg_heart_rate.models.PixelBuffer` objects, the same shape a
browser canvas would deliver.  The estimator itself never imports this
module.
"""

from __future__ import annotations

import logging
from typing import Generator, Optional, Tuple

import cv2
import numpy as np

from ppg_heart_rate.models import PixelBuffer

logger = logging.getLogger(__name__)


class FingerCamera:
    """
    Thin wrapper around an OpenCV camera.

    Parameters
    ----------
    resolution:
        (width, height) of captured frames.
    fps:
        Target frame rate.  Actual rate may differ; the estimator derives
        the real rate from frame timestamps.
    camera_index:
        OpenCV camera index.
    """

    def __init__(
        self,
        resolution: Tuple[int, int] = (640, 480),
        fps: int = 30,
        camera_index: int = 0,
    ) -> None:
        self.resolution = resolution
        self.fps = fps
        self.camera_index = camera_index

        self._cam: Optional[cv2.VideoCapture] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Initialise and start the camera."""
        cap = cv2.VideoCapture(self.camera_index)
        if not cap.isOpened():
            raise RuntimeError(
                f"Cannot open video capture device index={self.camera_index}"
            )
        w, h = self.resolution
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
        cap.set(cv2.CAP_PROP_FPS, self.fps)
        self._cam = cap
        logger.info(
            "Camera opened – index=%d resolution=%s fps=%d",
            self.camera_index,
            self.resolution,
            self.fps,
        )

    def close(self) -> None:
        """Release the camera."""
        if self._cam is None:
            return
        self._cam.release()
        self._cam = None
        logger.info("Camera closed.")

    # Context-manager support
    def __enter__(self) -> "FingerCamera":
        self.open()
        return self

    def __exit__(self, *_) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Frame acquisition
    # ------------------------------------------------------------------

    def read_frame(self) -> Optional[PixelBuffer]:
        """
        Capture a single frame.

        Returns
        -------
        PixelBuffer
            RGBA pixels, or *None* on failure.
        """
        if self._cam is None:
            raise RuntimeError("Camera is not open.  Call open() first.")

        ok, frame = self._cam.read()
        if not ok or frame is None:
            logger.warning("VideoCapture.read() returned False.")
            return None
        return bgr_to_pixel_buffer(frame)

    def frames(self) -> Generator[PixelBuffer, None, None]:
        """
        Yield frames until the camera is closed or keeps failing.

        Usage::

            with FingerCamera() as cam:
                for frame in cam.frames():
                    processor.push_frame(frame)
        """
        _null_streak = 0
        while self._cam is not None:
            frame = self.read_frame()
            if frame is None:
                _null_streak += 1
                if _null_streak >= 10:
                    logger.error(
                        "Camera returned 10 consecutive empty frames – aborting."
                    )
                    break
                continue
            _null_streak = 0
            yield frame


def bgr_to_pixel_buffer(frame: np.ndarray) -> PixelBuffer:
    """Convert an OpenCV BGR (or BGRA) image into an RGBA pixel buffer."""
    code = cv2.COLOR_BGRA2RGBA if frame.ndim == 3 and frame.shape[2] == 4 else cv2.COLOR_BGR2RGBA
    return PixelBuffer.from_array(cv2.cvtColor(frame, code))
