"""Camera acquisition: OpenCV frames in, HandFrames out."""

from __future__ import annotations

import logging
import time
from typing import Iterator, Optional

from gesture_vision.config import CaptureConfig
from gesture_vision.detector import HandDetector
from gesture_vision.landmarks import HandFrame

try:
    import cv2
except ImportError:
    cv2 = None

logger = logging.getLogger("gesture_vision.capture")


class CaptureError(RuntimeError):
    """The camera could not be opened or stopped delivering frames."""


class CameraSource:
    """Reads camera frames and runs the hand detector on each of them.

    Usage:
        with CameraSource() as source:
            for frame in source.frames():
                engine.process(frame)
    """

    MAX_FAILED_READS = 30
    RETRY_DELAY = 0.01  # seconds

    def __init__(
        self,
        config: Optional[CaptureConfig] = None,
        detector: Optional[HandDetector] = None,
    ):
        if cv2 is None:
            raise ImportError(
                "opencv-python is required for camera capture. Install with: pip install opencv-python"
            )

        self.config = config or CaptureConfig()
        self._detector = detector
        self._capture = None

    def open(self):
        """Open the camera. Raises CaptureError when it is unavailable."""
        capture = cv2.VideoCapture(self.config.camera_index)
        if not capture.isOpened():
            capture.release()
            raise CaptureError(f"Could not open camera {self.config.camera_index}")

        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
        self._capture = capture

        if self._detector is None:
            self._detector = HandDetector(self.config)

        logger.info(f"Camera {self.config.camera_index} opened ({self.config.width}x{self.config.height})")

    def read(self) -> Optional[HandFrame]:
        """Grab one frame. Returns None when the camera produced no image."""
        if self._capture is None:
            raise CaptureError("Camera is not open")

        ret, frame = self._capture.read()
        if not ret:
            return None

        captured_at = time.time()
        frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        return self._detector.detect_frame(frame_rgb, captured_at)

    def frames(self) -> Iterator[HandFrame]:
        """Yield frames until the source is closed.

        Raises CaptureError once the camera fails `MAX_FAILED_READS` reads in a row.
        """
        failed = 0
        while self._capture is not None:
            frame = self.read()
            if frame is None:
                failed += 1
                if failed >= self.MAX_FAILED_READS:
                    raise CaptureError(f"Camera {self.config.camera_index} stopped delivering frames")
                time.sleep(self.RETRY_DELAY)
                continue
            failed = 0
            yield frame

    def close(self):
        if self._capture is not None:
            self._capture.release()
            self._capture = None
        if self._detector is not None:
            self._detector.close()
            self._detector = None
        logger.info("Camera released")

    @property
    def is_open(self) -> bool:
        return self._capture is not None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *args):
        self.close()
