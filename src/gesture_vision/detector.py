"""Hand landmark extraction using MediaPipe."""

from __future__ import annotations

import time
from typing import Optional

import numpy as np

from gesture_vision.config import CaptureConfig
from gesture_vision.landmarks import RIGHT, HandFrame

try:
    import mediapipe as mp
except ImportError:
    mp = None


class HandDetector:
    """Extracts the 21 landmarks of one hand per frame with MediaPipe Hands.

    Each landmark is (x, y, z) normalized to [0, 1] relative to image
    dimensions. Results are wrapped in a HandFrame; a frame without a
    detected hand carries no landmarks.
    """

    def __init__(self, config: Optional[CaptureConfig] = None):
        if mp is None:
            raise ImportError(
                "mediapipe is required. Install with: pip install mediapipe"
            )

        self.config = config or CaptureConfig()
        self._hands = mp.solutions.hands.Hands(
            static_image_mode=False,
            max_num_hands=self.config.max_hands,
            model_complexity=self.config.model_complexity,
            min_detection_confidence=self.config.min_detection_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )

    def detect_frame(self, frame_rgb: np.ndarray, captured_at: Optional[float] = None) -> HandFrame:
        """Detect the first hand in an RGB image.

        Args:
            frame_rgb: RGB image as numpy array (H, W, 3), uint8.
            captured_at: Capture time in seconds, defaults to the wall clock.
        """
        if captured_at is None:
            captured_at = time.time()

        results = self._hands.process(frame_rgb)
        if not results.multi_hand_landmarks:
            return HandFrame.empty(captured_at)

        hand_landmarks = results.multi_hand_landmarks[0]
        landmarks = np.array(
            [[lm.x, lm.y, lm.z] for lm in hand_landmarks.landmark],
            dtype=np.float64,
        )

        handedness = RIGHT
        if results.multi_handedness:
            classification = results.multi_handedness[0].classification
            if classification:
                handedness = classification[0].label

        return HandFrame(landmarks=landmarks, handedness=handedness, captured_at=captured_at)

    def close(self):
        """Release MediaPipe resources."""
        self._hands.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
