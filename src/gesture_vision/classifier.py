"""Rule-based static pose classification from joint geometry."""

from __future__ import annotations

import time
from typing import Optional

import numpy as np

from gesture_vision.config import EngineConfig
from gesture_vision.landmarks import (
    FINGER_JOINTS,
    RIGHT,
    THUMB_IP,
    THUMB_TIP,
    GestureEvent,
    GestureLabel,
    as_landmark_array,
)


class PoseClassifier:
    """Maps one hand skeleton to a static gesture.

    A finger counts as extended when its tip sits above its PIP joint by more
    than the extension margin (image y grows downward). The thumb is tested
    along x instead, in opposite directions for the two hands.

    Rules are checked in a fixed priority order and the first match wins:
    open palm, fist, point, scissors. Anything else is unknown. The classifier
    keeps no state between frames.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def finger_states(self, landmarks: np.ndarray, handedness: str = RIGHT) -> list[bool]:
        """Extension flags ordered [thumb, index, middle, ring, pinky]."""
        margin = self.config.extension_margin

        thumb_tip = landmarks[THUMB_TIP]
        thumb_ip = landmarks[THUMB_IP]
        if handedness == RIGHT:
            thumb = thumb_tip[0] < thumb_ip[0] - margin
        else:
            thumb = thumb_tip[0] > thumb_ip[0] + margin

        states = [bool(thumb)]
        for tip, pip in FINGER_JOINTS:
            states.append(bool(landmarks[tip][1] < landmarks[pip][1] - margin))
        return states

    def classify(
        self,
        landmarks,
        handedness: Optional[str] = None,
        now: Optional[float] = None,
    ) -> GestureEvent:
        """Classify a single frame.

        Args:
            landmarks: (N, 3) array or sequence of points. Fewer than
                `min_landmarks` points yields an unknown result.
            handedness: "Left" or "Right"; defaults to "Right".
            now: Evaluation time, defaults to the wall clock.
        """
        if now is None:
            now = time.time()

        if landmarks is None or len(landmarks) < self.config.min_landmarks:
            return GestureEvent.unknown(now)

        landmarks = as_landmark_array(landmarks)
        states = self.finger_states(landmarks, handedness or RIGHT)
        extended_count = sum(states)
        thumb, index, middle, ring, pinky = states

        label = GestureLabel.UNKNOWN
        confidence = 0.0

        if all(states):
            label = GestureLabel.OPEN_PALM
            confidence = min(1.0, extended_count / 5)
        elif not any(states[1:]):
            label = GestureLabel.FIST
            confidence = 1 - extended_count / 5
        elif index and not any(states[2:]):
            label = GestureLabel.POINT
            confidence = self.config.point_confidence
        elif index and middle and not ring and not pinky:
            label = GestureLabel.SCISSORS
            confidence = self.config.scissors_confidence

        return GestureEvent.create(label, confidence, now)
