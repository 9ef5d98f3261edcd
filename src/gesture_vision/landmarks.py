"""Hand landmark topology and the value types shared across the engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import numpy as np

# MediaPipe hand landmark indices
WRIST = 0
THUMB_IP, THUMB_TIP = 3, 4
INDEX_PIP, INDEX_TIP = 6, 8
MIDDLE_PIP, MIDDLE_TIP = 10, 12
RING_PIP, RING_TIP = 14, 16
PINKY_PIP, PINKY_TIP = 18, 20

NUM_LANDMARKS = 21
LANDMARK_DIM = 3  # x, y, z

# (tip, pip) pairs for the four non-thumb fingers
FINGER_JOINTS = [
    (INDEX_TIP, INDEX_PIP),
    (MIDDLE_TIP, MIDDLE_PIP),
    (RING_TIP, RING_PIP),
    (PINKY_TIP, PINKY_PIP),
]

RIGHT = "Right"
LEFT = "Left"


@dataclass(frozen=True)
class Landmark:
    """One skeleton point in normalized image space (origin top-left)."""
    x: float
    y: float
    z: float = 0.0


class GestureLabel(Enum):
    OPEN_PALM = "open_palm"
    FIST = "fist"
    POINT = "point"
    SCISSORS = "scissors"
    SWIPE_LEFT = "swipe_left"
    SWIPE_RIGHT = "swipe_right"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def is_motion(self) -> bool:
        return self in (GestureLabel.SWIPE_LEFT, GestureLabel.SWIPE_RIGHT)


_DISPLAY_NAMES = {
    GestureLabel.OPEN_PALM: "Open palm",
    GestureLabel.FIST: "Fist",
    GestureLabel.POINT: "Index point",
    GestureLabel.SCISSORS: "Scissors",
    GestureLabel.SWIPE_LEFT: "Swipe left",
    GestureLabel.SWIPE_RIGHT: "Swipe right",
    GestureLabel.UNKNOWN: "Unknown",
}

SUPPORTED_GESTURES = [label for label in GestureLabel if label is not GestureLabel.UNKNOWN]


@dataclass(frozen=True)
class GestureEvent:
    """A classified gesture. Confidence is rounded to 2 decimals on creation."""
    label: GestureLabel
    confidence: float
    timestamp: float

    @classmethod
    def create(cls, label: GestureLabel, confidence: float, timestamp: float) -> GestureEvent:
        clamped = min(1.0, max(0.0, float(confidence)))
        return cls(label=label, confidence=round(clamped, 2), timestamp=float(timestamp))

    @classmethod
    def unknown(cls, timestamp: float) -> GestureEvent:
        return cls(label=GestureLabel.UNKNOWN, confidence=0.0, timestamp=float(timestamp))

    def to_dict(self) -> dict:
        return {
            "label": self.label.value,
            "display_name": self.label.display_name,
            "confidence": self.confidence,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> GestureEvent:
        return cls(
            label=GestureLabel(data["label"]),
            confidence=float(data["confidence"]),
            timestamp=float(data["timestamp"]),
        )


@dataclass(frozen=True)
class MotionSample:
    """Wrist x position at a point in time."""
    wrist_x: float
    captured_at: float


@dataclass
class HandFrame:
    """One detector result: zero or one hand.

    `landmarks` is an (N, 3) array, or None when no hand was detected.
    """
    landmarks: Optional[np.ndarray]
    handedness: str = RIGHT
    captured_at: float = 0.0

    @property
    def has_hand(self) -> bool:
        return self.landmarks is not None and len(self.landmarks) > 0

    @classmethod
    def empty(cls, captured_at: float) -> HandFrame:
        return cls(landmarks=None, captured_at=captured_at)

    @classmethod
    def from_points(
        cls,
        points: Optional[Sequence],
        handedness: Optional[str] = None,
        captured_at: float = 0.0,
    ) -> HandFrame:
        """Build a frame from Landmark objects or (x, y, z) sequences."""
        if points is None or len(points) == 0:
            landmarks = None
        else:
            landmarks = as_landmark_array(points)
        return cls(
            landmarks=landmarks,
            handedness=handedness or RIGHT,
            captured_at=captured_at,
        )

    def to_dict(self) -> dict:
        return {
            "landmarks": self.landmarks.tolist() if self.has_hand else None,
            "handedness": self.handedness,
            "captured_at": self.captured_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> HandFrame:
        return cls.from_points(
            data.get("landmarks"),
            handedness=data.get("handedness"),
            captured_at=float(data.get("captured_at", 0.0)),
        )


def as_landmark_array(points: Sequence) -> np.ndarray:
    """Convert Landmark objects or coordinate rows into an (N, 3) float array."""
    if isinstance(points, np.ndarray):
        arr = points.astype(np.float64, copy=False)
    else:
        rows = []
        for p in points:
            if isinstance(p, Landmark):
                rows.append((p.x, p.y, p.z))
            else:
                row = tuple(p)
                rows.append(row + (0.0,) * (LANDMARK_DIM - len(row)))
        arr = np.array(rows, dtype=np.float64)
    return arr.reshape(-1, LANDMARK_DIM)
