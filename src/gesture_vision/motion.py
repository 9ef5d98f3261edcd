"""Lateral swipe detection over a short window of wrist positions.

A swipe only makes sense as motion of an open, flat hand, so the window is
fed while the static pose is an open palm and emptied as soon as it is not.

Usage:
    window = MotionWindow()
    # In frame loop, after static classification:
    event = window.observe(landmarks, static.label, now)
    if event:
        print(f"Swipe: {event.label.value} ({event.confidence:.2f})")
"""

from __future__ import annotations

from collections import deque
from typing import Iterable, Optional

import numpy as np

from gesture_vision.config import EngineConfig
from gesture_vision.landmarks import WRIST, GestureEvent, GestureLabel, MotionSample


def _to_ms(seconds: float) -> int:
    # Window and cooldown bounds are inclusive; compare whole milliseconds.
    return round(seconds * 1000)


class MotionWindow:
    """Time-bounded buffer of wrist x positions with swipe debouncing.

    Owns two pieces of state: the sample buffer, cleared on every pose change,
    and the time of the last emitted swipe, cleared only by `reset()`.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._samples: deque[MotionSample] = deque()
        self._last_emitted_at: Optional[float] = None

    def observe(
        self,
        landmarks: Optional[np.ndarray],
        static_label: GestureLabel,
        now: float,
    ) -> Optional[GestureEvent]:
        """Feed one frame. Returns a swipe event or None."""
        if static_label is not GestureLabel.OPEN_PALM:
            self.clear()
            return None

        if landmarks is None or len(landmarks) <= WRIST:
            return None

        # Prune old samples
        window = _to_ms(self.config.wave_window)
        while self._samples and _to_ms(now) - _to_ms(self._samples[0].captured_at) > window:
            self._samples.popleft()

        self._samples.append(MotionSample(wrist_x=float(landmarks[WRIST][0]), captured_at=now))

        if len(self._samples) < self.config.min_motion_samples:
            return None

        delta = self._samples[-1].wrist_x - self._samples[0].wrist_x
        if abs(delta) < self.config.wave_threshold:
            return None

        # Cooldown check
        if (
            self._last_emitted_at is not None
            and _to_ms(now) - _to_ms(self._last_emitted_at) < _to_ms(self.config.wave_cooldown)
        ):
            return None

        self._last_emitted_at = now
        label = GestureLabel.SWIPE_RIGHT if delta > 0 else GestureLabel.SWIPE_LEFT
        confidence = min(1.0, abs(delta) / self.config.wave_full_scale)
        return GestureEvent.create(label, confidence, now)

    def clear(self):
        """Drop buffered samples. The swipe cooldown is kept."""
        self._samples.clear()

    def reset(self):
        """Drop buffered samples and forget the last swipe."""
        self._samples.clear()
        self._last_emitted_at = None

    def restore(self, samples: Iterable[MotionSample], last_emitted_at: Optional[float]):
        self._samples = deque(samples)
        self._last_emitted_at = last_emitted_at

    @property
    def samples(self) -> tuple[MotionSample, ...]:
        return tuple(self._samples)

    @property
    def last_emitted_at(self) -> Optional[float]:
        return self._last_emitted_at

    def __len__(self) -> int:
        return len(self._samples)
