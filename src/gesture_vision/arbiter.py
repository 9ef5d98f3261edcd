"""Per-frame arbitration between static and motion gestures."""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable, Optional

from gesture_vision.classifier import PoseClassifier
from gesture_vision.config import EngineConfig
from gesture_vision.landmarks import GestureEvent, GestureLabel, HandFrame
from gesture_vision.motion import MotionWindow

logger = logging.getLogger("gesture_vision.arbiter")


class GestureArbiter:
    """Turns per-frame classifications into a current gesture and a history.

    Each frame runs the pose classifier and then the motion window; a swipe
    wins over the static pose when both are available. The history only
    records label transitions, most recent first, so holding a pose for many
    frames adds a single entry.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        classifier: Optional[PoseClassifier] = None,
        motion: Optional[MotionWindow] = None,
    ):
        self.config = config or EngineConfig()
        self.classifier = classifier or PoseClassifier(self.config)
        self.motion = motion or MotionWindow(self.config)

        self._current = GestureEvent.unknown(0.0)
        self._history: deque[GestureEvent] = deque(maxlen=self.config.history_size)
        self._last_transition: Optional[GestureEvent] = None

    def process(self, frame: HandFrame) -> tuple[GestureEvent, tuple[GestureEvent, ...]]:
        """Process one frame. Returns (current gesture, history snapshot)."""
        now = frame.captured_at
        self._last_transition = None

        if not frame.has_hand:
            self._current = GestureEvent.unknown(now)
            self.motion.clear()
            return self._current, self.history

        static = self.classifier.classify(frame.landmarks, frame.handedness, now)
        swipe = self.motion.observe(frame.landmarks, static.label, now)
        resolved = swipe or static

        if resolved.label is not GestureLabel.UNKNOWN and resolved.label is not self._current.label:
            self._history.appendleft(resolved)
            self._last_transition = resolved
            logger.debug(
                f"Gesture {self._current.label.value} -> {resolved.label.value} "
                f"(confidence: {resolved.confidence:.2f})"
            )

        self._current = resolved
        return self._current, self.history

    def reset(self):
        """Return to the zero state: unknown gesture, empty history and motion window."""
        self._current = GestureEvent.unknown(0.0)
        self._history.clear()
        self._last_transition = None
        self.motion.reset()

    def restore(self, current: GestureEvent, history: Iterable[GestureEvent]):
        self._current = current
        self._history = deque(list(history)[: self.config.history_size], maxlen=self.config.history_size)
        self._last_transition = None

    @property
    def current(self) -> GestureEvent:
        return self._current

    @property
    def history(self) -> tuple[GestureEvent, ...]:
        return tuple(self._history)

    @property
    def last_transition(self) -> Optional[GestureEvent]:
        """The event added to the history by the latest frame, if any."""
        return self._last_transition
