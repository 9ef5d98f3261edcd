"""Gesture inference engine: lifecycle, state snapshots and the frame loop entry.

The engine wires a GestureArbiter and a FrameRateMeter together and owns the
session lifecycle. All timing comes from `HandFrame.captured_at`, so feeding
the same frames to a freshly started engine reproduces the same events.

Usage:
    engine = GestureEngine()
    engine.start()
    # For every detector result:
    output = engine.process(frame)
    print(output.gesture.label.value, output.fps)
    engine.stop()

The same transition is available as a pure function over an explicit,
JSON-serializable state:

    state = GestureEngine.zero_state(running=True)
    state, emitted = step(state, frame)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from gesture_vision.arbiter import GestureArbiter
from gesture_vision.classifier import PoseClassifier
from gesture_vision.config import EngineConfig
from gesture_vision.fps import FrameRateMeter
from gesture_vision.landmarks import GestureEvent, HandFrame, MotionSample
from gesture_vision.motion import MotionWindow

logger = logging.getLogger("gesture_vision.engine")


class EngineStatus(Enum):
    IDLE = "idle"
    AWAITING_PERMISSION = "awaiting_permission"
    ERROR = "error"
    RUNNING = "running"


STATUS_MESSAGES = {
    EngineStatus.IDLE: "Press start and allow camera access to see live recognition results.",
    EngineStatus.AWAITING_PERMISSION: "Waiting for camera access...",
    EngineStatus.ERROR: "Cannot access the camera, check the permission settings.",
    EngineStatus.RUNNING: "Recognizing gestures...",
}


@dataclass(frozen=True)
class EngineState:
    """Everything the engine remembers between frames."""
    current: GestureEvent = field(default_factory=lambda: GestureEvent.unknown(0.0))
    history: tuple[GestureEvent, ...] = ()
    motion_samples: tuple[MotionSample, ...] = ()
    last_swipe_at: Optional[float] = None
    last_frame_at: Optional[float] = None
    fps: float = 0.0
    running: bool = False
    status: EngineStatus = EngineStatus.IDLE

    def to_dict(self) -> dict:
        return {
            "current": self.current.to_dict(),
            "history": [e.to_dict() for e in self.history],
            "motion_samples": [[s.wrist_x, s.captured_at] for s in self.motion_samples],
            "last_swipe_at": self.last_swipe_at,
            "last_frame_at": self.last_frame_at,
            "fps": self.fps,
            "running": self.running,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> EngineState:
        return cls(
            current=GestureEvent.from_dict(data["current"]),
            history=tuple(GestureEvent.from_dict(e) for e in data.get("history", [])),
            motion_samples=tuple(
                MotionSample(wrist_x=float(x), captured_at=float(t))
                for x, t in data.get("motion_samples", [])
            ),
            last_swipe_at=data.get("last_swipe_at"),
            last_frame_at=data.get("last_frame_at"),
            fps=float(data.get("fps", 0.0)),
            running=bool(data.get("running", False)),
            status=EngineStatus(data.get("status", EngineStatus.IDLE.value)),
        )


@dataclass(frozen=True)
class EngineOutput:
    """What the presentation layer needs after each frame."""
    gesture: GestureEvent
    history: tuple[GestureEvent, ...]
    fps: float
    running: bool
    status: EngineStatus
    status_message: str
    emitted: Optional[GestureEvent] = None  # history entry added by this frame

    def to_dict(self) -> dict:
        return {
            "gesture": self.gesture.to_dict(),
            "history": [e.to_dict() for e in self.history],
            "fps": self.fps,
            "running": self.running,
            "status": self.status.value,
            "status_message": self.status_message,
            "emitted": self.emitted.to_dict() if self.emitted else None,
        }


class GestureEngine:
    """Frame-driven gesture engine with start/stop session semantics.

    Collaborators are injected; the engine holds no global state. Frames
    delivered while the engine is stopped are ignored.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        classifier: Optional[PoseClassifier] = None,
        motion: Optional[MotionWindow] = None,
    ):
        self.config = config or EngineConfig()
        self.arbiter = GestureArbiter(self.config, classifier=classifier, motion=motion)
        self.fps_meter = FrameRateMeter()

        self._running = False
        self._status = EngineStatus.IDLE
        self._status_message = STATUS_MESSAGES[EngineStatus.IDLE]

    # --- lifecycle ---

    def start(self):
        """(Re)initialize to the zero state and begin accepting frames."""
        self._reset()
        self._running = True
        self._set_status(EngineStatus.RUNNING)
        logger.info("Gesture engine started")

    def stop(self):
        """Stop accepting frames and drop all session state."""
        self._reset()
        was_running = self._running
        self._running = False
        self._set_status(EngineStatus.IDLE)
        if was_running:
            logger.info("Gesture engine stopped")

    def await_permission(self):
        """Mark the session as waiting on the capture layer."""
        self._set_status(EngineStatus.AWAITING_PERMISSION)

    def fail(self, message: Optional[str] = None):
        """Stop and report an acquisition failure."""
        self.stop()
        self._set_status(EngineStatus.ERROR, message)
        logger.error(f"Gesture engine error: {self._status_message}")

    def _reset(self):
        self.arbiter.reset()
        self.fps_meter.reset()

    def _set_status(self, status: EngineStatus, message: Optional[str] = None):
        self._status = status
        self._status_message = message or STATUS_MESSAGES[status]

    # --- frame loop ---

    def process(self, frame: HandFrame) -> EngineOutput:
        """Process one detector result and return the updated output."""
        if not self._running:
            logger.debug("Ignoring frame delivered while the engine is stopped")
            return self.output()

        self.arbiter.process(frame)
        self.fps_meter.tick(frame.captured_at)
        return self.output(emitted=self.arbiter.last_transition)

    def output(self, emitted: Optional[GestureEvent] = None) -> EngineOutput:
        return EngineOutput(
            gesture=self.arbiter.current,
            history=self.arbiter.history,
            fps=self.fps_meter.fps,
            running=self._running,
            status=self._status,
            status_message=self._status_message,
            emitted=emitted,
        )

    # --- state snapshots ---

    def snapshot(self) -> EngineState:
        motion = self.arbiter.motion
        return EngineState(
            current=self.arbiter.current,
            history=self.arbiter.history,
            motion_samples=motion.samples,
            last_swipe_at=motion.last_emitted_at,
            last_frame_at=self.fps_meter.last_call,
            fps=self.fps_meter.fps,
            running=self._running,
            status=self._status,
        )

    @classmethod
    def from_state(cls, state: EngineState, config: Optional[EngineConfig] = None) -> GestureEngine:
        engine = cls(config)
        engine.arbiter.restore(state.current, state.history)
        engine.arbiter.motion.restore(state.motion_samples, state.last_swipe_at)
        engine.fps_meter.restore(state.last_frame_at, state.fps)
        engine._running = state.running
        engine._set_status(state.status)
        return engine

    @staticmethod
    def zero_state(running: bool = False) -> EngineState:
        status = EngineStatus.RUNNING if running else EngineStatus.IDLE
        return EngineState(running=running, status=status)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def status_message(self) -> str:
        return self._status_message

    @property
    def current(self) -> GestureEvent:
        return self.arbiter.current

    @property
    def history(self) -> tuple[GestureEvent, ...]:
        return self.arbiter.history

    @property
    def fps(self) -> float:
        return self.fps_meter.fps


def step(
    state: EngineState,
    frame: HandFrame,
    config: Optional[EngineConfig] = None,
) -> tuple[EngineState, Optional[GestureEvent]]:
    """Pure transition: (state, frame) -> (new state, event added to history)."""
    engine = GestureEngine.from_state(state, config)
    output = engine.process(frame)
    return engine.snapshot(), output.emitted
