"""GestureVision - Real-time hand gesture recognition from hand landmarks."""

__version__ = "0.1.0"

from gesture_vision.landmarks import (
    GestureEvent,
    GestureLabel,
    HandFrame,
    Landmark,
    MotionSample,
    SUPPORTED_GESTURES,
)
from gesture_vision.config import EngineConfig, CaptureConfig, Settings, load_settings
from gesture_vision.classifier import PoseClassifier
from gesture_vision.motion import MotionWindow
from gesture_vision.arbiter import GestureArbiter
from gesture_vision.fps import FrameRateMeter
from gesture_vision.engine import EngineOutput, EngineState, EngineStatus, GestureEngine, step
from gesture_vision.recorder import GestureRecorder, GesturePlayer
from gesture_vision.metrics import MetricsCollector
