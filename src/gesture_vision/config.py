"""Engine and capture configuration.

Every tuning constant of the engine is a named field with the default the
engine was calibrated with. Settings can be loaded from a YAML file:

    engine:
      wave_threshold: 0.15
    capture:
      camera_index: 1
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

import yaml

logger = logging.getLogger("gesture_vision.config")


@dataclass(frozen=True)
class EngineConfig:
    extension_margin: float = 0.02  # normalized units, absorbs detector jitter
    wave_window: float = 0.9  # seconds of wrist history kept
    wave_threshold: float = 0.12  # minimum lateral travel in normalized x
    wave_cooldown: float = 0.7  # seconds between two swipe emissions
    wave_full_scale: float = 0.3  # travel that maps to confidence 1.0
    min_motion_samples: int = 3
    history_size: int = 6
    min_landmarks: int = 21
    point_confidence: float = 0.7
    scissors_confidence: float = 0.8

    def __post_init__(self):
        if self.extension_margin < 0:
            raise ValueError("extension_margin must be >= 0")
        if self.wave_window <= 0:
            raise ValueError("wave_window must be > 0")
        if self.wave_threshold < 0:
            raise ValueError("wave_threshold must be >= 0")
        if self.wave_cooldown < 0:
            raise ValueError("wave_cooldown must be >= 0")
        if self.wave_full_scale <= 0:
            raise ValueError("wave_full_scale must be > 0")
        if self.min_motion_samples < 2:
            raise ValueError("min_motion_samples must be >= 2")
        if self.history_size < 1:
            raise ValueError("history_size must be >= 1")
        if self.min_landmarks < 21:
            # the classifier reads joints up to index 20
            raise ValueError("min_landmarks must be >= 21")
        for name in ("point_confidence", "scissors_confidence"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ValueError(f"{name} must be within [0, 1]")


@dataclass(frozen=True)
class CaptureConfig:
    camera_index: int = 0
    width: int = 640
    height: int = 480
    max_hands: int = 1
    model_complexity: int = 1
    min_detection_confidence: float = 0.7
    min_tracking_confidence: float = 0.4

    def __post_init__(self):
        if self.camera_index < 0:
            raise ValueError("camera_index must be >= 0")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be > 0")
        if self.max_hands < 1:
            raise ValueError("max_hands must be >= 1")
        for name in ("min_detection_confidence", "min_tracking_confidence"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ValueError(f"{name} must be within [0, 1]")


@dataclass(frozen=True)
class Settings:
    engine: EngineConfig = field(default_factory=EngineConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)

    def to_dict(self) -> dict:
        return {"engine": asdict(self.engine), "capture": asdict(self.capture)}

    @classmethod
    def from_dict(cls, data: dict) -> Settings:
        return cls(
            engine=_build(EngineConfig, data.get("engine") or {}, "engine"),
            capture=_build(CaptureConfig, data.get("capture") or {}, "capture"),
        )


def _build(config_cls, data: dict, section: str):
    known = {f.name for f in fields(config_cls)}
    for key in data:
        if key not in known:
            logger.warning(f"Ignoring unknown {section} setting: {key}")
    try:
        return config_cls(**{k: v for k, v in data.items() if k in known})
    except TypeError as e:
        raise ValueError(f"Invalid {section} settings: {e}") from e


def load_settings(path: str | Path) -> Settings:
    """Load settings from a YAML file."""
    path = Path(path)
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")

    settings = Settings.from_dict(data)
    logger.info(f"Loaded settings from {path}")
    return settings


def save_settings(settings: Settings, path: str | Path):
    """Write settings to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(settings.to_dict(), f, sort_keys=False)
