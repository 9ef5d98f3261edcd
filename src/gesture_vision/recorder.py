"""Session recording and replay: capture HandFrames to disk.

Record real sessions for:
- Reproducible testing without a camera
- Replaying the exact same frames through a fresh engine
- Demo recordings that play back deterministically
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Iterator, Optional

from gesture_vision.engine import EngineOutput, GestureEngine
from gesture_vision.landmarks import HandFrame

FORMAT_VERSION = 1


class GestureRecorder:
    """Records detector output frame by frame.

    Usage:
        recorder = GestureRecorder()
        recorder.start()
        # In your frame loop:
        recorder.add_frame(frame)
        # When done:
        recorder.save("session.json")
    """

    def __init__(self):
        self._frames: list[HandFrame] = []
        self._recording = False

    def start(self):
        """Begin a new recording session."""
        self._frames = []
        self._recording = True

    def stop(self) -> int:
        """Stop recording. Returns number of frames captured."""
        self._recording = False
        return len(self._frames)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        """Seconds between the first and last recorded frame."""
        if len(self._frames) < 2:
            return 0.0
        return self._frames[-1].captured_at - self._frames[0].captured_at

    def add_frame(self, frame: HandFrame):
        if not self._recording:
            return
        self._frames.append(frame)

    def save(self, path: str | Path):
        """Save recording to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": FORMAT_VERSION,
            "frame_count": len(self._frames),
            "duration": self.duration,
            "frames": [f.to_dict() for f in self._frames],
        }

        with open(path, "w") as f:
            json.dump(data, f)


class GesturePlayer:
    """Replays a recorded session.

    Usage:
        player = GesturePlayer.load("session.json")
        engine.start()
        for output in player.replay(engine):
            if output.emitted:
                print(output.emitted.label.value)
    """

    def __init__(self, frames: list[HandFrame]):
        self._frames = frames

    @classmethod
    def load(cls, path: str | Path) -> GesturePlayer:
        """Load recording from JSON file."""
        with open(path) as f:
            data = json.load(f)

        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported recording version: {version}")

        return cls([HandFrame.from_dict(f) for f in data["frames"]])

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if len(self._frames) < 2:
            return 0.0
        return self._frames[-1].captured_at - self._frames[0].captured_at

    def play(self) -> Iterator[HandFrame]:
        """Iterate through all frames instantly (no timing)."""
        yield from self._frames

    def play_realtime(self, speed: float = 1.0) -> Iterator[HandFrame]:
        """Replay at original timing (or scaled by speed factor).

        Args:
            speed: Playback speed multiplier (2.0 = double speed).
        """
        if not self._frames:
            return

        start = time.monotonic()
        origin = self._frames[0].captured_at

        for frame in self._frames:
            target_time = (frame.captured_at - origin) / speed
            elapsed = time.monotonic() - start
            if target_time > elapsed:
                time.sleep(target_time - elapsed)
            yield frame

    def replay(self, engine: GestureEngine) -> Iterator[EngineOutput]:
        """Feed every frame through an engine, yielding its output."""
        for frame in self.play():
            yield engine.process(frame)

    def get_frame(self, index: int) -> Optional[HandFrame]:
        """Get a specific frame by index."""
        if 0 <= index < len(self._frames):
            return self._frames[index]
        return None
