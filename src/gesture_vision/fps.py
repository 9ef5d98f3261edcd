"""Instantaneous frame-rate measurement."""

from __future__ import annotations

from typing import Optional


class FrameRateMeter:
    """Frames per second from the interval between consecutive ticks.

    A non-positive interval (repeated or out-of-order timestamps) keeps the
    previous reading. Diagnostic only; never feeds into classification.
    """

    def __init__(self):
        self._last_call: Optional[float] = None
        self._fps = 0.0

    def tick(self, now: float) -> float:
        """Record a frame at `now` (seconds) and return the current fps."""
        if self._last_call is not None:
            elapsed = now - self._last_call
            if elapsed > 0:
                self._fps = round(1.0 / elapsed, 1)
        self._last_call = now
        return self._fps

    def reset(self):
        self._last_call = None
        self._fps = 0.0

    def restore(self, last_call: Optional[float], fps: float):
        self._last_call = last_call
        self._fps = fps

    @property
    def fps(self) -> float:
        return self._fps

    @property
    def last_call(self) -> Optional[float]:
        return self._last_call
