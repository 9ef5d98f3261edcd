"""Prometheus-compatible metrics for the gesture engine.

Generates the text exposition format directly.

Tracked metrics:
- gesture_vision_gestures_total (counter, by gesture label)
- gesture_vision_frames_total (counter)
- gesture_vision_hands_detected_total (counter)
- gesture_vision_hand_detection_rate (gauge)
- gesture_vision_fps (gauge)
- gesture_vision_frame_latency_seconds (histogram)
- gesture_vision_active_connections (gauge)
"""

from __future__ import annotations

import threading
import time
from collections import Counter


class _Histogram:
    """Histogram with fixed cumulative buckets."""

    def __init__(self, buckets: list[float]):
        self.buckets = sorted(buckets)
        self.bucket_counts = [0] * len(self.buckets)
        self.count = 0
        self.sum = 0.0
        self._lock = threading.Lock()

    def observe(self, value: float):
        with self._lock:
            self.count += 1
            self.sum += value
            for i, b in enumerate(self.buckets):
                if value <= b:
                    self.bucket_counts[i] += 1
                    break

    def render(self, name: str, help_text: str) -> list[str]:
        lines = [
            f"# HELP {name} {help_text}",
            f"# TYPE {name} histogram",
        ]
        with self._lock:
            cumulative = 0
            for b, n in zip(self.buckets, self.bucket_counts):
                cumulative += n
                lines.append(f'{name}_bucket{{le="{b}"}} {cumulative}')
            lines.append(f'{name}_bucket{{le="+Inf"}} {self.count}')
            lines.append(f"{name}_sum {self.sum:.6f}")
            lines.append(f"{name}_count {self.count}")
        return lines


def _metric(lines: list[str], name: str, kind: str, help_text: str, value):
    lines.append(f"# HELP {name} {help_text}")
    lines.append(f"# TYPE {name} {kind}")
    lines.append(f"{name} {value}")
    lines.append("")


class MetricsCollector:
    """Collects engine and server counters for the /metrics endpoint."""

    PREFIX = "gesture_vision"

    def __init__(self):
        self._gesture_counts: Counter = Counter()
        self._frames_total = 0
        self._hands_total = 0
        self._hand_detection_rate = 0.0
        self._fps = 0.0
        self._active_connections = 0
        self._lock = threading.Lock()

        # 1ms to 100ms
        self._latency = _Histogram(
            [0.001, 0.002, 0.005, 0.010, 0.020, 0.033, 0.050, 0.100]
        )
        self._start_time = time.time()

    def record_gesture(self, label: str):
        with self._lock:
            self._gesture_counts[label] += 1

    def record_frame(self, latency_seconds: float, hand_detected: bool, fps: float = 0.0):
        with self._lock:
            self._frames_total += 1
            if hand_detected:
                self._hands_total += 1
            # Exponential moving average
            rate = 1.0 if hand_detected else 0.0
            self._hand_detection_rate = 0.95 * self._hand_detection_rate + 0.05 * rate
            self._fps = fps
        self._latency.observe(latency_seconds)

    def set_connections(self, count: int):
        self._active_connections = count

    def render(self) -> str:
        """Render all metrics in Prometheus text exposition format."""
        p = self.PREFIX
        lines: list[str] = []

        _metric(lines, f"{p}_uptime_seconds", "gauge", "Time since collector start",
                f"{time.time() - self._start_time:.1f}")

        lines.append(f"# HELP {p}_gestures_total Gesture transitions by label")
        lines.append(f"# TYPE {p}_gestures_total counter")
        with self._lock:
            for label, count in sorted(self._gesture_counts.items()):
                lines.append(f'{p}_gestures_total{{gesture="{label}"}} {count}')
            frames_total = self._frames_total
            hands_total = self._hands_total
            detection_rate = self._hand_detection_rate
            fps = self._fps
        lines.append("")

        lines.extend(self._latency.render(
            f"{p}_frame_latency_seconds",
            "Frame processing latency in seconds",
        ))
        lines.append("")

        _metric(lines, f"{p}_frames_total", "counter", "Total frames processed", frames_total)
        _metric(lines, f"{p}_hands_detected_total", "counter", "Frames with a detected hand", hands_total)
        _metric(lines, f"{p}_hand_detection_rate", "gauge",
                "Exponential moving average of hand detection", f"{detection_rate:.4f}")
        _metric(lines, f"{p}_fps", "gauge", "Instantaneous frames per second", fps)
        _metric(lines, f"{p}_active_connections", "gauge", "Current WebSocket connections",
                self._active_connections)

        return "\n".join(lines) + "\n"

    @property
    def gesture_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._gesture_counts)

    @property
    def frames_total(self) -> int:
        return self._frames_total

    @property
    def hands_total(self) -> int:
        return self._hands_total
