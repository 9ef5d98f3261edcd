"""Tests for swipe detection over the wrist motion window."""

from gesture_vision.config import EngineConfig
from gesture_vision.landmarks import GestureLabel, MotionSample
from gesture_vision.motion import MotionWindow


def feed(window, make_hand, points, label=GestureLabel.OPEN_PALM):
    """Feed (wrist_x, t) pairs; return the emitted events."""
    events = []
    for x, t in points:
        lm = make_hand(True, True, True, True, True, wrist_x=x)
        event = window.observe(lm, label, t)
        if event:
            events.append((t, event))
    return events


class TestSwipeDetection:
    def test_swipe_right(self, make_hand):
        window = MotionWindow()
        events = feed(window, make_hand, [(0.30, 0.0), (0.34, 0.2), (0.45, 0.4)])
        assert len(events) == 1
        t, event = events[0]
        assert t == 0.4
        assert event.label is GestureLabel.SWIPE_RIGHT
        assert event.confidence == 0.5
        assert event.timestamp == 0.4

    def test_swipe_left(self, make_hand):
        window = MotionWindow()
        events = feed(window, make_hand, [(0.7, 0.0), (0.6, 0.1), (0.4, 0.2)])
        assert len(events) == 1
        assert events[0][1].label is GestureLabel.SWIPE_LEFT
        assert events[0][1].confidence == 1.0

    def test_needs_three_samples(self, make_hand):
        window = MotionWindow()
        events = feed(window, make_hand, [(0.1, 0.0), (0.9, 0.1)])
        assert events == []

    def test_small_travel_ignored(self, make_hand):
        window = MotionWindow()
        events = feed(window, make_hand, [(0.50, 0.0), (0.55, 0.1), (0.60, 0.2)])
        assert events == []

    def test_confidence_capped(self, make_hand):
        window = MotionWindow()
        events = feed(window, make_hand, [(0.0, 0.0), (0.3, 0.1), (0.9, 0.2)])
        assert events[0][1].confidence == 1.0


class TestWindowing:
    def test_old_samples_evicted(self, make_hand):
        window = MotionWindow()
        feed(window, make_hand, [(0.5, 0.0), (0.5, 0.5), (0.5, 1.0)])
        # sample at t=0.0 is older than 0.9s at t=1.0
        assert [s.captured_at for s in window.samples] == [0.5, 1.0]

    def test_sample_exactly_window_old_retained(self, make_hand):
        window = MotionWindow()
        events = feed(window, make_hand, [(0.30, 0.2), (0.34, 0.6), (0.45, 1.1)])
        assert [s.captured_at for s in window.samples] == [0.2, 0.6, 1.1]
        assert len(events) == 1
        assert events[0][1].label is GestureLabel.SWIPE_RIGHT
        assert events[0][1].confidence == 0.5

    def test_sample_just_past_window_evicted(self, make_hand):
        window = MotionWindow()
        feed(window, make_hand, [(0.30, 0.2), (0.34, 0.6), (0.45, 1.101)])
        assert [s.captured_at for s in window.samples] == [0.6, 1.101]

    def test_slow_drift_not_a_swipe(self, make_hand):
        window = MotionWindow()
        # 0.05 per 0.5s never accumulates 0.12 inside a 0.9s window
        points = [(0.3 + 0.05 * i, 0.5 * i) for i in range(10)]
        assert feed(window, make_hand, points) == []

    def test_non_open_palm_clears_buffer(self, make_hand):
        window = MotionWindow()
        feed(window, make_hand, [(0.30, 0.0), (0.34, 0.2)])
        assert len(window) == 2

        assert window.observe(make_hand(), GestureLabel.FIST, 0.3) is None
        assert len(window) == 0

        # motion restarts from scratch
        assert feed(window, make_hand, [(0.45, 0.4)]) == []

    def test_missing_wrist(self):
        window = MotionWindow()
        assert window.observe(None, GestureLabel.OPEN_PALM, 0.0) is None
        assert len(window) == 0


class TestCooldown:
    def test_continuous_motion_fires_once(self, make_hand):
        window = MotionWindow()
        # 0.2 right over 400ms, then the same motion for another 500ms
        points = [(0.3 + 0.025 * k, k * 50 / 1000) for k in range(19)]
        events = feed(window, make_hand, points)
        assert len(events) == 1
        assert events[0][1].label is GestureLabel.SWIPE_RIGHT

    def test_second_swipe_after_cooldown(self, make_hand):
        window = MotionWindow()
        points = [(0.3 + 0.025 * k, k * 50 / 1000) for k in range(25)]
        events = feed(window, make_hand, points)
        assert len(events) == 2
        first, second = events[0][0], events[1][0]
        assert round((second - first) * 1000) == 700

    def test_swipe_exactly_at_cooldown_allowed(self, make_hand):
        window = MotionWindow()
        first = feed(window, make_hand, [(0.30, 1.2), (0.34, 1.4), (0.45, 1.6)])
        assert len(first) == 1
        window.clear()

        second = feed(window, make_hand, [(0.30, 2.0), (0.34, 2.2), (0.45, 2.3)])
        assert len(second) == 1
        assert second[0][0] == 2.3

    def test_swipe_just_inside_cooldown_suppressed(self, make_hand):
        window = MotionWindow()
        feed(window, make_hand, [(0.30, 1.2), (0.34, 1.4), (0.45, 1.6)])
        window.clear()
        assert feed(window, make_hand, [(0.30, 2.0), (0.34, 2.2), (0.45, 2.299)]) == []

    def test_clear_keeps_cooldown(self, make_hand):
        window = MotionWindow()
        feed(window, make_hand, [(0.30, 0.0), (0.34, 0.2), (0.45, 0.4)])
        window.clear()
        assert window.last_emitted_at == 0.4
        events = feed(window, make_hand, [(0.30, 0.5), (0.40, 0.6), (0.50, 0.7)])
        assert events == []

    def test_reset_forgets_cooldown(self, make_hand):
        window = MotionWindow()
        feed(window, make_hand, [(0.30, 0.0), (0.34, 0.2), (0.45, 0.4)])
        window.reset()
        assert window.last_emitted_at is None
        events = feed(window, make_hand, [(0.30, 0.5), (0.40, 0.6), (0.50, 0.7)])
        assert len(events) == 1

    def test_custom_cooldown(self, make_hand):
        window = MotionWindow(EngineConfig(wave_cooldown=0.0))
        points = [(0.3 + 0.05 * k, k * 0.05) for k in range(6)]
        events = feed(window, make_hand, points)
        assert len(events) > 1


class TestRestore:
    def test_restore_state(self):
        window = MotionWindow()
        samples = [MotionSample(0.3, 0.0), MotionSample(0.34, 0.2)]
        window.restore(samples, last_emitted_at=None)
        assert window.samples == tuple(samples)
        assert window.last_emitted_at is None
