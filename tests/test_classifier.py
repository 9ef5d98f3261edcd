"""Tests for rule-based static pose classification."""

import itertools

import numpy as np
import pytest

from gesture_vision.classifier import PoseClassifier
from gesture_vision.config import EngineConfig
from gesture_vision.landmarks import LEFT, RIGHT, GestureLabel, Landmark


class TestFingerStates:
    def test_all_extended(self, make_hand):
        classifier = PoseClassifier()
        lm = make_hand(True, True, True, True, True)
        assert classifier.finger_states(lm) == [True] * 5

    def test_margin_absorbs_jitter(self, make_hand):
        classifier = PoseClassifier()
        lm = make_hand()
        lm[8] = [0.5, 0.49, 0.0]  # tip only 0.01 above PIP
        assert classifier.finger_states(lm)[1] is False

    def test_custom_margin(self, make_hand):
        classifier = PoseClassifier(EngineConfig(extension_margin=0.0))
        lm = make_hand()
        lm[8] = [0.5, 0.49, 0.0]
        assert classifier.finger_states(lm)[1] is True

    def test_thumb_direction_depends_on_handedness(self, make_hand):
        classifier = PoseClassifier()
        right = make_hand(thumb=True, handedness=RIGHT)
        assert classifier.finger_states(right, RIGHT)[0] is True
        assert classifier.finger_states(right, LEFT)[0] is False

        left = make_hand(thumb=True, handedness=LEFT)
        assert classifier.finger_states(left, LEFT)[0] is True
        assert classifier.finger_states(left, RIGHT)[0] is False


class TestClassify:
    def test_open_palm(self, make_hand):
        result = PoseClassifier().classify(make_hand(True, True, True, True, True), RIGHT, now=1.0)
        assert result.label is GestureLabel.OPEN_PALM
        assert result.confidence == 1.0
        assert result.timestamp == 1.0

    def test_left_open_palm(self, make_hand):
        lm = make_hand(True, True, True, True, True, handedness=LEFT)
        result = PoseClassifier().classify(lm, LEFT, now=0.0)
        assert result.label is GestureLabel.OPEN_PALM

    def test_point(self, make_hand):
        result = PoseClassifier().classify(make_hand(index=True), now=0.0)
        assert result.label is GestureLabel.POINT
        assert result.confidence == 0.7

    def test_point_with_thumb_out(self, make_hand):
        result = PoseClassifier().classify(make_hand(thumb=True, index=True), now=0.0)
        assert result.label is GestureLabel.POINT

    def test_scissors(self, make_hand):
        result = PoseClassifier().classify(make_hand(index=True, middle=True), now=0.0)
        assert result.label is GestureLabel.SCISSORS
        assert result.confidence == 0.8

    def test_fist_thumb_curled(self, make_hand):
        result = PoseClassifier().classify(make_hand(), now=0.0)
        assert result.label is GestureLabel.FIST
        assert result.confidence == 1.0

    def test_fist_thumb_out(self, make_hand):
        result = PoseClassifier().classify(make_hand(thumb=True), now=0.0)
        assert result.label is GestureLabel.FIST
        assert result.confidence == 0.8

    def test_unmatched_combination_is_unknown(self, make_hand):
        # middle only: no rule covers it
        result = PoseClassifier().classify(make_hand(middle=True), now=0.0)
        assert result.label is GestureLabel.UNKNOWN
        assert result.confidence == 0.0

    def test_four_fingers_without_thumb_is_unknown(self, make_hand):
        result = PoseClassifier().classify(make_hand(False, True, True, True, True), now=0.0)
        assert result.label is GestureLabel.UNKNOWN

    def test_handedness_defaults_to_right(self, make_hand):
        result = PoseClassifier().classify(make_hand(True, True, True, True, True), None, now=0.0)
        assert result.label is GestureLabel.OPEN_PALM

    def test_accepts_landmark_objects(self, make_hand):
        lm = make_hand(index=True)
        points = [Landmark(*row) for row in lm]
        assert PoseClassifier().classify(points, now=0.0).label is GestureLabel.POINT

    def test_uses_wall_clock_by_default(self, make_hand):
        result = PoseClassifier().classify(make_hand())
        assert result.timestamp > 0


class TestIncompleteInput:
    @pytest.mark.parametrize("count", [0, 1, 5, 20])
    def test_too_few_landmarks(self, count):
        lm = np.full((count, 3), 0.5)
        result = PoseClassifier().classify(lm, now=2.0)
        assert result.label is GestureLabel.UNKNOWN
        assert result.confidence == 0.0
        assert result.timestamp == 2.0

    def test_none_landmarks(self):
        assert PoseClassifier().classify(None, now=0.0).label is GestureLabel.UNKNOWN


class TestPriorityOrder:
    @pytest.mark.parametrize("states", list(itertools.product([False, True], repeat=5)))
    def test_every_finger_combination(self, make_hand, states):
        result = PoseClassifier().classify(make_hand(*states), now=0.0)
        thumb, index, middle, ring, pinky = states

        if all(states):
            expected = GestureLabel.OPEN_PALM
        elif not (index or middle or ring or pinky):
            expected = GestureLabel.FIST
        elif index and not (middle or ring or pinky):
            expected = GestureLabel.POINT
        elif index and middle and not (ring or pinky):
            expected = GestureLabel.SCISSORS
        else:
            expected = GestureLabel.UNKNOWN

        assert result.label is expected
        assert 0.0 <= result.confidence <= 1.0
        assert result.confidence == round(result.confidence, 2)
