"""Shared landmark builders."""

import numpy as np
import pytest

from gesture_vision.landmarks import (
    FINGER_JOINTS,
    RIGHT,
    THUMB_IP,
    THUMB_TIP,
    WRIST,
    HandFrame,
)


def build_hand(
    thumb=False,
    index=False,
    middle=False,
    ring=False,
    pinky=False,
    handedness=RIGHT,
    wrist_x=0.5,
):
    """Build a (21, 3) skeleton with the given fingers extended.

    Extended fingers put the tip 0.1 above the PIP joint, curled ones 0.05
    below it. The thumb is moved along x, away from the palm for the given hand.
    """
    lm = np.full((21, 3), 0.5, dtype=np.float64)
    lm[:, 2] = 0.0
    lm[WRIST] = [wrist_x, 0.8, 0.0]

    for extended, (tip, pip) in zip([index, middle, ring, pinky], FINGER_JOINTS):
        lm[pip] = [0.5, 0.5, 0.0]
        lm[tip] = [0.5, 0.4 if extended else 0.55, 0.0]

    lm[THUMB_IP] = [0.5, 0.5, 0.0]
    outward = -1 if handedness == RIGHT else 1
    if thumb:
        lm[THUMB_TIP] = [0.5 + outward * 0.1, 0.5, 0.0]
    else:
        lm[THUMB_TIP] = [0.5 - outward * 0.05, 0.5, 0.0]
    return lm


def open_palm_frame(wrist_x, captured_at, handedness=RIGHT):
    lm = build_hand(True, True, True, True, True, handedness=handedness, wrist_x=wrist_x)
    return HandFrame(landmarks=lm, handedness=handedness, captured_at=captured_at)


@pytest.fixture
def make_hand():
    return build_hand


@pytest.fixture
def make_open_palm_frame():
    return open_palm_frame
