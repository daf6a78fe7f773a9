"""Shared fixtures for the ardetect test suite."""
import math

import pytest

from ardetect.config import PipelineConfig
from ardetect.core.orientation import STANDARD_GRAVITY
from ardetect.core.types import Detection, Frame

FRAME_W = 1000
FRAME_H = 1000
MAGNETIC_FIELD = (0.0, 20.0, -40.0)


def gravity_for_pitch(pitch_deg):
    """Accelerometer vector of a device held at `pitch_deg` with no roll."""
    p = math.radians(pitch_deg)
    return (0.0, -math.sin(p) * STANDARD_GRAVITY, math.cos(p) * STANDARD_GRAVITY)


@pytest.fixture
def config():
    return PipelineConfig(target_angle_deg=-45.0, angle_tolerance_deg=20.0)


@pytest.fixture
def centered_detection():
    """A 'car' box fully inside the default zone of a 1000x1000 frame."""
    return Detection(label="car", confidence=0.9, bbox=(400.0, 400.0, 600.0, 600.0))


@pytest.fixture
def make_frame():
    def _make(timestamp_ms=0, depth_lookup=None, width=FRAME_W, height=FRAME_H):
        return Frame(image=object(), width=width, height=height,
                     timestamp_ms=timestamp_ms, depth_lookup=depth_lookup)
    return _make
