"""
Orientation estimation from accelerometer + magnetometer.

Fuses the latest reading of each sensor into a rotation matrix and derives
azimuth / pitch / roll. Sensors arrive unsynchronized, so every new reading
of either one triggers a recomputation with the most recent of the other.
"""

import logging
import math
from typing import Optional, Sequence, Tuple

import numpy as np

from .types import OrientationSample

logger = logging.getLogger(__name__)

STANDARD_GRAVITY = 9.80665

# Below 10% of g the device is considered in free fall
_FREE_FALL_GRAVITY_SQUARED = 0.01 * STANDARD_GRAVITY * STANDARD_GRAVITY
_MIN_HORIZONTAL_NORM = 0.1


def rotation_matrix(gravity: Sequence[float], geomagnetic: Sequence[float]) -> Optional[np.ndarray]:
    """
    Rotation matrix from device to world coordinates (East, North, Up rows).

    Args:
        gravity: Accelerometer vector (m/s^2), device frame
        geomagnetic: Magnetometer vector (uT), device frame

    Returns:
        3x3 matrix, or None when gravity is too weak (free fall) or the
        magnetic field is parallel to gravity.
    """
    a = np.asarray(gravity, dtype=np.float64)
    e = np.asarray(geomagnetic, dtype=np.float64)
    if a.shape != (3,) or e.shape != (3,):
        raise ValueError("sensor vectors must have 3 components")

    if float(a @ a) < _FREE_FALL_GRAVITY_SQUARED:
        return None

    h = np.cross(e, a)
    norm_h = float(np.linalg.norm(h))
    if norm_h < _MIN_HORIZONTAL_NORM:
        return None

    h /= norm_h
    a = a / np.linalg.norm(a)
    m = np.cross(a, h)
    return np.vstack((h, m, a))


def orientation_angles(r: np.ndarray) -> Tuple[float, float, float]:
    """(azimuth, pitch, roll) in radians from a rotation matrix."""
    azimuth = math.atan2(r[0, 1], r[1, 1])
    pitch = math.asin(max(-1.0, min(1.0, -r[2, 1])))
    roll = math.atan2(-r[2, 0], r[2, 2])
    return azimuth, pitch, roll


class OrientationEstimator:
    """
    Pitch estimator fed by two independent sensor callbacks.

    Usage:
        estimator = OrientationEstimator()
        sample = estimator.availability_sample(now_ms)  # None if sensors OK
        sample = estimator.on_accelerometer((0.0, 6.9, 6.9), now_ms)
        sample = estimator.on_magnetometer((0.0, 20.0, -40.0), now_ms)
        if sample:
            gate.update(sample)

    A missing sensor is permanent: it is reported once and fusion is never
    attempted afterwards.
    """

    def __init__(self, accelerometer_available: bool = True, magnetometer_available: bool = True):
        self.accelerometer_available = accelerometer_available
        self.magnetometer_available = magnetometer_available
        self._gravity: Optional[np.ndarray] = None
        self._geomagnetic: Optional[np.ndarray] = None
        self._unavailable_reported = False
        self.last_sample: Optional[OrientationSample] = None

        if not self.available:
            missing = [name for name, ok in (
                ("accelerometer", accelerometer_available),
                ("magnetometer", magnetometer_available),
            ) if not ok]
            logger.warning("Orientation sensing unavailable (missing: %s)", ", ".join(missing))

    @property
    def available(self) -> bool:
        return self.accelerometer_available and self.magnetometer_available

    def availability_sample(self, timestamp_ms: int) -> Optional[OrientationSample]:
        """Emit the 'source unavailable' signal, once, if a sensor is missing."""
        if self.available or self._unavailable_reported:
            return None
        self._unavailable_reported = True
        self.last_sample = OrientationSample(
            pitch_deg=0.0, timestamp_ms=timestamp_ms, source_available=False
        )
        return self.last_sample

    def on_accelerometer(self, values: Sequence[float], timestamp_ms: int) -> Optional[OrientationSample]:
        if not self.available:
            return None
        self._gravity = np.asarray(values, dtype=np.float64)
        return self._fuse(timestamp_ms)

    def on_magnetometer(self, values: Sequence[float], timestamp_ms: int) -> Optional[OrientationSample]:
        if not self.available:
            return None
        self._geomagnetic = np.asarray(values, dtype=np.float64)
        return self._fuse(timestamp_ms)

    def _fuse(self, timestamp_ms: int) -> Optional[OrientationSample]:
        if self._gravity is None or self._geomagnetic is None:
            return None

        r = rotation_matrix(self._gravity, self._geomagnetic)
        if r is None:
            logger.debug("Rotation matrix rejected at t=%d (free fall or degenerate field)", timestamp_ms)
            return None

        azimuth, pitch, roll = orientation_angles(r)
        self.last_sample = OrientationSample(
            pitch_deg=math.degrees(pitch),
            timestamp_ms=timestamp_ms,
            source_available=True,
            azimuth_deg=math.degrees(azimuth),
            roll_deg=math.degrees(roll),
        )
        return self.last_sample
