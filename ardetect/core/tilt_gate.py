"""
Tilt gate: allows detection only while the device is held near a target pitch.
"""

import logging
from typing import Optional

from .types import GateState, OrientationSample

logger = logging.getLogger(__name__)


def evaluate_gate(pitch_deg: float, target_deg: float, tolerance_deg: float, source_available: bool) -> GateState:
    """
    Gate decision for one orientation reading.

    Devices without orientation sensing are never locked out: an
    unavailable source is always READY. Otherwise the pitch must be
    strictly closer than `tolerance_deg` to the target.
    """
    if not source_available:
        return GateState.READY
    if abs(pitch_deg - target_deg) < tolerance_deg:
        return GateState.READY
    return GateState.BLOCKED


class TiltGate:
    """Holds the current gate state, re-evaluated on every orientation update."""

    def __init__(self, target_deg: float = -45.0, tolerance_deg: float = 20.0):
        """
        Args:
            target_deg: Pitch the device should be held at
            tolerance_deg: Half-width of the accepted band around the target
        """
        self.target_deg = target_deg
        self.tolerance_deg = tolerance_deg
        self.state = GateState.BLOCKED
        self.last_sample: Optional[OrientationSample] = None

    def update(self, sample: OrientationSample) -> GateState:
        new_state = evaluate_gate(
            sample.pitch_deg, self.target_deg, self.tolerance_deg, sample.source_available
        )
        if new_state != self.state:
            if sample.source_available:
                logger.debug(
                    "Gate %s -> %s (pitch=%.1f, target=%.1f±%.1f)",
                    self.state.value, new_state.value, sample.pitch_deg,
                    self.target_deg, self.tolerance_deg,
                )
            else:
                logger.info("Orientation source unavailable, gate permanently %s", new_state.value)
        self.state = new_state
        self.last_sample = sample
        return new_state

    @property
    def is_ready(self) -> bool:
        return self.state is GateState.READY
