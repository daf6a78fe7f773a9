"""
Detection scheduler: admission control in front of the detector.

Decides when a frame is handed to detection, based on:
- Gate state (device held at the right angle)
- A detection already in flight (at most one at a time)
- Minimum spacing between dispatches
"""

import logging
from typing import Optional

from .types import GateState, SchedulerState

logger = logging.getLogger(__name__)


class DetectionScheduler:
    """
    Rate limiter for detection dispatches.

    Only the scheduling thread may call should_fire() / complete(); the
    state is not locked.
    """

    def __init__(self, min_interval_ms: int = 3000, state: Optional[SchedulerState] = None):
        """
        Args:
            min_interval_ms: Min milliseconds between two dispatches
            state: Existing state to continue from (a fresh one otherwise)
        """
        self.min_interval_ms = min_interval_ms
        self.state = state if state is not None else SchedulerState()

    def should_fire(self, now_ms: int, gate_state: GateState) -> bool:
        """
        Check whether a detection may be dispatched now.

        On True the state is already marked in flight; the caller must call
        complete() once the detection finishes, whatever its outcome.
        """
        if gate_state is not GateState.READY:
            return False
        if self.state.in_flight:
            return False
        if now_ms - self.state.last_fire_ms <= self.min_interval_ms:
            return False

        self.state.in_flight = True
        self.state.last_fire_ms = now_ms
        self.state.fired += 1
        logger.debug("Detection dispatched at t=%d (#%d)", now_ms, self.state.fired)
        return True

    def complete(self):
        """Mark the in-flight detection as finished (success or failure)."""
        if not self.state.in_flight:
            logger.warning("complete() called with no detection in flight")
            return
        self.state.in_flight = False
        self.state.completed += 1

    def reset(self):
        """Forget all history (new session)."""
        self.state = SchedulerState()

    @property
    def in_flight(self) -> bool:
        return self.state.in_flight
