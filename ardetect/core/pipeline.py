"""
Detection session: orientation -> gate -> scheduler -> detector -> zone -> distance.

Architecture:
    Scheduling thread (caller)          Worker thread (one at a time)
    - sensor callbacks -> TiltGate      - detector.detect(image)
    - on_frame() -> DetectionScheduler  - ZoneFilter
    - poll() applies results      <--   - DistanceResolver (hit test)

Results travel back through a queue and are applied by poll() on the
scheduling thread, so SchedulerState never leaves that thread.
"""

import logging
import queue
import threading
import time
from typing import List, Optional, Sequence

from ..config import PipelineConfig
from .detector import BaseDetector
from .distance import DistanceResolver
from .orientation import OrientationEstimator
from .scheduler import DetectionScheduler
from .tilt_gate import TiltGate
from .types import Detection, Frame, GateState, OrientationSample
from .zone_filter import ZoneFilter

logger = logging.getLogger(__name__)


def run_detection_cycle(
    frame: Frame,
    detector: BaseDetector,
    zone_filter: ZoneFilter,
    resolver: DistanceResolver,
) -> List[Detection]:
    """One synchronous detection cycle; every returned detection has a distance."""
    raw = detector.detect(frame.image)
    in_zone = zone_filter.filter(raw, frame.width, frame.height)
    resolved = resolver.resolve_all(in_zone, frame.depth_lookup)
    logger.debug("Cycle t=%d: %d raw, %d in zone", frame.timestamp_ms, len(raw), len(resolved))
    return resolved


class DetectionSession:
    """
    Owns the gate, scheduler and worker for one AR session.

    Usage:
        session = DetectionSession(PipelineConfig(), detector)
        session.start(now_ms)

        # Sensor callbacks
        session.on_accelerometer(values, t)
        session.on_magnetometer(values, t)

        # Every camera frame
        session.on_frame(Frame(image, w, h, t, depth_lookup))
        detections = session.poll()   # None if nothing new

        session.close()
    """

    def __init__(
        self,
        config: PipelineConfig,
        detector: BaseDetector,
        estimator: Optional[OrientationEstimator] = None,
    ):
        self.config = config
        self.detector = detector
        self.detector.confidence_threshold = config.confidence_threshold
        self.detector.max_results = config.max_results
        self.estimator = estimator if estimator is not None else OrientationEstimator()
        self.gate = TiltGate(config.target_angle_deg, config.angle_tolerance_deg)
        self.scheduler = DetectionScheduler(config.min_detection_interval_ms)
        self.zone_filter = ZoneFilter(config.zone_width_ratio, config.zone_height_ratio)
        self.resolver = DistanceResolver(
            focal_length_px=config.focal_length_px,
            known_widths=config.real_widths_m,
            default_width_m=config.default_real_width_m,
            max_hit_distance_m=config.max_hit_distance_m,
            hit_test_enabled=config.hit_test_enabled,
        )

        self.latest_detections: List[Detection] = []
        self._results: "queue.Queue[List[Detection]]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._closed = False
        self._started = False

    # ------------------------------------------------------------------ lifecycle

    def start(self, timestamp_ms: int = 0) -> GateState:
        """Report sensor availability to the gate. Call once before feeding samples."""
        self._started = True
        sample = self.estimator.availability_sample(timestamp_ms)
        if sample is not None:
            self.gate.update(sample)
        logger.info(
            "Session started (orientation=%s, gate=%s)",
            "available" if self.estimator.available else "unavailable",
            self.gate.state.value,
        )
        return self.gate.state

    def close(self):
        """Tear down the session. A detection still running is not aborted; its result is dropped."""
        if self._closed:
            return
        self._closed = True
        if self._worker is not None and self._worker.is_alive():
            logger.info("Detection still running at close; its result will be discarded")
        self.detector.close()
        logger.info(
            "Session closed (%d dispatched, %d completed)",
            self.scheduler.state.fired, self.scheduler.state.completed,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------ sensors

    def on_accelerometer(self, values: Sequence[float], timestamp_ms: int) -> GateState:
        return self._apply(self.estimator.on_accelerometer(values, timestamp_ms))

    def on_magnetometer(self, values: Sequence[float], timestamp_ms: int) -> GateState:
        return self._apply(self.estimator.on_magnetometer(values, timestamp_ms))

    def _apply(self, sample: Optional[OrientationSample]) -> GateState:
        if sample is not None and not self._closed:
            self.gate.update(sample)
        return self.gate.state

    # ------------------------------------------------------------------ frames

    def on_frame(self, frame: Frame, now_ms: Optional[int] = None) -> bool:
        """
        Offer a frame for detection.

        Returns:
            True if a detection was dispatched for this frame
        """
        if self._closed:
            return False
        if not self._started:
            self.start(frame.timestamp_ms)
        if now_ms is None:
            now_ms = frame.timestamp_ms

        if not self.scheduler.should_fire(now_ms, self.gate.state):
            return False

        self._worker = threading.Thread(
            target=self._detect_worker, args=(frame,), name="ardetect-worker", daemon=True
        )
        self._worker.start()
        return True

    def _detect_worker(self, frame: Frame):
        detections: List[Detection] = []
        try:
            detections = run_detection_cycle(frame, self.detector, self.zone_filter, self.resolver)
        except Exception as e:
            logger.error("Detection cycle failed: %s", e)
        finally:
            self._results.put(detections)

    def poll(self, timeout: Optional[float] = None) -> Optional[List[Detection]]:
        """
        Apply a finished detection, if any. Must run on the scheduling thread.

        Args:
            timeout: Seconds to wait for a result (None = don't wait)

        Returns:
            The new detection list, or None if no detection finished
        """
        try:
            if timeout is None:
                detections = self._results.get_nowait()
            else:
                detections = self._results.get(timeout=timeout)
        except queue.Empty:
            return None

        if self._closed:
            logger.debug("Discarding %d detections from a closed session", len(detections))
            return None

        self.scheduler.complete()
        self.latest_detections = detections
        return detections

    def wait_idle(self, timeout: float = 5.0) -> bool:
        """Block until the in-flight detection (if any) has been applied."""
        deadline = time.monotonic() + timeout
        while self.scheduler.in_flight and not self._closed:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            self.poll(timeout=remaining)
        return not self.scheduler.in_flight

    # ------------------------------------------------------------------ status

    @property
    def is_detecting(self) -> bool:
        return self.scheduler.in_flight

    def status_text(self) -> str:
        """One-line status for the UI."""
        if self.latest_detections:
            count = len(self.latest_detections)
            return f"{count} object{'s' if count != 1 else ''} detected"
        if self.is_detecting:
            return "Analyzing..."
        return "Point camera at objects in the detection zone"
