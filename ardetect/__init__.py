"""Tilt-gated object detection with depth/size distance fusion for handheld AR."""

from .config import ConfigError, PipelineConfig
from .core import (
    Detection,
    DetectionScheduler,
    DistanceResolver,
    Frame,
    GateState,
    MockDetector,
    OrientationEstimator,
    TiltGate,
    ZoneFilter,
)
from .core.pipeline import DetectionSession, run_detection_cycle

__version__ = "1.0.0"

__all__ = [
    "ConfigError",
    "PipelineConfig",
    "Detection",
    "DetectionScheduler",
    "DistanceResolver",
    "Frame",
    "GateState",
    "MockDetector",
    "OrientationEstimator",
    "TiltGate",
    "ZoneFilter",
    "DetectionSession",
    "run_detection_cycle",
]
