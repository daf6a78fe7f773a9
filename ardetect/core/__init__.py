# torch-free imports only (safe for the scheduling side)
from .types import (
    COCO_LABELS,
    UNRESOLVED_DISTANCE,
    Detection,
    DistanceSample,
    Frame,
    GateState,
    OrientationSample,
    SchedulerState,
)
from .orientation import OrientationEstimator
from .tilt_gate import TiltGate, evaluate_gate
from .scheduler import DetectionScheduler
from .zone_filter import ZoneFilter, boxes_intersect, detection_zone, filter_detections
from .distance import KNOWN_WIDTHS_M, DistanceResolver, estimate_distance
from .depth import DepthMapLookup, NoDepthLookup, safe_hit_test
from .detector import BaseDetector, MockDetector

# NOTE: YoloDetector imports torch - import it explicitly when needed
# from .yolo_detector import YoloDetector

__all__ = [
    "COCO_LABELS",
    "UNRESOLVED_DISTANCE",
    "Detection",
    "DistanceSample",
    "Frame",
    "GateState",
    "OrientationSample",
    "SchedulerState",
    "OrientationEstimator",
    "TiltGate",
    "evaluate_gate",
    "DetectionScheduler",
    "ZoneFilter",
    "boxes_intersect",
    "detection_zone",
    "filter_detections",
    "KNOWN_WIDTHS_M",
    "DistanceResolver",
    "estimate_distance",
    "DepthMapLookup",
    "NoDepthLookup",
    "safe_hit_test",
    "BaseDetector",
    "MockDetector",
]
