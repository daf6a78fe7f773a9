"""
Core types for the detection pipeline.

This file contains data structures that are shared between modules.
IMPORTANT: This file must NOT import torch/ultralytics so the scheduling
side stays light.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Optional, Tuple

# Distance value of a detection the resolver has not processed yet
UNRESOLVED_DISTANCE = -1.0

# left, top, right, bottom in frame pixels
BBox = Tuple[float, float, float, float]

# hit_test(x, y) -> metres, or None when no scene geometry was hit
DepthLookup = Callable[[float, float], Optional[float]]


@dataclass(frozen=True)
class Detection:
    """Detected object with (eventually) a distance in metres."""
    label: str           # "chair", "person", etc.
    confidence: float    # 0.0 - 1.0
    bbox: BBox           # left, top, right, bottom
    distance_m: float = UNRESOLVED_DISTANCE

    def __post_init__(self):
        left, top, right, bottom = (float(v) for v in self.bbox)
        if left > right:
            left, right = right, left
        if top > bottom:
            top, bottom = bottom, top
        object.__setattr__(self, "bbox", (left, top, right, bottom))

    @property
    def width(self) -> float:
        return self.bbox[2] - self.bbox[0]

    @property
    def height(self) -> float:
        return self.bbox[3] - self.bbox[1]

    @property
    def center(self) -> Tuple[float, float]:
        left, top, right, bottom = self.bbox
        return (left + right) / 2, (top + bottom) / 2

    @property
    def is_resolved(self) -> bool:
        return self.distance_m >= 0

    def with_distance(self, distance_m: float) -> "Detection":
        """Copy of this detection with the distance filled in."""
        return replace(self, distance_m=float(distance_m))


@dataclass(frozen=True)
class OrientationSample:
    """Pitch reading produced by the orientation estimator."""
    pitch_deg: float
    timestamp_ms: int
    source_available: bool = True
    azimuth_deg: float = 0.0
    roll_deg: float = 0.0


class GateState(Enum):
    BLOCKED = "blocked"
    READY = "ready"


@dataclass
class SchedulerState:
    """Mutable scheduling state, owned by a single DetectionScheduler."""
    last_fire_ms: int = 0
    in_flight: bool = False
    fired: int = 0
    completed: int = 0


@dataclass(frozen=True)
class DistanceSample:
    """Both distance candidates for one detection (internal to the resolver)."""
    hit_distance_m: Optional[float]
    fallback_distance_m: float

    @property
    def source(self) -> str:
        return "hit_test" if self.hit_distance_m is not None else "fallback"

    @property
    def chosen(self) -> float:
        if self.hit_distance_m is not None:
            return self.hit_distance_m
        return self.fallback_distance_m


@dataclass(frozen=True)
class Frame:
    """Camera frame handed to the pipeline. The image is opaque to the core."""
    image: Any
    width: int
    height: int
    timestamp_ms: int = 0
    depth_lookup: Optional[DepthLookup] = None


# Label vocabulary of the COCO-trained detectors
COCO_LABELS = (
    "person", "bicycle", "car", "motorcycle", "airplane", "bus", "train", "truck",
    "boat", "traffic light", "fire hydrant", "stop sign", "parking meter", "bench",
    "bird", "cat", "dog", "horse", "sheep", "cow", "elephant", "bear", "zebra",
    "giraffe", "backpack", "umbrella", "handbag", "tie", "suitcase", "frisbee",
    "skis", "snowboard", "sports ball", "kite", "baseball bat", "baseball glove",
    "skateboard", "surfboard", "tennis racket", "bottle", "wine glass", "cup",
    "fork", "knife", "spoon", "bowl", "banana", "apple", "sandwich", "orange",
    "broccoli", "carrot", "hot dog", "pizza", "donut", "cake", "chair", "couch",
    "potted plant", "bed", "dining table", "toilet", "tv", "laptop", "mouse",
    "remote", "keyboard", "cell phone", "microwave", "oven", "toaster", "sink",
    "refrigerator", "book", "clock", "vase", "scissors", "teddy bear", "hair drier",
    "toothbrush",
)
