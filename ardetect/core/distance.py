"""
Distance resolution for detections.

Two sources, in priority order:
1. Depth hit test at the box center (authoritative when the tracking
   subsystem has geometry there)
2. Size-based estimate from the label's assumed real width (always available)
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .depth import safe_hit_test
from .types import DepthLookup, Detection, DistanceSample

logger = logging.getLogger(__name__)

DEFAULT_FOCAL_LENGTH_PX = 800.0
DEFAULT_REAL_WIDTH_M = 0.5
DEFAULT_MAX_HIT_DISTANCE_M = 10.0

# Assumed real-world width per label, in metres
KNOWN_WIDTHS_M: Dict[str, float] = {
    # Vehicles
    "car": 1.8, "truck": 2.5, "bus": 2.5,
    "motorcycle": 0.8, "bicycle": 0.6,

    # People/animals
    "person": 0.5, "dog": 0.3, "cat": 0.2,

    # Furniture
    "chair": 0.5, "couch": 2.0, "bed": 1.6,
    "dining table": 1.2, "toilet": 0.4, "bench": 1.5,

    # Objects
    "tv": 1.0, "laptop": 0.35, "bottle": 0.08, "cup": 0.08,
    "cell phone": 0.07, "book": 0.15, "backpack": 0.3,
    "suitcase": 0.45, "refrigerator": 0.8, "potted plant": 0.4,
}


def estimate_distance(real_width_m: float, focal_length_px: float, box_width_px: float) -> float:
    """Pinhole estimate Z = W * f / w. Zero for a non-positive box width."""
    if box_width_px <= 0:
        return 0.0
    return real_width_m * focal_length_px / box_width_px


class DistanceResolver:
    """Fills in `distance_m` for detections."""

    def __init__(
        self,
        focal_length_px: float = DEFAULT_FOCAL_LENGTH_PX,
        known_widths: Optional[Mapping[str, float]] = None,
        default_width_m: float = DEFAULT_REAL_WIDTH_M,
        max_hit_distance_m: float = DEFAULT_MAX_HIT_DISTANCE_M,
        hit_test_enabled: bool = True,
    ):
        """
        Args:
            focal_length_px: Camera focal length (calibration constant)
            known_widths: Real width per label in metres (KNOWN_WIDTHS_M if None)
            default_width_m: Width assumed for labels missing from the table
            max_hit_distance_m: Hit test results beyond this are discarded
            hit_test_enabled: If False, always use the size-based estimate
        """
        self.focal_length_px = focal_length_px
        self.known_widths = dict(KNOWN_WIDTHS_M if known_widths is None else known_widths)
        self.default_width_m = default_width_m
        self.max_hit_distance_m = max_hit_distance_m
        self.hit_test_enabled = hit_test_enabled

    def real_width(self, label: str) -> float:
        return self.known_widths.get(label, self.default_width_m)

    def sample(self, detection: Detection, depth_lookup: Optional[DepthLookup]) -> DistanceSample:
        """Compute both distance candidates for one detection."""
        hit = None
        if self.hit_test_enabled:
            center_x, center_y = detection.center
            hit = self._accept_hit(safe_hit_test(depth_lookup, center_x, center_y))

        fallback = estimate_distance(
            self.real_width(detection.label), self.focal_length_px, detection.width
        )
        return DistanceSample(hit_distance_m=hit, fallback_distance_m=fallback)

    def resolve(self, detection: Detection, depth_lookup: Optional[DepthLookup]) -> Detection:
        sample = self.sample(detection, depth_lookup)
        logger.debug(
            "%s: %.2fm (%s; hit=%s, fallback=%.2f)",
            detection.label, sample.chosen, sample.source,
            sample.hit_distance_m, sample.fallback_distance_m,
        )
        return detection.with_distance(sample.chosen)

    def resolve_all(self, detections: Sequence[Detection], depth_lookup: Optional[DepthLookup]) -> List[Detection]:
        return [self.resolve(det, depth_lookup) for det in detections]

    def _accept_hit(self, distance: Optional[float]) -> Optional[float]:
        # NaN fails both comparisons and is rejected too
        if distance is None:
            return None
        if 0 < distance <= self.max_hit_distance_m:
            return distance
        return None
