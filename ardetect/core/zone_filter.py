"""
Detection zone filtering.

Keeps only the detections whose box overlaps a rectangle centered in the
frame. The overlap test is boolean, no partial-overlap weighting.
"""

from typing import List, Sequence

from .types import BBox, Detection


def detection_zone(frame_width: float, frame_height: float,
                   width_ratio: float = 0.4, height_ratio: float = 0.3) -> BBox:
    """Centered rectangle (left, top, right, bottom) sized as a ratio of the frame."""
    center_x = frame_width / 2
    center_y = frame_height / 2
    half_w = frame_width * width_ratio / 2
    half_h = frame_height * height_ratio / 2
    return (center_x - half_w, center_y - half_h, center_x + half_w, center_y + half_h)


def boxes_intersect(box1: BBox, box2: BBox) -> bool:
    """True if the two boxes share a region of positive area (touching edges don't count)."""
    inter_x1 = max(box1[0], box2[0])
    inter_y1 = max(box1[1], box2[1])
    inter_x2 = min(box1[2], box2[2])
    inter_y2 = min(box1[3], box2[3])
    return inter_x2 > inter_x1 and inter_y2 > inter_y1


def filter_detections(detections: Sequence[Detection], frame_width: float, frame_height: float,
                      width_ratio: float = 0.4, height_ratio: float = 0.3) -> List[Detection]:
    """Detections intersecting the zone, in their original order."""
    zone = detection_zone(frame_width, frame_height, width_ratio, height_ratio)
    return [det for det in detections if boxes_intersect(det.bbox, zone)]


class ZoneFilter:
    """Zone filter with fixed ratios."""

    def __init__(self, width_ratio: float = 0.4, height_ratio: float = 0.3):
        self.width_ratio = width_ratio
        self.height_ratio = height_ratio

    def zone(self, frame_width: float, frame_height: float) -> BBox:
        return detection_zone(frame_width, frame_height, self.width_ratio, self.height_ratio)

    def filter(self, detections: Sequence[Detection], frame_width: float, frame_height: float) -> List[Detection]:
        return filter_detections(
            detections, frame_width, frame_height, self.width_ratio, self.height_ratio
        )
