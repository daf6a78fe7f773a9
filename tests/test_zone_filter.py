import pytest

from ardetect.core.types import Detection
from ardetect.core.zone_filter import ZoneFilter, boxes_intersect, detection_zone, filter_detections


def _det(bbox, label="person"):
    return Detection(label=label, confidence=0.9, bbox=bbox)


def test_zone_is_centered_with_ratio_size():
    assert detection_zone(1000, 1000) == pytest.approx((300.0, 350.0, 700.0, 650.0))
    assert detection_zone(1280, 720, 0.5, 0.5) == pytest.approx((320.0, 180.0, 960.0, 540.0))


def test_intersection_requires_positive_area():
    zone = (300.0, 350.0, 700.0, 650.0)
    assert boxes_intersect((0, 0, 301, 351), zone)
    assert not boxes_intersect((0, 0, 300, 500), zone)      # shares left edge
    assert not boxes_intersect((700, 400, 900, 500), zone)  # shares right edge
    assert not boxes_intersect((400, 650, 500, 800), zone)  # shares bottom edge
    assert not boxes_intersect((0, 0, 100, 100), zone)


def test_filter_keeps_overlapping_in_order():
    inside = _det((400, 400, 600, 600), "car")
    partial = _det((0, 0, 350, 400), "dog")
    outside = _det((0, 0, 100, 100), "cat")
    touching = _det((700, 400, 800, 500), "cup")
    enclosing = _det((0, 0, 1000, 1000), "bed")

    kept = filter_detections([inside, outside, partial, touching, enclosing], 1000, 1000)
    assert kept == [inside, partial, enclosing]


def test_filter_passes_detections_unmodified():
    det = _det((400, 400, 600, 600)).with_distance(2.0)
    assert filter_detections([det], 1000, 1000)[0] is det


def test_filter_is_idempotent():
    dets = [_det((x, x, x + 150, x + 150)) for x in range(0, 1000, 100)]
    zf = ZoneFilter(0.4, 0.3)
    once = zf.filter(dets, 1000, 1000)
    assert zf.filter(once, 1000, 1000) == once


def test_zone_filter_uses_its_ratios():
    zf = ZoneFilter(width_ratio=0.1, height_ratio=0.1)
    assert zf.zone(1000, 1000) == pytest.approx((450.0, 450.0, 550.0, 550.0))
    assert zf.filter([_det((300, 300, 440, 440))], 1000, 1000) == []


def test_empty_input():
    assert filter_detections([], 640, 480) == []
