import pytest

from ardetect.core.types import UNRESOLVED_DISTANCE, Detection, DistanceSample


def test_detection_starts_unresolved():
    det = Detection("person", 0.8, (0, 0, 10, 20))
    assert det.distance_m == UNRESOLVED_DISTANCE
    assert not det.is_resolved


def test_detection_geometry():
    det = Detection("person", 0.8, (10, 20, 50, 100))
    assert det.width == 40
    assert det.height == 80
    assert det.center == (30, 60)


def test_detection_normalizes_swapped_corners():
    det = Detection("person", 0.8, (50, 100, 10, 20))
    assert det.bbox == (10.0, 20.0, 50.0, 100.0)


def test_with_distance_returns_copy():
    det = Detection("person", 0.8, (0, 0, 10, 20))
    resolved = det.with_distance(2.5)
    assert resolved.distance_m == 2.5
    assert resolved.is_resolved
    assert det.distance_m == UNRESOLVED_DISTANCE


def test_detection_is_immutable():
    det = Detection("person", 0.8, (0, 0, 10, 20))
    with pytest.raises(AttributeError):
        det.distance_m = 3.0


def test_distance_sample_prefers_hit():
    assert DistanceSample(3.0, 7.0).chosen == 3.0
    assert DistanceSample(3.0, 7.0).source == "hit_test"
    assert DistanceSample(None, 7.0).chosen == 7.0
    assert DistanceSample(None, 7.0).source == "fallback"
