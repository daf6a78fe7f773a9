import math

import pytest

from ardetect.core.distance import KNOWN_WIDTHS_M, DistanceResolver, estimate_distance
from ardetect.core.types import Detection


def _car(width_px=400.0):
    return Detection(label="car", confidence=0.9, bbox=(100.0, 100.0, 100.0 + width_px, 300.0))


def test_estimate_distance_formula():
    assert estimate_distance(1.8, 800.0, 400.0) == pytest.approx(3.6)


@pytest.mark.parametrize("width", [0.0, -5.0])
def test_estimate_distance_non_positive_width(width):
    assert estimate_distance(1.8, 800.0, width) == 0.0


def test_hit_test_takes_priority():
    resolver = DistanceResolver(focal_length_px=800.0, max_hit_distance_m=10.0)
    for det in (_car(400), _car(10), Detection("unknown-thing", 0.6, (0, 0, 0, 0))):
        assert resolver.resolve(det, lambda x, y: 3.0).distance_m == 3.0


def test_fallback_when_no_hit():
    resolver = DistanceResolver(focal_length_px=800.0, known_widths={"car": 1.8})
    assert resolver.resolve(_car(400), lambda x, y: None).distance_m == pytest.approx(3.6)


def test_fallback_when_lookup_missing():
    resolver = DistanceResolver(focal_length_px=800.0)
    assert KNOWN_WIDTHS_M["car"] == 1.8
    assert resolver.resolve(_car(400), None).distance_m == pytest.approx(3.6)


def test_unknown_label_zero_width_resolves_to_zero():
    resolver = DistanceResolver()
    det = Detection(label="spaceship", confidence=0.7, bbox=(50.0, 50.0, 50.0, 90.0))
    distance = resolver.resolve(det, lambda x, y: None).distance_m
    assert distance == 0.0
    assert not math.isnan(distance)


def test_unknown_label_uses_default_width():
    resolver = DistanceResolver(focal_length_px=1000.0, known_widths={}, default_width_m=0.5)
    det = Detection(label="spaceship", confidence=0.7, bbox=(0, 0, 250, 100))
    assert resolver.resolve(det, None).distance_m == pytest.approx(2.0)


@pytest.mark.parametrize("hit", [0.0, -1.0, 10.01, 50.0, float("nan")])
def test_implausible_hit_falls_back(hit):
    resolver = DistanceResolver(focal_length_px=800.0, max_hit_distance_m=10.0)
    assert resolver.resolve(_car(400), lambda x, y: hit).distance_m == pytest.approx(3.6)


def test_hit_at_max_distance_is_accepted():
    resolver = DistanceResolver(max_hit_distance_m=10.0)
    assert resolver.resolve(_car(400), lambda x, y: 10.0).distance_m == 10.0


def test_hit_test_queried_at_box_center():
    calls = []

    def lookup(x, y):
        calls.append((x, y))
        return 2.0

    DistanceResolver().resolve(Detection("cup", 0.9, (10, 20, 30, 60)), lookup)
    assert calls == [(20.0, 40.0)]


def test_failing_hit_test_falls_back():
    def lookup(x, y):
        raise RuntimeError("tracking lost")

    resolver = DistanceResolver(focal_length_px=800.0)
    assert resolver.resolve(_car(400), lookup).distance_m == pytest.approx(3.6)


def test_disabled_hit_test_never_called():
    def lookup(x, y):
        raise AssertionError("should not be called")

    resolver = DistanceResolver(focal_length_px=800.0, hit_test_enabled=False)
    assert resolver.resolve(_car(400), lookup).distance_m == pytest.approx(3.6)


def test_resolve_all_preserves_order_and_resolves_everything():
    resolver = DistanceResolver()
    dets = [_car(400), Detection("person", 0.8, (0, 0, 100, 300)), Detection("x", 0.6, (5, 5, 5, 5))]
    resolved = resolver.resolve_all(dets, lambda x, y: None)
    assert [d.label for d in resolved] == ["car", "person", "x"]
    assert all(d.distance_m >= 0 for d in resolved)


def test_sample_exposes_both_candidates():
    resolver = DistanceResolver(focal_length_px=800.0)
    sample = resolver.sample(_car(400), lambda x, y: 2.0)
    assert sample.hit_distance_m == 2.0
    assert sample.fallback_distance_m == pytest.approx(3.6)
