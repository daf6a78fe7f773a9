import pytest

from ardetect.core.scheduler import DetectionScheduler
from ardetect.core.types import GateState, SchedulerState

READY = GateState.READY
BLOCKED = GateState.BLOCKED


def test_fires_when_ready_and_interval_elapsed():
    sched = DetectionScheduler(min_interval_ms=3000)
    assert sched.should_fire(3500, READY)
    assert sched.state.in_flight
    assert sched.state.last_fire_ms == 3500


def test_interval_boundary_is_strict():
    sched = DetectionScheduler(min_interval_ms=3000)
    assert not sched.should_fire(3000, READY)
    assert sched.should_fire(3001, READY)


def test_blocked_gate_never_fires():
    sched = DetectionScheduler(min_interval_ms=3000)
    assert not sched.should_fire(10_000, BLOCKED)
    assert not sched.state.in_flight
    assert sched.state.last_fire_ms == 0


def test_never_fires_while_in_flight():
    sched = DetectionScheduler(min_interval_ms=3000)
    assert sched.should_fire(4000, READY)
    for now in (8000, 20_000, 100_000):
        assert not sched.should_fire(now, READY)
    sched.complete()
    assert sched.should_fire(100_000, READY)


def test_minimum_spacing_after_completion():
    sched = DetectionScheduler(min_interval_ms=3000)
    assert sched.should_fire(4000, READY)
    sched.complete()
    assert not sched.should_fire(5000, READY)
    assert not sched.should_fire(7000, READY)
    assert sched.should_fire(7001, READY)


def test_fire_times_respect_interval_over_many_frames():
    sched = DetectionScheduler(min_interval_ms=3000)
    fire_times = []
    for now in range(0, 30_000, 66):  # ~15 fps
        if sched.should_fire(now, READY):
            fire_times.append(now)
            sched.complete()
    assert len(fire_times) >= 8
    gaps = [b - a for a, b in zip(fire_times, fire_times[1:])]
    assert all(gap > 3000 for gap in gaps)


def test_complete_without_flight_is_harmless():
    sched = DetectionScheduler()
    sched.complete()
    assert not sched.in_flight
    assert sched.state.completed == 0


def test_counters_and_reset():
    sched = DetectionScheduler(min_interval_ms=100)
    assert sched.should_fire(200, READY)
    sched.complete()
    assert (sched.state.fired, sched.state.completed) == (1, 1)
    sched.reset()
    assert sched.state == SchedulerState()


def test_continues_from_existing_state():
    state = SchedulerState(last_fire_ms=5000, in_flight=False)
    sched = DetectionScheduler(min_interval_ms=3000, state=state)
    assert not sched.should_fire(6000, READY)
    assert sched.should_fire(8001, READY)
    assert state.in_flight
