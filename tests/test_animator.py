"""Tests for the frame-driven GeodesicAnimator."""

import dataclasses

import pytest

from surface_geodesics.integrators import GeodesicState, geodesic_step
from surface_geodesics.solver import GeodesicAnimator


@pytest.fixture
def start():
    return GeodesicState(0.0, 0.0, 1.0, 0.0)


def test_path_starts_empty(plane, start):
    anim = GeodesicAnimator(plane, start)
    assert anim.path == []
    assert anim.steps == 0
    assert not anim.finished


def test_tick_emits_sub_steps_points(plane, start):
    anim = GeodesicAnimator(plane, start, sub_steps=4, time_scale=2.0)
    emitted = anim.tick(0.1)
    assert len(emitted) == 4
    assert anim.path == emitted
    # dt = 0.1 * 2 / 4 = 0.05 per step
    assert anim.state.u == pytest.approx(0.2, abs=1e-6)
    assert emitted[0][0] == pytest.approx(0.05, abs=1e-6)


def test_ticks_follow_the_stepper(torus):
    state = GeodesicState(0.3, 0.1, 0.5, 0.5)
    anim = GeodesicAnimator(torus, state, solver="euler")
    anim.tick(0.02)
    anim.tick(0.02)
    expected = geodesic_step(torus, geodesic_step(torus, state, 0.02, "euler"), 0.02, "euler")
    assert anim.state == expected
    assert anim.path[-1] == expected.point


def test_max_steps_finishes(plane, start):
    anim = GeodesicAnimator(plane, start, sub_steps=3, max_steps=5)
    anim.tick(0.1)
    assert len(anim.tick(0.1)) == 2
    assert anim.finished
    assert anim.tick(0.1) == []
    assert anim.steps == 5


def test_max_length_finishes(plane, start):
    anim = GeodesicAnimator(plane, start, max_length=0.25)
    for _ in range(10):
        anim.tick(0.1)
    assert anim.finished
    assert anim.steps == 3
    assert anim.length == pytest.approx(0.3, abs=1e-6)


def test_reset_restores_initial_state(plane, start):
    anim = GeodesicAnimator(plane, start)
    anim.tick(0.1)
    anim.reset()
    assert anim.state == start
    assert anim.path == [] and anim.steps == 0 and anim.length == 0.0

    other = GeodesicState(1.0, 1.0, 0.0, 1.0)
    anim.reset(other)
    anim.tick(0.1)
    anim.reset()
    assert anim.state == other


def test_snapshot_is_frozen(plane, start):
    anim = GeodesicAnimator(plane, start)
    anim.tick(0.1)
    snap = anim.snapshot()
    anim.tick(0.1)
    assert len(snap.path) == 1
    assert snap.steps == 1
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.steps = 7


def test_invalid_arguments(plane, start):
    with pytest.raises(ValueError):
        GeodesicAnimator(plane, start, sub_steps=0)
    with pytest.raises(ValueError):
        GeodesicAnimator(plane, start, solver="verlet")
