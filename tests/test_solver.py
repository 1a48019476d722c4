"""Tests for the bounded batch solver and path length measures."""

import numpy as np
import pytest

from surface_geodesics.enums import Solver
from surface_geodesics.integrators import GeodesicState
from surface_geodesics.solver import path_length, reference_geodesic, solve_geodesic, step_length
from surface_geodesics.surfaces import undefined_surface


def test_initial_point_always_present(plane):
    path = solve_geodesic(plane, GeodesicState(1.0, 2.0, 1.0, 0.0), 0.1, 0)
    assert path.shape == (1, 2)
    assert path[0] == pytest.approx([1.0, 2.0])


def test_unlimited_length_runs_all_steps(plane):
    path = solve_geodesic(plane, GeodesicState(0.0, 0.0, 1.0, 0.0), 0.1, 25, max_length=0.0)
    assert path.shape == (26, 2)
    assert path[-1] == pytest.approx([2.5, 0.0], abs=1e-6)


def test_length_cap_keeps_overshooting_step(plane):
    dt = 0.1
    path = solve_geodesic(plane, GeodesicState(0.0, 0.0, 1.0, 0.0), dt, 100, max_length=0.55)
    assert len(path) == 7
    length = path_length(plane, path)
    assert 0.55 <= length < 0.55 + dt + 1e-9


def test_default_solver_is_euler(torus):
    state = GeodesicState(0.5, 0.2, 0.4, 0.6)
    default = solve_geodesic(torus, state, 0.05, 10)
    euler = solve_geodesic(torus, state, 0.05, 10, solver="euler")
    rk = solve_geodesic(torus, state, 0.05, 10, solver=Solver.RK)
    assert np.array_equal(default, euler)
    assert not np.array_equal(default, rk)


def test_straight_line_on_plane(plane):
    path = solve_geodesic(plane, GeodesicState(-1.0, 1.0, 0.6, -0.8), 0.25, 20, solver="rk")
    t = 0.25 * np.arange(21)
    assert path[:, 0] == pytest.approx(-1.0 + 0.6 * t, abs=1e-5)
    assert path[:, 1] == pytest.approx(1.0 - 0.8 * t, abs=1e-5)
    assert path_length(plane, path) == pytest.approx(5.0, rel=1e-6)


def test_equator_is_a_great_circle(sphere2):
    dt = 0.05
    n = int(round(2 * np.pi / dt))
    start = GeodesicState(np.pi / 2, 0.0, 0.0, 1.0)
    path = solve_geodesic(sphere2, start, dt, n, solver="rk")
    assert path[:, 0] == pytest.approx(np.full(n + 1, np.pi / 2), abs=1e-2)
    assert path_length(sphere2, path) == pytest.approx(2 * np.pi * 2, rel=0.02)
    gap = np.linalg.norm(sphere2(*path[-1]) - sphere2(*path[0]))
    assert gap < 0.1


def test_meridian_keeps_longitude(sphere2):
    dt = 0.05
    path = solve_geodesic(sphere2, GeodesicState(0.5, 1.0, 1.0, 0.0), dt, 20, solver="rk")
    t = dt * np.arange(21)
    assert path[:, 1] == pytest.approx(np.full(21, 1.0), abs=1e-3)
    assert path[:, 0] == pytest.approx(0.5 + t, abs=1e-3)


def test_nan_surface_yields_nan_path():
    path = solve_geodesic(undefined_surface(), GeodesicState(0.1, 0.1, 1.0, 1.0), 0.1, 5,
                          max_length=1.0)
    assert path.shape == (6, 2)
    assert np.isnan(path[-1]).all()


def test_step_length_uses_pre_step_metric(sphere2):
    # On the sphere g_vv = r^2 sin^2 u is taken at the starting latitude
    u = 1.0
    length = step_length(sphere2, (u, 0.0), (u + 0.5, 0.1))
    expected = np.sqrt(4.0 * 0.5 ** 2 + 4.0 * np.sin(u) ** 2 * 0.1 ** 2)
    assert length == pytest.approx(expected, rel=1e-3)


def test_path_length_of_single_point(plane):
    assert path_length(plane, [[0.0, 0.0]]) == 0.0


def test_rk4_agrees_with_scipy_reference(unit_sphere):
    start = GeodesicState(1.0, 0.2, 0.3, 0.5)
    rk = solve_geodesic(unit_sphere, start, 0.05, 20, solver="rk")
    ref = reference_geodesic(unit_sphere, start, (0.0, 1.0), num=21)
    assert ref.shape == (21, 2)
    assert rk == pytest.approx(ref, abs=2e-3)


def test_zero_velocity_path_is_stationary(torus):
    for solver in (Solver.EULER, Solver.RK):
        path = solve_geodesic(torus, GeodesicState(0.8, 1.3, 0.0, 0.0), 0.1, 20, solver=solver)
        assert path.shape == (21, 2)
        assert np.all(path == [0.8, 1.3])
        assert path_length(torus, path) == 0.0
