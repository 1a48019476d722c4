"""Tests for the forward-difference helpers and tangent bases."""

import numpy as np
import pytest

from surface_geodesics.calculus import DIFF_DELTA, diff, diff_wrt_u, diff_wrt_v, partial_u, partial_v
from surface_geodesics.metric import metric
from surface_geodesics.surfaces import ParametricSurface, U, V, nan_position, total


def test_diff_scalar_returns_float():
    d = diff(lambda x: x ** 2, 3.0)
    assert isinstance(d, float)
    # forward difference of x^2 is exactly 2x + h
    assert d == pytest.approx(6.0 + DIFF_DELTA, abs=1e-8)


def test_diff_vector():
    d = diff(lambda x: np.array([x, 2 * x, x ** 3]), 1.0)
    assert d.shape == (3,)
    assert d == pytest.approx([1.0, 2.0, 3.0], abs=1e-3)


def test_partial_derivatives_hold_other_parameter():
    f = lambda u, v: u * u * v
    assert diff_wrt_u(f, 2.0, 3.0) == pytest.approx(12.0, abs=1e-3)
    assert diff_wrt_v(f, 2.0, 3.0) == pytest.approx(4.0, abs=1e-6)


def test_plane_basis(plane):
    assert partial_u(plane, 1.3, -0.7) == pytest.approx([1.0, 0.0, 0.0])
    assert partial_v(plane, 1.3, -0.7) == pytest.approx([0.0, 0.0, 1.0])


def test_sphere_basis_on_equator(unit_sphere):
    e_u = partial_u(unit_sphere, np.pi / 2, 0.0)
    e_v = partial_v(unit_sphere, np.pi / 2, 0.0)
    assert e_u == pytest.approx([0.0, -1.0, 0.0], abs=1e-3)
    assert e_v == pytest.approx([0.0, 0.0, 1.0], abs=1e-3)


def test_nan_surface_propagates():
    nowhere = total(lambda u, v: nan_position())
    assert np.isnan(partial_u(nowhere, 0.1, 0.2)).all()
    assert np.isnan(partial_v(nowhere, 0.1, 0.2)).all()


def test_total_swallows_evaluation_failures():
    broken = total(lambda u, v: [1.0 / 0.0, 0.0, 0.0])
    assert np.isnan(broken(0.0, 0.0)).all()
    wrong_size = total(lambda u, v: [u, v])
    assert np.isnan(wrong_size(0.0, 0.0)).all()
    # numpy division by zero gives inf and nan, never a partial point
    blown_up = total(lambda u, v: np.array([u, 0.0, v]) / np.float64(0.0))
    assert np.isnan(blown_up(1.0, 0.0)).all()
    lookup = total(lambda u, v: {}[(u, v)])
    assert np.isnan(lookup(0.0, 0.0)).all()
    assert np.isnan(total(lambda u, v: None.x)(0.0, 0.0)).all()


def test_metric_of_failing_callable_is_nan():
    g = metric(total(lambda u, v: [u, v, 0.0][int(u) + 5]), 0.0, 0.0)
    assert np.isnan(g).all()


def test_surface_call_maps_infinities_to_nan():
    reciprocal = ParametricSurface([1 / U, 0, V])
    assert np.isnan(reciprocal(0.0, 1.0)).all()
    assert reciprocal(2.0, 1.0) == pytest.approx([0.5, 0.0, 1.0])
