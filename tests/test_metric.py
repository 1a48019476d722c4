"""Tests for the metric tensor, its closed-form inverse and the metric norm."""

import numpy as np
import pytest

from surface_geodesics.metric import (
    determinant, inverse_metric, metric, metric_from_bases, norm, norm_squared, tangent_vector,
)
from surface_geodesics.surfaces import undefined_surface


def test_plane_metric_is_identity(plane):
    g = metric(plane, 2.5, -1.0)
    assert g == pytest.approx(np.eye(2))


def test_metric_is_symmetric(torus):
    g = metric(torus, 0.7, 1.9)
    assert g[0, 1] == g[1, 0]


def test_sphere_metric_matches_exact(sphere2):
    u, v = np.pi / 3, 0.5
    g = metric(sphere2, u, v)
    expected = np.array([[4.0, 0.0], [0.0, 4.0 * np.sin(u) ** 2]])
    assert g == pytest.approx(expected, abs=2e-3)
    assert g == pytest.approx(sphere2.exact_metric(u, v), abs=2e-3)


@pytest.mark.parametrize("point", [(0.3, 0.4), (1.2, 2.0), (2.5, 5.0), (4.0, 0.1)])
def test_inverse_times_metric_is_identity(torus, point):
    g = metric(torus, *point)
    assert g @ inverse_metric(g) == pytest.approx(np.eye(2), abs=1e-9)


def test_inverse_closed_form():
    g = np.array([[2.0, 1.0], [1.0, 3.0]])
    assert inverse_metric(g) == pytest.approx(np.linalg.inv(g))


def test_singular_metric_does_not_raise():
    ug = inverse_metric(np.zeros((2, 2)))
    assert not np.isfinite(ug).all()


def test_sphere_pole_is_singular(unit_sphere):
    g = metric(unit_sphere, 0.0, 1.0)
    assert determinant(g) == 0.0
    assert not np.isfinite(inverse_metric(g)).all()


def test_metric_from_bases():
    g = metric_from_bases(np.array([1.0, 2.0, 0.0]), np.array([0.0, 1.0, 3.0]))
    assert g == pytest.approx([[5.0, 2.0], [2.0, 10.0]])


def test_norm_on_plane(plane):
    assert norm(plane, 0.0, 0.0, 3.0, 4.0) == pytest.approx(5.0)
    assert norm_squared(plane, 0.0, 0.0, 3.0, 4.0) == pytest.approx(25.0)


def test_norm_on_sphere_scales_with_radius(sphere2):
    # Along the equator dv/dt = 1 is metric speed r
    assert norm(sphere2, np.pi / 2, 0.0, 0.0, 1.0) == pytest.approx(2.0, rel=1e-3)


def test_tangent_vector(plane):
    assert tangent_vector(plane, 1.0, 1.0, 2.0, -1.0) == pytest.approx([2.0, 0.0, -1.0])


def test_nan_surface_metric_is_nan():
    g = metric(undefined_surface(), 0.5, 0.5)
    assert np.isnan(g).all()
    assert np.isnan(inverse_metric(g)).all()
