import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest
import sympy as sp

from surface_geodesics.logging import logger
from surface_geodesics.surfaces import ParametricSurface, U, V


@pytest.fixture
def caplog(caplog):
    """Route loguru records into pytest's caplog."""
    handler_id = logger.add(caplog.handler, format="{message}")
    yield caplog
    logger.remove(handler_id)


@pytest.fixture
def plane():
    """x = u, y = 0, z = v: identity metric, straight geodesics."""
    return ParametricSurface([U, 0, V], u_range=(-10, 10), v_range=(-10, 10), name="plane")


@pytest.fixture
def polar_plane():
    """The flat plane in polar coordinates (u = radius, v = angle)."""
    return ParametricSurface([U * sp.cos(V), 0, U * sp.sin(V)],
                             u_range=(0, 5), v_range=(0, 2 * np.pi), name="polar")


def make_sphere(r):
    return ParametricSurface(
        [r * sp.sin(U) * sp.cos(V), r * sp.cos(U), r * sp.sin(U) * sp.sin(V)],
        u_range=(1e-20, np.pi), v_range=(0, 2 * np.pi), name="sphere",
    )


@pytest.fixture
def unit_sphere():
    return make_sphere(1)


@pytest.fixture
def sphere2():
    return make_sphere(2)


@pytest.fixture
def torus():
    R, r = 3, 1
    return ParametricSurface(
        [(R + r * sp.cos(U)) * sp.cos(V), r * sp.sin(U), (R + r * sp.cos(U)) * sp.sin(V)],
        u_range=(0, 2 * np.pi), v_range=(0, 2 * np.pi), name="torus",
    )
