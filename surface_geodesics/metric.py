import numpy as np

from .calculus import partial_u, partial_v
from .surfaces import SurfaceFunction


def metric_from_bases(e_u: np.ndarray, e_v: np.ndarray) -> np.ndarray:
    """
    Metric tensor g_ij = e_i . e_j from the two tangent basis vectors.
    g[i, j] = g[j, i]
    """
    uu = np.dot(e_u, e_u)
    uv = np.dot(e_u, e_v)
    vv = np.dot(e_v, e_v)
    return np.array([
        [uu, uv],
        [uv, vv],
    ])


def metric(surface: SurfaceFunction, u: float, v: float) -> np.ndarray:
    """
    Induced metric at (u, v), built from the finite-difference tangent bases.
    """
    with np.errstate(all='ignore'):
        return metric_from_bases(partial_u(surface, u, v), partial_v(surface, u, v))


def inverse_metric(g: np.ndarray) -> np.ndarray:
    """
    Closed-form inverse of a symmetric 2x2 metric.

    A singular metric (det = 0) is not guarded against: the result holds
    Infinity/NaN entries.
    """
    g = np.asarray(g, dtype=float)
    uu = g[0, 0]
    uv = g[0, 1]
    vv = g[1, 1]
    with np.errstate(all='ignore'):
        det = uu * vv - uv ** 2
        det_reciprocal = np.float64(1.0) / det
        return np.array([
            [det_reciprocal * vv, -det_reciprocal * uv],
            [-det_reciprocal * uv, det_reciprocal * uu],
        ])


def quadratic_form(g: np.ndarray, a: float, b: float) -> float:
    """Squared metric length g_uu a^2 + 2 g_uv a b + g_vv b^2 of the vector (a, b)."""
    with np.errstate(all='ignore'):
        return float(g[0, 0] * a ** 2 + 2 * g[0, 1] * a * b + g[1, 1] * b ** 2)


def norm_squared(surface: SurfaceFunction, u: float, v: float, u_vel: float, v_vel: float) -> float:
    """Squared metric norm of the parameter-space vector [u_vel, v_vel] at (u, v)."""
    return quadratic_form(metric(surface, u, v), u_vel, v_vel)


def norm(surface: SurfaceFunction, u: float, v: float, u_vel: float, v_vel: float) -> float:
    """Metric norm of the parameter-space vector [u_vel, v_vel] at (u, v)."""
    with np.errstate(all='ignore'):
        return float(np.sqrt(norm_squared(surface, u, v, u_vel, v_vel)))


def determinant(g: np.ndarray) -> float:
    """det(g); zero marks a singular point of the parametrization."""
    with np.errstate(all='ignore'):
        return float(g[0, 0] * g[1, 1] - g[0, 1] ** 2)


def tangent_vector(surface: SurfaceFunction, u: float, v: float, u_vel: float, v_vel: float) -> np.ndarray:
    """Pushforward of (u_vel, v_vel) into R^3: u_vel * e_u + v_vel * e_v."""
    with np.errstate(all='ignore'):
        return u_vel * partial_u(surface, u, v) + v_vel * partial_v(surface, u, v)


__all__ = [
    "metric_from_bases",
    "metric",
    "inverse_metric",
    "quadratic_form",
    "norm_squared",
    "norm",
    "determinant",
    "tangent_vector",
]

# End of metric.py
