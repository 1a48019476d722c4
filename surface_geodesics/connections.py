import numpy as np
from typing import Tuple

from .calculus import diff_wrt_u, diff_wrt_v, partial_u, partial_v
from .metric import metric_from_bases, inverse_metric
from .surfaces import SurfaceFunction


def christoffel_first_kind(surface: SurfaceFunction, u: float, v: float) -> np.ndarray:
    """
    Christoffel symbols of the first kind Gamma[k][i][j] = Gamma_{k,ij}.

    Uses the extrinsic definition Gamma_{k,ij} = (d e_i / d x^j) . e_k, so only
    derivatives of the tangent basis fields are needed, never an explicit
    second derivative formula of the position.
    Gamma[k, i, j] = Gamma[k, j, i]
    """
    with np.errstate(all='ignore'):
        # bases derivative; u_v = v_u
        u_u = diff_wrt_u(lambda u_, v_: partial_u(surface, u_, v_), u, v)
        u_v = diff_wrt_v(lambda u_, v_: partial_u(surface, u_, v_), u, v)
        v_v = diff_wrt_v(lambda u_, v_: partial_v(surface, u_, v_), u, v)

        e_u = partial_u(surface, u, v)
        e_v = partial_v(surface, u, v)

        uuu = np.dot(u_u, e_u)
        vuu = np.dot(u_u, e_v)
        uuv = np.dot(u_v, e_u)
        vuv = np.dot(u_v, e_v)
        uvv = np.dot(v_v, e_u)
        vvv = np.dot(v_v, e_v)

    return np.array([
        [
            [uuu, uuv],
            [uuv, uvv],
        ],
        [
            [vuu, vuv],
            [vuv, vvv],
        ],
    ])


def raise_index(ug: np.ndarray, csf: np.ndarray) -> np.ndarray:
    """
    Second kind from first kind: Gamma^k_ij = sum_m g^{km} Gamma_{m,ij}.
    The lower pair is written once per (i, j) with i <= j and mirrored.
    """
    css = np.empty((2, 2, 2))
    with np.errstate(all='ignore'):
        for k in range(2):
            uu = ug[k, 0] * csf[0, 0, 0] + ug[k, 1] * csf[1, 0, 0]
            uv = ug[k, 0] * csf[0, 0, 1] + ug[k, 1] * csf[1, 0, 1]
            vv = ug[k, 0] * csf[0, 1, 1] + ug[k, 1] * csf[1, 1, 1]
            css[k] = [[uu, uv], [uv, vv]]
    return css


def christoffel_second_kind(surface: SurfaceFunction, u: float, v: float) -> np.ndarray:
    """
    Christoffel symbols of the second kind Gamma[k][i][j] = Gamma^k_{ij}.
    k is contravariant; Gamma[k, i, j] = Gamma[k, j, i].
    """
    with np.errstate(all='ignore'):
        lg = metric_from_bases(partial_u(surface, u, v), partial_v(surface, u, v))
    ug = inverse_metric(lg)
    csf = christoffel_first_kind(surface, u, v)
    return raise_index(ug, csf)


def acceleration_from_symbols(css: np.ndarray, u_vel: float, v_vel: float) -> Tuple[float, float]:
    """a^k = -Gamma^k_ij v^i v^j for k in (u, v)."""
    with np.errstate(all='ignore'):
        du_vel_dt = -(css[0, 0, 0] * u_vel * u_vel + 2 * css[0, 0, 1] * u_vel * v_vel + css[0, 1, 1] * v_vel * v_vel)
        dv_vel_dt = -(css[1, 0, 0] * u_vel * u_vel + 2 * css[1, 0, 1] * u_vel * v_vel + css[1, 1, 1] * v_vel * v_vel)
    return float(du_vel_dt), float(dv_vel_dt)


def geodesic_acceleration(surface: SurfaceFunction, u: float, v: float,
                          u_vel: float, v_vel: float) -> Tuple[float, float]:
    """
    Right-hand side of the geodesic equation at (u, v) with velocity
    (u_vel, v_vel): returns (d u_vel / dt, d v_vel / dt).
    """
    return acceleration_from_symbols(christoffel_second_kind(surface, u, v), u_vel, v_vel)


__all__ = [
    "christoffel_first_kind",
    "christoffel_second_kind",
    "raise_index",
    "acceleration_from_symbols",
    "geodesic_acceleration",
]

# End of connections.py
