"""
Forward-difference calculus on functions of the surface parameters (u, v).

All derivatives use the fixed step DIFF_DELTA:

    f'(x) ~ (f(x + h) - f(x)) / h

Functions may be scalar- or vector-valued (numpy arrays). NaN and Infinity in
the underlying function propagate unchanged.
"""
from typing import Callable, Union

import numpy as np

from .surfaces import SurfaceFunction

# h in the difference quotient
DIFF_DELTA = 1e-4

Value = Union[float, np.ndarray]


def diff(f: Callable[[float], Value], x: float) -> Value:
    """Return f'(x)."""
    with np.errstate(all='ignore'):
        d = (np.asarray(f(x + DIFF_DELTA), dtype=float) - np.asarray(f(x), dtype=float)) / DIFF_DELTA
    return float(d) if d.ndim == 0 else d


def diff_wrt_u(f: Callable[[float, float], Value], u: float, v: float) -> Value:
    """Return df/du at (u, v)."""
    return diff(lambda u_: f(u_, v), u)


def diff_wrt_v(f: Callable[[float, float], Value], u: float, v: float) -> Value:
    """Return df/dv at (u, v)."""
    return diff(lambda v_: f(u, v_), v)


def partial_u(surface: SurfaceFunction, u: float, v: float) -> np.ndarray:
    """Tangent basis vector e_u = dr/du."""
    return diff_wrt_u(surface, u, v)


def partial_v(surface: SurfaceFunction, u: float, v: float) -> np.ndarray:
    """Tangent basis vector e_v = dr/dv."""
    return diff_wrt_v(surface, u, v)


__all__ = [
    "DIFF_DELTA",
    "diff",
    "diff_wrt_u",
    "diff_wrt_v",
    "partial_u",
    "partial_v",
]
