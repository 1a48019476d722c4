# surfaces.py: parametric surfaces, the NaN sentinel and symbolic reference geometry
from __future__ import annotations
import functools
import sympy as sp
from sympy import Expr, Symbol, sympify, lambdify, Matrix, diff
from typing import Callable, List, Tuple, Optional, Sequence, Any
import numpy as np

# A surface function maps parameter coordinates (u, v) to a point in R^3.
SurfaceFunction = Callable[[float, float], np.ndarray]

# Default parameter symbols shared by formula-built surfaces
U, V = sp.symbols('u v', real=True)


# -------------------------- Position helpers --------------------------
def nan_position() -> np.ndarray:
    """Fresh 'surface undefined here' sentinel."""
    return np.full(3, np.nan)


def as_position(value: Any) -> np.ndarray:
    """
    Coerce a surface evaluation to a float64 array of shape (3,).
    Raises ValueError/TypeError when the value is not a 3-vector.
    """
    arr = np.asarray(value, dtype=float)
    if arr.size != 3:
        raise ValueError(f"Surface must evaluate to 3 components, got {arr.size}.")
    return arr.reshape(3).copy()


def finite_or_nan(position: np.ndarray) -> np.ndarray:
    """Position unchanged when every component is finite, else the sentinel."""
    if np.all(np.isfinite(position)):
        return position
    return nan_position()


def total(fn: Callable[[float, float], Any]) -> SurfaceFunction:
    """
    Wrap an arbitrary callable into a total surface function: any exception
    raised by the callable, and any non-finite component, comes back as the
    NaN sentinel instead of propagating.
    """
    @functools.wraps(fn)
    def evaluate(u: float, v: float) -> np.ndarray:
        with np.errstate(all='ignore'):
            try:
                return finite_or_nan(as_position(fn(u, v)))
            except Exception:
                return nan_position()
    return evaluate


# -------------------------- Parameter ranges --------------------------
class Range(tuple):
    """
    Closed display interval (lo, hi) for one surface parameter. Only used for
    tessellation and plotting, never by the integrator.
    """
    def __new__(cls, lo: float, hi: float):
        return super().__new__(cls, (float(lo), float(hi)))

    @property
    def lo(self) -> float:
        return self[0]

    @property
    def hi(self) -> float:
        return self[1]

    def linspace(self, num: int) -> np.ndarray:
        return np.linspace(self.lo, self.hi, num)


# ------------------------ Parametric Surface ------------------------
class ParametricSurface:
    """
    Symbolic map (u, v) -> R^3, lambdified once for numeric evaluation.

    Calling the surface is total: evaluation failures, non-finite components
    and non-3-vector results return the NaN sentinel. The symbolic expressions
    are kept so the exact induced metric and Christoffel symbols can be derived
    for reference.

    Attributes:
        coords: the two sympy Symbols (u, v).
        map_exprs: x, y, z expressions in the coords.
        u_range, v_range: display ranges.
    """
    def __init__(
        self,
        map_exprs: Sequence[Any],
        coords: Optional[List[Symbol]] = None,
        u_range: Tuple[float, float] = (0.0, 1.0),
        v_range: Tuple[float, float] = (0.0, 1.0),
        name: str = "surface",
    ):
        self.coords = list(coords) if coords is not None else [U, V]
        if len(self.coords) != 2:
            raise ValueError(f"A surface needs exactly 2 coordinates, got {len(self.coords)}.")
        if len(map_exprs) != 3:
            raise ValueError(f"A surface needs exactly 3 map expressions, got {len(map_exprs)}.")
        self.map_exprs: List[Expr] = [sympify(expr) for expr in map_exprs]
        self.u_range = Range(*u_range)
        self.v_range = Range(*v_range)
        self.name = name
        self._func = lambdify(self.coords, self.map_exprs, 'numpy')
        self._metric_func = None
        self._gamma_func = None

    def __repr__(self) -> str:
        return f"<ParametricSurface '{self.name}' {self.map_exprs}>"

    def __call__(self, u: float, v: float) -> np.ndarray:
        with np.errstate(all='ignore'):
            try:
                return finite_or_nan(as_position(self._func(u, v)))
            except Exception:
                return nan_position()

    def sample_grid(self, resolution: int = 25) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Tessellate u_range x v_range into (X, Y, Z) arrays of shape
        (resolution, resolution), ready for plot_surface.
        """
        uu, vv = np.meshgrid(self.u_range.linspace(resolution), self.v_range.linspace(resolution))
        with np.errstate(all='ignore'):
            try:
                vals = self._func(uu, vv)
                X, Y, Z = [np.broadcast_to(np.asarray(c, dtype=float), uu.shape).copy() for c in vals]
            except (ArithmeticError, ValueError, TypeError):
                X, Y, Z = [np.full(uu.shape, np.nan) for _ in range(3)]
        return X, Y, Z

    # ---------- Exact (symbolic) intrinsic geometry ----------
    def jacobian(self) -> Matrix:
        """Symbolic Jacobian of the embedding (3 x 2)."""
        return Matrix(self.map_exprs).jacobian(self.coords)

    def _compute_intrinsics(self):
        """
        Induced metric g = J^T J and Levi-Civita Christoffel symbols, lambdified.
        """
        J = self.jacobian()
        g = J.T * J
        det = g[0, 0] * g[1, 1] - g[0, 1] ** 2
        invg = Matrix([[g[1, 1], -g[0, 1]], [-g[0, 1], g[0, 0]]]) / det
        coords = self.coords
        Gamma = [[[
            sum(invg[k, m] * (diff(g[m, j], coords[i]) +
                              diff(g[m, i], coords[j]) -
                              diff(g[i, j], coords[m]))
                for m in range(2)) / 2
            for j in range(2)] for i in range(2)] for k in range(2)]
        self._metric_func = lambdify(coords, g.tolist(), 'numpy')
        self._gamma_func = lambdify(coords, Gamma, 'numpy')

    def exact_metric(self, u: float, v: float) -> np.ndarray:
        """Metric tensor from symbolic differentiation, shape (2, 2)."""
        if self._metric_func is None:
            self._compute_intrinsics()
        with np.errstate(all='ignore'):
            return np.array(self._metric_func(u, v), dtype=float)

    def exact_christoffel(self, u: float, v: float) -> np.ndarray:
        """Christoffel symbols of the second kind Gamma[k][i][j], shape (2, 2, 2)."""
        if self._gamma_func is None:
            self._compute_intrinsics()
        with np.errstate(all='ignore'):
            return np.array(self._gamma_func(u, v), dtype=float)


def undefined_surface(u_range: Tuple[float, float] = (0.0, 1.0),
                      v_range: Tuple[float, float] = (0.0, 1.0),
                      name: str = "undefined") -> ParametricSurface:
    """Surface that is NaN everywhere, used when a definition cannot be built."""
    return ParametricSurface([sp.nan, sp.nan, sp.nan], u_range=u_range, v_range=v_range, name=name)


# ---------------------- Module Export ----------------------
__all__ = [
    'SurfaceFunction', 'U', 'V',
    'nan_position', 'as_position', 'finite_or_nan', 'total',
    'Range', 'ParametricSurface', 'undefined_surface',
]
