"""
Path solvers built on the one-step integrators.

- solve_geodesic: bounded batch solve returning the whole discrete path.
- reference_geodesic: adaptive scipy solve on the exact symbols, for checks.
- embed_path: a parameter-space path mapped through the surface to 3D.
- GeodesicAnimator: the mutable ODE-state cell an animation driver ticks once
  per displayed frame.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np
from scipy.integrate import solve_ivp

from .connections import acceleration_from_symbols
from .enums import Solver
from .integrators import GeodesicState, geodesic_step, resolve_solver
from .logging import logger
from .metric import metric, quadratic_form
from .surfaces import ParametricSurface, SurfaceFunction

ParameterPoint = Tuple[float, float]


def step_length(surface: SurfaceFunction, before: ParameterPoint, after: ParameterPoint) -> float:
    """
    Metric-weighted length of the displacement before -> after, using the
    metric at the pre-step point.
    """
    du = after[0] - before[0]
    dv = after[1] - before[1]
    g = metric(surface, before[0], before[1])
    with np.errstate(all='ignore'):
        return float(np.sqrt(quadratic_form(g, du, dv)))


def path_length(surface: SurfaceFunction, path) -> float:
    """Sum of step_length over consecutive points of a parameter-space path."""
    pts = np.asarray(path, dtype=float)
    total = 0.0
    for before, after in zip(pts[:-1], pts[1:]):
        total += step_length(surface, before, after)
    return total


def embed_path(surface: SurfaceFunction, path) -> np.ndarray:
    """Map (n, 2) parameter points through the surface; returns (n, 3)."""
    pts = np.asarray(path, dtype=float).reshape(-1, 2)
    if len(pts) == 0:
        return np.empty((0, 3))
    return np.array([surface(u, v) for u, v in pts])


def solve_geodesic(
    surface: SurfaceFunction,
    state: GeodesicState,
    dt: float,
    n_steps: int,
    max_length: float = 0.0,
    solver: Union[Solver, str] = Solver.EULER,
) -> np.ndarray:
    """
    Integrate from state for at most n_steps steps of size dt.

    Stops early once the accumulated metric length reaches max_length; the
    step that crosses the cap is kept. max_length == 0 means unlimited.

    Returns:
        ndarray of shape (n, 2): parameter-space points, starting with the
        initial point.
    """
    solver = resolve_solver(solver)
    path = [state.point]
    length = 0.0
    for _ in range(max(int(n_steps), 0)):
        new_state = geodesic_step(surface, state, dt, solver)
        length += step_length(surface, state.point, new_state.point)
        path.append(new_state.point)
        state = new_state
        if max_length > 0 and length >= max_length:
            break
    logger.debug(
        f"solve_geodesic: {len(path) - 1} {solver.value} steps, dt={dt}, length={length:.6g}"
    )
    return np.array(path, dtype=float)


def reference_geodesic(
    surface: ParametricSurface,
    state: GeodesicState,
    t_span: Tuple[float, float],
    num: int = 100,
    method: str = 'RK45',
    rtol: float = 1e-9,
    atol: float = 1e-9,
) -> np.ndarray:
    """
    Adaptive scipy integration of the geodesic equation with the exact
    (symbolic) Christoffel symbols of a ParametricSurface.

    Returns:
        ndarray of shape (num, 2) sampled evenly over t_span, or fewer rows
        if the integrator stopped early.
    """
    def geodesic_eq(t, y):
        u, v, du, dv = y
        css = surface.exact_christoffel(u, v)
        ddu, ddv = acceleration_from_symbols(css, du, dv)
        return [du, dv, ddu, ddv]

    sol = solve_ivp(
        geodesic_eq,
        t_span,
        list(state),
        t_eval=np.linspace(t_span[0], t_span[1], num),
        method=method,
        rtol=rtol,
        atol=atol,
    )
    if not sol.success:
        logger.warning(f"reference_geodesic: {sol.message}")
    return np.column_stack([sol.y[0], sol.y[1]])


# ---------------------- Incremental animation ----------------------
@dataclass(frozen=True)
class AnimationSnapshot:
    """Immutable view of an animator for the rendering layer."""
    state: GeodesicState
    path: Tuple[ParameterPoint, ...]
    steps: int
    length: float
    finished: bool


@dataclass
class GeodesicAnimator:
    """
    Mutable ODE-state cell owned by an animation driver.

    Each tick integrates sub_steps steps with dt = elapsed * time_scale / sub_steps
    and appends the emitted points to path. The path starts empty; the
    driver decides when to reset. Optional max_steps / max_length budgets
    finish the animation (further ticks emit nothing).
    """
    surface: SurfaceFunction
    state: GeodesicState
    solver: Union[Solver, str] = Solver.RK
    sub_steps: int = 1
    time_scale: float = 1.0
    max_steps: Optional[int] = None
    max_length: float = 0.0
    path: List[ParameterPoint] = field(default_factory=list)
    steps: int = 0
    length: float = 0.0

    def __post_init__(self):
        self.solver = resolve_solver(self.solver)
        if self.sub_steps < 1:
            raise ValueError(f"sub_steps must be >= 1, got {self.sub_steps}")
        self._initial = self.state

    @property
    def finished(self) -> bool:
        if self.max_steps is not None and self.steps >= self.max_steps:
            return True
        return self.max_length > 0 and self.length >= self.max_length

    def tick(self, elapsed: float) -> List[ParameterPoint]:
        """Advance by one displayed frame of elapsed seconds; return new points."""
        emitted: List[ParameterPoint] = []
        dt = elapsed * self.time_scale / self.sub_steps
        for _ in range(self.sub_steps):
            if self.finished:
                break
            new_state = geodesic_step(self.surface, self.state, dt, self.solver)
            self.length += step_length(self.surface, self.state.point, new_state.point)
            self.steps += 1
            self.state = new_state
            emitted.append(new_state.point)
        self.path.extend(emitted)
        return emitted

    def reset(self, state: Optional[GeodesicState] = None) -> None:
        """Clear the path; restart from state (or the last initial state)."""
        if state is not None:
            self._initial = state
        self.state = self._initial
        self.path = []
        self.steps = 0
        self.length = 0.0
        logger.debug(f"GeodesicAnimator reset to {self.state}")

    def snapshot(self) -> AnimationSnapshot:
        return AnimationSnapshot(
            state=self.state,
            path=tuple(self.path),
            steps=self.steps,
            length=self.length,
            finished=self.finished,
        )


__all__ = [
    "ParameterPoint",
    "step_length",
    "path_length",
    "embed_path",
    "solve_geodesic",
    "reference_geodesic",
    "AnimationSnapshot",
    "GeodesicAnimator",
]
