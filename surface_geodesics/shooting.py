"""
Shooting method: search launch directions at a start point for the geodesic
that passes closest to a target point in parameter space.

This is an approximate boundary-seeking helper on top of the initial-value
integrator. It does not look for the globally shortest path.
"""
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np
from scipy.optimize import minimize_scalar

from .enums import Solver
from .integrators import GeodesicState, resolve_solver
from .logging import logger
from .metric import norm
from .solver import solve_geodesic
from .surfaces import SurfaceFunction


@dataclass(frozen=True)
class ShootingResult:
    angle: float
    velocity: Tuple[float, float]
    path: np.ndarray
    miss: float
    converged: bool


def launch_velocity(surface: SurfaceFunction, start: Tuple[float, float], angle: float,
                    speed: float = 1.0) -> Tuple[float, float]:
    """
    Parameter-space direction (cos angle, sin angle) scaled to metric speed
    `speed` at start. Degenerate metrics leave the raw direction.
    """
    direction = (np.cos(angle), np.sin(angle))
    length = norm(surface, start[0], start[1], direction[0], direction[1])
    if not np.isfinite(length) or length == 0:
        return float(direction[0]), float(direction[1])
    return float(speed * direction[0] / length), float(speed * direction[1] / length)


def _closest_approach(path: np.ndarray, target: Tuple[float, float]) -> Tuple[int, float]:
    dist = np.hypot(path[:, 0] - target[0], path[:, 1] - target[1])
    if not np.any(np.isfinite(dist)):
        return 0, float('inf')
    idx = int(np.nanargmin(dist))
    return idx, float(dist[idx])


def shoot_geodesic(
    surface: SurfaceFunction,
    start: Tuple[float, float],
    target: Tuple[float, float],
    speed: float = 1.0,
    dt: float = 0.05,
    n_steps: int = 200,
    n_angles: int = 36,
    solver: Union[Solver, str] = Solver.RK,
    tolerance: float = 1e-2,
) -> ShootingResult:
    """
    Find the launch angle whose geodesic passes closest to target.

    Samples n_angles directions evenly on [0, 2 pi), then refines the best one
    with a bounded scalar minimization between its neighbours.

    Returns:
        ShootingResult with the path truncated at the closest approach.
    """
    if n_angles < 1:
        raise ValueError(f"n_angles must be >= 1, got {n_angles}")
    solver = resolve_solver(solver)

    def trace(angle: float):
        vel = launch_velocity(surface, start, angle, speed)
        path = solve_geodesic(surface, GeodesicState(start[0], start[1], vel[0], vel[1]),
                              dt, n_steps, solver=solver)
        idx, miss = _closest_approach(path, target)
        return vel, path[:idx + 1], miss

    step = 2 * np.pi / n_angles
    angles = np.arange(n_angles) * step
    misses = [trace(a)[2] for a in angles]
    best = int(np.argmin(misses))
    best_angle = float(angles[best])
    logger.debug(f"shoot_geodesic: coarse best angle {best_angle:.4f}, miss {misses[best]:.4g}")

    if n_angles > 1 and np.isfinite(misses[best]):
        res = minimize_scalar(
            lambda a: trace(a)[2],
            bounds=(best_angle - step, best_angle + step),
            method='bounded',
            options={'xatol': 1e-6},
        )
        if np.isfinite(res.fun) and res.fun <= misses[best]:
            best_angle = float(res.x)

    vel, path, miss = trace(best_angle)
    converged = bool(miss <= tolerance)
    logger.info(
        f"shoot_geodesic: angle={best_angle:.6f} miss={miss:.4g} converged={converged}"
    )
    return ShootingResult(
        angle=float(np.mod(best_angle, 2 * np.pi)),
        velocity=vel,
        path=path,
        miss=miss,
        converged=converged,
    )


__all__ = [
    "ShootingResult",
    "launch_velocity",
    "shoot_geodesic",
]
