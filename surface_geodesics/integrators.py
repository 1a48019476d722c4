"""
One-step integrators for the geodesic equation

    u''^k + Gamma^k_ij u'^i u'^j = 0

written as the first-order system d(point)/dt = velocity,
d(velocity)/dt = acceleration(point, velocity).

Every step takes a full GeodesicState and returns a new one; nothing is
mutated. Degenerate surfaces produce NaN states rather than exceptions.
"""
from typing import NamedTuple, Tuple, Union

import numpy as np

from .connections import geodesic_acceleration
from .enums import Solver, VelocityMode
from .metric import norm
from .surfaces import SurfaceFunction


class GeodesicState(NamedTuple):
    """Point and velocity in parameter space."""
    u: float
    v: float
    u_vel: float
    v_vel: float

    @property
    def point(self) -> Tuple[float, float]:
        return (self.u, self.v)

    @property
    def velocity(self) -> Tuple[float, float]:
        return (self.u_vel, self.v_vel)

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self)))


def euler_step(surface: SurfaceFunction, state: GeodesicState, dt: float) -> GeodesicState:
    """Explicit Euler; acceleration evaluated at the current point."""
    u, v, u_vel, v_vel = state
    with np.errstate(all='ignore'):
        new_u = u + u_vel * dt
        new_v = v + v_vel * dt

        u_acc, v_acc = geodesic_acceleration(surface, u, v, u_vel, v_vel)
        new_u_vel = u_vel + u_acc * dt
        new_v_vel = v_vel + v_acc * dt

    return GeodesicState(float(new_u), float(new_v), float(new_u_vel), float(new_v_vel))


def rk4_step(surface: SurfaceFunction, state: GeodesicState, dt: float) -> GeodesicState:
    """Classic 4th-order Runge-Kutta; four Christoffel evaluations per step."""
    u, v, u_vel, v_vel = state
    with np.errstate(all='ignore'):
        k1 = (u_vel, v_vel)
        l1 = geodesic_acceleration(surface, u, v, u_vel, v_vel)

        k2 = (u_vel + 0.5 * dt * l1[0], v_vel + 0.5 * dt * l1[1])
        l2 = geodesic_acceleration(surface, u + 0.5 * dt * k1[0], v + 0.5 * dt * k1[1], k2[0], k2[1])

        k3 = (u_vel + 0.5 * dt * l2[0], v_vel + 0.5 * dt * l2[1])
        l3 = geodesic_acceleration(surface, u + 0.5 * dt * k2[0], v + 0.5 * dt * k2[1], k3[0], k3[1])

        k4 = (u_vel + dt * l3[0], v_vel + dt * l3[1])
        l4 = geodesic_acceleration(surface, u + dt * k3[0], v + dt * k3[1], k4[0], k4[1])

        new_u = u + dt / 6 * (k1[0] + 2 * k2[0] + 2 * k3[0] + k4[0])
        new_v = v + dt / 6 * (k1[1] + 2 * k2[1] + 2 * k3[1] + k4[1])
        new_u_vel = u_vel + dt / 6 * (l1[0] + 2 * l2[0] + 2 * l3[0] + l4[0])
        new_v_vel = v_vel + dt / 6 * (l1[1] + 2 * l2[1] + 2 * l3[1] + l4[1])

    return GeodesicState(float(new_u), float(new_v), float(new_u_vel), float(new_v_vel))


_STEPPERS = {
    Solver.RK: rk4_step,
    Solver.EULER: euler_step,
}


def resolve_solver(solver: Union[Solver, str]) -> Solver:
    """Accept a Solver or its string value ("rk" / "euler")."""
    try:
        return Solver(solver)
    except ValueError:
        raise ValueError(
            f"Unknown solver {solver!r}; expected one of {[s.value for s in Solver]}"
        ) from None


def geodesic_step(surface: SurfaceFunction, state: GeodesicState, dt: float,
                  solver: Union[Solver, str] = Solver.RK) -> GeodesicState:
    """Advance state by dt with the selected scheme (RK4 by default)."""
    return _STEPPERS[resolve_solver(solver)](surface, state, dt)


def initial_state(surface: SurfaceFunction, point: Tuple[float, float], velocity: Tuple[float, float],
                  mode: Union[VelocityMode, str] = VelocityMode.RAW) -> GeodesicState:
    """
    Build the starting state. With VelocityMode.UNIT the velocity is rescaled
    to unit metric length at the start point; a zero or non-finite length
    leaves it untouched.
    """
    u, v = float(point[0]), float(point[1])
    u_vel, v_vel = float(velocity[0]), float(velocity[1])
    if VelocityMode(mode) is VelocityMode.UNIT:
        length = norm(surface, u, v, u_vel, v_vel)
        if np.isfinite(length) and length > 0:
            u_vel, v_vel = u_vel / length, v_vel / length
    return GeodesicState(u, v, u_vel, v_vel)


__all__ = [
    "GeodesicState",
    "euler_step",
    "rk4_step",
    "resolve_solver",
    "geodesic_step",
    "initial_state",
]
