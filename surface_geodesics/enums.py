# surface_geodesics/enums.py

from enum import Enum


class Solver(str, Enum):
    """Integration scheme used by the geodesic stepper."""
    RK = "rk"        # classic 4th-order Runge-Kutta
    EULER = "euler"  # explicit Euler, first order


class VelocityMode(str, Enum):
    """How the initial parameter-space velocity is interpreted."""
    RAW = "raw"    # used as given; its metric length is the traversal speed
    UNIT = "unit"  # rescaled to unit metric length at the start point


__all__ = [
    "Solver",
    "VelocityMode",
]
