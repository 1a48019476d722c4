"""surface_geodesics/ # root package
├── __init__.py # imports and version info
├── enums.py # Solver, VelocityMode
├── surfaces.py # ParametricSurface, NaN sentinel, exact reference geometry
├── calculus.py # forward differences, tangent bases
├── metric.py # metric tensor, closed-form inverse, metric norm
├── connections.py # Christoffel symbols, geodesic acceleration
├── integrators.py # GeodesicState, Euler / RK4 steps
├── solver.py # batch solve, reference solve, GeodesicAnimator
├── shooting.py # launch-angle search towards a target point
├── formulas.py # %u/%v formula parser -> sympy
├── presets.py # preset surface catalogue
├── config.py # pydantic / YAML configuration
├── logging.py # loguru setup
├── visualization.py # matplotlib path plots
└── cli.py # typer command line"""

# surface_geodesics/__init__.py
"""
surface_geodesics: particles sliding along geodesics of parametric surfaces.

Modules:
  surfaces      - ParametricSurface (sympy map, lambdified) and its exact geometry
  calculus      - forward-difference partial derivatives and tangent bases
  metric        - induced metric, inverse metric, metric norm
  connections   - Christoffel symbols of the first and second kind
  integrators   - one Euler / RK4 step of the geodesic equation
  solver        - bounded batch solve, scipy reference solve, frame animator
  shooting      - shooting method between two parameter points
  formulas      - safe parser for '%u'-style surface formulas
  presets       - sphere, torus, saddle and the other preset surfaces
  config        - SimulationConfig and load_config
  visualization - matplotlib plots (import explicitly, pulls in pyplot)
  cli           - 'surface-geodesics' command line

Usage:
  from surface_geodesics import preset_surface, initial_state, solve_geodesic
  sphere = preset_surface("sphere", r=2)
  path = solve_geodesic(sphere, initial_state(sphere, (1.57, 0.0), (0.0, 1.0)), 0.01, 300)
"""
__version__ = "0.1.0"

# core imports
from .enums import Solver, VelocityMode
from .surfaces import ParametricSurface, Range, nan_position, total, undefined_surface
from .calculus import DIFF_DELTA, diff, partial_u, partial_v
from .metric import metric, inverse_metric, norm
from .connections import christoffel_first_kind, christoffel_second_kind, geodesic_acceleration
from .integrators import GeodesicState, euler_step, rk4_step, geodesic_step, initial_state
from .solver import (
    AnimationSnapshot, GeodesicAnimator, path_length, reference_geodesic, solve_geodesic,
)
from .shooting import ShootingResult, shoot_geodesic
from .formulas import FormulaError, find_parameters, parse_formula, surface_from_formulas
from .presets import PRESETS, PRESET_NAMES, get_preset, preset_surface
from .config import SimulationConfig, load_config

# package-level shortcuts
__all__ = [
    "Solver", "VelocityMode",
    "ParametricSurface", "Range", "nan_position", "total", "undefined_surface",
    "DIFF_DELTA", "diff", "partial_u", "partial_v",
    "metric", "inverse_metric", "norm",
    "christoffel_first_kind", "christoffel_second_kind", "geodesic_acceleration",
    "GeodesicState", "euler_step", "rk4_step", "geodesic_step", "initial_state",
    "AnimationSnapshot", "GeodesicAnimator", "path_length", "reference_geodesic", "solve_geodesic",
    "ShootingResult", "shoot_geodesic",
    "FormulaError", "find_parameters", "parse_formula", "surface_from_formulas",
    "PRESETS", "PRESET_NAMES", "get_preset", "preset_surface",
    "SimulationConfig", "load_config",
]
