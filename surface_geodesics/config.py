"""
Simulation configuration: pydantic models loadable from YAML.

Example (sphere.yml):

    surface:
      preset: sphere
      parameters: {r: 2}
    initial:
      u: 1.5707963
      v: 0.0
      u_vel: 0.0
      v_vel: 1.0
    integration:
      dt: 0.01
      n_steps: 500
      solver: rk

Exports:
    - SurfaceConfig, InitialConditions, IntegrationConfig, SimulationConfig
    - load_config: YAML file + dotted key=value overrides -> SimulationConfig
    - apply_overrides: the override merge on a plain dict
"""

__all__ = [
    "SurfaceConfig",
    "InitialConditions",
    "IntegrationConfig",
    "SimulationConfig",
    "apply_overrides",
    "load_config",
]

import math
import re
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import Solver, VelocityMode
from .formulas import FormulaError, parse_formula, surface_from_formulas
from .integrators import GeodesicState, initial_state
from .logging import logger
from .presets import get_preset
from .surfaces import ParametricSurface

_PARAMETER_NAME = re.compile(r'^[a-df-tw-zA-Z]$')


class SurfaceConfig(BaseModel):
    """Either a preset name or three coordinate formulas."""
    model_config = ConfigDict(extra="forbid")

    preset: Optional[str] = Field(None, description="Preset name; 'sphere' when no formulas are given")
    x: Optional[str] = Field(None, description="x(u, v) formula")
    y: Optional[str] = Field(None, description="y(u, v) formula")
    z: Optional[str] = Field(None, description="z(u, v) formula")
    u_range: Optional[Tuple[float, float]] = None
    v_range: Optional[Tuple[float, float]] = None
    parameters: Dict[str, float] = Field(default_factory=dict)
    name: Optional[str] = None

    @field_validator("x", "y", "z", mode="before")
    @classmethod
    def numbers_as_formulas(cls, v):
        # YAML reads 'y: 0' as an int
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("parameters")
    @classmethod
    def single_letter_names(cls, v):
        for key in v:
            if not _PARAMETER_NAME.match(key):
                raise ValueError(
                    f"Parameter name {key!r} must be a single letter other than u, v or e"
                )
        return v

    @model_validator(mode="after")
    def preset_or_formulas(self):
        formulas = (self.x, self.y, self.z)
        if self.preset is None and all(f is None for f in formulas):
            self.preset = "sphere"
        if self.preset is not None:
            if any(f is not None for f in formulas):
                raise ValueError("Give either 'preset' or x/y/z formulas, not both")
            try:
                get_preset(self.preset)
            except KeyError as exc:
                raise ValueError(exc.args[0]) from None
        else:
            if any(f is None for f in formulas):
                raise ValueError("Custom surfaces need all three formulas x, y and z")
            for text in formulas:
                try:
                    parse_formula(text, self.parameters)
                except FormulaError as exc:
                    raise ValueError(str(exc)) from None
        return self

    def build(self) -> ParametricSurface:
        if self.preset is not None:
            p = get_preset(self.preset)
            return surface_from_formulas(
                p.x, p.y, p.z, {**p.parameters, **self.parameters},
                u_range=self.u_range or p.u_range,
                v_range=self.v_range or p.v_range,
                name=self.name or p.name,
                strict=True,
            )
        return surface_from_formulas(
            self.x, self.y, self.z, self.parameters,
            u_range=self.u_range or (0.0, 1.0),
            v_range=self.v_range or (0.0, 1.0),
            name=self.name or "custom",
            strict=True,
        )


class InitialConditions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    u: float = math.pi / 4
    v: float = 0.0
    u_vel: float = 1.0
    v_vel: float = 1.0


class IntegrationConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    dt: float = Field(0.05, description="Time step; negative runs backwards")
    n_steps: int = Field(50, ge=0)
    max_length: float = Field(0.0, ge=0, description="Metric length cap, 0 = unlimited")
    solver: Solver = Solver.RK
    sub_steps: int = Field(1, ge=1)
    time_scale: float = Field(1.0, gt=0)
    velocity_mode: VelocityMode = VelocityMode.RAW

    @field_validator("dt")
    @classmethod
    def nonzero_dt(cls, v):
        if v == 0 or not math.isfinite(v):
            raise ValueError("dt must be finite and non-zero")
        return v


class SimulationConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    surface: SurfaceConfig = Field(default_factory=SurfaceConfig)
    initial: InitialConditions = Field(default_factory=InitialConditions)
    integration: IntegrationConfig = Field(default_factory=IntegrationConfig)

    def build_surface(self) -> ParametricSurface:
        return self.surface.build()

    def initial_state(self, surface: Optional[ParametricSurface] = None) -> GeodesicState:
        surface = surface if surface is not None else self.build_surface()
        return initial_state(
            surface,
            (self.initial.u, self.initial.v),
            (self.initial.u_vel, self.initial.v_vel),
            self.integration.velocity_mode,
        )


def apply_overrides(data: Dict[str, Any], overrides: Iterable[str]) -> Dict[str, Any]:
    """
    Merge dotted overrides such as 'integration.dt=0.01' into data (in place).
    Values are parsed with yaml.safe_load, so '0.01', 'true' and '[0, 3.14]'
    become a float, a bool and a list.
    """
    for override in overrides:
        if "=" not in override:
            raise ValueError(f"Override {override!r} is not of the form key=value")
        key, val = override.split("=", 1)
        keys = key.strip().split(".")
        d = data
        for k in keys[:-1]:
            d = d.setdefault(k, {})
            if not isinstance(d, dict):
                raise ValueError(f"Cannot override {key!r}: {k!r} is not a mapping")
        try:
            d[keys[-1]] = yaml.safe_load(val)
        except yaml.YAMLError:
            # formulas such as '%u * 2' are not valid YAML scalars
            d[keys[-1]] = val
    return data


def load_config(path: Optional[Union[str, Path]] = None,
                overrides: Optional[Iterable[str]] = None) -> SimulationConfig:
    """
    Load a SimulationConfig from YAML, then apply dotted overrides.

    Raises:
        FileNotFoundError: if path does not exist.
        pydantic.ValidationError: if the merged data is invalid.
    """
    data: Dict[str, Any] = {}
    if path is not None:
        config_file = Path(path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        with open(config_file, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_file} must contain a mapping")
        logger.debug(f"Loaded config from {config_file}")
    if overrides:
        apply_overrides(data, overrides)
    return SimulationConfig.model_validate(data)
