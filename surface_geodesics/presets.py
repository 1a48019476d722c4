"""
Preset surface catalogue: formulas, display ranges and default parameters.
"""
from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple

import numpy as np

from .formulas import surface_from_formulas
from .surfaces import ParametricSurface

# Ranges starting at 1e-20 keep the tessellation off the coordinate pole.
_TINY = 1e-20
_TWO_PI = 2 * np.pi


@dataclass(frozen=True)
class Preset:
    name: str
    x: str
    y: str
    z: str
    u_range: Tuple[float, float]
    v_range: Tuple[float, float]
    parameters: Mapping[str, float] = field(default_factory=dict)

    def surface(self, **overrides: float) -> ParametricSurface:
        params: Dict[str, float] = {**self.parameters, **overrides}
        return surface_from_formulas(
            self.x, self.y, self.z, params,
            u_range=self.u_range, v_range=self.v_range, name=self.name, strict=True,
        )


PRESETS: Dict[str, Preset] = {p.name: p for p in [
    Preset("plane", "%u", "%y", "%v",
           (-10, 10), (-10, 10), {"y": 0}),
    Preset("sphere", "%r * sin(%u) * cos(%v)", "%r * cos(%u)", "%r * sin(%u) * sin(%v)",
           (_TINY, np.pi), (0, _TWO_PI), {"r": 5}),
    Preset("cylinder", "%r * cos(%v)", "%u", "-%r * sin(%v)",
           (-10, 10), (0, _TWO_PI), {"r": 5}),
    Preset("cone", "%u * cos(%v)", "%h - %u", "%u * sin(%v)",
           (_TINY, 5), (0, _TWO_PI), {"h": 5}),
    Preset("ellipsoid", "%a * sin(%u) * cos(%v)", "%b * cos(%u)", "%c * sin(%u) * sin(%v)",
           (_TINY, np.pi), (0, _TWO_PI), {"a": 2, "b": 3, "c": 4}),
    Preset("torus", "(%R + %r * cos(%u)) * cos(%v)", "%r * sin(%u)", "(%R + %r * cos(%u)) * sin(%v)",
           (0, _TWO_PI), (0, _TWO_PI), {"R": 5, "r": 1}),
    Preset("saddle", "%u", "(%u^2 - %v^2) / %s", "%v",
           (-10, 10), (-10, 10), {"s": 10}),
    Preset("hyperboloid1", "%a * cosh(%u) * cos(%v)", "%b * sinh(%u)", "%c * cosh(%u) * sin(%v)",
           (-2, 2), (0, _TWO_PI), {"a": 1, "b": 1, "c": 1}),
    Preset("hyperboloid2", "%a * sinh(%u) * cos(%v)", "%b * cosh(%u)", "%c * sinh(%u) * sin(%v)",
           (0, 2.5), (0, _TWO_PI), {"a": 1, "b": 1, "c": 1}),
    Preset("paraboloid", "%u * cos(%v)", "%u^2", "%u * sin(%v)",
           (_TINY, 2.5), (0, _TWO_PI)),
    Preset("crossed-through", "%u", "%u^2 * %v^2 / %s", "%v",
           (-20, 20), (-20, 20), {"s": 1000}),
]}

PRESET_NAMES: Tuple[str, ...] = tuple(PRESETS)


def get_preset(name: str) -> Preset:
    """Look up a preset; 'crossed through' and 'Crossed-Through' both resolve."""
    key = name.strip().lower().replace(' ', '-').replace('_', '-')
    try:
        return PRESETS[key]
    except KeyError:
        raise KeyError(f"Unknown preset {name!r}; available: {', '.join(PRESET_NAMES)}") from None


def preset_surface(name: str, **overrides: float) -> ParametricSurface:
    """Build the named preset, with parameter overrides such as r=2."""
    return get_preset(name).surface(**overrides)


__all__ = [
    "Preset",
    "PRESETS",
    "PRESET_NAMES",
    "get_preset",
    "preset_surface",
]
