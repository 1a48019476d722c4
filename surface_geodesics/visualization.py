"""
Matplotlib consumers of geodesic paths.

- plot_surface_path: the surface tessellated over its display ranges with the
  geodesic trace mapped through it to 3D.
- plot_parameter_path: the same path on the flat (u, v) parameter board.
- plot_geodesic_figure: both side by side, as written by the CLI.

Rendering stops at the first non-finite point of a path, so a trace that
leaves the surface's domain is drawn up to where it was still defined.
"""

import os
from typing import Optional, Tuple

import matplotlib
import numpy as np

from .logging import logger
from .solver import embed_path
from .surfaces import ParametricSurface, SurfaceFunction

# Headless sessions (CI, ssh) get the non-interactive backend
if os.environ.get('DISPLAY', '') == '' and os.name != 'nt':
    logger.debug("No display found; using the non-interactive Agg backend")
    matplotlib.use('Agg')

import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401  registers the 3d projection


def finite_prefix(points) -> np.ndarray:
    """Leading rows of points that are entirely finite."""
    pts = np.asarray(points, dtype=float)
    if len(pts) == 0:
        return pts
    bad = ~np.all(np.isfinite(pts), axis=1)
    if bad.any():
        return pts[:int(np.argmax(bad))]
    return pts


def _clean_3d_axes(ax):
    ax.set_axis_off()
    ax.xaxis.set_pane_color((1.0, 1.0, 1.0, 0.0))
    ax.yaxis.set_pane_color((1.0, 1.0, 1.0, 0.0))
    ax.zaxis.set_pane_color((1.0, 1.0, 1.0, 0.0))
    ax.grid(False)


def plot_surface_path(surface: ParametricSurface, path, ax=None, resolution: int = 30,
                      color: str = 'lightblue', surface_alpha: float = 0.3,
                      path_color: str = 'r', linewidth: float = 2):
    """Plot the surface and the geodesic trace on a 3D axis; returns the axis."""
    if ax is None:
        fig = plt.figure(figsize=(10, 10))
        ax = fig.add_subplot(111, projection='3d')
    _clean_3d_axes(ax)

    X, Y, Z = surface.sample_grid(resolution)
    if np.isfinite(X).any():
        ax.plot_surface(X, Y, Z, alpha=surface_alpha, color=color)

    # Positions, not parameters, decide where drawing stops
    points = finite_prefix(embed_path(surface, path))
    if len(points):
        ax.plot(points[:, 0], points[:, 1], points[:, 2], color=path_color, linewidth=linewidth)
        ax.scatter([points[0, 0]], [points[0, 1]], [points[0, 2]], color='blue', s=60)

    ax.set_title(f'Geodesic on {surface.name}')
    return ax


def plot_parameter_path(surface: ParametricSurface, path, ax=None,
                        path_color: str = 'r', linewidth: float = 1.5):
    """Plot the path on the (u, v) board bounded by the surface display ranges."""
    if ax is None:
        fig = plt.figure(figsize=(6, 6))
        ax = fig.add_subplot(111)

    points = finite_prefix(np.asarray(path, dtype=float).reshape(-1, 2))
    if len(points):
        ax.plot(points[:, 0], points[:, 1], color=path_color, linewidth=linewidth)
        ax.scatter([points[0, 0]], [points[0, 1]], color='blue', s=30, zorder=3)

    ax.set_xlim(surface.u_range.lo, surface.u_range.hi)
    ax.set_ylim(surface.v_range.lo, surface.v_range.hi)
    ax.set_xlabel('u')
    ax.set_ylabel('v')
    ax.grid(True, linestyle=':', alpha=0.5)
    ax.set_title('Parameter plane')
    return ax


def plot_geodesic_figure(surface: ParametricSurface, path, title: Optional[str] = None,
                         resolution: int = 30, figsize: Tuple[float, float] = (14, 7)):
    """Figure with the 3D trace on the left and the parameter board on the right."""
    fig = plt.figure(figsize=figsize)
    ax3d = fig.add_subplot(1, 2, 1, projection='3d')
    ax2d = fig.add_subplot(1, 2, 2)
    plot_surface_path(surface, path, ax=ax3d, resolution=resolution)
    plot_parameter_path(surface, path, ax=ax2d)
    if title:
        fig.suptitle(title)
    return fig


__all__ = [
    "finite_prefix",
    "plot_surface_path",
    "plot_parameter_path",
    "plot_geodesic_figure",
]
