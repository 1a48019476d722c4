"""
Demo script for geodesics on the sphere using surface_geodesics.
Covers: preset surfaces, finite-difference vs exact Christoffel symbols,
Euler vs RK4, the length cap, the frame animator and the shooting method.
"""
import os

import numpy as np
import matplotlib.pyplot as plt

from surface_geodesics import (
    GeodesicAnimator,
    GeodesicState,
    VelocityMode,
    christoffel_second_kind,
    initial_state,
    path_length,
    preset_surface,
    shoot_geodesic,
    solve_geodesic,
)
from surface_geodesics.visualization import plot_geodesic_figure, plot_surface_path


def save_matplotlib_figure(fig, filename):
    """Save a figure at print quality and close it."""
    fig.savefig(filename, bbox_inches='tight', dpi=200)
    plt.close(fig)


def main():
    os.makedirs("figures", exist_ok=True)
    sphere = preset_surface("sphere", r=2)

    print("\n1. Christoffel symbols")
    print("----------------------")
    u, v = 1.0, 0.3
    numeric = christoffel_second_kind(sphere, u, v)
    exact = sphere.exact_christoffel(u, v)
    print(f"Gamma^u_vv  numeric {numeric[0, 1, 1]: .6f}  exact {exact[0, 1, 1]: .6f}")
    print(f"Gamma^v_uv  numeric {numeric[1, 0, 1]: .6f}  exact {exact[1, 0, 1]: .6f}")

    print("\n2. Great circle along the equator")
    print("---------------------------------")
    start = initial_state(sphere, (np.pi / 2, 0.0), (0.0, 1.0), VelocityMode.UNIT)
    dt = 0.05
    for solver in ("euler", "rk"):
        path = solve_geodesic(sphere, start, dt, int(round(4 * np.pi / dt)), solver=solver)
        print(f"{solver:>5}: length {path_length(sphere, path):.4f} (2 pi r = {4 * np.pi:.4f}), "
              f"max |u - pi/2| = {np.max(np.abs(path[:, 0] - np.pi / 2)):.2e}")
    fig = plot_geodesic_figure(sphere, path, title="Equator")
    save_matplotlib_figure(fig, "figures/equator.png")

    print("\n3. Tilted geodesics with a length cap")
    print("-------------------------------------")
    fig = plt.figure(figsize=(10, 10))
    ax = fig.add_subplot(111, projection='3d')
    for angle in np.linspace(0.2, 1.4, 4):
        state = initial_state(sphere, (np.pi / 2, 0.0), (np.sin(angle), np.cos(angle)), VelocityMode.UNIT)
        path = solve_geodesic(sphere, state, dt, 1000, max_length=2 * np.pi * 2, solver="rk")
        print(f"angle {angle:.2f}: {len(path) - 1} steps, length {path_length(sphere, path):.4f}")
        plot_surface_path(sphere, path, ax=ax)
    ax.view_init(elev=30, azim=45)
    save_matplotlib_figure(fig, "figures/great_circles.png")

    print("\n4. Animator at 60 fps")
    print("---------------------")
    animator = GeodesicAnimator(sphere, GeodesicState(1.0, 0.0, 0.2, 0.4), sub_steps=4)
    for _ in range(120):
        animator.tick(1 / 60)
    snap = animator.snapshot()
    print(f"{snap.steps} steps, length {snap.length:.4f}, end {snap.state.point}")

    print("\n5. Shooting between two points")
    print("------------------------------")
    result = shoot_geodesic(sphere, (1.0, 0.0), (2.0, 1.5), dt=0.05, n_steps=150)
    print(f"angle {result.angle:.4f}, miss {result.miss:.2e}, converged {result.converged}")
    fig = plot_geodesic_figure(sphere, result.path, title="Shooting")
    save_matplotlib_figure(fig, "figures/shooting.png")


if __name__ == "__main__":
    main()
