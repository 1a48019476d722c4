"""
Command line interface: solve, animate, shoot and plot geodesics.

    surface-geodesics presets
    surface-geodesics solve --preset sphere --u 1.5708 --v 0 --u-vel 0 --v-vel 1 --steps 200
    surface-geodesics solve --config run.yml --set integration.dt=0.01 -o path.csv
    surface-geodesics trace --preset torus --fps 60 --frames 240
    surface-geodesics shoot --preset plane --start 0 0 --target 3 4
    surface-geodesics plot --preset saddle -o saddle.png
"""
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import SimulationConfig, load_config
from .enums import Solver, VelocityMode
from .logging import logger, set_console_level, setup_logfile
from .presets import PRESETS
from .shooting import shoot_geodesic
from .solver import GeodesicAnimator, embed_path, path_length, solve_geodesic

console = Console()
app = typer.Typer(
    help="Geodesics on parametric surfaces",
    context_settings={"help_option_names": ["-h", "--help"]},
    no_args_is_help=True,
)

# Option name -> dotted config key
_FIELD_KEYS = {
    "u": "initial.u",
    "v": "initial.v",
    "u_vel": "initial.u_vel",
    "v_vel": "initial.v_vel",
    "dt": "integration.dt",
    "steps": "integration.n_steps",
    "max_length": "integration.max_length",
    "solver": "integration.solver",
    "velocity_mode": "integration.velocity_mode",
    "sub_steps": "integration.sub_steps",
    "time_scale": "integration.time_scale",
}

ConfigOpt = typer.Option(None, "--config", "-c", help="YAML configuration file")
PresetOpt = typer.Option(None, "--preset", "-p", help="Preset surface name (see 'presets')")
ParamOpt = typer.Option(None, "--param", "-P", help="Surface parameter, e.g. -P r=2 (repeatable)")
SetOpt = typer.Option(None, "--set", "-s", help="Dotted config override, e.g. integration.dt=0.01")
UOpt = typer.Option(None, "--u", help="Start u")
VOpt = typer.Option(None, "--v", help="Start v")
UVelOpt = typer.Option(None, "--u-vel", help="Start du/dt")
VVelOpt = typer.Option(None, "--v-vel", help="Start dv/dt")
DtOpt = typer.Option(None, "--dt", help="Time step")
StepsOpt = typer.Option(None, "--steps", "-n", help="Number of steps")
MaxLengthOpt = typer.Option(None, "--max-length", help="Metric length cap (0 = unlimited)")
SolverOpt = typer.Option(None, "--solver", help="Integrator")
ModeOpt = typer.Option(None, "--velocity-mode", help="raw: as given; unit: unit metric speed")


def _fmt(x: float) -> str:
    return f"{x:.6g}"


def _build_config(config: Optional[Path], preset: Optional[str], params: Optional[List[str]],
                  overrides: Optional[List[str]], **fields) -> SimulationConfig:
    items = list(overrides or [])
    if preset is not None:
        items.append(f"surface.preset={preset}")
    for param in params or []:
        if "=" not in param:
            raise typer.BadParameter(f"Parameter {param!r} is not of the form name=value")
        items.append(f"surface.parameters.{param.strip()}")
    for name, value in fields.items():
        if value is None:
            continue
        if isinstance(value, (Solver, VelocityMode)):
            value = value.value
        elif isinstance(value, float):
            value = repr(value)
        items.append(f"{_FIELD_KEYS[name]}={value}")
    return load_config(config, items)


def _fail(exc: Exception):
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    raise typer.Exit(1)


def _write_csv(surface, path: np.ndarray, output: Path) -> None:
    xyz = embed_path(surface, path)
    rows = np.column_stack([path, xyz]) if len(path) else np.empty((0, 5))
    np.savetxt(output, rows, delimiter=",", header="u,v,x,y,z", comments="")
    console.print(f"Wrote {len(rows)} rows to {output}")
    logger.info(f"Path written to {output}")


def _summary_table(title: str, surface, path: np.ndarray, extra: List[Tuple[str, str]]) -> Table:
    table = Table(title=title)
    table.add_column("Quantity", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("surface", surface.name)
    for key, value in extra:
        table.add_row(key, value)
    table.add_row("points", str(len(path)))
    if len(path):
        start, end = path[0], path[-1]
        table.add_row("start (u, v)", f"({_fmt(start[0])}, {_fmt(start[1])})")
        table.add_row("end (u, v)", f"({_fmt(end[0])}, {_fmt(end[1])})")
        end_xyz = surface(end[0], end[1])
        table.add_row("end (x, y, z)", "(" + ", ".join(_fmt(c) for c in end_xyz) + ")")
        table.add_row("metric length", _fmt(path_length(surface, path)))
    return table


def _show_version(value: bool):
    if value:
        from . import __version__
        typer.echo(f"surface-geodesics {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file (rotated)"),
    version: Optional[bool] = typer.Option(None, "--version", callback=_show_version, is_eager=True,
                                           help="Show version and exit"),
):
    """
    Trace geodesics on parametric surfaces.

    Use 'surface-geodesics COMMAND --help' to see options for specific commands.
    """
    set_console_level("DEBUG" if verbose else "INFO")
    if log_file is not None:
        setup_logfile(str(log_file), level="DEBUG" if verbose else "INFO")


@app.command("presets")
def list_presets():
    """List the preset surfaces."""
    table = Table(title="Preset surfaces")
    table.add_column("Name", style="cyan")
    table.add_column("x")
    table.add_column("y")
    table.add_column("z")
    table.add_column("u range", style="dim")
    table.add_column("v range", style="dim")
    table.add_column("Parameters", style="green")
    for p in PRESETS.values():
        params = ", ".join(f"{k}={v:g}" for k, v in p.parameters.items()) or "-"
        table.add_row(
            p.name, p.x, p.y, p.z,
            f"[{_fmt(p.u_range[0])}, {_fmt(p.u_range[1])}]",
            f"[{_fmt(p.v_range[0])}, {_fmt(p.v_range[1])}]",
            params,
        )
    console.print(table)


@app.command("solve")
def solve(
    config: Optional[Path] = ConfigOpt,
    preset: Optional[str] = PresetOpt,
    param: Optional[List[str]] = ParamOpt,
    set_: Optional[List[str]] = SetOpt,
    u: Optional[float] = UOpt,
    v: Optional[float] = VOpt,
    u_vel: Optional[float] = UVelOpt,
    v_vel: Optional[float] = VVelOpt,
    dt: Optional[float] = DtOpt,
    steps: Optional[int] = StepsOpt,
    max_length: Optional[float] = MaxLengthOpt,
    solver: Optional[Solver] = SolverOpt,
    velocity_mode: Optional[VelocityMode] = ModeOpt,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="CSV file for the path"),
):
    """Batch-solve one geodesic and print a summary."""
    try:
        cfg = _build_config(config, preset, param, set_, u=u, v=v, u_vel=u_vel, v_vel=v_vel,
                            dt=dt, steps=steps, max_length=max_length, solver=solver,
                            velocity_mode=velocity_mode)
        surface = cfg.build_surface()
    except (ValueError, KeyError, FileNotFoundError, typer.BadParameter) as exc:
        _fail(exc)

    integ = cfg.integration
    path = solve_geodesic(surface, cfg.initial_state(surface), integ.dt, integ.n_steps,
                          max_length=integ.max_length, solver=integ.solver)
    console.print(_summary_table("Geodesic", surface, path, [
        ("solver", integ.solver.value),
        ("dt", _fmt(integ.dt)),
        ("steps", str(len(path) - 1)),
    ]))
    if output is not None:
        _write_csv(surface, path, output)


@app.command("trace")
def trace(
    config: Optional[Path] = ConfigOpt,
    preset: Optional[str] = PresetOpt,
    param: Optional[List[str]] = ParamOpt,
    set_: Optional[List[str]] = SetOpt,
    u: Optional[float] = UOpt,
    v: Optional[float] = VOpt,
    u_vel: Optional[float] = UVelOpt,
    v_vel: Optional[float] = VVelOpt,
    solver: Optional[Solver] = SolverOpt,
    velocity_mode: Optional[VelocityMode] = ModeOpt,
    sub_steps: Optional[int] = typer.Option(None, "--sub-steps", help="Integration steps per frame"),
    time_scale: Optional[float] = typer.Option(None, "--time-scale", help="Simulated seconds per real second"),
    max_length: Optional[float] = MaxLengthOpt,
    fps: float = typer.Option(60.0, "--fps", help="Frames per second of the simulated clock"),
    frames: int = typer.Option(120, "--frames", help="Number of frames to tick"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="CSV file for the path"),
):
    """Drive the frame-by-frame animator on a simulated clock."""
    try:
        if fps <= 0:
            raise typer.BadParameter("--fps must be positive")
        cfg = _build_config(config, preset, param, set_, u=u, v=v, u_vel=u_vel, v_vel=v_vel,
                            solver=solver, velocity_mode=velocity_mode, sub_steps=sub_steps,
                            time_scale=time_scale, max_length=max_length)
        surface = cfg.build_surface()
    except (ValueError, KeyError, FileNotFoundError, typer.BadParameter) as exc:
        _fail(exc)

    integ = cfg.integration
    start = cfg.initial_state(surface)
    animator = GeodesicAnimator(surface, start, solver=integ.solver, sub_steps=integ.sub_steps,
                                time_scale=integ.time_scale, max_length=integ.max_length)
    elapsed = 1.0 / fps
    for _ in range(max(frames, 0)):
        if animator.finished:
            break
        animator.tick(elapsed)
    snap = animator.snapshot()

    path = np.array([start.point] + list(snap.path), dtype=float)
    console.print(_summary_table("Animated geodesic", surface, path, [
        ("solver", integ.solver.value),
        ("frames", str(frames)),
        ("steps", str(snap.steps)),
        ("finished", str(snap.finished)),
    ]))
    if output is not None:
        _write_csv(surface, path, output)


@app.command("shoot")
def shoot(
    start: Tuple[float, float] = typer.Option(..., "--start", help="Start point u v"),
    target: Tuple[float, float] = typer.Option(..., "--target", help="Target point u v"),
    config: Optional[Path] = ConfigOpt,
    preset: Optional[str] = PresetOpt,
    param: Optional[List[str]] = ParamOpt,
    set_: Optional[List[str]] = SetOpt,
    speed: float = typer.Option(1.0, "--speed", help="Metric launch speed"),
    angles: int = typer.Option(36, "--angles", help="Coarse launch directions"),
    dt: Optional[float] = DtOpt,
    steps: Optional[int] = StepsOpt,
    solver: Optional[Solver] = SolverOpt,
    tolerance: float = typer.Option(1e-2, "--tolerance", help="Miss distance counted as a hit"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="CSV file for the path"),
):
    """Search the launch direction whose geodesic passes closest to a target."""
    try:
        if angles < 1:
            raise typer.BadParameter("--angles must be >= 1")
        cfg = _build_config(config, preset, param, set_, dt=dt, steps=steps, solver=solver)
        surface = cfg.build_surface()
    except (ValueError, KeyError, FileNotFoundError, typer.BadParameter) as exc:
        _fail(exc)

    integ = cfg.integration
    result = shoot_geodesic(surface, start, target, speed=speed, dt=integ.dt,
                            n_steps=integ.n_steps, n_angles=angles, solver=integ.solver,
                            tolerance=tolerance)
    console.print(_summary_table("Shooting", surface, result.path, [
        ("target (u, v)", f"({_fmt(target[0])}, {_fmt(target[1])})"),
        ("angle", _fmt(result.angle)),
        ("velocity", f"({_fmt(result.velocity[0])}, {_fmt(result.velocity[1])})"),
        ("miss", _fmt(result.miss)),
        ("converged", str(result.converged)),
    ]))
    if not result.converged:
        console.print("[yellow]Target not reached within tolerance; try more steps or angles[/yellow]")
    if output is not None:
        _write_csv(surface, result.path, output)


@app.command("plot")
def plot(
    config: Optional[Path] = ConfigOpt,
    preset: Optional[str] = PresetOpt,
    param: Optional[List[str]] = ParamOpt,
    set_: Optional[List[str]] = SetOpt,
    u: Optional[float] = UOpt,
    v: Optional[float] = VOpt,
    u_vel: Optional[float] = UVelOpt,
    v_vel: Optional[float] = VVelOpt,
    dt: Optional[float] = DtOpt,
    steps: Optional[int] = StepsOpt,
    max_length: Optional[float] = MaxLengthOpt,
    solver: Optional[Solver] = SolverOpt,
    resolution: int = typer.Option(30, "--resolution", help="Surface tessellation per axis"),
    output: Path = typer.Option(Path("geodesic.png"), "--output", "-o", help="Image file"),
):
    """Solve one geodesic and save a figure of the surface and the trace."""
    try:
        cfg = _build_config(config, preset, param, set_, u=u, v=v, u_vel=u_vel, v_vel=v_vel,
                            dt=dt, steps=steps, max_length=max_length, solver=solver)
        surface = cfg.build_surface()
    except (ValueError, KeyError, FileNotFoundError, typer.BadParameter) as exc:
        _fail(exc)

    from .visualization import plot_geodesic_figure, plt

    integ = cfg.integration
    path = solve_geodesic(surface, cfg.initial_state(surface), integ.dt, integ.n_steps,
                          max_length=integ.max_length, solver=integ.solver)
    fig = plot_geodesic_figure(surface, path, title=f"{surface.name}: {len(path) - 1} steps",
                               resolution=resolution)
    fig.savefig(output, dpi=120, bbox_inches="tight")
    plt.close(fig)
    console.print(f"Saved figure to {output}")


if __name__ == "__main__":
    app()
