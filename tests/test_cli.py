"""Tests for the surface-geodesics command line."""

import subprocess
import sys
from pathlib import Path

import numpy as np
import pytest
from typer.testing import CliRunner

from surface_geodesics import __version__
from surface_geodesics.cli import app
from surface_geodesics.logging import set_console_level

runner = CliRunner()

PLANE_LINE = ["--preset", "plane", "--u", "0", "--v", "0", "--u-vel", "1", "--v-vel", "0"]


@pytest.fixture(autouse=True)
def restore_console_sink():
    yield
    # the CLI bound loguru to the runner's (now closed) stderr
    set_console_level("WARNING", colorize=False)


def _rows(path):
    return np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_presets_table():
    result = runner.invoke(app, ["presets"])
    assert result.exit_code == 0
    assert "sphere" in result.output
    assert "plane" in result.output


def test_solve_writes_csv(tmp_path):
    out = tmp_path / "path.csv"
    result = runner.invoke(app, ["solve", *PLANE_LINE, "--dt", "0.1", "--steps", "10",
                                 "--solver", "euler", "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert out.read_text().splitlines()[0] == "u,v,x,y,z"
    rows = _rows(out)
    assert rows.shape == (11, 5)
    assert rows[-1, 0] == pytest.approx(1.0, abs=1e-6)
    # plane: x = u, y = 0, z = v
    assert rows[:, 2] == pytest.approx(rows[:, 0])
    assert rows[:, 3] == pytest.approx(np.zeros(11))


def test_solve_with_config_and_overrides(tmp_path):
    cfg = tmp_path / "run.yml"
    cfg.write_text("surface:\n  preset: sphere\n  parameters: {r: 2}\nintegration:\n  n_steps: 5\n")
    out = tmp_path / "sphere.csv"
    result = runner.invoke(app, ["solve", "-c", str(cfg), "--set", "integration.n_steps=7",
                                 "-o", str(out)])
    assert result.exit_code == 0, result.output
    rows = _rows(out)
    assert rows.shape == (8, 5)
    assert np.linalg.norm(rows[0, 2:]) == pytest.approx(2.0)


def test_solve_respects_length_cap(tmp_path):
    out = tmp_path / "capped.csv"
    result = runner.invoke(app, ["solve", *PLANE_LINE, "--dt", "0.1", "--steps", "100",
                                 "--max-length", "0.55", "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert _rows(out).shape == (7, 5)


@pytest.mark.parametrize("args", [
    ["solve", "--preset", "klein-bottle"],
    ["solve", "--preset", "plane", "--dt", "0"],
    ["solve", "--config", "does-not-exist.yml"],
    ["solve", "--set", "integration.solver=leapfrog"],
    ["solve", "--param", "r"],
    ["solve", "--set", "surface.x=%u +", "--set", "surface.y=0", "--set", "surface.z=%v"],
])
def test_invalid_input_exits_with_1(args):
    result = runner.invoke(app, args)
    assert result.exit_code == 1
    assert "Error" in result.output


def test_trace_ticks_the_animator(tmp_path):
    out = tmp_path / "trace.csv"
    result = runner.invoke(app, ["trace", *PLANE_LINE, "--fps", "10", "--frames", "5",
                                 "--sub-steps", "2", "-o", str(out)])
    assert result.exit_code == 0, result.output
    rows = _rows(out)
    # start point plus 5 frames x 2 sub-steps
    assert rows.shape == (11, 5)
    assert rows[-1, 0] == pytest.approx(0.5, abs=1e-6)


def test_shoot(tmp_path):
    result = runner.invoke(app, ["shoot", "--preset", "plane", "--start", "0", "0",
                                 "--target", "3", "4", "--dt", "0.1", "--steps", "60",
                                 "--angles", "12", "--solver", "euler"])
    assert result.exit_code == 0, result.output
    assert "converged" in result.output
    assert "True" in result.output


def test_plot_saves_figure(tmp_path):
    out = tmp_path / "plane.png"
    result = runner.invoke(app, ["plot", *PLANE_LINE, "--steps", "5", "--resolution", "6",
                                 "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert out.exists() and out.stat().st_size > 0


def test_cli_import_leaves_pyplot_unloaded():
    code = ("import sys, surface_geodesics.cli; "
            "print('matplotlib.pyplot' in sys.modules, 'surface_geodesics.visualization' in sys.modules)")
    root = Path(__file__).resolve().parents[1]
    result = subprocess.run([sys.executable, "-c", code], cwd=root,
                            capture_output=True, text=True, check=True)
    assert result.stdout.split() == ["False", "False"]
