"""Smoke tests for the plotting helpers (Agg backend, no display)."""
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
import pytest
from datetime import datetime

from mantis.analysis import analyze_maneuver, analyze_maneuvers_batch
from mantis.elements import MOON, OrbitalElements
from mantis.maneuvers import InclinationChange, OrbitRaise
from mantis.propagator import build_position_history
from mantis.viz import (
    plot_maneuver_comparison,
    plot_maneuver_options,
    plot_orbit_paths,
    plot_position_history,
)

EXEC_TIME = datetime(2024, 6, 1, 12, 0)
ISS = OrbitalElements(6793.0, 0.0001, 51.64, 125.4, 45.2, 180.0)


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


class TestPlots:
    def test_orbit_paths(self, tmp_path):
        out = tmp_path / "orbits.png"
        fig = plot_orbit_paths(
            {"ISS": ISS, "GEO-ish": OrbitalElements.from_altitude(35786.0)},
            segments=64,
            save_path=out,
        )
        assert fig.axes
        assert fig.axes[0].get_title() == "Orbit Paths around Earth"
        assert out.exists()

    def test_orbit_paths_moon(self):
        llo = OrbitalElements.from_altitude(100.0, inclination=90.0, body=MOON)
        fig = plot_orbit_paths({"LLO": llo}, body=MOON)
        assert "Moon" in fig.axes[0].get_title()

    def test_maneuver_comparison(self, tmp_path):
        analysis = analyze_maneuver(OrbitRaise("ISS", EXEC_TIME, 472.0), ISS)
        out = tmp_path / "compare.png"
        fig = plot_maneuver_comparison(ISS, analysis, save_path=out)
        assert "Raise orbit to 472.0 km altitude" in fig.axes[0].get_title()
        assert out.exists()

    def test_position_history(self):
        history = build_position_history(ISS, EXEC_TIME, duration_s=5400, step_s=60)
        fig = plot_position_history(history)
        assert len(fig.axes) == 2

    def test_maneuver_options(self):
        df = analyze_maneuvers_batch(
            [
                OrbitRaise("ISS", EXEC_TIME, 472.0),
                InclinationChange("ISS", EXEC_TIME, 52.0),
            ],
            {"ISS": ISS},
        )
        fig = plot_maneuver_options(df)
        assert len(fig.axes) == 2

    def test_maneuver_options_empty(self):
        fig = plot_maneuver_options(pd.DataFrame())
        assert len(fig.axes) == 1
