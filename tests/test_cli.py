"""Command-line interface tests."""
import pytest
import matplotlib

matplotlib.use("Agg")

import pandas as pd
from click.testing import CliRunner
from datetime import datetime

from mantis.cli import main
from mantis.elements import OrbitalElements
from mantis.tle import TLERecord, format_tle


ISS_ARGS = ["--sma", "6793", "--inc", "51.64", "--raan", "125.4"]
AT = ["--at", "2024-06-01T12:00:00"]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("MANTIS_DRY_MASS_KG", "MANTIS_ISP_S", "MANTIS_SAFETY_DISTANCE_KM"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def catalog(tmp_path):
    """TLE file with one object 5 km above the ISS orbit and one far away."""
    epoch = datetime(2024, 6, 1)
    near = OrbitalElements.from_altitude(427.0, inclination=51.64)
    far = OrbitalElements.from_altitude(780.0, inclination=86.4)
    lines = ["DEBRIS-NEAR", *format_tle(near, 40001, epoch), "IRIDIUM-X", *format_tle(far, 40002, epoch)]
    path = tmp_path / "catalog.tle"
    path.write_text("\n".join(lines) + "\n")
    return path


class TestPropagateCommand:
    def test_earth(self, runner):
        result = runner.invoke(main, ["propagate", *ISS_ARGS, *AT])
        assert result.exit_code == 0, result.output
        assert "Position around Earth" in result.output
        assert "2024-06-01 12:00:00" in result.output

    def test_moon(self, runner):
        result = runner.invoke(main, ["--body", "moon", "propagate", "--altitude", "100", *AT])
        assert result.exit_code == 0, result.output
        assert "Position around Moon" in result.output

    def test_missing_orbit(self, runner):
        result = runner.invoke(main, ["propagate", *AT])
        assert result.exit_code == 1
        assert "Provide --sma" in result.output

    def test_conflicting_orbit(self, runner):
        result = runner.invoke(main, ["propagate", "--sma", "6793", "--altitude", "422", *AT])
        assert result.exit_code == 1
        assert "not both" in result.output

    def test_invalid_eccentricity(self, runner):
        result = runner.invoke(main, ["propagate", "--sma", "6793", "--ecc", "1.2", *AT])
        assert result.exit_code == 1
        assert "eccentricity" in result.output


class TestPathCommand:
    def test_csv_output(self, runner, tmp_path):
        out = tmp_path / "path.csv"
        result = runner.invoke(main, ["path", *ISS_ARGS, "--segments", "32", "--output", str(out)])
        assert result.exit_code == 0, result.output
        assert "Orbit Path" in result.output

        df = pd.read_csv(out)
        assert len(df) == 33
        assert list(df.columns) == ["angle_deg", "x_km", "y_km", "z_km"]

    def test_plot(self, runner, tmp_path):
        png = tmp_path / "path.png"
        result = runner.invoke(main, ["path", *ISS_ARGS, "--plot", str(png)])
        assert result.exit_code == 0, result.output
        assert png.exists()


class TestPlanCommand:
    def test_orbit_raise(self, runner, tmp_path):
        out = tmp_path / "plan.csv"
        result = runner.invoke(main, [
            "plan", "orbit-raise", *ISS_ARGS, *AT,
            "--satellite-id", "ISS", "--target-altitude", "472", "--output", str(out),
        ])
        assert result.exit_code == 0, result.output
        assert "Maneuver Analysis" in result.output
        assert "Raise orbit to 472.0 km altitude" in result.output

        row = pd.read_csv(out).iloc[0]
        assert row["satellite_id"] == "ISS"
        assert row["type"] == "ORBIT_RAISE"
        assert 25.0 < row["delta_v_ms"] < 32.0
        assert row["new_altitude_km"] == pytest.approx(472.0)

    def test_station_keeping_altitude_target(self, runner, tmp_path):
        out = tmp_path / "plan.csv"
        result = runner.invoke(main, [
            "plan", "station-keeping", *ISS_ARGS, *AT,
            "--target-altitude", "423", "--output", str(out),
        ])
        assert result.exit_code == 0, result.output
        assert pd.read_csv(out).iloc[0]["delta_v_ms"] == pytest.approx(500.0)

    def test_mass_option(self, runner, tmp_path):
        light, heavy = tmp_path / "light.csv", tmp_path / "heavy.csv"
        base = ["plan", "inclination-change", *ISS_ARGS, *AT, "--target-inclination", "52"]
        assert runner.invoke(main, [*base, "--output", str(light)]).exit_code == 0
        assert runner.invoke(main, [*base, "--mass", "1000", "--output", str(heavy)]).exit_code == 0

        fuel_light = pd.read_csv(light).iloc[0]["fuel_cost_kg"]
        fuel_heavy = pd.read_csv(heavy).iloc[0]["fuel_cost_kg"]
        assert fuel_heavy == pytest.approx(2 * fuel_light)

    def test_collision_avoidance_with_catalog(self, runner, catalog, tmp_path):
        out = tmp_path / "plan.csv"
        result = runner.invoke(main, [
            "plan", "collision-avoidance", *ISS_ARGS, *AT,
            "--tracked", str(catalog), "--output", str(out),
        ])
        assert result.exit_code == 0, result.output
        assert "Loaded 2 tracked objects" in result.output
        assert "Closest Tracked Objects" in result.output

        row = pd.read_csv(out).iloc[0]
        # Default 5 km margin lands on the near object's altitude
        assert row["new_altitude_km"] == pytest.approx(427.0)
        assert row["collision_probability_pct"] == pytest.approx(100.0, abs=0.01)

    def test_safety_distance_from_env(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("MANTIS_SAFETY_DISTANCE_KM", "12")
        out = tmp_path / "plan.csv"
        result = runner.invoke(main, [
            "plan", "collision-avoidance", *ISS_ARGS, *AT, "--output", str(out),
        ])
        assert result.exit_code == 0, result.output
        assert pd.read_csv(out).iloc[0]["new_altitude_km"] == pytest.approx(434.0)

    def test_invalid_target(self, runner):
        result = runner.invoke(main, [
            "plan", "orbit-lower", *ISS_ARGS, *AT, "--target-altitude", "-9000",
        ])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_unknown_kind(self, runner):
        result = runner.invoke(main, ["plan", "deorbit", *ISS_ARGS])
        assert result.exit_code != 0

    def test_plot(self, runner, tmp_path):
        png = tmp_path / "plan.png"
        result = runner.invoke(main, [
            "plan", "orbit-raise", *ISS_ARGS, *AT, "--target-altitude", "472", "--plot", str(png),
        ])
        assert result.exit_code == 0, result.output
        assert png.exists()


class TestTLECommand:
    def test_export(self, runner):
        result = runner.invoke(main, [
            "tle", *ISS_ARGS, "--norad-id", "25544", "--name", "ISS", "--epoch", "2024-06-01",
        ])
        assert result.exit_code == 0, result.output
        name, line1, line2 = result.output.strip().splitlines()
        assert name == "ISS"

        record = TLERecord.parse(line1, line2, name=name)
        assert record.norad_id == 25544
        assert record.epoch == datetime(2024, 6, 1)
        assert record.to_elements().semi_major_axis == pytest.approx(6793.0, abs=1e-3)

    def test_elements_from_tle_file(self, runner, catalog):
        result = runner.invoke(main, ["tle", "--tle", str(catalog), "--norad-id", "1", "--epoch", "2024-06-01"])
        assert result.exit_code == 0, result.output
        line1, line2 = result.output.strip().splitlines()
        assert TLERecord.parse(line1, line2).inclination == pytest.approx(51.64)

    def test_norad_id_too_large(self, runner):
        result = runner.invoke(main, ["tle", *ISS_ARGS, "--norad-id", "123456"])
        assert result.exit_code == 1
        assert "NORAD ID" in result.output
