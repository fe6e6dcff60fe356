#!/usr/bin/env python3
"""MANTIS command-line interface.

Usage::

    mantis propagate --altitude 422 --inc 51.64 --at 2024-06-01T12:00:00
    mantis path --sma 6793 --inc 51.64 --segments 256 --output path.csv
    mantis plan orbit-raise --sma 6793 --inc 51.64 --target-altitude 472
    mantis plan collision-avoidance --tle iss.tle --tracked catalog.tle
    mantis --body moon plan inclination-change --altitude 100 --target-inclination 90
    mantis tle --sma 6793 --inc 51.64 --norad-id 25544
"""
from __future__ import annotations

import sys
import logging
import functools
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .analysis import ManeuverAnalysis, analyze_maneuver
from .conjunction import TrackedObject, rank_conjunction_risks
from .elements import (
    BODIES,
    CentralBody,
    InvalidOrbitalElements,
    OrbitalElements,
    PlannerConfig,
    get_body,
)
from .maneuvers import (
    CollisionAvoidance,
    ElementTargets,
    InclinationChange,
    ManeuverIntent,
    ManeuverKind,
    OrbitLower,
    OrbitRaise,
    StationKeeping,
)
from .propagator import orbit_path_frame, propagate
from .tle import format_tle, load_tle_file

console = Console()

_DATETIME_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--body", "-b", default="earth", type=click.Choice(sorted(BODIES)),
              help="Central body")
@click.pass_context
def main(ctx: click.Context, verbose: bool, body: str):
    """MANTIS — Maneuver ANalysis and Trajectory Insight for Space training."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(name)s — %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["body"] = get_body(body)


def element_options(func):
    """Options describing the current orbit, shared by every command."""
    options = [
        click.option("--tle", "tle_file", type=click.Path(exists=True),
                     help="Take elements from the first TLE in this file"),
        click.option("--sma", type=float, help="Semi-major axis (km)"),
        click.option("--altitude", type=float, help="Altitude above the body (km), instead of --sma"),
        click.option("--ecc", default=0.0001, show_default=True, help="Eccentricity"),
        click.option("--inc", default=0.0, show_default=True, help="Inclination (deg)"),
        click.option("--raan", default=0.0, show_default=True, help="RAAN (deg)"),
        click.option("--argp", default=0.0, show_default=True, help="Argument of perigee (deg)"),
        click.option("--nu", default=0.0, show_default=True, help="True anomaly (deg)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def reports_errors(func):
    """Turn domain errors into a red message and exit status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (InvalidOrbitalElements, ValueError) as e:
            console.print(f"[red]Error: {e}[/red]")
            sys.exit(1)
    return wrapper


@main.command("propagate")
@element_options
@click.option("--at", "at", type=click.DateTime(_DATETIME_FORMATS),
              help="UTC instant (default: now)")
@click.pass_context
@reports_errors
def propagate_cmd(ctx: click.Context, at: Optional[datetime], **element_kwargs):
    """Position of a spacecraft at an instant."""
    body: CentralBody = ctx.obj["body"]
    elements = _resolve_elements(body, **element_kwargs)
    instant = at or datetime.now(timezone.utc).replace(tzinfo=None)

    pos = propagate(elements, instant, body)
    console.print(
        Panel(
            f"Epoch: {instant:%Y-%m-%d %H:%M:%S} UTC\n"
            f"x: {pos.x:12.3f} km\n"
            f"y: {pos.y:12.3f} km\n"
            f"z: {pos.z:12.3f} km\n"
            f"|r|: {pos.norm():10.3f} km\n"
            f"Period: {elements.period(body) / 60:.2f} min",
            title=f"Position around {body.name}",
            box=box.ROUNDED,
        )
    )


@main.command("path")
@element_options
@click.option("--segments", "-s", default=128, show_default=True, help="Path segments")
@click.option("--output", "-o", type=click.Path(), help="Save path points to CSV")
@click.option("--plot", "plot_path", type=click.Path(), help="Save a 3D plot to PNG")
@click.pass_context
@reports_errors
def path_cmd(
    ctx: click.Context,
    segments: int,
    output: Optional[str],
    plot_path: Optional[str],
    **element_kwargs,
):
    """Closed orbit path for one revolution."""
    body: CentralBody = ctx.obj["body"]
    elements = _resolve_elements(body, **element_kwargs)
    df = orbit_path_frame(elements, segments)

    first = df.iloc[0]
    last = df.iloc[-1]
    closure = (
        (first["x_km"] - last["x_km"]) ** 2
        + (first["y_km"] - last["y_km"]) ** 2
        + (first["z_km"] - last["z_km"]) ** 2
    ) ** 0.5

    console.print(
        Panel(
            f"Points: {len(df)}\n"
            f"Radius: {elements.semi_major_axis:.1f} km "
            f"(altitude {elements.altitude(body):.1f} km)\n"
            f"Max |z|: {df['z_km'].abs().max():.1f} km\n"
            f"Closure error: {closure:.3e} km",
            title="Orbit Path",
            box=box.ROUNDED,
        )
    )

    if output:
        df.to_csv(output, index=False)
        console.print(f"\nPath saved to {output}")

    if plot_path:
        from .viz import plot_orbit_paths
        plot_orbit_paths({"orbit": elements}, body=body, segments=segments, save_path=plot_path)
        console.print(f"Plot saved to {plot_path}")


@main.command("plan")
@click.argument("kind", type=click.Choice([k.slug for k in ManeuverKind]))
@element_options
@click.option("--satellite-id", default="SAT-1", show_default=True, help="Maneuvering spacecraft")
@click.option("--at", "at", type=click.DateTime(_DATETIME_FORMATS),
              help="Execution time, UTC (default: now)")
@click.option("--target-altitude", type=float, help="Target altitude (km)")
@click.option("--target-inclination", type=float, help="Target inclination (deg)")
@click.option("--safety-distance", type=float, help="Collision-avoidance margin (km)")
@click.option("--mass", type=float, help="Spacecraft dry mass (kg)")
@click.option("--tracked", "tracked_file", type=click.Path(exists=True),
              help="TLE file of other tracked objects")
@click.option("--output", "-o", type=click.Path(), help="Save the analysis to CSV")
@click.option("--plot", "plot_path", type=click.Path(), help="Save a before/after plot to PNG")
@click.pass_context
@reports_errors
def plan_cmd(
    ctx: click.Context,
    kind: str,
    satellite_id: str,
    at: Optional[datetime],
    target_altitude: Optional[float],
    target_inclination: Optional[float],
    safety_distance: Optional[float],
    mass: Optional[float],
    tracked_file: Optional[str],
    output: Optional[str],
    plot_path: Optional[str],
    **element_kwargs,
):
    """Analyze a maneuver: delta-v, fuel and collision risk."""
    body: CentralBody = ctx.obj["body"]
    elements = _resolve_elements(body, **element_kwargs)

    config = PlannerConfig.from_env(body)
    if mass is not None:
        config = replace(config, dry_mass_kg=mass)

    intent = _build_intent(
        ManeuverKind.from_slug(kind),
        satellite_id,
        at or datetime.now(timezone.utc).replace(tzinfo=None),
        target_altitude,
        target_inclination,
        safety_distance,
        body,
    )

    tracked: list[TrackedObject] = []
    if tracked_file:
        tracked = [TrackedObject.from_tle(r, body) for r in load_tle_file(tracked_file)]
        console.print(f"Loaded {len(tracked)} tracked objects from {tracked_file}")

    analysis = analyze_maneuver(intent, elements, tracked, config)
    _display_analysis(elements, analysis, body)

    if tracked:
        _display_risk_table(analysis, tracked, config)

    if output:
        import pandas as pd
        pd.DataFrame([analysis.to_dict()]).to_csv(output, index=False)
        console.print(f"\nAnalysis saved to {output}")

    if plot_path:
        from .viz import plot_maneuver_comparison
        plot_maneuver_comparison(elements, analysis, body=body, save_path=plot_path)
        console.print(f"Plot saved to {plot_path}")


@main.command("tle")
@element_options
@click.option("--norad-id", "-n", required=True, type=int, help="NORAD catalog number")
@click.option("--name", help="Object name (adds a line 0)")
@click.option("--epoch", type=click.DateTime(_DATETIME_FORMATS),
              help="Element epoch, UTC (default: now)")
@click.pass_context
@reports_errors
def tle_cmd(
    ctx: click.Context,
    norad_id: int,
    name: Optional[str],
    epoch: Optional[datetime],
    **element_kwargs,
):
    """Export elements as a two-line element set."""
    body: CentralBody = ctx.obj["body"]
    elements = _resolve_elements(body, **element_kwargs)
    line1, line2 = format_tle(
        elements,
        norad_id,
        epoch or datetime.now(timezone.utc).replace(tzinfo=None),
        body=body,
    )
    if name:
        click.echo(name)
    click.echo(line1)
    click.echo(line2)


def _resolve_elements(
    body: CentralBody,
    tle_file: Optional[str],
    sma: Optional[float],
    altitude: Optional[float],
    ecc: float,
    inc: float,
    raan: float,
    argp: float,
    nu: float,
) -> OrbitalElements:
    if tle_file:
        records = load_tle_file(tle_file)
        if not records:
            raise ValueError(f"No TLEs found in {tle_file}")
        return records[0].to_elements(body)

    if sma is None and altitude is None:
        raise ValueError("Provide --sma, --altitude or --tle")
    if sma is not None and altitude is not None:
        raise ValueError("Use either --sma or --altitude, not both")

    return OrbitalElements(
        semi_major_axis=sma if sma is not None else body.radius + altitude,
        eccentricity=ecc,
        inclination=inc,
        raan=raan,
        arg_perigee=argp,
        true_anomaly=nu,
    )


def _build_intent(
    kind: ManeuverKind,
    satellite_id: str,
    at: datetime,
    target_altitude: Optional[float],
    target_inclination: Optional[float],
    safety_distance: Optional[float],
    body: CentralBody,
) -> ManeuverIntent:
    if kind is ManeuverKind.ORBIT_RAISE:
        return OrbitRaise(satellite_id, at, target_altitude_km=target_altitude)
    if kind is ManeuverKind.ORBIT_LOWER:
        return OrbitLower(satellite_id, at, target_altitude_km=target_altitude)
    if kind is ManeuverKind.INCLINATION_CHANGE:
        return InclinationChange(satellite_id, at, target_inclination_deg=target_inclination)
    if kind is ManeuverKind.COLLISION_AVOIDANCE:
        return CollisionAvoidance(satellite_id, at, safety_distance_km=safety_distance)

    targets = ElementTargets(
        semi_major_axis=body.radius + target_altitude if target_altitude is not None else None,
        inclination=target_inclination,
    )
    return StationKeeping(satellite_id, at, targets=targets)


def _display_analysis(
    current: OrbitalElements,
    analysis: ManeuverAnalysis,
    body: CentralBody,
):
    """Display a maneuver analysis with rich formatting."""
    risk = analysis.collision_probability
    risk_color = "green" if risk < 1 else "yellow" if risk < 10 else "red"
    delta_alt = analysis.new_altitude_km - current.altitude(body)
    alt_color = "green" if delta_alt >= 0 else "red"

    console.print(
        Panel(
            f"[bold]{analysis.intent.describe()}[/bold] ({analysis.intent.satellite_id})\n"
            f"Execution: {analysis.intent.execution_time:%Y-%m-%d %H:%M} UTC\n"
            f"Δv: [bold]{analysis.delta_v_ms:.2f}[/bold] m/s\n"
            f"Fuel: {analysis.fuel_cost_kg:.2f} kg\n"
            f"Collision risk: [{risk_color}]{risk:.1f}%[/{risk_color}]\n"
            f"Burn: {analysis.execution_duration_s / 60:.0f} min, "
            f"complete in {analysis.time_to_complete_s / 60:.0f} min",
            title="Maneuver Analysis",
            box=box.ROUNDED,
        )
    )

    table = Table(title="Orbit", box=box.SIMPLE_HEAVY)
    table.add_column("Element", style="cyan")
    table.add_column("Current", justify="right")
    table.add_column("Predicted", justify="right")

    predicted = analysis.predicted
    table.add_row("Altitude (km)", f"{current.altitude(body):.2f}",
                  f"[{alt_color}]{analysis.new_altitude_km:.2f}[/{alt_color}]")
    table.add_row("Velocity (km/s)", f"{current.circular_velocity(body):.4f}",
                  f"{analysis.new_velocity_kms:.4f}")
    table.add_row("Eccentricity", f"{current.eccentricity:.4f}", f"{predicted.eccentricity:.4f}")
    table.add_row("Inclination (°)", f"{current.inclination:.2f}", f"{predicted.inclination:.2f}")
    table.add_row("RAAN (°)", f"{current.raan:.2f}", f"{predicted.raan:.2f}")
    table.add_row("Arg. perigee (°)", f"{current.arg_perigee:.2f}", f"{predicted.arg_perigee:.2f}")
    console.print(table)


def _display_risk_table(
    analysis: ManeuverAnalysis,
    tracked: list[TrackedObject],
    config: PlannerConfig,
):
    """Display the closest tracked objects to the predicted orbit."""
    df = rank_conjunction_risks(analysis.predicted, tracked, config.body, config.risk)

    table = Table(title="Closest Tracked Objects", box=box.SIMPLE_HEAVY)
    table.add_column("Object", style="cyan")
    table.add_column("Name")
    table.add_column("Δ Alt (km)", justify="right")
    table.add_column("Δ Inc (°)", justify="right")
    table.add_column("Risk (%)", justify="right")

    for _, row in df.head(10).iterrows():
        table.add_row(
            str(row["object_id"]),
            str(row["name"] or ""),
            f"{row['altitude_diff_km']:.2f}",
            f"{row['inclination_diff_deg']:.3f}",
            f"{row['risk_pct']:.2f}",
        )

    if len(df) > 10:
        console.print(f"(showing 10 of {len(df)} objects)")
    console.print(table)


if __name__ == "__main__":
    main()
