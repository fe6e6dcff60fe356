"""
Example: Planning an ISS-class reboost and comparing maneuver options.

Runs entirely on hand-built orbits (no TLE download needed). Analyzes a set
of candidate maneuvers for two spacecraft against a small debris field and
prints the trade-off table, then saves plots to data/.
"""

import sys
sys.path.insert(0, "src")

from datetime import datetime, timedelta
from pathlib import Path

from mantis.analysis import analyze_maneuver, analyze_maneuvers_batch
from mantis.conjunction import TrackedObject, rank_conjunction_risks
from mantis.elements import OrbitalElements, PlannerConfig
from mantis.maneuvers import (
    CollisionAvoidance,
    ElementTargets,
    InclinationChange,
    OrbitLower,
    OrbitRaise,
    StationKeeping,
)
from mantis.propagator import build_position_history


def main():
    print("=" * 65)
    print("  MANTIS — Reboost Planning Demo")
    print("=" * 65)

    base = datetime(2024, 6, 1, 6, 0)

    station = OrbitalElements(
        semi_major_axis=6793.0,
        eccentricity=0.0001,
        inclination=51.64,
        raan=125.4,
        arg_perigee=45.2,
        true_anomaly=180.0,
    )
    smallsat = OrbitalElements.from_altitude(550.0, inclination=53.0, raan=40.0)
    orbits = {"STATION": station, "SMALLSAT": smallsat}

    # ── Debris field: a few fragments near both shells ──
    debris = [
        TrackedObject("DEB-1", altitude_km=468.0, inclination_deg=51.9, name="FRAGMENT A"),
        TrackedObject("DEB-2", altitude_km=427.5, inclination_deg=51.6, name="FRAGMENT B"),
        TrackedObject("DEB-3", altitude_km=552.0, inclination_deg=53.1, name="FRAGMENT C"),
        TrackedObject("DEB-4", altitude_km=780.0, inclination_deg=86.4, name="FRAGMENT D"),
    ]
    tracked = debris + [TrackedObject.from_elements(sid, el) for sid, el in orbits.items()]

    # ── Candidate maneuvers ──
    intents = [
        OrbitRaise("STATION", base, target_altitude_km=472.0),
        OrbitRaise("STATION", base + timedelta(hours=1), target_altitude_km=440.0),
        CollisionAvoidance("STATION", base + timedelta(hours=2)),
        CollisionAvoidance("STATION", base + timedelta(hours=2), safety_distance_km=15.0),
        InclinationChange("SMALLSAT", base + timedelta(hours=3), target_inclination_deg=53.2),
        OrbitLower("SMALLSAT", base + timedelta(hours=4), target_altitude_km=540.0),
        StationKeeping(
            "SMALLSAT",
            base + timedelta(hours=5),
            targets=ElementTargets(semi_major_axis=smallsat.semi_major_axis + 0.2, raan=40.05),
        ),
    ]

    config = PlannerConfig(dry_mass_kg=420_000.0)
    print(f"\nStation mass: {config.dry_mass_kg:,.0f} kg, Isp {config.isp_s:.0f} s")
    print(f"Analyzing {len(intents)} candidate maneuvers against {len(debris)} debris objects\n")

    df = analyze_maneuvers_batch(intents, orbits, tracked, config)

    print(f"{'TIME':17s} {'SAT':9s} {'MANEUVER':48s} {'Δv (m/s)':>9} {'RISK %':>7}")
    print("-" * 94)
    for _, row in df.iterrows():
        print(
            f"{row['execution_time']:%Y-%m-%d %H:%M} "
            f"{row['satellite_id']:9s} "
            f"{row['description']:48s} "
            f"{row['delta_v_ms']:>9.2f} "
            f"{row['collision_probability_pct']:>7.1f}"
        )

    # ── Best option per satellite: lowest risk, then lowest Δv ──
    print(f"\n{'=' * 65}")
    print("RECOMMENDED OPTIONS")
    print(f"{'=' * 65}")

    for sat_id in orbits:
        options = df[df["satellite_id"] == sat_id]
        if options.empty:
            print(f"  {sat_id}: no feasible options")
            continue
        best = options.sort_values(["collision_probability_pct", "delta_v_ms"]).iloc[0]
        print(
            f"  {sat_id}: {best['description']} "
            f"(Δv≈{best['delta_v_ms']:.1f} m/s, risk {best['collision_probability_pct']:.1f}%)"
        )

    # ── Closest objects after the nominal reboost ──
    reboost = analyze_maneuver(intents[0], station, debris, config)
    print(f"\n{reboost.summary()}")
    print(f"  Propellant (station mass): {reboost.fuel_cost_kg:,.0f} kg")
    print("\nClosest objects after reboost:")
    print(rank_conjunction_risks(reboost.predicted, debris).head(3).to_string(index=False))

    # ── Plots ──
    import matplotlib
    matplotlib.use("Agg")
    from mantis.viz import (
        plot_maneuver_comparison,
        plot_maneuver_options,
        plot_position_history,
    )

    Path("data").mkdir(exist_ok=True)

    plot_maneuver_comparison(station, reboost, save_path="data/demo_reboost.png")
    print("\nPlot saved to data/demo_reboost.png")

    plot_maneuver_options(df, title="Demo — Candidate Maneuvers", save_path="data/demo_options.png")
    print("Plot saved to data/demo_options.png")

    history = build_position_history(station, base, duration_s=2 * station.period(), step_s=30)
    plot_position_history(history, title="STATION: Two Revolutions", save_path="data/demo_history.png")
    print("Plot saved to data/demo_history.png")


if __name__ == "__main__":
    main()
