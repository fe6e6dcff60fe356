"""Maneuver analysis assembly.

Combines the delta-v calculator, the rocket-equation fuel estimate and the
proximity risk heuristic into one immutable ``ManeuverAnalysis`` per
planner request.

Execution duration and time to complete are fixed placeholders (5 and 30
minutes) taken from ``PlannerConfig``; they are not derived from thrust or
burn time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Mapping, Optional, Sequence

import pandas as pd

from .conjunction import TrackedObject, collision_probability
from .elements import InvalidOrbitalElements, OrbitalElements, PlannerConfig
from .maneuvers import CollisionAvoidance, ManeuverIntent, compute_maneuver
from .propagator import _as_utc
from .propulsion import estimate_fuel_cost

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManeuverAnalysis:
    """Predicted outcome of one planned maneuver."""

    intent: ManeuverIntent
    predicted: OrbitalElements

    fuel_cost_kg: float
    delta_v_ms: float
    collision_probability: float  # percent, 0-100

    execution_duration_s: float
    time_to_complete_s: float

    new_altitude_km: float
    new_velocity_kms: float

    def to_dict(self) -> dict:
        row = {
            "satellite_id": self.intent.satellite_id,
            "type": self.intent.kind.name,
            "description": self.intent.describe(),
            "execution_time": _as_utc(self.intent.execution_time).replace(tzinfo=None),
            "delta_v_ms": self.delta_v_ms,
            "fuel_cost_kg": self.fuel_cost_kg,
            "collision_probability_pct": self.collision_probability,
            "execution_duration_s": self.execution_duration_s,
            "time_to_complete_s": self.time_to_complete_s,
            "new_altitude_km": self.new_altitude_km,
            "new_velocity_kms": self.new_velocity_kms,
        }
        row.update(self.predicted.to_dict())
        return row

    def summary(self) -> str:
        return (
            f"[{self.intent.execution_time:%Y-%m-%d %H:%M}] "
            f"{self.intent.satellite_id} — {self.intent.describe()} "
            f"(Δv={self.delta_v_ms:.2f} m/s, "
            f"fuel={self.fuel_cost_kg:.2f} kg, "
            f"risk={self.collision_probability:.1f}%, "
            f"alt={self.new_altitude_km:.1f} km)"
        )

    def as_tracked_object(self) -> TrackedObject:
        """The maneuvered spacecraft as seen by other planners."""
        return TrackedObject(
            object_id=self.intent.satellite_id,
            altitude_km=self.new_altitude_km,
            inclination_deg=self.predicted.inclination,
        )


class ManeuverAnalyzer:
    """Assembles maneuver analyses under a fixed ``PlannerConfig``.

    The analyzer holds no mutable state and can be shared between callers.
    """

    def __init__(self, config: Optional[PlannerConfig] = None):
        self.config = config or PlannerConfig()

    def analyze(
        self,
        intent: ManeuverIntent,
        elements: OrbitalElements,
        tracked: Iterable[TrackedObject] = (),
    ) -> ManeuverAnalysis:
        """Analyze one maneuver.

        Args:
            intent: What the operator wants to do.
            elements: Current orbit of the maneuvering spacecraft.
            tracked: Other objects to score the predicted orbit against.

        Returns:
            The assembled analysis.

        Raises:
            InvalidOrbitalElements: If the intent would produce an invalid
                orbit (for example, a target altitude below the body center).
        """
        cfg = self.config
        body = cfg.body

        if isinstance(intent, CollisionAvoidance) and intent.safety_distance_km is None:
            intent = replace(intent, safety_distance_km=cfg.safety_distance_km)

        solution = compute_maneuver(intent, elements, body)
        predicted = solution.elements

        fuel = estimate_fuel_cost(
            solution.delta_v_ms,
            dry_mass_kg=cfg.dry_mass_kg,
            isp_s=cfg.isp_s,
            g0=cfg.g0,
        )
        risk = collision_probability(predicted, tracked, body, cfg.risk)

        return ManeuverAnalysis(
            intent=intent,
            predicted=predicted,
            fuel_cost_kg=fuel,
            delta_v_ms=solution.delta_v_ms,
            collision_probability=risk,
            execution_duration_s=cfg.execution_duration_s,
            time_to_complete_s=cfg.time_to_complete_s,
            new_altitude_km=predicted.altitude(body),
            new_velocity_kms=predicted.circular_velocity(body),
        )


def analyze_maneuver(
    intent: ManeuverIntent,
    elements: OrbitalElements,
    tracked: Iterable[TrackedObject] = (),
    config: Optional[PlannerConfig] = None,
) -> ManeuverAnalysis:
    """Analyze a single maneuver with the given (or default) configuration."""
    return ManeuverAnalyzer(config).analyze(intent, elements, tracked)


def analyze_maneuvers_batch(
    intents: Iterable[ManeuverIntent],
    elements_by_satellite: Mapping[str, OrbitalElements],
    tracked: Sequence[TrackedObject] = (),
    config: Optional[PlannerConfig] = None,
) -> pd.DataFrame:
    """Analyze many maneuvers, one row per successful analysis.

    Each satellite is excluded from its own risk set. Intents that name an
    unknown satellite or produce invalid elements are logged and skipped.

    Returns:
        DataFrame of ``ManeuverAnalysis.to_dict()`` rows sorted by execution
        time (naive UTC, aware inputs are converted); empty if nothing could
        be analyzed.
    """
    analyzer = ManeuverAnalyzer(config)
    rows: list[dict] = []

    for intent in intents:
        elements = elements_by_satellite.get(intent.satellite_id)
        if elements is None:
            logger.warning("No orbital elements for %s, skipping", intent.satellite_id)
            continue

        others = [obj for obj in tracked if obj.object_id != intent.satellite_id]
        try:
            analysis = analyzer.analyze(intent, elements, others)
        except InvalidOrbitalElements as e:
            logger.warning("Skipping %s for %s: %s", intent.kind.name, intent.satellite_id, e)
            continue
        rows.append(analysis.to_dict())

    if not rows:
        return pd.DataFrame()

    df = pd.DataFrame(rows)
    return df.sort_values("execution_time", kind="stable").reset_index(drop=True)
