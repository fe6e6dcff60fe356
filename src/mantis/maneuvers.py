"""Maneuver intents and the delta-v calculator.

Each maneuver kind is its own intent class carrying only the target that
applies to it, so an intent can never hold a target for the wrong kind.
The calculator maps (current elements, intent) to the delta-v magnitude and
the predicted elements after the burn.

Models:
    - Orbit raise / lower: two-burn Hohmann transfer between circular orbits.
      Raising and lowering share one formula; the direction is implicit in
      the ratio of the two radii.
    - Inclination change: single impulsive plane change at circular speed.
    - Collision avoidance: Hohmann raise by a safety margin.
    - Station keeping: a crude per-element correction cost, kept for
      compatibility with the training scenarios rather than derived from
      physics.

An intent whose target is missing is a no-op: zero delta-v and unchanged
elements.
"""

from __future__ import annotations

import math
import logging
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum, auto
from typing import Callable, ClassVar, Optional

from .elements import (
    DEFAULT_SAFETY_DISTANCE_KM,
    EARTH,
    NEAR_CIRCULAR_ECCENTRICITY,
    CentralBody,
    InvalidOrbitalElements,
    OrbitalElements,
)

logger = logging.getLogger(__name__)

# Station-keeping altitude cost per km of semi-major axis change (km/s per km).
STATION_KEEPING_SMA_COST = 0.5


class ManeuverKind(Enum):
    """Supported maneuver kinds."""
    ORBIT_RAISE = auto()
    ORBIT_LOWER = auto()
    INCLINATION_CHANGE = auto()
    COLLISION_AVOIDANCE = auto()
    STATION_KEEPING = auto()

    @property
    def slug(self) -> str:
        """Hyphenated name used on the command line, e.g. ``orbit-raise``."""
        return self.name.lower().replace("_", "-")

    @classmethod
    def from_slug(cls, slug: str) -> ManeuverKind:
        return cls[slug.strip().upper().replace("-", "_")]


@dataclass(frozen=True)
class ElementTargets:
    """Partial set of target elements for a station-keeping correction.

    Fields left as ``None`` are not corrected.
    """

    semi_major_axis: Optional[float] = None
    eccentricity: Optional[float] = None
    inclination: Optional[float] = None
    raan: Optional[float] = None
    arg_perigee: Optional[float] = None
    true_anomaly: Optional[float] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def as_changes(self) -> dict[str, float]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class ManeuverIntent:
    """Common fields of every maneuver request.

    Attributes:
        satellite_id: Identifier of the maneuvering spacecraft.
        execution_time: Planned burn start.
    """

    kind: ClassVar[ManeuverKind]

    satellite_id: str
    execution_time: datetime

    def describe(self) -> str:
        return "Maneuver"


@dataclass(frozen=True)
class OrbitRaise(ManeuverIntent):
    kind: ClassVar[ManeuverKind] = ManeuverKind.ORBIT_RAISE

    target_altitude_km: Optional[float] = None

    def describe(self) -> str:
        if self.target_altitude_km is None:
            return "Raise orbit"
        return f"Raise orbit to {self.target_altitude_km:.1f} km altitude"


@dataclass(frozen=True)
class OrbitLower(ManeuverIntent):
    kind: ClassVar[ManeuverKind] = ManeuverKind.ORBIT_LOWER

    target_altitude_km: Optional[float] = None

    def describe(self) -> str:
        if self.target_altitude_km is None:
            return "Lower orbit"
        return f"Lower orbit to {self.target_altitude_km:.1f} km altitude"


@dataclass(frozen=True)
class InclinationChange(ManeuverIntent):
    kind: ClassVar[ManeuverKind] = ManeuverKind.INCLINATION_CHANGE

    target_inclination_deg: Optional[float] = None

    def describe(self) -> str:
        if self.target_inclination_deg is None:
            return "Change inclination"
        return f"Change inclination to {self.target_inclination_deg:.2f}°"


@dataclass(frozen=True)
class CollisionAvoidance(ManeuverIntent):
    kind: ClassVar[ManeuverKind] = ManeuverKind.COLLISION_AVOIDANCE

    # None means the planner default (5 km unless configured otherwise).
    safety_distance_km: Optional[float] = None

    def effective_safety_distance(self) -> float:
        if self.safety_distance_km is None:
            return DEFAULT_SAFETY_DISTANCE_KM
        return self.safety_distance_km

    def describe(self) -> str:
        return (
            f"Collision avoidance maneuver with "
            f"{self.effective_safety_distance():g} km safety margin"
        )


@dataclass(frozen=True)
class StationKeeping(ManeuverIntent):
    kind: ClassVar[ManeuverKind] = ManeuverKind.STATION_KEEPING

    targets: ElementTargets = field(default_factory=ElementTargets)

    def describe(self) -> str:
        return "Station-keeping correction maneuver"


@dataclass(frozen=True)
class ManeuverSolution:
    """Delta-v magnitude (m/s) and the elements after the maneuver."""

    delta_v_ms: float
    elements: OrbitalElements


# ── Calculators ──


def hohmann_transfer(
    elements: OrbitalElements,
    target_altitude_km: float,
    body: CentralBody = EARTH,
) -> ManeuverSolution:
    """Two-burn Hohmann transfer from the current orbit to a target altitude.

    ``Δv = |vt1 − v1| + |v2 − vt2|`` with circular speeds ``v1``, ``v2`` and
    transfer-ellipse speeds ``vt1``, ``vt2`` at each apse. The resulting
    orbit is circularized (eccentricity reset to 1e-4).

    Args:
        elements: Current orbit; its semi-major axis is taken as ``r1``.
        target_altitude_km: Altitude of the destination orbit (km).
        body: Central body.

    Returns:
        Delta-v in m/s and the predicted elements.
    """
    mu = body.mu
    r1 = elements.semi_major_axis
    r2 = body.radius + target_altitude_km
    if not math.isfinite(r2) or r2 <= 0:
        raise InvalidOrbitalElements(
            f"Target altitude {target_altitude_km} km is below the center of {body.name}"
        )

    v1 = math.sqrt(mu / r1)
    v2 = math.sqrt(mu / r2)
    vt1 = math.sqrt(mu * (2.0 / r1 - 2.0 / (r1 + r2)))
    vt2 = math.sqrt(mu * (2.0 / r2 - 2.0 / (r1 + r2)))

    delta_v = (abs(vt1 - v1) + abs(v2 - vt2)) * 1000.0
    predicted = elements.with_changes(
        semi_major_axis=r2,
        eccentricity=NEAR_CIRCULAR_ECCENTRICITY,
    )
    return ManeuverSolution(delta_v, predicted)


def orbit_raise(
    elements: OrbitalElements,
    target_altitude_km: float,
    body: CentralBody = EARTH,
) -> ManeuverSolution:
    """Raise the orbit to ``target_altitude_km`` (Hohmann transfer)."""
    return hohmann_transfer(elements, target_altitude_km, body)


def orbit_lower(
    elements: OrbitalElements,
    target_altitude_km: float,
    body: CentralBody = EARTH,
) -> ManeuverSolution:
    """Lower the orbit to ``target_altitude_km`` (reverse Hohmann transfer)."""
    return hohmann_transfer(elements, target_altitude_km, body)


def inclination_change(
    elements: OrbitalElements,
    target_inclination_deg: float,
    body: CentralBody = EARTH,
) -> ManeuverSolution:
    """Impulsive plane change: ``Δv = 2·v·sin(|Δi|/2)``."""
    v = elements.circular_velocity(body)
    delta_i = abs(math.radians(target_inclination_deg - elements.inclination))
    delta_v = 2.0 * v * math.sin(delta_i / 2.0) * 1000.0
    return ManeuverSolution(
        delta_v, elements.with_changes(inclination=target_inclination_deg)
    )


def collision_avoidance(
    elements: OrbitalElements,
    safety_distance_km: float = DEFAULT_SAFETY_DISTANCE_KM,
    body: CentralBody = EARTH,
) -> ManeuverSolution:
    """Raise the orbit by ``safety_distance_km`` above its current altitude."""
    target_altitude = elements.altitude(body) + safety_distance_km
    return hohmann_transfer(elements, target_altitude, body)


def station_keeping(
    elements: OrbitalElements,
    targets: ElementTargets,
    body: CentralBody = EARTH,
) -> ManeuverSolution:
    """Small corrections toward a partial set of target elements.

    Cost model (km/s before conversion to m/s):
        - semi-major axis: ``|Δa| × 0.5``
        - inclination: ``v × |Δi|`` with ``Δi`` in radians

    RAAN, argument of perigee, eccentricity and true anomaly are set to
    their targets at no cost.
    """
    total = 0.0

    if targets.semi_major_axis is not None:
        delta_a = abs(targets.semi_major_axis - elements.semi_major_axis)
        total += delta_a * STATION_KEEPING_SMA_COST

    if targets.inclination is not None:
        v = elements.circular_velocity(body)
        delta_i = abs(math.radians(targets.inclination - elements.inclination))
        total += v * delta_i

    changes = targets.as_changes()
    predicted = elements.with_changes(**changes) if changes else elements
    return ManeuverSolution(total * 1000.0, predicted)


def apply_impulse(
    elements: OrbitalElements,
    delta_v_ms: float,
    body: CentralBody = EARTH,
) -> OrbitalElements:
    """Apply a tangential impulse at circular speed and return the new orbit.

    The new semi-major axis follows from the vis-viva specific energy
    ``ε = v²/2 − μ/r`` as ``a = −μ / (2ε)``. Burn direction and timing are
    not modeled; a negative ``delta_v_ms`` is a retrograde burn.

    Raises:
        InvalidOrbitalElements: If the impulse reaches escape energy.
    """
    r = elements.semi_major_axis
    v = elements.circular_velocity(body) + delta_v_ms / 1000.0
    energy = v * v / 2.0 - body.mu / r
    if energy >= 0:
        raise InvalidOrbitalElements(
            f"A {delta_v_ms:.1f} m/s impulse escapes {body.name} from a = {r:.1f} km"
        )
    return elements.with_changes(semi_major_axis=-body.mu / (2.0 * energy))


# ── Dispatch ──


def _solve_orbit_raise(intent: OrbitRaise, elements, body) -> Optional[ManeuverSolution]:
    if intent.target_altitude_km is None:
        return None
    return orbit_raise(elements, intent.target_altitude_km, body)


def _solve_orbit_lower(intent: OrbitLower, elements, body) -> Optional[ManeuverSolution]:
    if intent.target_altitude_km is None:
        return None
    return orbit_lower(elements, intent.target_altitude_km, body)


def _solve_inclination(intent: InclinationChange, elements, body) -> Optional[ManeuverSolution]:
    if intent.target_inclination_deg is None:
        return None
    return inclination_change(elements, intent.target_inclination_deg, body)


def _solve_avoidance(intent: CollisionAvoidance, elements, body) -> Optional[ManeuverSolution]:
    return collision_avoidance(elements, intent.effective_safety_distance(), body)


def _solve_station_keeping(intent: StationKeeping, elements, body) -> Optional[ManeuverSolution]:
    if intent.targets.is_empty():
        return None
    return station_keeping(elements, intent.targets, body)


_SOLVERS: dict[type, Callable[..., Optional[ManeuverSolution]]] = {
    OrbitRaise: _solve_orbit_raise,
    OrbitLower: _solve_orbit_lower,
    InclinationChange: _solve_inclination,
    CollisionAvoidance: _solve_avoidance,
    StationKeeping: _solve_station_keeping,
}


def compute_maneuver(
    intent: ManeuverIntent,
    elements: OrbitalElements,
    body: CentralBody = EARTH,
) -> ManeuverSolution:
    """Delta-v and predicted elements for ``intent`` applied to ``elements``.

    Intents without a usable target return zero delta-v and the input
    elements unchanged.

    Raises:
        TypeError: If ``intent`` is not one of the known intent classes.
    """
    solver = _SOLVERS.get(type(intent))
    if solver is None:
        raise TypeError(f"Unsupported maneuver intent: {type(intent).__name__}")

    solution = solver(intent, elements, body)
    if solution is None:
        logger.debug(
            "%s for %s has no target, treating as no-op",
            intent.kind.name, intent.satellite_id,
        )
        return ManeuverSolution(0.0, elements)

    logger.debug(
        "%s for %s: Δv=%.3f m/s, a %.1f → %.1f km",
        intent.kind.name,
        intent.satellite_id,
        solution.delta_v_ms,
        elements.semi_major_axis,
        solution.elements.semi_major_axis,
    )
    return solution
