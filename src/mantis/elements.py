"""Keplerian orbital elements and the physical constants they are evaluated against.

Elements are stored in the units a scenario author thinks in (km and
degrees) and converted to radians only inside computations. Every value is
validated on construction so that a malformed orbit fails fast instead of
leaking NaN into positions, delta-v or risk estimates downstream.

References:
    - Vallado, D. (2013). Fundamentals of Astrodynamics and Applications.
    - Curtis, H. (2020). Orbital Mechanics for Engineering Students.
"""

from __future__ import annotations

import math
import numbers
import os
import logging
from dataclasses import dataclass, field, fields, replace
from typing import Optional

logger = logging.getLogger(__name__)

# ── Physical constants ──

MU_EARTH = 398600.4418
"""Earth gravitational parameter (km³/s²)."""

R_EARTH = 6371.0
"""Earth mean radius (km)."""

MU_MOON = 4902.800066
"""Lunar gravitational parameter (km³/s²)."""

R_MOON = 1737.4
"""Lunar mean radius (km)."""

G0 = 9.80665
"""Standard gravity (m/s²)."""

ISP_STANDARD = 300.0
"""Specific impulse assumed for maneuver propellant estimates (s)."""

DEFAULT_DRY_MASS_KG = 500.0
"""Spacecraft mass used when a scenario does not specify one (kg)."""

DEFAULT_SAFETY_DISTANCE_KM = 5.0
"""Altitude margin for collision-avoidance raises (km)."""

NEAR_CIRCULAR_ECCENTRICITY = 0.0001
"""Eccentricity assigned after a circularizing transfer."""

TWO_PI = 2.0 * math.pi
"""2π constant."""


class InvalidOrbitalElements(ValueError):
    """Raised when orbital elements cannot describe a bound two-body orbit."""


@dataclass(frozen=True, slots=True)
class CentralBody:
    """Gravitating body the orbit is evaluated around.

    Attributes:
        name: Display name.
        mu: Gravitational parameter (km³/s²).
        radius: Mean radius used for altitude conversions (km).
    """

    name: str
    mu: float
    radius: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.mu) and self.mu > 0):
            raise ValueError(f"Gravitational parameter must be positive, got {self.mu}")
        if not (math.isfinite(self.radius) and self.radius > 0):
            raise ValueError(f"Body radius must be positive, got {self.radius}")


EARTH = CentralBody(name="Earth", mu=MU_EARTH, radius=R_EARTH)
MOON = CentralBody(name="Moon", mu=MU_MOON, radius=R_MOON)

BODIES: dict[str, CentralBody] = {
    "earth": EARTH,
    "moon": MOON,
}


def get_body(name: str) -> CentralBody:
    """Look up a central body by name (case-insensitive)."""
    try:
        return BODIES[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown central body '{name}', expected one of {sorted(BODIES)}"
        ) from None


@dataclass(frozen=True, slots=True)
class OrbitalElements:
    """Classical Keplerian elements of a two-body orbit.

    Attributes:
        semi_major_axis: Semi-major axis (km). Must be positive.
        eccentricity: Eccentricity, in [0, 1). Near-circular (< 0.05) is
            assumed by the propagator but larger values are accepted.
        inclination: Inclination (degrees).
        raan: Right ascension of the ascending node (degrees).
        arg_perigee: Argument of perigee (degrees).
        true_anomaly: True anomaly at epoch (degrees).
    """

    semi_major_axis: float
    eccentricity: float
    inclination: float
    raan: float
    arg_perigee: float
    true_anomaly: float

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidOrbitalElements(f"{f.name} must be a finite number, got {value!r}")
            # Store plain floats, also for numpy scalars read from DataFrames
            value = float(value)
            if not math.isfinite(value):
                raise InvalidOrbitalElements(f"{f.name} must be a finite number, got {value!r}")
            object.__setattr__(self, f.name, value)
        if self.semi_major_axis <= 0:
            raise InvalidOrbitalElements(
                f"semi_major_axis must be positive, got {self.semi_major_axis}"
            )
        if not 0.0 <= self.eccentricity < 1.0:
            raise InvalidOrbitalElements(
                f"eccentricity must be in [0, 1) for a bound orbit, got {self.eccentricity}"
            )

    @classmethod
    def from_altitude(
        cls,
        altitude_km: float,
        inclination: float = 0.0,
        raan: float = 0.0,
        arg_perigee: float = 0.0,
        true_anomaly: float = 0.0,
        eccentricity: float = NEAR_CIRCULAR_ECCENTRICITY,
        body: CentralBody = EARTH,
    ) -> OrbitalElements:
        """Build a near-circular orbit from an altitude above ``body``."""
        return cls(
            semi_major_axis=body.radius + altitude_km,
            eccentricity=eccentricity,
            inclination=inclination,
            raan=raan,
            arg_perigee=arg_perigee,
            true_anomaly=true_anomaly,
        )

    def altitude(self, body: CentralBody = EARTH) -> float:
        """Altitude of the (circular) orbit above the body's surface (km)."""
        return self.semi_major_axis - body.radius

    def circular_velocity(self, body: CentralBody = EARTH) -> float:
        """Circular orbital speed at the semi-major axis (km/s)."""
        return math.sqrt(body.mu / self.semi_major_axis)

    def period(self, body: CentralBody = EARTH) -> float:
        """Orbital period (s)."""
        return TWO_PI * math.sqrt(self.semi_major_axis**3 / body.mu)

    def with_changes(self, **changes: float) -> OrbitalElements:
        """Return a copy with the given fields replaced (re-validated)."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Flat dictionary suitable for DataFrame construction."""
        return {
            "sma_km": self.semi_major_axis,
            "eccentricity": self.eccentricity,
            "inclination_deg": self.inclination,
            "raan_deg": self.raan,
            "arg_perigee_deg": self.arg_perigee,
            "true_anomaly_deg": self.true_anomaly,
        }


@dataclass(frozen=True)
class RiskThresholds:
    """Proximity gates and decay scales for the collision-risk heuristic.

    An object contributes risk only when it is inside both gates; the
    contribution then decays exponentially with each difference.
    """

    # Altitude gate (km). Objects at or beyond this separation score zero.
    altitude_gate_km: float = 50.0

    # Inclination gate (degrees).
    inclination_gate_deg: float = 10.0

    # e-folding distance of the altitude term (km).
    altitude_scale_km: float = 10.0

    # e-folding angle of the inclination term (degrees).
    inclination_scale_deg: float = 2.0


@dataclass(frozen=True)
class PlannerConfig:
    """Constants used when assembling a maneuver analysis.

    Defaults reproduce the Earth training scenarios. Use the presets or
    construct a custom instance to evaluate other bodies or spacecraft.
    """

    body: CentralBody = EARTH

    # Rocket-equation inputs.
    isp_s: float = ISP_STANDARD
    g0: float = G0
    dry_mass_kg: float = DEFAULT_DRY_MASS_KG

    # Altitude margin used by collision-avoidance intents that do not
    # override it (km).
    safety_distance_km: float = DEFAULT_SAFETY_DISTANCE_KM

    # Fixed burn and completion durations (s). These are placeholders,
    # not derived from thrust or burn time.
    execution_duration_s: float = 300.0
    time_to_complete_s: float = 1800.0

    risk: RiskThresholds = field(default_factory=RiskThresholds)

    @classmethod
    def for_earth(cls) -> PlannerConfig:
        """Default Earth-orbit configuration."""
        return cls()

    @classmethod
    def for_moon(cls) -> PlannerConfig:
        """Low lunar orbit: same spacecraft, lunar gravity and radius."""
        return cls(body=MOON)

    @classmethod
    def from_env(cls, body: Optional[CentralBody] = None) -> PlannerConfig:
        """Build a configuration with overrides from environment variables.

        Recognized variables::

            MANTIS_DRY_MASS_KG
            MANTIS_ISP_S
            MANTIS_SAFETY_DISTANCE_KM
        """
        overrides: dict[str, float] = {}
        for var, attr in (
            ("MANTIS_DRY_MASS_KG", "dry_mass_kg"),
            ("MANTIS_ISP_S", "isp_s"),
            ("MANTIS_SAFETY_DISTANCE_KM", "safety_distance_km"),
        ):
            raw = os.environ.get(var)
            if raw is None or not raw.strip():
                continue
            try:
                overrides[attr] = float(raw)
            except ValueError:
                raise ValueError(f"{var} must be a number, got {raw!r}") from None
            logger.debug("Config override from %s: %s=%s", var, attr, overrides[attr])

        return cls(body=body or EARTH, **overrides)
