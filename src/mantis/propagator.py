"""Two-body position propagation and orbit path geometry.

Positions come from a circular-orbit approximation: the spacecraft sits at
radius ``a`` and advances uniformly in anomaly with the orbital period.
Eccentricity does not perturb the radius. This keeps paths visually stable
for the training scenarios and is a known simplification, not an SGP4
substitute.

The in-plane point is rotated, in order, by the argument of perigee (about
the orbit normal), the inclination (about the node line) and the RAAN
(about the polar axis). Results are expressed in the propagator's own
(x, y, z) frame; any axis permutation needed by a renderer is up to the
caller.
"""

from __future__ import annotations

import math
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Union

import numpy as np
import pandas as pd

from .elements import EARTH, TWO_PI, CentralBody, OrbitalElements

logger = logging.getLogger(__name__)

Instant = Union[datetime, float, int]

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class Position3:
    """Cartesian position (km)."""

    x: float
    y: float
    z: float

    def norm(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


def orbital_period(elements: OrbitalElements, body: CentralBody = EARTH) -> float:
    """Orbital period ``T = 2π·sqrt(a³/μ)`` in seconds."""
    return elements.period(body)


def propagate(
    elements: OrbitalElements,
    instant: Instant,
    body: CentralBody = EARTH,
) -> Position3:
    """Position of the spacecraft at ``instant``.

    Args:
        elements: Orbit to evaluate.
        instant: A datetime (naive values are taken as UTC) or Unix epoch
            seconds.
        body: Central body supplying μ.

    Returns:
        Cartesian position in km.
    """
    seconds = _epoch_seconds(instant)
    period = elements.period(body)
    phase = (math.fmod(seconds, period) / period) * TWO_PI
    anomaly = math.radians(elements.true_anomaly) + phase

    x, y, z = _orbit_to_inertial(elements, np.array([anomaly]))
    return Position3(float(x[0]), float(y[0]), float(z[0]))


def orbit_path(
    elements: OrbitalElements,
    segments: int = 128,
) -> list[Position3]:
    """Closed loop of ``segments + 1`` points tracing one full revolution.

    The first and last points coincide (angles 0 and 2π).
    """
    x, y, z = _path_arrays(elements, segments)
    return [Position3(float(px), float(py), float(pz)) for px, py, pz in zip(x, y, z)]


def orbit_path_frame(elements: OrbitalElements, segments: int = 128) -> pd.DataFrame:
    """Orbit path as a DataFrame with one row per point.

    Columns: ``angle_deg``, ``x_km``, ``y_km``, ``z_km``.
    """
    x, y, z = _path_arrays(elements, segments)
    angles = np.linspace(0.0, 360.0, segments + 1)
    return pd.DataFrame({"angle_deg": angles, "x_km": x, "y_km": y, "z_km": z})


def build_position_history(
    elements: OrbitalElements,
    start: datetime,
    duration_s: float,
    step_s: float = 60.0,
    body: CentralBody = EARTH,
) -> pd.DataFrame:
    """Sample the propagated position over a time window.

    Useful for charting the ground truth a training scenario is built on.

    Args:
        elements: Orbit to propagate.
        start: First sample time (naive values are taken as UTC).
        duration_s: Window length (s). The end point is included when it
            falls on a step.
        step_s: Sampling interval (s).
        body: Central body.

    Returns:
        DataFrame with columns ``epoch`` (naive UTC), ``x_km``, ``y_km``, ``z_km``,
        ``radius_km``, ``altitude_km`` and ``speed_kms``.
    """
    if step_s <= 0:
        raise ValueError(f"step_s must be positive, got {step_s}")
    if duration_s < 0:
        raise ValueError(f"duration_s must be non-negative, got {duration_s}")

    offsets = np.arange(0.0, duration_s + step_s * 1e-9, step_s)
    t0 = _epoch_seconds(start)
    period = elements.period(body)
    phases = (np.fmod(t0 + offsets, period) / period) * TWO_PI
    anomalies = math.radians(elements.true_anomaly) + phases

    x, y, z = _orbit_to_inertial(elements, anomalies)
    radius = np.sqrt(x**2 + y**2 + z**2)

    start_utc = _as_utc(start).replace(tzinfo=None)
    epochs = [start_utc + timedelta(seconds=float(dt)) for dt in offsets]

    logger.debug(
        "Sampled %d positions over %.0f s (period %.1f s)",
        len(offsets), duration_s, period,
    )
    return pd.DataFrame({
        "epoch": epochs,
        "x_km": x,
        "y_km": y,
        "z_km": z,
        "radius_km": radius,
        "altitude_km": radius - body.radius,
        "speed_kms": elements.circular_velocity(body),
    })


# ── Private helpers ──


def _path_arrays(
    elements: OrbitalElements,
    segments: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    if segments < 1:
        raise ValueError(f"segments must be at least 1, got {segments}")
    angles = np.arange(segments + 1) / segments * TWO_PI
    return _orbit_to_inertial(elements, angles)


def _orbit_to_inertial(
    elements: OrbitalElements,
    anomalies: np.ndarray,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Rotate in-plane points at ``anomalies`` (rad) into the inertial frame."""
    r = elements.semi_major_axis
    inc = math.radians(elements.inclination)
    raan = math.radians(elements.raan)
    argp = math.radians(elements.arg_perigee)

    x_orb = r * np.cos(anomalies)
    y_orb = r * np.sin(anomalies)

    # Argument of perigee, about the orbit normal
    x_p = x_orb * math.cos(argp) - y_orb * math.sin(argp)
    y_p = x_orb * math.sin(argp) + y_orb * math.cos(argp)

    # Inclination, about the node line
    x_i = x_p
    y_i = y_p * math.cos(inc)
    z_i = y_p * math.sin(inc)

    # RAAN, about the polar axis
    x = x_i * math.cos(raan) - y_i * math.sin(raan)
    y = x_i * math.sin(raan) + y_i * math.cos(raan)
    return x, y, z_i


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def _epoch_seconds(instant: Instant) -> float:
    """Unix epoch seconds for a datetime or a numeric timestamp."""
    if isinstance(instant, datetime):
        return (_as_utc(instant) - _UNIX_EPOCH).total_seconds()
    seconds = float(instant)
    if not math.isfinite(seconds):
        raise ValueError(f"instant must be finite, got {instant!r}")
    return seconds
