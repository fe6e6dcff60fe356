"""Proximity-based collision-risk heuristic.

Scores how close a predicted orbit sits to other tracked objects in
altitude and inclination. The score is a percentage in [0, 100] meant to
rank maneuver options in a training context; it is not a conjunction
probability (Pc) and uses no covariance, miss distance or time of closest
approach.

For each object inside both gates::

    risk = 100 · exp(−Δalt / 10 km) · exp(−Δinc / 2°)

and the overall score is the maximum over all objects.
"""

from __future__ import annotations

import math
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import pandas as pd

from .elements import EARTH, CentralBody, OrbitalElements, RiskThresholds
from .tle import TLERecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TrackedObject:
    """Minimal view of another object in orbit.

    Attributes:
        object_id: Catalog or scenario identifier.
        altitude_km: Mean altitude (km).
        inclination_deg: Inclination (degrees).
        name: Optional display name.
    """

    object_id: str
    altitude_km: float
    inclination_deg: float
    name: Optional[str] = None

    @classmethod
    def from_elements(
        cls,
        object_id: str,
        elements: OrbitalElements,
        body: CentralBody = EARTH,
        name: Optional[str] = None,
    ) -> TrackedObject:
        return cls(
            object_id=object_id,
            altitude_km=elements.altitude(body),
            inclination_deg=elements.inclination,
            name=name,
        )

    @classmethod
    def from_tle(cls, record: TLERecord, body: CentralBody = EARTH) -> TrackedObject:
        """Tracked object from a parsed TLE, using ``body`` for the altitude."""
        return cls.from_elements(
            str(record.norad_id), record.to_elements(body), body, name=record.name
        )


def proximity_risk(
    altitude_diff_km: float,
    inclination_diff_deg: float,
    thresholds: Optional[RiskThresholds] = None,
) -> float:
    """Risk contribution (percent) of one object at the given separations."""
    t = thresholds or RiskThresholds()
    altitude_diff_km = abs(altitude_diff_km)
    inclination_diff_deg = abs(inclination_diff_deg)

    if altitude_diff_km >= t.altitude_gate_km or inclination_diff_deg >= t.inclination_gate_deg:
        return 0.0

    return (
        100.0
        * math.exp(-altitude_diff_km / t.altitude_scale_km)
        * math.exp(-inclination_diff_deg / t.inclination_scale_deg)
    )


def collision_probability(
    predicted: OrbitalElements,
    tracked: Iterable[TrackedObject],
    body: CentralBody = EARTH,
    thresholds: Optional[RiskThresholds] = None,
) -> float:
    """Highest proximity risk (percent, clamped to [0, 100]) over ``tracked``.

    An empty collection gives zero risk.
    """
    altitude = predicted.altitude(body)
    max_risk = 0.0

    for obj in tracked:
        risk = proximity_risk(
            altitude - obj.altitude_km,
            predicted.inclination - obj.inclination_deg,
            thresholds,
        )
        if risk > max_risk:
            max_risk = risk

    return min(max(max_risk, 0.0), 100.0)


def rank_conjunction_risks(
    predicted: OrbitalElements,
    tracked: Sequence[TrackedObject],
    body: CentralBody = EARTH,
    thresholds: Optional[RiskThresholds] = None,
) -> pd.DataFrame:
    """Per-object risk contributions, highest first.

    Returns:
        DataFrame with columns ``object_id``, ``name``, ``altitude_diff_km``,
        ``inclination_diff_deg`` and ``risk_pct``. Empty if nothing is
        tracked.
    """
    altitude = predicted.altitude(body)
    rows = []
    for obj in tracked:
        d_alt = abs(altitude - obj.altitude_km)
        d_inc = abs(predicted.inclination - obj.inclination_deg)
        rows.append({
            "object_id": obj.object_id,
            "name": obj.name,
            "altitude_diff_km": d_alt,
            "inclination_diff_deg": d_inc,
            "risk_pct": proximity_risk(d_alt, d_inc, thresholds),
        })

    if not rows:
        return pd.DataFrame(
            columns=["object_id", "name", "altitude_diff_km", "inclination_diff_deg", "risk_pct"]
        )

    df = pd.DataFrame(rows)
    logger.debug(
        "Ranked %d tracked objects, %d inside the risk gates",
        len(df), int((df["risk_pct"] > 0).sum()),
    )
    return df.sort_values("risk_pct", ascending=False, kind="stable").reset_index(drop=True)
