"""Propellant estimates from the Tsiolkovsky rocket equation.

``Δv = ve · ln(m0 / mf)`` with exhaust velocity ``ve = Isp · g0``. The
spacecraft mass passed in is the mass after the burn, so the propellant
needed is ``m · (exp(Δv / ve) − 1)``.
"""

from __future__ import annotations

import math

from .elements import DEFAULT_DRY_MASS_KG, G0, ISP_STANDARD


def exhaust_velocity(isp_s: float = ISP_STANDARD, g0: float = G0) -> float:
    """Effective exhaust velocity (m/s)."""
    if isp_s <= 0:
        raise ValueError(f"Specific impulse must be positive, got {isp_s}")
    return isp_s * g0


def estimate_fuel_cost(
    delta_v_ms: float,
    dry_mass_kg: float = DEFAULT_DRY_MASS_KG,
    isp_s: float = ISP_STANDARD,
    g0: float = G0,
) -> float:
    """Propellant mass (kg) needed to impart ``delta_v_ms``.

    Args:
        delta_v_ms: Delta-v magnitude (m/s). Zero gives zero propellant.
        dry_mass_kg: Spacecraft mass after the burn (kg).
        isp_s: Specific impulse (s).
        g0: Standard gravity (m/s²).

    Raises:
        ValueError: If delta-v is negative or the mass is not positive.
    """
    if delta_v_ms < 0:
        raise ValueError(f"Delta-v magnitude must be non-negative, got {delta_v_ms}")
    if dry_mass_kg <= 0:
        raise ValueError(f"Spacecraft mass must be positive, got {dry_mass_kg}")

    mass_ratio = math.exp(delta_v_ms / exhaust_velocity(isp_s, g0))
    return dry_mass_kg * (mass_ratio - 1.0)


def delta_v_for_propellant(
    propellant_kg: float,
    dry_mass_kg: float = DEFAULT_DRY_MASS_KG,
    isp_s: float = ISP_STANDARD,
    g0: float = G0,
) -> float:
    """Delta-v (m/s) available from ``propellant_kg`` of propellant."""
    if propellant_kg < 0:
        raise ValueError(f"Propellant mass must be non-negative, got {propellant_kg}")
    if dry_mass_kg <= 0:
        raise ValueError(f"Spacecraft mass must be positive, got {dry_mass_kg}")
    return exhaust_velocity(isp_s, g0) * math.log1p(propellant_kg / dry_mass_kg)
