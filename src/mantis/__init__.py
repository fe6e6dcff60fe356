"""MANTIS — Maneuver ANalysis and Trajectory Insight for Space training.

Orbital mechanics engine for satellite scenario training: positions and
orbit paths from Keplerian elements, and maneuver analyses (delta-v, fuel
and collision risk) for the maneuver planner.

Modules:
    elements:    Orbital element model, central bodies and planner config.
    propagator:  Two-body circular propagation and orbit path geometry.
    maneuvers:   Maneuver intents and the delta-v calculator.
    propulsion:  Rocket-equation propellant estimates.
    conjunction: Proximity-based collision-risk heuristic.
    analysis:    Maneuver analysis assembly (single and batch).
    tle:         Two-Line Element import and export.
    viz:         Plots of orbit paths and maneuver analyses.
    cli:         Command-line interface.

Example:
    >>> from datetime import datetime
    >>> from mantis.elements import OrbitalElements
    >>> from mantis.maneuvers import OrbitRaise
    >>> from mantis.analysis import analyze_maneuver
    >>>
    >>> iss = OrbitalElements(6793.0, 0.0001, 51.64, 125.4, 45.2, 180.0)
    >>> intent = OrbitRaise("ISS", datetime(2024, 6, 1), target_altitude_km=472.0)
    >>> print(analyze_maneuver(intent, iss).summary())
"""

__version__ = "0.1.0"
