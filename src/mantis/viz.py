#!/usr/bin/env python3
"""Plotting helpers for orbit geometry and maneuver analyses.

Produces static matplotlib figures of orbit paths, before/after maneuver
comparisons and sampled position histories. Every function returns the
Figure and can optionally save it as a PNG, which makes them usable both in
notebooks and in batch report generation.
"""
from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import matplotlib.dates as mdates

from .analysis import ManeuverAnalysis
from .elements import EARTH, CentralBody, OrbitalElements
from .propagator import orbit_path_frame


plt.rcParams.update({
    "figure.facecolor": "white",
    "axes.facecolor": "#fafafa",
    "axes.grid": True,
    "grid.alpha": 0.3,
    "font.family": "sans-serif",
    "font.size": 10,
})

# Maneuver kind colors
KIND_COLORS = {
    "ORBIT_RAISE": "#2ecc71",
    "ORBIT_LOWER": "#e74c3c",
    "INCLINATION_CHANGE": "#9b59b6",
    "COLLISION_AVOIDANCE": "#f39c12",
    "STATION_KEEPING": "#3498db",
}

_PATH_COLORS = ["#2c3e50", "#2980b9", "#8e44ad", "#16a085", "#d35400", "#c0392b"]


def plot_orbit_paths(
    orbits: Mapping[str, OrbitalElements],
    body: CentralBody = EARTH,
    segments: int = 128,
    title: Optional[str] = None,
    save_path: Optional[str | Path] = None,
    figsize: tuple = (9, 9),
) -> plt.Figure:
    """Plot one closed path per labelled orbit around a wireframe body.

    Args:
        orbits: Mapping of label to orbital elements.
        body: Central body drawn at the origin.
        segments: Path resolution.
        title: Plot title.
        save_path: Path to save figure (optional).

    Returns:
        matplotlib Figure
    """
    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(projection="3d")
    _draw_body(ax, body)

    extent = body.radius
    for idx, (label, elements) in enumerate(orbits.items()):
        path = orbit_path_frame(elements, segments)
        ax.plot(
            path["x_km"], path["y_km"], path["z_km"],
            linewidth=1.2,
            color=_PATH_COLORS[idx % len(_PATH_COLORS)],
            label=label,
        )
        extent = max(extent, elements.semi_major_axis)

    _finish_3d(ax, extent, title or f"Orbit Paths around {body.name}")
    if orbits:
        ax.legend(loc="upper right", fontsize=8)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_maneuver_comparison(
    current: OrbitalElements,
    analysis: ManeuverAnalysis,
    body: CentralBody = EARTH,
    segments: int = 128,
    save_path: Optional[str | Path] = None,
    figsize: tuple = (9, 9),
) -> plt.Figure:
    """Overlay the current orbit and the orbit predicted by ``analysis``."""
    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(projection="3d")
    _draw_body(ax, body)

    before = orbit_path_frame(current, segments)
    after = orbit_path_frame(analysis.predicted, segments)
    color = KIND_COLORS.get(analysis.intent.kind.name, "#95a5a6")

    ax.plot(before["x_km"], before["y_km"], before["z_km"],
            linewidth=1.0, linestyle="--", color="#95a5a6", label="Current")
    ax.plot(after["x_km"], after["y_km"], after["z_km"],
            linewidth=1.5, color=color, label="Predicted")

    extent = max(current.semi_major_axis, analysis.predicted.semi_major_axis)
    _finish_3d(
        ax,
        extent,
        f"{analysis.intent.satellite_id} — {analysis.intent.describe()}\n"
        f"Δv = {analysis.delta_v_ms:.2f} m/s, fuel = {analysis.fuel_cost_kg:.2f} kg, "
        f"risk = {analysis.collision_probability:.1f}%",
    )
    ax.legend(loc="upper right", fontsize=8)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_position_history(
    history_df: pd.DataFrame,
    title: str = "Position History",
    save_path: Optional[str | Path] = None,
    figsize: tuple = (14, 7),
) -> plt.Figure:
    """Plot Cartesian components and altitude from ``build_position_history``."""
    fig, axes = plt.subplots(2, 1, figsize=figsize, sharex=True)
    epochs = pd.to_datetime(history_df["epoch"])

    # Panel 1: components
    ax = axes[0]
    for col, color in (("x_km", "#c0392b"), ("y_km", "#27ae60"), ("z_km", "#2980b9")):
        ax.plot(epochs, history_df[col], linewidth=0.8, color=color, label=col[0])
    ax.set_ylabel("Position (km)")
    ax.set_title(title)
    ax.legend(loc="upper right", fontsize=8)

    # Panel 2: altitude
    ax = axes[1]
    ax.plot(epochs, history_df["altitude_km"], linewidth=0.8, color="#2c3e50")
    ax.set_ylabel("Altitude (km)")
    ax.set_xlabel("Epoch")

    for ax in axes:
        ax.xaxis.set_major_formatter(mdates.DateFormatter("%H:%M"))
    fig.autofmt_xdate(rotation=30)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_maneuver_options(
    analysis_df: pd.DataFrame,
    title: str = "Maneuver Options",
    save_path: Optional[str | Path] = None,
    figsize: tuple = (12, 6),
) -> plt.Figure:
    """Compare batch analyses: delta-v and collision risk per option.

    Expects the DataFrame returned by ``analyze_maneuvers_batch``.
    """
    if analysis_df.empty:
        fig, ax = plt.subplots(figsize=figsize)
        ax.text(0.5, 0.5, "No maneuvers analyzed", transform=ax.transAxes,
                ha="center", va="center", fontsize=14, color="#95a5a6")
        return fig

    fig, axes = plt.subplots(2, 1, figsize=figsize, sharex=True,
                             gridspec_kw={"height_ratios": [2, 1]})
    labels = [
        f"{sat}\n{kind.replace('_', ' ').title()}"
        for sat, kind in zip(analysis_df["satellite_id"], analysis_df["type"])
    ]
    colors = [KIND_COLORS.get(kind, "#95a5a6") for kind in analysis_df["type"]]
    x = np.arange(len(analysis_df))

    ax = axes[0]
    ax.bar(x, analysis_df["delta_v_ms"], color=colors, alpha=0.85)
    ax.set_ylabel("Δv (m/s)")
    ax.set_title(title)

    ax = axes[1]
    ax.bar(x, analysis_df["collision_probability_pct"], color="#7f8c8d", alpha=0.8)
    ax.set_ylabel("Risk (%)")
    ax.set_ylim(0, 100)
    ax.set_xticks(x)
    ax.set_xticklabels(labels, fontsize=8)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def _draw_body(ax, body: CentralBody) -> None:
    u, v = np.mgrid[0:2 * np.pi:24j, 0:np.pi:12j]
    ax.plot_wireframe(
        body.radius * np.cos(u) * np.sin(v),
        body.radius * np.sin(u) * np.sin(v),
        body.radius * np.cos(v),
        color="#3498db",
        linewidth=0.3,
        alpha=0.4,
    )


def _finish_3d(ax, extent: float, title: str) -> None:
    lim = extent * 1.1
    ax.set_xlim(-lim, lim)
    ax.set_ylim(-lim, lim)
    ax.set_zlim(-lim, lim)
    ax.set_box_aspect((1, 1, 1))
    ax.set_xlabel("x (km)")
    ax.set_ylabel("y (km)")
    ax.set_zlabel("z (km)")
    ax.set_title(title)
