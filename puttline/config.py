"""
Tunable constants for terrain sampling, ball physics and shot planning,
plus JSON scene loading.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any

import numpy as np

LOG_LEVEL = os.environ.get("PUTTLINE_LOG_LEVEL", "INFO").upper()

# Per-step velocity decay for each green speed (higher = faster green)
GREEN_SPEEDS = {
    "slow": 0.988,
    "medium": 0.992,
    "fast": 0.995,
    "very_fast": 0.997,
}


def green_speed_friction(name: str) -> float:
    try:
        return GREEN_SPEEDS[name]
    except KeyError:
        raise ValueError(
            f"Unknown green speed {name!r}; expected one of {sorted(GREEN_SPEEDS)}"
        ) from None


@dataclass(frozen=True)
class TerrainConfig:
    resolution: float = 0.05   # m per cell
    width: float = 1.0         # total lateral extent (m)
    hole_radius: float = 0.05  # capture radius (m)
    force_scale: float = 0.015
    min_rows: int = 5

    def __post_init__(self):
        if self.resolution <= 0:
            raise ValueError("resolution must be positive")
        if self.width < 0:
            raise ValueError("width must be non-negative")
        if self.hole_radius <= 0:
            raise ValueError("hole_radius must be positive")


@dataclass(frozen=True)
class SimulationConfig:
    time_step: float = 0.01
    gravity: float = 9.81
    ball_radius: float = 0.02135
    max_speed: float = 2.0           # m/s, also the power=1.0 launch speed
    green_speed: str = "medium"
    stop_speed: float = 0.01         # m/s
    slope_force_factor: float = 0.35
    min_slope_damping: float = 0.8   # slope influence at full speed
    away_step_limit: int = 40
    max_steps: int = 700

    def __post_init__(self):
        if self.time_step <= 0:
            raise ValueError("time_step must be positive")
        if self.max_speed <= 0:
            raise ValueError("max_speed must be positive")
        if self.stop_speed < 0:
            raise ValueError("stop_speed must be non-negative")
        if self.max_steps <= 0:
            raise ValueError("max_steps must be positive")
        green_speed_friction(self.green_speed)

    @property
    def friction(self) -> float:
        return green_speed_friction(self.green_speed)


@dataclass(frozen=True)
class PlannerConfig:
    max_shots: int = 50
    max_total_power_boosts: int = 8
    max_phase_boosts: int = 3
    angle_tolerance: float = 0.5     # deg, repeat detection
    power_tolerance: float = 0.1     # repeat detection
    boost_cap: float = 3.0
    short_boost: float = 1.3
    short_trigger_attempts: int = 3
    phase2_power_ratio: float = 1.10
    initial_angle_increment: float = 3.0
    oscillation_tolerance: float = 0.1

    def __post_init__(self):
        if self.max_shots <= 0:
            raise ValueError("max_shots must be positive")
        if self.max_total_power_boosts < 0 or self.max_phase_boosts < 0:
            raise ValueError("boost limits must be non-negative")


@dataclass(frozen=True)
class Bump:
    """Gaussian bump (positive height) or bowl (negative height)."""
    center_x: float
    center_z: float
    height: float
    sigma: float


@dataclass(frozen=True)
class Scene:
    """
    A putt to plan, as read from a scene JSON file.

    Example:
        {
          "start": [0.0, 0.0, 0.0],
          "target": [0.0, 0.0, -2.0],
          "green_speed": "medium",
          "terrain": {
            "base_height": 0.0,
            "slope_x": 0.0, "slope_z": 0.01,
            "bumps": [{"x": 0.2, "z": -1.0, "height": 0.01, "sigma": 0.3}]
          },
          "resolution": 0.05, "width": 1.0, "hole_radius": 0.05
        }
    """
    start: np.ndarray
    target: np.ndarray
    terrain: TerrainConfig
    simulation: SimulationConfig
    base_height: float = 0.0
    slope_x: float = 0.0
    slope_z: float = 0.0
    bumps: list[Bump] = field(default_factory=list)
    coverage_radius: float | None = None


def _point(value: Any, key: str) -> np.ndarray:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"{key} must be a list of three numbers")
    return np.array([float(v) for v in value], dtype=float)


def scene_from_dict(data: dict[str, Any]) -> Scene:
    if "start" not in data or "target" not in data:
        raise ValueError("scene needs 'start' and 'target'")

    t = data.get("terrain") or {}
    bumps = [
        Bump(
            center_x=float(b["x"]),
            center_z=float(b["z"]),
            height=float(b["height"]),
            sigma=float(b["sigma"]),
        )
        for b in t.get("bumps", [])
    ]

    terrain_cfg = TerrainConfig(
        resolution=float(data.get("resolution", TerrainConfig.resolution)),
        width=float(data.get("width", TerrainConfig.width)),
        hole_radius=float(data.get("hole_radius", TerrainConfig.hole_radius)),
    )
    sim_cfg = SimulationConfig(green_speed=str(data.get("green_speed", "medium")))

    coverage = t.get("coverage_radius")
    return Scene(
        start=_point(data["start"], "start"),
        target=_point(data["target"], "target"),
        terrain=terrain_cfg,
        simulation=sim_cfg,
        base_height=float(t.get("base_height", 0.0)),
        slope_x=float(t.get("slope_x", 0.0)),
        slope_z=float(t.get("slope_z", 0.0)),
        bumps=bumps,
        coverage_radius=float(coverage) if coverage is not None else None,
    )


def load_scene(path: str) -> Scene:
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: scene must be a JSON object")
    try:
        return scene_from_dict(data)
    except (KeyError, TypeError) as e:
        raise ValueError(f"{path}: malformed scene ({e})") from e
