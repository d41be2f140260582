from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from puttline.geometry import planar_distance


@dataclass
class BallState:
    pos: np.ndarray
    vel: np.ndarray

    def copy(self) -> "BallState":
        return BallState(pos=self.pos.copy(), vel=self.vel.copy())

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.vel))


class SimulationOutcome(Enum):
    HOLED = "holed"
    STOPPED = "stopped"          # came to rest short of / past the hole
    DIVERGED = "diverged"        # kept rolling away from the hole
    OFF_TERRAIN = "off_terrain"  # no terrain sample under the ball
    STEP_LIMIT = "step_limit"

    @property
    def problem(self) -> str | None:
        """What the next attempt should fix: "power", "angle" or nothing."""
        if self is SimulationOutcome.STOPPED:
            return "power"
        if self is SimulationOutcome.DIVERGED:
            return "angle"
        return None


@dataclass(frozen=True)
class StepRecord:
    step: int
    position: np.ndarray
    velocity: np.ndarray
    acceleration: np.ndarray
    forward_slope: float
    lateral_slope: float

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))


@dataclass
class SimulationResult:
    states: list[BallState]
    holed: bool
    closest_index: int
    deviation: float
    outcome: SimulationOutcome
    final_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @property
    def path(self) -> np.ndarray:
        if not self.states:
            return np.empty((0, 3))
        return np.array([s.pos for s in self.states])


@dataclass(frozen=True)
class Shot:
    """One simulated putt: aim, strength and where the ball went."""
    angle: float          # degrees offset from the straight line to the hole (+ = right)
    power: float          # fraction of max speed
    path: np.ndarray      # (n, 3) positions
    holed: bool
    closest_index: int
    deviation: float = 0.0
    outcome: SimulationOutcome = SimulationOutcome.STOPPED

    @property
    def final_position(self) -> np.ndarray | None:
        if len(self.path) == 0:
            return None
        return self.path[-1]

    @property
    def closest_position(self) -> np.ndarray | None:
        if len(self.path) == 0:
            return None
        idx = min(max(self.closest_index, 0), len(self.path) - 1)
        return self.path[idx]

    def miss_distance(self, target) -> float:
        """Planar distance from the closest approach to the target."""
        p = self.closest_position
        if p is None:
            return float("inf")
        return planar_distance(p, target)
