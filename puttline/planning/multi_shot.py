from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from functools import partial
from typing import Any

import numpy as np

from puttline.config import PlannerConfig
from puttline.geometry import planar_distance
from puttline.physics.shot import Shot
from puttline.planning.power import initial_power
from puttline.planning.shot_analyzer import DeviationType, analyze

logger = logging.getLogger(__name__)


@dataclass
class PlanningSession:
    """Everything one plan_shots call learns; created fresh per call."""
    start: np.ndarray
    target: np.ndarray
    initial_power: float = 0.0
    shots: list[Shot] = field(default_factory=list)
    phases: list[int] = field(default_factory=list)  # phase of each shot
    attempts: int = 0
    power_boosts: int = 0
    best_index: int | None = None
    best_distance: float = math.inf

    @property
    def best_shot(self) -> Shot | None:
        if self.best_index is None:
            return None
        return self.shots[self.best_index]

    @property
    def holed(self) -> bool:
        best = self.best_shot
        return best is not None and best.holed

    def record(self, shot: Shot, phase: int) -> None:
        self.shots.append(shot)
        self.phases.append(phase)
        self.attempts += 1

        if self.holed:
            return
        dist = shot.miss_distance(self.target)
        if shot.holed or dist < self.best_distance:
            self.best_index = len(self.shots) - 1
            self.best_distance = 0.0 if shot.holed else dist


class MultiShotPlanner:
    """
    Search for a holing putt by repeated PathFinder attempts.

    Phase 1 starts at the power policy's estimate; phase 2 (only if phase 1
    never holes) restarts at phase2_power_ratio times that. Within a phase:
      - an (angle, power) pair close to one already tried triggers a power
        boost of min((1 + shortfall / distance)^2, boost_cap) and a fresh
        angle sweep instead of a wasted attempt
      - a short shot after short_trigger_attempts attempts gets a flat
        short_boost
    Boosts are limited per phase and across the whole call. The best shot
    (holed, else closest approach) is drawn through the renderer, if any.
    """

    def __init__(self, renderer=None, config: PlannerConfig | None = None, power_policy=None):
        self.renderer = renderer
        self.config = config or PlannerConfig()
        self.power_policy = power_policy
        self.session: PlanningSession | None = None
        self.best_shot_handles: list = []

    @property
    def best_shot(self) -> Shot | None:
        return self.session.best_shot if self.session is not None else None

    def clear_rendering(self) -> None:
        if self.renderer is not None and self.best_shot_handles:
            self.renderer.remove(self.best_shot_handles)
        self.best_shot_handles = []

    def plan_shots(self, start, target, simulator, finder, field, max_shots: int | None = None) -> list[Shot]:
        """
        Run both phases and return every simulated shot in order. `field` must
        be built over the same (start, target) pair.
        """
        cfg = self.config
        max_shots = cfg.max_shots if max_shots is None else int(max_shots)
        start = np.asarray(start, dtype=float)
        target = np.asarray(target, dtype=float)

        self.clear_rendering()
        session = PlanningSession(start=start.copy(), target=target.copy())
        self.session = session

        # policy(start, target, field) -> power scale; the default reads the simulator's constants
        policy = self.power_policy or partial(initial_power, simulator=simulator)
        base_power = float(policy(start, target, field))
        session.initial_power = base_power
        logger.info(
            "Planning putt: distance=%.3fm, initial power=%.3f, max %d shots per phase",
            planar_distance(start, target), base_power, max_shots,
        )

        holed = self._run_phase(session, 1, base_power, simulator, finder, field, max_shots)
        if not holed:
            logger.info("Phase 1 exhausted without holing, escalating power")
            holed = self._run_phase(
                session, 2, base_power * cfg.phase2_power_ratio, simulator, finder, field, max_shots
            )

        best = session.best_shot
        if best is None:
            logger.warning("No shots were simulated")
        else:
            logger.info(
                "Best shot #%d: angle=%.2f power=%.3f holed=%s miss=%.3fm (%d attempts, %d boosts)",
                session.best_index + 1, best.angle, best.power, best.holed,
                session.best_distance, session.attempts, session.power_boosts,
            )
            if self.renderer is not None and len(best.path) > 0:
                self.best_shot_handles = list(self.renderer.draw(best.path, target))

        return list(session.shots)

    def _can_boost(self, session: PlanningSession, phase_boosts: int) -> bool:
        cfg = self.config
        return phase_boosts < cfg.max_phase_boosts and session.power_boosts < cfg.max_total_power_boosts

    def _already_tried(self, tried, angle: float, power: float) -> bool:
        cfg = self.config
        return any(
            abs(angle - a) <= cfg.angle_tolerance and abs(power - p) <= cfg.power_tolerance
            for a, p in tried
        )

    def _run_phase(self, session, phase, power, simulator, finder, field, max_shots) -> bool:
        cfg = self.config
        start, target = session.start, session.target
        distance = planar_distance(start, target)

        finder.reset()
        tried = []
        phase_boosts = 0
        attempts = 0
        last_shot = None

        while attempts < max_shots:
            angle = finder.preview_angle()

            if self._already_tried(tried, angle, power) and self._can_boost(session, phase_boosts):
                ratio = 0.0
                if last_shot is not None and distance > 0.0:
                    ratio = analyze(last_shot, start, target).distance_shortfall / distance
                multiplier = min((1.0 + ratio) ** 2, cfg.boost_cap)
                power *= multiplier
                phase_boosts += 1
                session.power_boosts += 1
                finder.reset()
                tried = []
                logger.info(
                    "Repeated angle %.2f, boosting power x%.2f to %.3f",
                    angle, multiplier, power,
                    extra={"phase": phase, "angle": angle, "power": power},
                )
                continue

            shot = finder.find_best_shot(start, target, simulator, field, power)
            attempts += 1
            tried.append((shot.angle, power))
            session.record(shot, phase)
            logger.debug(
                "Phase %d attempt %d: angle=%.2f power=%.3f holed=%s",
                phase, attempts, shot.angle, power, shot.holed,
                extra={"phase": phase, "attempt": attempts, "angle": shot.angle, "power": power},
            )

            if shot.holed:
                logger.info("Holed on phase %d attempt %d", phase, attempts)
                return True
            last_shot = shot

            if attempts >= cfg.short_trigger_attempts and self._can_boost(session, phase_boosts):
                if analyze(shot, start, target).deviation_type is DeviationType.SHORT:
                    power *= cfg.short_boost
                    phase_boosts += 1
                    session.power_boosts += 1
                    finder.reset()
                    tried = []
                    logger.info(
                        "Shot came up short, boosting power to %.3f", power,
                        extra={"phase": phase, "attempt": attempts, "power": power},
                    )

        return False


def aim_advice(angle: float) -> str:
    if abs(angle) < 0.1:
        return f"aim straight ({abs(angle):.1f}°)"
    side = "right" if angle > 0 else "left"
    return f"aim {abs(angle):.1f}° {side}"


@dataclass(frozen=True)
class PlanResult:
    start: list[float]
    target: list[float]
    attempts: int
    power_boosts: int
    initial_power: float
    holed: bool
    angle: float
    power: float
    miss_m: float
    advice: str
    min_angle: float
    max_angle: float
    path: list[list[float]]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_session(session: PlanningSession) -> "PlanResult":
        best = session.best_shot
        if best is None:
            raise ValueError("session has no shots")
        angles = [s.angle for s in session.shots]
        return PlanResult(
            start=[float(v) for v in session.start],
            target=[float(v) for v in session.target],
            attempts=int(session.attempts),
            power_boosts=int(session.power_boosts),
            initial_power=float(session.initial_power),
            holed=bool(best.holed),
            angle=float(best.angle),
            power=float(best.power),
            miss_m=float(session.best_distance),
            advice=aim_advice(best.angle),
            min_angle=float(min(angles)),
            max_angle=float(max(angles)),
            path=[[float(v) for v in p] for p in best.path],
        )
