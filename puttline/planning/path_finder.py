import logging
from dataclasses import dataclass, replace

import numpy as np

from puttline.geometry import planar_unit, rotate_about_y
from puttline.physics.shot import BallState, Shot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AngleSearchState:
    current: float = 0.0
    previous: float = 0.0
    preprevious: float = 0.0
    increment: float = 3.0
    tried: int = 0  # angles chosen since the last reset


def advance_angle(
    state: AngleSearchState,
    deviation: float,
    initial_increment: float = 3.0,
    oscillation_tolerance: float = 0.1,
) -> AngleSearchState:
    """
    Next aim angle given the signed deviation of the previous attempt.

      deviation == 0 -> first attempt: aim straight, increment reset
      deviation  < 0 -> ball went left, aim further right (+increment)
      deviation  > 0 -> ball went right, aim further left (-increment)

    When the angle three attempts back matches the current one (within
    oscillation_tolerance), the increment is halved first so the search
    narrows in on the bracketed angle.
    """
    if deviation == 0:
        return AngleSearchState(current=0.0, increment=initial_increment, tried=1)

    increment = state.increment
    if state.tried >= 3 and abs(state.current - state.preprevious) < oscillation_tolerance:
        increment = increment / 2.0
        logger.debug("Oscillation detected, angle increment now %.3f deg", increment)

    step = increment if deviation < 0 else -increment
    return replace(
        state,
        current=state.current + step,
        previous=state.current,
        preprevious=state.previous,
        increment=increment,
        tried=state.tried + 1,
    )


class PathFinder:
    """
    Picks one aim angle per call and rolls one putt with it.

    Search state lives on the instance and belongs to a single planning
    session; `reset()` starts a fresh angle sweep (e.g. after a power change).
    """

    def __init__(self, initial_increment: float = 3.0, oscillation_tolerance: float = 0.1):
        self.initial_increment = float(initial_increment)
        self.oscillation_tolerance = float(oscillation_tolerance)
        self.reset()

    def reset(self) -> None:
        self.state = AngleSearchState(increment=self.initial_increment)
        self.last_deviation = 0.0

    @property
    def current_angle(self) -> float:
        return self.state.current

    @property
    def previous_angle(self) -> float:
        return self.state.previous

    @property
    def angle_increment(self) -> float:
        return self.state.increment

    def _advanced(self, deviation: float) -> AngleSearchState:
        return advance_angle(
            self.state,
            deviation,
            initial_increment=self.initial_increment,
            oscillation_tolerance=self.oscillation_tolerance,
        )

    def preview_angle(self) -> float:
        """Angle the next find_best_shot call would use; state is untouched."""
        return self._advanced(self.last_deviation).current

    def next_angle(self, deviation: float) -> float:
        self.state = self._advanced(deviation)
        return self.state.current

    def find_best_shot(self, start, target, simulator, field, power: float) -> Shot:
        """
        Roll one putt at the next search angle with launch speed
        power * simulator.max_speed, and remember its deviation for the next call.
        """
        start = np.asarray(start, dtype=float)
        target = np.asarray(target, dtype=float)

        angle = self.next_angle(self.last_deviation)
        direction = rotate_about_y(planar_unit(target - start), angle)
        velocity = direction * (float(power) * simulator.max_speed)

        result = simulator.simulate(BallState(pos=start.copy(), vel=velocity), field)
        self.last_deviation = result.deviation

        logger.debug(
            "Shot angle=%.2f power=%.3f -> %s, %d points, closest index %d, deviation %.3f",
            angle, power, result.outcome.value, len(result.states),
            result.closest_index, result.deviation,
            extra={"angle": angle, "power": power},
        )

        return Shot(
            angle=angle,
            power=float(power),
            path=result.path,
            holed=result.holed,
            closest_index=result.closest_index,
            deviation=result.deviation,
            outcome=result.outcome,
        )
