from dataclasses import dataclass
from enum import Enum

import numpy as np

from puttline.geometry import planar_distance, planar_unit, signed_lateral

SHORT_THRESHOLD_M = 0.15
LATERAL_THRESHOLD = 0.05


class DeviationType(Enum):
    SHORT = "short"
    LEFT = "left"
    RIGHT = "right"
    ACCURATE = "accurate"

    @property
    def message(self) -> str:
        return {
            DeviationType.SHORT: "came up short",
            DeviationType.LEFT: "missed left",
            DeviationType.RIGHT: "missed right",
            DeviationType.ACCURATE: "on line",
        }[self]


@dataclass(frozen=True)
class ShotAnalysis:
    distance_shortfall: float  # m, >= 0
    lateral_deviation: float   # |sin| of the angle between aim line and result
    deviation_type: DeviationType


def analyze(shot, start, target) -> ShotAnalysis:
    """
    Classify where a finished shot ended relative to the start->target line.

    Being short by more than 15 cm overrides any left/right reading.
    """
    start = np.asarray(start, dtype=float)
    target = np.asarray(target, dtype=float)
    final = shot.final_position
    if final is None:
        return ShotAnalysis(0.0, 0.0, DeviationType.ACCURATE)

    shortfall = max(0.0, planar_distance(start, target) - planar_distance(start, final))

    direct = planar_unit(target - start)
    actual = planar_unit(final - start)
    lateral = signed_lateral(direct, actual)

    if shortfall > SHORT_THRESHOLD_M:
        kind = DeviationType.SHORT
    elif lateral < -LATERAL_THRESHOLD:
        kind = DeviationType.LEFT
    elif lateral > LATERAL_THRESHOLD:
        kind = DeviationType.RIGHT
    else:
        kind = DeviationType.ACCURATE

    return ShotAnalysis(
        distance_shortfall=shortfall,
        lateral_deviation=abs(lateral),
        deviation_type=kind,
    )
