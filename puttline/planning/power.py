import numpy as np

from puttline.config import SimulationConfig
from puttline.geometry import planar_distance

MIN_POWER = 0.1
MAX_POWER = 1.0
OVERSHOOT = 1.10             # aim to roll 10% past the hole
HEIGHT_SENSITIVITY = 2.0
UNDULATION_THRESHOLD = 0.015  # m of accumulated up/down along the line
UNDULATION_BOOST = 1.10


def accumulated_height_change(field) -> float:
    """Total |dy| walked along the field's centerline (m)."""
    line = field.centerline()
    if len(line) < 2:
        return 0.0
    ys = np.array([s.position[1] for s in line])
    return float(np.sum(np.abs(np.diff(ys))))


def initial_power(start, target, field, simulator=None) -> float:
    """
    Starting power scale for a putt.

    On a flat green each step multiplies speed by f, so a ball launched at v0
    rolls about v0 * dt * f / (1 - f). Invert that for the planar distance
    (plus overshoot), scale by 1 + 2 * rise / distance for the net climb, and
    hit 10% harder when the line undulates by more than 1.5 cm in total.

    Time step, friction and max speed come from `simulator.config`, or the
    SimulationConfig defaults when no simulator is given.
    """
    dist = planar_distance(start, target)
    if dist <= 0.0:
        return MIN_POWER

    cfg = simulator.config if simulator is not None else SimulationConfig()
    f = cfg.friction
    dt = cfg.time_step
    rollout_per_speed = dt * f / (1.0 - f)
    v0 = dist * OVERSHOOT / rollout_per_speed

    rise = float(target[1]) - float(start[1])
    v0 *= max(0.0, 1.0 + HEIGHT_SENSITIVITY * rise / dist)

    if field is not None and accumulated_height_change(field) > UNDULATION_THRESHOLD:
        v0 *= UNDULATION_BOOST

    return min(MAX_POWER, max(MIN_POWER, v0 / cfg.max_speed))
