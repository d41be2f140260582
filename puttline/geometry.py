"""
Small vector helpers for the planar (x, z) geometry of a putt.

Conventions:
  - Y is up; the ground plane is (x, z)
  - facing along a direction f, "right" is (-f.z, 0, f.x)
  - positive aim angles rotate the aim to the right
  - signed lateral deviation is negative when the ball ends up left of the line
"""
import math

import numpy as np

UP = np.array([0.0, 1.0, 0.0])


def planar(v) -> np.ndarray:
    return np.array([float(v[0]), 0.0, float(v[2])], dtype=float)


def planar_unit(v) -> np.ndarray:
    """Unit vector of v projected on the ground plane; zero vector if degenerate."""
    p = planar(v)
    n = math.hypot(p[0], p[2])
    if n < 1e-12:
        return np.zeros(3)
    return p / n


def planar_distance(a, b) -> float:
    return float(math.hypot(float(b[0]) - float(a[0]), float(b[2]) - float(a[2])))


def right_of(direction) -> np.ndarray:
    d = planar_unit(direction)
    return np.array([-d[2], 0.0, d[0]])


def rotate_about_y(v, angle_deg: float) -> np.ndarray:
    rad = math.radians(angle_deg)
    c, s = math.cos(rad), math.sin(rad)
    return np.array([v[0] * c - v[2] * s, 0.0, v[0] * s + v[2] * c])


def signed_lateral(direct_unit, actual_unit) -> float:
    # y component of cross(actual, direct)
    return float(actual_unit[2] * direct_unit[0] - actual_unit[0] * direct_unit[2])
