import math

import numpy as np
import pytest

from conftest import START, TARGET
from puttline.physics import Shot
from puttline.planning import DeviationType, analyze


def shot_ending_at(final):
    path = np.array([START, np.asarray(final, dtype=float)])
    return Shot(angle=0.0, power=0.5, path=path, holed=False, closest_index=1)


def test_empty_path_is_accurate():
    shot = Shot(angle=0.0, power=0.5, path=np.empty((0, 3)), holed=False, closest_index=0)
    a = analyze(shot, START, TARGET)
    assert a.deviation_type is DeviationType.ACCURATE
    assert a.distance_shortfall == 0.0
    assert a.lateral_deviation == 0.0


def test_short_overrides_lateral():
    final = 1.8 * np.array([0.1, 0.0, -math.sqrt(0.99)])
    a = analyze(shot_ending_at(final), START, TARGET)
    assert a.deviation_type is DeviationType.SHORT
    assert a.distance_shortfall == pytest.approx(0.2)
    assert a.lateral_deviation == pytest.approx(0.1)


@pytest.mark.parametrize(
    "x, expected",
    [(-0.2, DeviationType.LEFT), (0.2, DeviationType.RIGHT)],
)
def test_left_and_right(x, expected):
    a = analyze(shot_ending_at([x, 0.0, -2.0]), START, TARGET)
    assert a.deviation_type is expected
    assert a.distance_shortfall == 0.0
    assert a.lateral_deviation == pytest.approx(0.2 / math.hypot(0.2, 2.0))


def test_close_miss_is_accurate():
    a = analyze(shot_ending_at([0.05, 0.0, -1.95]), START, TARGET)
    assert a.deviation_type is DeviationType.ACCURATE
    assert a.distance_shortfall < 0.15


def test_long_straight_shot_has_no_shortfall():
    a = analyze(shot_ending_at([0.0, 0.0, -2.5]), START, TARGET)
    assert a.distance_shortfall == 0.0
    assert a.deviation_type is DeviationType.ACCURATE


def test_height_is_ignored():
    a = analyze(shot_ending_at([0.0, 0.4, -1.0]), START, TARGET)
    assert a.distance_shortfall == pytest.approx(1.0)
    assert a.deviation_type is DeviationType.SHORT
    assert DeviationType.SHORT.message == "came up short"
