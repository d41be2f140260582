import numpy as np
import pytest

from conftest import START, TARGET, build_field
from puttline.planning import PathFinder
from puttline.planning.path_finder import AngleSearchState, advance_angle
from puttline.terrain import SyntheticGreen


def test_first_angle_is_straight():
    finder = PathFinder()
    assert finder.next_angle(0.0) == 0.0
    assert finder.angle_increment == 3.0


def test_left_miss_aims_right_and_right_miss_aims_left():
    finder = PathFinder()
    finder.next_angle(0.0)
    assert finder.next_angle(-0.2) == pytest.approx(3.0)
    assert finder.previous_angle == pytest.approx(0.0)

    finder.reset()
    finder.next_angle(0.0)
    assert finder.next_angle(0.2) == pytest.approx(-3.0)


def test_oscillation_halves_increment():
    finder = PathFinder()
    angles = [
        finder.next_angle(0.0),
        finder.next_angle(-0.2),
        finder.next_angle(0.2),
        finder.next_angle(-0.2),
    ]
    assert angles == pytest.approx([0.0, 3.0, 0.0, 1.5])
    assert finder.angle_increment == pytest.approx(1.5)


def test_advance_angle_is_pure():
    state = AngleSearchState(current=3.0, previous=0.0, preprevious=0.0, increment=3.0, tried=2)
    nxt = advance_angle(state, 0.5)
    assert nxt.current == pytest.approx(0.0)
    assert nxt.previous == pytest.approx(3.0)
    assert nxt.preprevious == pytest.approx(0.0)
    assert state.current == 3.0  # untouched


def test_reset_starts_a_fresh_sweep():
    finder = PathFinder()
    finder.next_angle(0.0)
    finder.next_angle(-0.2)
    finder.last_deviation = -0.4
    finder.reset()
    assert finder.current_angle == 0.0
    assert finder.angle_increment == 3.0
    assert finder.last_deviation == 0.0
    assert finder.preview_angle() == 0.0


def test_preview_does_not_change_state():
    finder = PathFinder()
    finder.next_angle(0.0)
    finder.last_deviation = -0.1
    before = finder.state
    assert finder.preview_angle() == pytest.approx(3.0)
    assert finder.state == before


def test_find_best_shot_on_flat_green(simulator, flat_field):
    finder = PathFinder()
    shot = finder.find_best_shot(START, TARGET, simulator, flat_field, 1.0)
    assert shot.angle == 0.0
    assert shot.power == 1.0
    assert shot.holed
    assert shot.path.shape[1] == 3
    assert np.array_equal(shot.path[0], START)


def test_sidehill_second_attempt_aims_uphill(simulator):
    field = build_field(SyntheticGreen(slope_x=0.05))
    finder = PathFinder()

    first = finder.find_best_shot(START, TARGET, simulator, field, 0.8)
    assert first.angle == 0.0
    assert first.deviation < 0.0
    assert finder.last_deviation == first.deviation

    second = finder.find_best_shot(START, TARGET, simulator, field, 0.8)
    assert second.angle == pytest.approx(3.0)
    # aimed right, so the first step moves toward +x
    assert second.path[1][0] > 0.0
