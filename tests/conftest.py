import numpy as np
import pytest

from puttline.config import SimulationConfig
from puttline.physics import BallSimulator
from puttline.terrain import SyntheticGreen, TerrainField

START = np.array([0.0, 0.0, 0.0])
TARGET = np.array([0.0, 0.0, -2.0])


def build_field(green=None, start=START, target=TARGET, resolution=0.05, width=1.0):
    green = green or SyntheticGreen()
    return TerrainField.build(start, target, green, resolution=resolution, width=width, hole_radius=0.05)


@pytest.fixture()
def flat_field():
    return build_field()


@pytest.fixture()
def simulator():
    return BallSimulator(SimulationConfig())
