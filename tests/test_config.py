import json

import numpy as np
import pytest

from puttline.config import (
    PlannerConfig,
    SimulationConfig,
    TerrainConfig,
    green_speed_friction,
    load_scene,
    scene_from_dict,
)


def test_green_speeds():
    assert green_speed_friction("slow") == 0.988
    assert green_speed_friction("very_fast") == 0.997
    assert SimulationConfig(green_speed="fast").friction == 0.995
    with pytest.raises(ValueError):
        green_speed_friction("glacial")
    with pytest.raises(ValueError):
        SimulationConfig(green_speed="glacial")


def test_defaults():
    sim = SimulationConfig()
    assert sim.time_step == 0.01
    assert sim.max_speed == 2.0
    assert sim.stop_speed == 0.01
    assert sim.friction == 0.992
    assert TerrainConfig().hole_radius == 0.05
    assert PlannerConfig().max_shots == 50


@pytest.mark.parametrize(
    "make",
    [
        lambda: TerrainConfig(resolution=0.0),
        lambda: TerrainConfig(hole_radius=-1.0),
        lambda: SimulationConfig(time_step=0.0),
        lambda: SimulationConfig(max_steps=0),
        lambda: PlannerConfig(max_shots=0),
        lambda: PlannerConfig(max_phase_boosts=-1),
    ],
)
def test_invalid_values_are_rejected(make):
    with pytest.raises(ValueError):
        make()


def test_scene_from_dict():
    scene = scene_from_dict({
        "start": [0, 0, 0],
        "target": [0.5, 0.01, -3],
        "green_speed": "slow",
        "terrain": {"slope_x": 0.02, "bumps": [{"x": 0.1, "z": -1, "height": 0.01, "sigma": 0.2}]},
        "resolution": 0.1,
    })
    assert np.allclose(scene.target, [0.5, 0.01, -3.0])
    assert scene.simulation.friction == 0.988
    assert scene.terrain.resolution == 0.1
    assert scene.terrain.width == 1.0
    assert scene.slope_x == 0.02
    assert scene.bumps[0].sigma == 0.2
    assert scene.coverage_radius is None


def test_scene_requires_endpoints():
    with pytest.raises(ValueError):
        scene_from_dict({"start": [0, 0, 0]})
    with pytest.raises(ValueError):
        scene_from_dict({"start": [0, 0], "target": [0, 0, -1]})


def test_load_scene_errors(tmp_path):
    not_object = tmp_path / "list.json"
    not_object.write_text("[1, 2, 3]")
    with pytest.raises(ValueError):
        load_scene(str(not_object))

    bad_bump = tmp_path / "bump.json"
    bad_bump.write_text(json.dumps({
        "start": [0, 0, 0], "target": [0, 0, -1], "terrain": {"bumps": [{"x": 0}]},
    }))
    with pytest.raises(ValueError, match="malformed scene"):
        load_scene(str(bad_bump))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(ValueError):
        load_scene(str(broken))

    with pytest.raises(OSError):
        load_scene(str(tmp_path / "missing.json"))
