import json

import pytest

from puttline import cli

FLAT = {
    "start": [0.0, 0.0, 0.0],
    "target": [0.0, 0.0, -2.0],
    "green_speed": "medium",
}


@pytest.fixture()
def scene_file(tmp_path):
    path = tmp_path / "flat.json"
    path.write_text(json.dumps(FLAT))
    return str(path)


def test_terrain_report(scene_file, capsys):
    cli.main(["terrain", scene_file])
    out = capsys.readouterr().out
    assert "Grid: 41 rows x 21 cols" in out
    assert out.count("\n") >= 41


def test_plan_writes_result_and_plot(scene_file, tmp_path, capsys):
    out_json = tmp_path / "plan.json"
    out_png = tmp_path / "plan.png"
    cli.main(["plan", scene_file, "--max-shots", "5", "--out", str(out_json), "--plot", str(out_png)])

    printed = capsys.readouterr().out
    assert "Holed at 0.00°" in printed

    result = json.loads(out_json.read_text())
    assert result["holed"] is True
    assert result["attempts"] == 1
    assert result["target"] == [0.0, 0.0, -2.0]
    assert out_png.stat().st_size > 0


def test_bad_scene_exits_nonzero(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"start": [0, 0, 0]}))
    with pytest.raises(SystemExit) as exc:
        cli.main(["plan", str(path)])
    assert exc.value.code == 1


def test_missing_scene_exits_nonzero(tmp_path):
    with pytest.raises(SystemExit) as exc:
        cli.main(["terrain", str(tmp_path / "nope.json")])
    assert exc.value.code == 1
