import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402

from puttline.render import MatplotlibRenderer  # noqa: E402


@pytest.fixture()
def ax():
    fig, ax = plt.subplots()
    yield ax
    plt.close(fig)


def test_draw_and_remove(ax):
    renderer = MatplotlibRenderer(ax, hole_radius=0.05)
    path = np.array([[0.0, 0.0, 0.0], [0.0, 0.0, -1.0], [0.05, 0.0, -2.0]])

    handles = renderer.draw(path, np.array([0.0, 0.0, -2.0]))
    assert len(handles) == 3
    assert len(ax.lines) == 1
    assert len(ax.patches) == 1
    assert list(ax.lines[0].get_xdata()) == [0.0, 0.0, 0.05]

    renderer.remove(handles)
    assert len(ax.lines) == 0
    assert len(ax.patches) == 0
    assert len(ax.collections) == 0


def test_draw_empty_path_only_marks_hole(ax):
    renderer = MatplotlibRenderer(ax)
    handles = renderer.draw(np.empty((0, 3)), np.array([1.0, 0.0, 1.0]))
    assert len(handles) == 1
    assert handles[0].get_radius() == 0.05
