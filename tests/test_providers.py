import numpy as np
import pytest

from puttline.terrain import NoDataProvider, SurfaceFitHeightProvider, SyntheticGreen


def plane_points(a=0.01, b=0.02, step=0.25):
    xs = np.arange(-1.0, 1.0 + 1e-9, step)
    return np.array([(x, a * x + b * z, z) for x in xs for z in xs])


def test_no_data_returns_probe():
    assert NoDataProvider().height(np.array([1.0, 0.3, 2.0])) == 0.3


def test_synthetic_green_surface():
    green = SyntheticGreen(base_height=0.1)
    green.add_planar_slope(slope_x=0.02)
    green.add_gaussian_bump(0.0, -1.0, 0.01, 0.2)

    assert green.surface(1.0, 0.0) == pytest.approx(0.12)
    assert green.surface(0.0, -1.0) == pytest.approx(0.11)
    assert green.height(np.array([5.0, 0.0, 5.0])) == pytest.approx(0.2, abs=1e-9)


def test_synthetic_green_coverage_radius():
    green = SyntheticGreen(base_height=0.1, coverage_center=(0.0, 0.0), coverage_radius=1.0)
    assert green.height(np.array([0.5, 0.0, 0.5])) == pytest.approx(0.1)
    assert green.height(np.array([2.0, -0.3, 0.0])) == -0.3


def test_surface_fit_reproduces_a_plane():
    provider = SurfaceFitHeightProvider(plane_points())
    h = provider.height(np.array([0.3, 0.0, -0.4]))
    assert h == pytest.approx(0.01 * 0.3 + 0.02 * -0.4, abs=1e-6)


def test_surface_fit_reports_no_data_outside_hull():
    provider = SurfaceFitHeightProvider(plane_points(), margin=0.05)
    assert provider.covers(1.02, 0.0)
    assert not provider.covers(1.5, 0.0)
    assert provider.height(np.array([3.0, 0.42, 3.0])) == 0.42


def test_surface_fit_rejects_bad_input():
    with pytest.raises(ValueError):
        SurfaceFitHeightProvider([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)])
    with pytest.raises(ValueError):
        SurfaceFitHeightProvider(np.zeros((5, 2)))
