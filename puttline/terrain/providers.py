"""
Height sources a TerrainField can be built from.

A provider answers `height(position) -> float` for a world position whose y
component is a probe height. Returning the probe height unchanged (or None /
NaN) means "no data here".
"""
from __future__ import annotations

import math
from typing import Iterable, Protocol

import numpy as np
from scipy.interpolate import RBFInterpolator
from shapely.geometry import MultiPoint, Point

from puttline.config import Bump


class HeightProvider(Protocol):
    def height(self, position) -> float: ...


class NoDataProvider:
    """Reports no data everywhere (every cell falls back to interpolation)."""

    def height(self, position) -> float:
        return float(position[1])


class SyntheticGreen:
    """
    Analytic green surface in METERS, for tests and offline planning.

      y = base + slope_x * x + slope_z * z + sum(gaussian bumps)

    slope_x, slope_z are rise per meter (dimensionless), e.g. a 2% grade
    rising toward +z is slope_z = 0.02. If `coverage_radius` is set, points
    further than that from `coverage_center` report no data.
    """

    def __init__(
        self,
        base_height: float = 0.0,
        slope_x: float = 0.0,
        slope_z: float = 0.0,
        bumps: Iterable[Bump] = (),
        coverage_center: tuple[float, float] = (0.0, 0.0),
        coverage_radius: float | None = None,
    ):
        self.base_height = float(base_height)
        self.slope_x = float(slope_x)
        self.slope_z = float(slope_z)
        self.bumps = list(bumps)
        self.coverage_center = (float(coverage_center[0]), float(coverage_center[1]))
        self.coverage_radius = None if coverage_radius is None else float(coverage_radius)

    def add_planar_slope(self, slope_x: float = 0.0, slope_z: float = 0.0) -> None:
        self.slope_x += slope_x
        self.slope_z += slope_z

    def add_gaussian_bump(self, center_x: float, center_z: float, height: float, sigma: float) -> None:
        """height > 0 makes a crown, height < 0 a bowl; sigma is the spread (m)."""
        self.bumps.append(Bump(center_x=center_x, center_z=center_z, height=height, sigma=sigma))

    def surface(self, x: float, z: float) -> float:
        y = self.base_height + self.slope_x * x + self.slope_z * z
        for b in self.bumps:
            dx = x - b.center_x
            dz = z - b.center_z
            y += b.height * math.exp(-(dx * dx + dz * dz) / (2.0 * b.sigma ** 2))
        return y

    def height(self, position) -> float:
        x, z = float(position[0]), float(position[2])
        if self.coverage_radius is not None:
            cx, cz = self.coverage_center
            if math.hypot(x - cx, z - cz) > self.coverage_radius:
                return float(position[1])
        return self.surface(x, z)


class SurfaceFitHeightProvider:
    """
    Smooth surface through scattered (x, y, z) terrain samples.

    Heights come from a thin-plate-spline fit; queries outside the convex hull
    of the samples (grown by `margin`) report no data.
    """

    def __init__(self, points, smooth: float = 0.0, margin: float = 0.05):
        pts = np.asarray(points, dtype=float)
        if pts.ndim != 2 or pts.shape[1] != 3:
            raise ValueError("points must have shape (n, 3)")
        if len(pts) < 3:
            raise ValueError("Need at least 3 terrain samples to fit a surface")

        xz = pts[:, [0, 2]]
        self._rbf = RBFInterpolator(xz, pts[:, 1], kernel="thin_plate_spline", smoothing=smooth)
        self.coverage = MultiPoint([(float(x), float(z)) for x, z in xz]).convex_hull.buffer(margin)

    def covers(self, x: float, z: float) -> bool:
        return bool(self.coverage.covers(Point(x, z)))

    def height(self, position) -> float:
        x, z = float(position[0]), float(position[2])
        if not self.covers(x, z):
            return float(position[1])
        return float(self._rbf(np.array([[x, z]]))[0])
