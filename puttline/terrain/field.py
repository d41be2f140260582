import logging
import math
from dataclasses import dataclass

import numpy as np

from puttline.geometry import UP, planar_distance, planar_unit, right_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TerrainSample:
    position: np.ndarray  # world coords (m)
    slope: float          # fall-line slope (deg), positive = rising toward the target
    lateral: float        # cross slope (deg), positive = rising to the right
    normal: np.ndarray    # unit surface normal


def _is_missing(height, probe_y: float) -> bool:
    if height is None:
        return True
    height = float(height)
    return not math.isfinite(height) or height == probe_y


class TerrainField:
    """
    Grid of terrain samples laid out between a ball and a hole, in METERS.

    Layout:
      - rows run from the start (row 0) to the target (last row)
      - columns run left -> right across the path, symmetric about the centerline
      - the center column of row 0 is exactly `start`, of the last row exactly `target`

    All per-cell arrays are indexed by (row, col).
    """

    def __init__(
        self,
        start,
        target,
        positions: np.ndarray,
        resolution: float,
        hole_radius: float = 0.05,
        force_scale: float = 0.015,
        measured: np.ndarray | None = None,
    ):
        positions = np.asarray(positions, dtype=float)
        if positions.ndim != 3 or positions.shape[-1] != 3:
            raise ValueError("positions must have shape (rows, cols, 3)")

        self.start = np.asarray(start, dtype=float).copy()
        self.target = np.asarray(target, dtype=float).copy()
        self.resolution = float(resolution)
        self.hole_radius = float(hole_radius)
        self.force_scale = float(force_scale)

        self.forward_dir = planar_unit(self.target - self.start)
        self.lateral_dir = right_of(self.forward_dir)

        self.positions = positions
        self.measured = measured
        if self.measured is None:
            self.measured = np.ones(positions.shape[:2], dtype=bool)

        # Slopes / normals, always recomputed together
        self.slopes = None
        self.laterals = None
        self.normals = None
        self.compute_slopes()

    @classmethod
    def build(
        cls,
        start,
        target,
        height_provider,
        resolution: float = 0.05,
        width: float = 1.0,
        hole_radius: float = 0.05,
        force_scale: float = 0.015,
        min_rows: int = 5,
    ) -> "TerrainField":
        """
        Lay out the grid from start to target and sample heights from
        `height_provider` (anything with a `height(position) -> float` method).
        """
        start = np.asarray(start, dtype=float)
        target = np.asarray(target, dtype=float)
        resolution = float(resolution)

        dx = target[0] - start[0]
        dz = target[2] - start[2]
        dist = math.hypot(dx, dz)
        lateral_dir = right_of((dx, 0.0, dz))

        n = max(min_rows, int(math.ceil(dist / resolution)))
        half = int(math.ceil((width / 2.0) / resolution))
        cols = half * 2 + 1

        positions = np.empty((n + 1, cols, 3), dtype=float)
        for i in range(n + 1):
            t = i / n
            cx = start[0] + dx * t
            cz = start[2] + dz * t
            for c in range(cols):
                offset = (c - half) * resolution
                positions[i, c, 0] = cx + lateral_dir[0] * offset
                positions[i, c, 2] = cz + lateral_dir[2] * offset
        positions[:, :, 1] = (start[1] + target[1]) / 2.0

        logger.info(
            "Building terrain field: distance=%.3fm, %d rows x %d cols at %.1fcm",
            dist, n + 1, cols, resolution * 100.0,
        )

        field = cls(
            start=start,
            target=target,
            positions=positions,
            resolution=resolution,
            hole_radius=hole_radius,
            force_scale=force_scale,
        )
        field.refresh(height_provider)
        return field

    @classmethod
    def empty(cls, start, target, resolution: float = 0.05, hole_radius: float = 0.05) -> "TerrainField":
        return cls(start, target, np.empty((0, 0, 3)), resolution, hole_radius=hole_radius)

    # ------------------------------------------------------------------
    # Grid maintenance
    # ------------------------------------------------------------------

    @property
    def shape(self) -> tuple[int, int]:
        return self.positions.shape[0], self.positions.shape[1]

    @property
    def is_empty(self) -> bool:
        return self.positions.size == 0

    @property
    def center_col(self) -> int:
        return self.positions.shape[1] // 2

    def refresh(self, height_provider) -> None:
        """
        Re-sample every non-endpoint height from `height_provider`, then
        recompute slopes and normals for the whole grid.

        A provider signals "no data" by handing back the probe height it was
        given (or None/NaN); those cells fall back to linear interpolation
        between the start and target heights by path progress.
        """
        if self.is_empty:
            return

        rows, cols = self.shape
        mid = self.center_col
        probe_y = (self.start[1] + self.target[1]) / 2.0
        last = rows - 1

        measured = np.zeros((rows, cols), dtype=bool)
        for i in range(rows):
            t = i / last if last > 0 else 0.0
            fallback_y = self.start[1] * (1.0 - t) + self.target[1] * t
            for c in range(cols):
                if c == mid and (i == 0 or i == last):
                    continue
                probe = np.array([self.positions[i, c, 0], probe_y, self.positions[i, c, 2]])
                h = height_provider.height(probe)
                if _is_missing(h, probe_y):
                    self.positions[i, c, 1] = fallback_y
                else:
                    self.positions[i, c, 1] = float(h)
                    measured[i, c] = True

        # Endpoints are always the exact input positions
        self.positions[0, mid] = self.start
        self.positions[last, mid] = self.target
        measured[0, mid] = True
        measured[last, mid] = True
        self.measured = measured

        self.compute_slopes()

        cov = self.coverage()
        if cov < 0.5:
            logger.warning("Terrain coverage is low: %.0f%% of cells measured", cov * 100.0)
        else:
            logger.debug("Terrain coverage: %.0f%% of cells measured", cov * 100.0)

    def compute_slopes(self) -> None:
        """
        Forward slope (deg) toward the next row, lateral slope (deg) across the
        neighbouring columns, and an averaged surface normal per cell.
        """
        P = self.positions
        rows, cols = self.shape
        self._flat_xz = P[:, :, [0, 2]].reshape(-1, 2)
        self._flat_y = P[:, :, 1].reshape(-1)

        if self.is_empty:
            self.slopes = np.zeros((rows, cols))
            self.laterals = np.zeros((rows, cols))
            self.normals = np.zeros((rows, cols, 3))
            return

        slopes = np.zeros((rows, cols))
        if rows > 1:
            ahead = _slope_deg(P[1:] - P[:-1])
            slopes[:-1] = ahead
            slopes[-1] = ahead[-1]  # last row looks back at the previous one

        laterals = np.zeros((rows, cols))
        if cols > 1:
            left = np.concatenate([P[:, :1], P[:, :-1]], axis=1)
            right = np.concatenate([P[:, 1:], P[:, -1:]], axis=1)
            laterals = _slope_deg(right - left)

        self.slopes = slopes
        self.laterals = laterals
        self.normals = _grid_normals(P)

    def coverage(self) -> float:
        """Fraction of cells whose height came from measured terrain data."""
        if self.is_empty:
            return 0.0
        return float(np.mean(self.measured))

    def sample(self, row: int, col: int) -> TerrainSample:
        return TerrainSample(
            position=self.positions[row, col].copy(),
            slope=float(self.slopes[row, col]),
            lateral=float(self.laterals[row, col]),
            normal=self.normals[row, col].copy(),
        )

    def centerline(self) -> list[TerrainSample]:
        if self.is_empty:
            return []
        mid = self.center_col
        return [self.sample(i, mid) for i in range(self.shape[0])]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _planar_distances(self, position) -> np.ndarray:
        d = self._flat_xz - np.array([position[0], position[2]], dtype=float)
        return np.hypot(d[:, 0], d[:, 1])

    def nearest(self, position) -> TerrainSample | None:
        """Nearest grid sample by planar distance, or None for an empty grid."""
        if self.is_empty:
            return None
        k = int(np.argmin(self._planar_distances(position)))
        row, col = divmod(k, self.shape[1])
        return self.sample(row, col)

    def interpolated_slope(self, position) -> tuple[float, float] | None:
        """
        (forward, lateral) slope in degrees, inverse-squared-distance weighted
        over samples within 2 x resolution; falls back to the nearest sample.
        """
        if self.is_empty:
            return None
        d = self._planar_distances(position)
        near = d < 2.0 * self.resolution
        if not np.any(near):
            k = int(np.argmin(d))
            return float(self.slopes.flat[k]), float(self.laterals.flat[k])

        w = 1.0 / np.maximum(d[near], 1e-3) ** 2
        total = float(np.sum(w))
        fwd = float(np.sum(w * self.slopes.reshape(-1)[near])) / total
        lat = float(np.sum(w * self.laterals.reshape(-1)[near])) / total
        return fwd, lat

    def local_force(self, position) -> np.ndarray:
        """
        Small in-plane downhill force from the local slope:
        -sin(angle) * force_scale along the path direction and across it.
        """
        slopes = self.interpolated_slope(position)
        if slopes is None:
            return np.zeros(3)
        fwd, lat = slopes
        f = -math.sin(math.radians(fwd)) * self.force_scale
        l = -math.sin(math.radians(lat)) * self.force_scale
        return self.forward_dir * f + self.lateral_dir * l

    def height_at(self, position) -> float | None:
        """
        Inverse-distance height from the nearest sample in each planar
        quadrant around `position` (four nearest overall if fewer than three
        quadrants have samples).
        """
        if self.is_empty:
            return None
        dx = self._flat_xz[:, 0] - float(position[0])
        dz = self._flat_xz[:, 1] - float(position[2])
        d = np.hypot(dx, dz)

        picks = []
        for sx, sz in ((1.0, 1.0), (-1.0, 1.0), (1.0, -1.0), (-1.0, -1.0)):
            candidates = np.flatnonzero((dx * sx >= 0) & (dz * sz >= 0))
            if candidates.size:
                picks.append(candidates[np.argmin(d[candidates])])

        if len(picks) < 3:
            idx = np.argsort(d)[:4]
        else:
            idx = np.array(picks)

        w = 1.0 / np.maximum(d[idx], 1e-3)
        return float(np.sum(w * self._flat_y[idx]) / np.sum(w))

    def is_in_hole(self, position) -> bool:
        return planar_distance(position, self.target) < self.hole_radius


def _slope_deg(delta: np.ndarray) -> np.ndarray:
    horizontal = np.hypot(delta[..., 0], delta[..., 2])
    angle = np.degrees(np.arctan2(delta[..., 1], horizontal))
    return np.where(horizontal > 1e-3, angle, 0.0)


def _grid_normals(P: np.ndarray) -> np.ndarray:
    """Average of the up-facing cross products of the four edge pairs."""
    padded = np.pad(P, ((1, 1), (1, 1), (0, 0)), mode="edge")
    v1 = padded[2:, 1:-1] - P   # forward
    v2 = padded[1:-1, 2:] - P   # right
    v3 = padded[:-2, 1:-1] - P  # backward
    v4 = padded[1:-1, :-2] - P  # left

    total = np.zeros_like(P)
    count = np.zeros(P.shape[:2])
    for a, b in ((v1, v2), (v2, v3), (v3, v4), (v4, v1)):
        n = np.cross(a, b)
        n = np.where(n[..., 1:2] < 0.0, -n, n)
        valid = n[..., 1] > 1e-12
        total += np.where(valid[..., None], n, 0.0)
        count += valid

    avg = total / np.maximum(count, 1.0)[..., None]
    length = np.linalg.norm(avg, axis=-1, keepdims=True)
    return np.where(length > 1e-12, avg / np.where(length > 1e-12, length, 1.0), UP)
