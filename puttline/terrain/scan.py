import logging
import math

import numpy as np

logger = logging.getLogger(__name__)


class ScanSampleBuffer:
    """
    Terrain height samples gathered over several scan passes, bucketed on a
    regular (row, col) grid.

    bounds = (x_min, z_min, x_max, z_max) in meters. Rows run along z and
    columns along x; the bucket of a point is fixed by its offset from
    (x_min, z_min) divided by `resolution`. Samples outside the bounds are
    dropped.
    """

    def __init__(self, bounds, resolution: float = 0.05):
        x_min, z_min, x_max, z_max = (float(b) for b in bounds)
        if x_max <= x_min or z_max <= z_min:
            raise ValueError("bounds must be (x_min, z_min, x_max, z_max) with max > min")
        if resolution <= 0:
            raise ValueError("resolution must be positive")

        self.x_min, self.z_min = x_min, z_min
        self.x_max, self.z_max = x_max, z_max
        self.resolution = float(resolution)
        self.n_cols = int(math.floor((x_max - x_min) / self.resolution)) + 1
        self.n_rows = int(math.floor((z_max - z_min) / self.resolution)) + 1
        self.passes = 0
        self.clear()

    def clear(self) -> None:
        self._buckets = [[[] for _ in range(self.n_cols)] for _ in range(self.n_rows)]
        self.passes = 0

    def index_of(self, x: float, z: float) -> tuple[int, int] | None:
        if not (self.x_min <= x <= self.x_max and self.z_min <= z <= self.z_max):
            return None
        col = int(round((x - self.x_min) / self.resolution))
        row = int(round((z - self.z_min) / self.resolution))
        return min(row, self.n_rows - 1), min(col, self.n_cols - 1)

    def bucket_center(self, row: int, col: int) -> tuple[float, float]:
        return self.x_min + col * self.resolution, self.z_min + row * self.resolution

    def add_sample(self, x: float, y: float, z: float) -> bool:
        """Record one height sample; returns False if it fell outside the bounds."""
        idx = self.index_of(float(x), float(z))
        if idx is None or not math.isfinite(float(y)):
            return False
        row, col = idx
        self._buckets[row][col].append(float(y))
        return True

    def add_pass(self, points) -> int:
        """Record a whole scan pass of (x, y, z) points; returns how many were kept."""
        kept = sum(1 for x, y, z in points if self.add_sample(x, y, z))
        self.passes += 1
        logger.debug("Scan pass %d: kept %d samples", self.passes, kept)
        return kept

    def samples(self, row: int, col: int) -> list[float]:
        return list(self._buckets[row][col])

    def variance(self) -> float:
        """Mean per-bucket variance over buckets with at least two samples."""
        if self.passes <= 1:
            return math.inf
        variances = [float(np.var(b)) for row in self._buckets for b in row if len(b) >= 2]
        if not variances:
            return math.inf
        return float(np.mean(variances))

    def is_stable(self, threshold: float = 0.01, min_passes: int = 3) -> bool:
        return self.passes >= min_passes and self.variance() < threshold

    def normalized(self) -> np.ndarray:
        """
        (n_rows, n_cols) array of per-bucket heights: the median after trimming
        10% from each end when a bucket holds 10 or more samples. Empty
        buckets are NaN.
        """
        out = np.full((self.n_rows, self.n_cols), np.nan)
        for r, row in enumerate(self._buckets):
            for c, heights in enumerate(row):
                if not heights:
                    continue
                ordered = np.sort(np.asarray(heights))
                if ordered.size >= 10:
                    trim = max(1, ordered.size // 10)
                    ordered = ordered[trim:-trim]
                # upper median for even counts
                out[r, c] = ordered[ordered.size // 2]
        return out

    def points(self) -> np.ndarray:
        """Bucket centers with their normalized height, as an (n, 3) array."""
        heights = self.normalized()
        rows, cols = np.nonzero(~np.isnan(heights))
        xs = self.x_min + cols * self.resolution
        zs = self.z_min + rows * self.resolution
        return np.column_stack([xs, heights[rows, cols], zs])


class BucketHeightProvider:
    """
    Height provider backed by a ScanSampleBuffer: the normalized height of the
    bucket under the query point, else the nearest non-empty bucket within
    1.5 x resolution, else no data.
    """

    def __init__(self, buffer: ScanSampleBuffer):
        self.buffer = buffer
        self.heights = buffer.normalized()

    def height(self, position) -> float:
        x, z = float(position[0]), float(position[2])
        buf = self.buffer
        idx = buf.index_of(x, z)
        if idx is not None and not np.isnan(self.heights[idx]):
            return float(self.heights[idx])

        # Search the surrounding buckets
        col = int(round((x - buf.x_min) / buf.resolution))
        row = int(round((z - buf.z_min) / buf.resolution))
        reach = 2
        best = None
        best_dist = 1.5 * buf.resolution
        for r in range(max(0, row - reach), min(buf.n_rows, row + reach + 1)):
            for c in range(max(0, col - reach), min(buf.n_cols, col + reach + 1)):
                h = self.heights[r, c]
                if np.isnan(h):
                    continue
                bx, bz = buf.bucket_center(r, c)
                d = math.hypot(bx - x, bz - z)
                if d < best_dist:
                    best_dist = d
                    best = float(h)

        if best is None:
            return float(position[1])
        return best
