"""
Drawing planned putts.

The planner only needs an object with `draw(path, target) -> handles` and
`remove(handles)`; MatplotlibRenderer is a top-down (x, z) implementation.
"""
from typing import Protocol

import numpy as np
from matplotlib.patches import Circle


class Renderer(Protocol):
    def draw(self, path, target) -> list: ...

    def remove(self, handles) -> None: ...


class MatplotlibRenderer:
    def __init__(self, ax, hole_radius: float = 0.05, color: str = "tab:blue"):
        self.ax = ax
        self.hole_radius = float(hole_radius)
        self.color = color

    def draw(self, path, target) -> list:
        pts = np.asarray(path, dtype=float)
        handles = []
        if len(pts):
            (line,) = self.ax.plot(pts[:, 0], pts[:, 2], color=self.color, linewidth=2)
            start = self.ax.scatter([pts[0, 0]], [pts[0, 2]], s=25, color="white", edgecolors="black", zorder=3)
            handles.extend([line, start])
        if target is not None:
            hole = Circle((float(target[0]), float(target[2])), self.hole_radius, color="black", zorder=2)
            self.ax.add_patch(hole)
            handles.append(hole)
        self.ax.set_aspect("equal", adjustable="datalim")
        self.ax.set_xlabel("x (m)")
        self.ax.set_ylabel("z (m)")
        return handles

    def remove(self, handles) -> None:
        for h in handles:
            h.remove()
