"""
puttline: terrain-aware putt simulation and shot planning.
"""
from .physics import BallSimulator, BallState, Shot
from .planning import MultiShotPlanner, PathFinder, analyze
from .terrain import TerrainField

__all__ = [
    "BallSimulator",
    "BallState",
    "Shot",
    "MultiShotPlanner",
    "PathFinder",
    "analyze",
    "TerrainField",
]
