"""
Planning: aim search, shot classification and the multi-attempt planner.
"""
from .multi_shot import MultiShotPlanner, PlanningSession, PlanResult, aim_advice
from .path_finder import AngleSearchState, PathFinder, advance_angle
from .power import initial_power
from .shot_analyzer import DeviationType, ShotAnalysis, analyze

__all__ = [
    "MultiShotPlanner",
    "PlanningSession",
    "PlanResult",
    "aim_advice",
    "PathFinder",
    "AngleSearchState",
    "advance_angle",
    "initial_power",
    "DeviationType",
    "ShotAnalysis",
    "analyze",
]
