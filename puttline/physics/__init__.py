"""
Physics: ball state, shots, and the rolling-ball integrator.
"""
from .ball_roll import BallSimulator
from .shot import BallState, Shot, SimulationOutcome, SimulationResult, StepRecord

__all__ = [
    "BallSimulator",
    "BallState",
    "Shot",
    "SimulationOutcome",
    "SimulationResult",
    "StepRecord",
]
