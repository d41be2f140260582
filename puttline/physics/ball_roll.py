import logging
import math

import numpy as np

from puttline.config import SimulationConfig
from puttline.geometry import planar_distance, planar_unit, signed_lateral
from puttline.physics.shot import BallState, SimulationOutcome, SimulationResult, StepRecord

logger = logging.getLogger(__name__)


class BallSimulator:
    """
    Roll a golf ball over a TerrainField in METERS.

    Per step (dt = time_step):
      a = -g * sin(slope) * slope_force_factor * damping(speed)
          along the path direction (forward slope) and across it (lateral slope)
      v = (v + a*dt) * friction
      p = p + v*dt,  p.y snapped to terrain height + ball radius

    Notes:
      - positive slopes rise toward the target / to the right, so the
        acceleration always points downhill
      - damping grows from min_slope_damping at max speed to 1.0 at rest:
        slow balls take more break
      - friction is the per-step decay of the chosen green speed
    """

    def __init__(self, config: SimulationConfig | None = None, step_observer=None):
        self.config = config or SimulationConfig()
        self.step_observer = step_observer

        c = self.config
        self.dt = float(c.time_step)
        self.gravity = float(c.gravity)
        self.ball_radius = float(c.ball_radius)
        self.max_speed = float(c.max_speed)
        self.friction = float(c.friction)
        self.stop_speed = float(c.stop_speed)

    def _slope_damping(self, speed: float) -> float:
        lo = self.config.min_slope_damping
        return lo + (1.0 - lo) * (1.0 - min(speed / self.max_speed, 1.0))

    def _advance(self, state: BallState, field, step: int) -> BallState:
        new = state.copy()
        fwd_deg, lat_deg = field.interpolated_slope(new.pos)

        g = self.gravity * self.config.slope_force_factor * self._slope_damping(new.speed)
        a_fwd = -g * math.sin(math.radians(fwd_deg))
        a_lat = -g * math.sin(math.radians(lat_deg))
        accel = field.forward_dir * a_fwd + field.lateral_dir * a_lat

        new.vel = (new.vel + accel * self.dt) * self.friction
        new.pos = new.pos + new.vel * self.dt

        height = field.height_at(new.pos)
        if height is not None:
            new.pos[1] = height + self.ball_radius

        speed = new.speed
        if speed > self.max_speed:
            new.vel = new.vel / speed * self.max_speed

        if self.step_observer is not None:
            self.step_observer(
                StepRecord(
                    step=step,
                    position=new.pos.copy(),
                    velocity=new.vel.copy(),
                    acceleration=accel,
                    forward_slope=fwd_deg,
                    lateral_slope=lat_deg,
                )
            )
        return new

    def simulate(self, initial: BallState, field) -> SimulationResult:
        """
        Roll from `initial` until the ball drops, leaves the terrain, keeps
        moving away from the hole, stops, or max_steps is reached.

        The result carries the full trajectory, the index of the closest
        approach to the target, and the signed lateral deviation of that
        closest approach from the start->target line (negative = left).
        """
        c = self.config
        state = BallState(
            pos=np.asarray(initial.pos, dtype=float).copy(),
            vel=np.asarray(initial.vel, dtype=float).copy(),
        )
        states = [state]
        target = field.target

        best_dist = planar_distance(state.pos, target)
        closest_index = 0
        away_steps = 0
        holed = False
        outcome = SimulationOutcome.STEP_LIMIT

        if field.is_in_hole(state.pos):
            state.vel = np.zeros(3)
            return self._result(initial, field, states, True, 0, SimulationOutcome.HOLED)

        for step in range(c.max_steps):
            if field.nearest(state.pos) is None:
                logger.debug("No terrain under the ball at step %d", step)
                outcome = SimulationOutcome.OFF_TERRAIN
                break

            state = self._advance(state, field, step)
            states.append(state)

            if field.is_in_hole(state.pos):
                state.vel = np.zeros(3)
                holed = True
                closest_index = len(states) - 1
                outcome = SimulationOutcome.HOLED
                logger.debug("Ball entered hole at step %d", step)
                break

            dist = planar_distance(state.pos, target)
            if dist < best_dist:
                best_dist = dist
                closest_index = len(states) - 1
                away_steps = 0
            else:
                away_steps += 1
                if away_steps > c.away_step_limit:
                    logger.debug("Ball moving away from hole for %d steps, stopping", away_steps)
                    outcome = SimulationOutcome.DIVERGED
                    break

            if state.speed < self.stop_speed:
                state.vel = np.zeros(3)
                outcome = SimulationOutcome.STOPPED
                logger.debug("Ball stopped at step %d", step)
                break

        return self._result(initial, field, states, holed, closest_index, outcome)

    def _result(self, initial, field, states, holed, closest_index, outcome) -> SimulationResult:
        direct = planar_unit(field.target - np.asarray(initial.pos, dtype=float))
        actual = planar_unit(states[closest_index].pos - np.asarray(initial.pos, dtype=float))
        return SimulationResult(
            states=states,
            holed=holed,
            closest_index=closest_index,
            deviation=signed_lateral(direct, actual),
            outcome=outcome,
            final_velocity=states[-1].vel.copy(),
        )
