import json
import logging

import numpy as np

from puttline.config import LOG_LEVEL

PLANNING_KEYS = ("phase", "attempt", "angle", "power")


def _step_fields(step) -> dict:
    """Flatten a physics StepRecord into JSON-ready fields."""
    return {
        "step": step.step,
        "position": np.round(step.position, 5).tolist(),
        "velocity": np.round(step.velocity, 5).tolist(),
        "speed": round(step.speed, 5),
        "forward_slope": round(float(step.forward_slope), 3),
        "lateral_slope": round(float(step.lateral_slope), 3),
    }


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line.

    Planner records carry phase / attempt / angle / power extras; physics
    records carry the StepRecord itself as `step_record`, which is expanded
    into position, velocity, speed and slopes.
    """

    def format(self, record):
        entry = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({k: getattr(record, k) for k in PLANNING_KEYS if hasattr(record, k)})

        step = getattr(record, "step_record", None)
        if step is not None:
            entry.update(_step_fields(step))

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str = LOG_LEVEL, json_format: bool = False) -> None:
    """Configure the root logger for command-line use."""
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    root = logging.getLogger()
    root.setLevel(level)
    if json_format and root.handlers:
        root.handlers[0].setFormatter(JsonFormatter())


def log_steps(logger: logging.Logger, every: int = 50):
    """
    Build a step observer for BallSimulator that logs the first few steps
    and then every `every` steps at DEBUG.
    """

    def observe(record):
        if record.step < 5 or record.step % every == 0:
            logger.debug(
                "step %d pos=(%.3f, %.3f, %.3f) speed=%.3f slope=%.1f lateral=%.1f",
                record.step,
                record.position[0], record.position[1], record.position[2],
                record.speed, record.forward_slope, record.lateral_slope,
                extra={"step_record": record},
            )

    return observe
