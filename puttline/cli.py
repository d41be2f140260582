"""
puttline CLI.

Usage:
    python -m puttline.cli plan <scene.json> [--max-shots N] [--out result.json] [--plot out.png]
    python -m puttline.cli terrain <scene.json>
"""

import argparse
import json
import logging
import sys

from puttline.config import LOG_LEVEL, PlannerConfig, load_scene
from puttline.log import configure_logging, log_steps
from puttline.physics import BallSimulator
from puttline.planning import MultiShotPlanner, PathFinder, PlanResult
from puttline.terrain import SyntheticGreen, TerrainField

logger = logging.getLogger("puttline.cli")


def build_field(scene) -> TerrainField:
    green = SyntheticGreen(
        base_height=scene.base_height,
        slope_x=scene.slope_x,
        slope_z=scene.slope_z,
        bumps=scene.bumps,
        coverage_center=(float(scene.start[0]), float(scene.start[2])),
        coverage_radius=scene.coverage_radius,
    )
    t = scene.terrain
    return TerrainField.build(
        scene.start,
        scene.target,
        green,
        resolution=t.resolution,
        width=t.width,
        hole_radius=t.hole_radius,
        force_scale=t.force_scale,
        min_rows=t.min_rows,
    )


def cmd_plan(args) -> None:
    scene = load_scene(args.scene)
    field = build_field(scene)

    observer = log_steps(logging.getLogger("puttline.physics.steps")) if args.trace_steps else None
    simulator = BallSimulator(scene.simulation, step_observer=observer)
    config = PlannerConfig() if args.max_shots is None else PlannerConfig(max_shots=args.max_shots)
    finder = PathFinder(config.initial_angle_increment, config.oscillation_tolerance)

    renderer = fig = plt = None
    if args.plot:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from puttline.render import MatplotlibRenderer

        fig, ax = plt.subplots(figsize=(6, 8))
        pos = field.positions
        ax.scatter(pos[:, :, 0].ravel(), pos[:, :, 2].ravel(), c=pos[:, :, 1].ravel(), s=4, cmap="viridis")
        renderer = MatplotlibRenderer(ax, hole_radius=field.hole_radius)

    planner = MultiShotPlanner(renderer=renderer, config=config)
    shots = planner.plan_shots(scene.start, scene.target, simulator, finder, field)
    if not shots:
        print("No shots simulated")
        sys.exit(1)

    result = PlanResult.from_session(planner.session)

    # Summary
    print("\n=== Plan Summary ===")
    print(f"  Attempts:     {result.attempts} ({result.power_boosts} power boosts)")
    print(f"  Angle range:  {result.min_angle:.2f}° .. {result.max_angle:.2f}°")
    if result.holed:
        print(f"  Holed at {result.angle:.2f}° with power {result.power:.3f}")
    else:
        print(f"  Best miss: {result.miss_m * 100:.1f}cm at {result.angle:.2f}°, power {result.power:.3f}")
    print(f"  Advice:       {result.advice}")

    if args.out:
        with open(args.out, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        print(f"  Wrote: {args.out}")

    if fig is not None:
        fig.savefig(args.plot, dpi=150)
        plt.close(fig)
        print(f"  Wrote: {args.plot}")


def cmd_terrain(args) -> None:
    scene = load_scene(args.scene)
    field = build_field(scene)
    rows, cols = field.shape

    print(f"Grid: {rows} rows x {cols} cols at {field.resolution * 100:.1f}cm")
    print(f"Coverage: {field.coverage() * 100:.0f}% measured")
    print("Row |    Y (m) | Slope° | Lateral° | Normal (x, y, z)")
    print("----|----------|--------|----------|-----------------")
    for i, s in enumerate(field.centerline()):
        n = s.normal
        print(
            f"{i:3d} | {s.position[1]:8.4f} | {s.slope:6.2f} | {s.lateral:8.2f} | "
            f"({n[0]:.2f}, {n[1]:.2f}, {n[2]:.2f})"
        )


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="puttline", description="Putt line planner")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    sub = parser.add_subparsers(dest="command", required=True)

    p_plan = sub.add_parser("plan", help="Plan a putt for a scene file")
    p_plan.add_argument("scene")
    p_plan.add_argument("--max-shots", type=int, default=None)
    p_plan.add_argument("--out", default=None, help="Write the plan result as JSON")
    p_plan.add_argument("--plot", default=None, help="Save a top-down plot (PNG)")
    p_plan.add_argument("--trace-steps", action="store_true", help="Log physics steps at DEBUG")
    p_plan.set_defaults(func=cmd_plan)

    p_terrain = sub.add_parser("terrain", help="Print the centerline terrain report")
    p_terrain.add_argument("scene")
    p_terrain.set_defaults(func=cmd_terrain)

    args = parser.parse_args(argv)
    configure_logging(args.log_level.upper(), json_format=args.json_logs)

    try:
        args.func(args)
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
