"""
3D Fish School Simulation
=========================

Headless flocking simulation of a school of fish in a glass tank.

Usage:
    python main.py                        # Run forever with defaults
    python main.py --frames 600 --seed 1  # Deterministic 10 second run
    python main.py --fish 30 --separation 5
"""

import argparse

from config import school as config
from core import Application
from shoal import SimulationParameters


def non_negative_int(value: str) -> int:
    count = int(value)
    if count < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return count


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="3D fish school flocking simulation")
    parser.add_argument("--fish", type=non_negative_int, default=config.SCHOOL["count"],
                        help="Number of fish in the school")
    parser.add_argument("--frames", type=non_negative_int, default=None,
                        help="Stop after this many frames (default: run until Ctrl+C)")
    parser.add_argument("--dt", type=float, default=config.SIMULATION["fixed_dt"],
                        help="Fixed time step in seconds; 0 uses wall-clock time")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--separation", type=float, default=None, help="Separation radius")
    parser.add_argument("--alignment", type=float, default=None, help="Alignment radius")
    parser.add_argument("--cohesion", type=float, default=None, help="Cohesion radius")
    parser.add_argument("--status-every", type=non_negative_int,
                        default=config.SIMULATION["status_every"],
                        help="Print a status line every N frames (0 disables)")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    params = SimulationParameters.from_config(
        target_population=args.fish,
        separation_radius=args.separation,
        alignment_radius=args.alignment,
        cohesion_radius=args.cohesion,
    )
    app = Application(
        params=params,
        seed=args.seed,
        fixed_dt=args.dt if args.dt > 0 else None,
        status_every=args.status_every,
    )

    try:
        app.run(frames=args.frames)
    except KeyboardInterrupt:
        print("\n[exit]")
    return app


if __name__ == "__main__":
    main()
