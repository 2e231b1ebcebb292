# =========== START of __main__.py ===========
from __future__ import annotations
import argparse
import sys
from typing import List, Optional
import setproctitle

from .enums import ExecutorBackend
from .logging_config import LogSettings, setup_directories, setup_logging, logger
from .rules import RuleTable
from .settings import GlobalSettings, load_settings_file
from .simulation import SimulationController
from .utils import process_memory_mb


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cubelife",
        description="Run a 3D Game of Life on a fixed cubic lattice.",
    )
    parser.add_argument("--config", help="JSON settings file applied before the other options")
    parser.add_argument("--size", type=int, help="lattice side length (even)")
    parser.add_argument("--steps", type=int, help="number of generations to run")
    parser.add_argument("--rule", help="rule in S<counts>/B<counts> form, e.g. S5-8/B6,7,9")
    parser.add_argument("--initial-condition", help="start-up seeding strategy")
    parser.add_argument("--population", type=int, help="number of random seed points")
    parser.add_argument("--extent", type=int, help="side of the random seed region")
    parser.add_argument("--center", type=int, nargs=3, metavar=("X", "Y", "Z"), help="center of the seed region")
    parser.add_argument("--seed", type=int, help="random seed for reproducible runs")
    parser.add_argument("--workers", type=int, help="worker pool size for the classification scans")
    parser.add_argument("--serial", action="store_true", help="run both scans in the main thread")
    parser.add_argument("--delay", type=int, help="milliseconds to sleep between generations")
    parser.add_argument("--log-level", help="file log level (DEBUG, DETAIL, INFO, ...)")
    parser.add_argument("--log-dir", help="base directory for logs and reports (default: cwd)")
    return parser


def apply_arguments(args: argparse.Namespace):
    """Fold command-line options into the settings classes."""
    if args.config:
        load_settings_file(args.config)
    sim, seeding = GlobalSettings.Simulation, GlobalSettings.Seeding
    if args.size is not None:
        sim.GRID_SIZE = args.size
    if args.steps is not None:
        sim.NUM_STEPS = args.steps
    if args.workers is not None:
        sim.NUM_WORKERS = args.workers
    if args.serial:
        sim.EXECUTOR_BACKEND = ExecutorBackend.SERIAL
    if args.delay is not None:
        sim.STEP_DELAY = min(max(args.delay, sim.MIN_STEP_DELAY), sim.MAX_STEP_DELAY)
    if args.rule:
        rule = RuleTable.parse(args.rule)
        GlobalSettings.Rules.SURVIVAL_COUNTS = rule.survival_counts
        GlobalSettings.Rules.SPAWN_COUNTS = rule.spawn_counts
    if args.initial_condition:
        seeding.INITIAL_CONDITION = args.initial_condition
    if args.population is not None:
        seeding.POPULATION = args.population
    if args.extent is not None:
        seeding.EXTENT = args.extent
    if args.center is not None:
        seeding.CENTER = tuple(args.center)
    if args.seed is not None:
        seeding.RANDOM_SEED = args.seed
    if args.log_level:
        LogSettings.Logging.LOG_LEVEL = args.log_level


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        apply_arguments(args)
        paths, _ = setup_directories(args.log_dir)
        setup_logging(paths["logs"], paths["reports"])
    except (OSError, ValueError) as e:
        print(f"cubelife: {e}", file=sys.stderr)
        return 2

    setproctitle.setproctitle("CUBELIFE Simulation")

    try:
        with SimulationController() as controller:
            controller.initialize()
            executed = controller.run(GlobalSettings.Simulation.NUM_STEPS, GlobalSettings.Simulation.STEP_DELAY)
            stats = controller.stats.get_current()
            logger.info(f"Finished {executed} generation(s): population={int(stats.get('population', 0))}, "
                        f"avg_tick={controller.perf.get_average('tick') * 1000:.2f}ms, "
                        f"memory={process_memory_mb():.1f}MB")
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
