# =========== START of simulation.py ===========
from __future__ import annotations
import logging
import time
from typing import Optional
import numpy as np

from .engine import GenerationEngine, GenerationResult
from .exceptions import EmptyRenderQuery
from .initial_conditions import InitialConditionManager
from .lattice import Lattice
from .logging_config import logger, LogSettings
from .render import InstanceBuffer, RenderProjection
from .rules import RuleTable
from .settings import GlobalSettings
from .utils import PerformanceLogger, SimulationStats, log_errors, process_memory_mb


periodic_report_logger = logging.getLogger("periodic_report")


################################################
#             SIMULATION CONTROLLER            #
################################################

class SimulationController:
    """Owns every piece of state for one simulation run and drives ticks.

    Grid size, rule and seeding parameters are read from ``GlobalSettings``
    unless passed in, and stay fixed for the lifetime of the controller.
    """

    def __init__(self, rule: Optional[RuleTable] = None,
                 size: Optional[int] = None,
                 buffer: Optional[InstanceBuffer] = None,
                 rng: Optional[np.random.Generator] = None,
                 initial_condition: Optional[str] = None):
        sim = GlobalSettings.Simulation
        self.rule = rule if rule is not None else RuleTable.from_counts(
            GlobalSettings.Rules.SURVIVAL_COUNTS, GlobalSettings.Rules.SPAWN_COUNTS)
        self.lattice = Lattice(size if size is not None else sim.GRID_SIZE, sim.CELL_SIZE)
        self.rng = rng if rng is not None else np.random.default_rng(GlobalSettings.Seeding.RANDOM_SEED)
        self.initial_condition = initial_condition or GlobalSettings.Seeding.INITIAL_CONDITION

        # The render destination has to exist before the first tick
        self.buffer = buffer if buffer is not None else InstanceBuffer()
        if not isinstance(self.buffer, InstanceBuffer):
            raise EmptyRenderQuery(f"Render output destination must be an InstanceBuffer, got {type(self.buffer).__name__}")

        self.initial_conditions = InitialConditionManager(self.rng)
        if self.initial_condition not in self.initial_conditions.get_all_names():
            raise ValueError(f"Unknown initial condition '{self.initial_condition}'. "
                             f"Known: {self.initial_conditions.get_all_names()}")
        self.projection = RenderProjection(self.rng)
        self.engine = GenerationEngine(self.lattice, self.rule, sim.EXECUTOR_BACKEND, sim.NUM_WORKERS)
        self.stats = SimulationStats()
        self.perf = PerformanceLogger()
        self.generation = 0
        self.initialized = False
        logger.info(f"SimulationController created: size={self.lattice.size}, rule={self.rule.notation}, "
                    f"initial_condition='{self.initial_condition}'")

    @log_errors
    def initialize(self):
        """Seed the lattice once and publish the first frame."""
        if self.initialized:
            raise RuntimeError("Simulation already initialized; the lattice is seeded exactly once per run")
        self.initial_conditions.apply(self.initial_condition, self.lattice)
        self.initialized = True
        self.projection.publish(self.lattice, self.buffer)
        self.stats.update(population=self.lattice.population, births=0, deaths=0,
                          rejected_seeds=self.initial_conditions.last_rejected)
        logger.info(f"Simulation initialized: population={self.lattice.population}")

    @log_errors
    def step(self) -> GenerationResult:
        """One tick: advance the lattice, then republish the render output."""
        if not self.initialized:
            raise RuntimeError("Simulation must be initialized before stepping")
        with self.perf.measure("tick"):
            result = self.engine.step()
            self.projection.publish(self.lattice, self.buffer)
        self.generation += 1
        self.stats.update(population=result.population, births=result.births, deaths=result.deaths,
                          step_time=self.perf.metrics["tick"][-1])
        logger.debug(f"Generation {self.generation}: population={result.population}, "
                     f"births={result.births}, deaths={result.deaths}")
        self._periodic_report()
        return result

    def _periodic_report(self):
        if not LogSettings.Performance.ENABLE_PERIODIC_REPORTING:
            return
        interval = min(max(LogSettings.Performance.REPORTING_INTERVAL,
                           LogSettings.Performance.MIN_REPORTING_INTERVAL),
                       LogSettings.Performance.MAX_REPORTING_INTERVAL)
        if self.generation % interval != 0:
            return
        avg_tick = self.perf.get_average("tick")
        periodic_report_logger.info(
            f"Generation {self.generation}: population={self.lattice.population}, "
            f"avg_tick={avg_tick * 1000:.2f}ms, memory={process_memory_mb():.1f}MB")

    def run(self, num_steps: int, step_delay: float = 0.0) -> int:
        """Run ``num_steps`` ticks, sleeping ``step_delay`` ms between them.
        Stops early if the lattice dies out; returns the ticks executed."""
        if not self.initialized:
            self.initialize()
        executed = 0
        for _ in range(num_steps):
            result = self.step()
            executed += 1
            if result.population == 0:
                logger.info(f"Population died out at generation {self.generation}")
                break
            if step_delay > 0:
                time.sleep(step_delay / 1000.0)
        return executed

    def close(self):
        self.engine.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
