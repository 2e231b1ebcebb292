import numpy as np
import pytest

from CUBELIFE.enums import ExecutorBackend
from CUBELIFE.exceptions import EmptyRenderQuery
from CUBELIFE.logging_config import LogSettings
from CUBELIFE.rules import RuleTable
from CUBELIFE.settings import GlobalSettings
from CUBELIFE.simulation import SimulationController


def test_initialize_publishes_first_frame():
    with SimulationController(size=8, initial_condition="Centered Block") as controller:
        controller.initialize()
        assert controller.lattice.population == 27
        assert len(controller.buffer) == 27
        assert controller.buffer.version == 1
        assert controller.generation == 0


def test_step_advances_one_generation():
    with SimulationController(size=8, initial_condition="Centered Block") as controller:
        controller.initialize()
        result = controller.step()
        assert controller.generation == 1
        assert result.population == 38
        assert len(controller.buffer) == 38
        assert controller.stats.get_current()['population'] == 38.0
        assert controller.stats.get_current()['births'] == 30.0


def test_initialize_only_once():
    with SimulationController(size=8, initial_condition="Empty") as controller:
        controller.initialize()
        with pytest.raises(RuntimeError):
            controller.initialize()


def test_step_before_initialize_raises():
    with SimulationController(size=8) as controller:
        with pytest.raises(RuntimeError):
            controller.step()


def test_run_stops_when_population_dies_out():
    with SimulationController(size=8, initial_condition="Empty") as controller:
        assert controller.run(10) == 1
        assert controller.generation == 1


def test_run_with_random_cube_is_reproducible():
    GlobalSettings.Seeding.POPULATION = 120
    GlobalSettings.Seeding.EXTENT = 6
    snapshots = []
    for _ in range(2):
        with SimulationController(size=10, rng=np.random.default_rng(99)) as controller:
            controller.run(3)
            snapshots.append(controller.lattice.snapshot())
    assert np.array_equal(snapshots[0], snapshots[1])


def test_settings_drive_the_controller():
    GlobalSettings.Simulation.GRID_SIZE = 6
    GlobalSettings.Simulation.EXECUTOR_BACKEND = ExecutorBackend.SERIAL
    GlobalSettings.Rules.SURVIVAL_COUNTS = [4]
    GlobalSettings.Rules.SPAWN_COUNTS = [4]
    with SimulationController() as controller:
        assert controller.lattice.size == 6
        assert controller.rule == RuleTable.from_counts([4], [4])
        assert controller.engine.backend == ExecutorBackend.SERIAL


def test_unknown_initial_condition_rejected_at_construction():
    with pytest.raises(ValueError):
        SimulationController(size=8, initial_condition="Nope")


def test_render_destination_must_be_an_instance_buffer():
    with pytest.raises(EmptyRenderQuery):
        SimulationController(size=8, buffer=[])


def test_periodic_report(caplog):
    LogSettings.Performance.ENABLE_PERIODIC_REPORTING = True
    LogSettings.Performance.REPORTING_INTERVAL = 1
    with caplog.at_level("INFO", logger="periodic_report"):
        with SimulationController(size=8, initial_condition="Centered Block") as controller:
            controller.initialize()
            controller.step()
    assert any("Generation 1" in r.getMessage() for r in caplog.records if r.name == "periodic_report")


def test_controllers_keep_separate_timings_and_history():
    with SimulationController(size=8, initial_condition="Centered Block") as first, \
            SimulationController(size=8, initial_condition="Centered Block") as second:
        first.initialize()
        second.initialize()
        first.step()
        first.step()
        second.step()
        assert len(first.perf.metrics["tick"]) == 2
        assert len(second.perf.metrics["tick"]) == 1
        assert list(first.stats.history("population")[:2]) == [27.0, 38.0]
        assert len(first.stats.history("step_time")) == 2
        assert second.stats.history("missing").size == 0
