import itertools

import numpy as np
import pytest

from CUBELIFE.engine import GenerationEngine
from CUBELIFE.enums import ExecutorBackend
from CUBELIFE.lattice import Lattice
from CUBELIFE.neighbors import MOORE_OFFSETS_3D, NeighborCounter
from CUBELIFE.rules import RuleTable

from Tests.helpers import live_coordinates, make_lattice


BACKENDS = [ExecutorBackend.THREADS, ExecutorBackend.SERIAL]


def block_centered_at_origin():
    return list(itertools.product((-1, 0, 1), repeat=3))


def expected_after_one_tick_of_block():
    """Hand-computed next generation of a full 3x3x3 block under S5-8/B6,7,9.

    Inside the block only the corners survive (7 neighbors; faces have 17,
    edges 11, the center 26). Outside, the cell facing a block face sees 9
    live neighbors and the cells beside it along a face edge see 6, so both
    spawn; every other outside cell sees at most 4.
    """
    expected = set(itertools.product((-1, 1), repeat=3))
    for axis in range(3):
        for outer in (-2, 2):
            face = [0, 0, 0]
            face[axis] = outer
            expected.add(tuple(face))
            for other in range(3):
                if other == axis:
                    continue
                for side in (-1, 1):
                    beside = list(face)
                    beside[other] = side
                    expected.add(tuple(beside))
    return expected


@pytest.mark.parametrize("backend", BACKENDS)
def test_block_end_to_end(backend):
    lattice = make_lattice(8, block_centered_at_origin())
    with GenerationEngine(lattice, RuleTable.default(), backend) as engine:
        result = engine.step()
    expected = expected_after_one_tick_of_block()
    assert len(expected) == 38
    assert live_coordinates(lattice) == expected
    assert result.deaths == 27 - 8
    assert result.births == 30
    assert result.population == 38 == lattice.population


@pytest.mark.parametrize("backend", BACKENDS)
def test_all_dead_lattice_stays_dead(backend):
    lattice = Lattice(6)
    with GenerationEngine(lattice, RuleTable.default(), backend) as engine:
        result = engine.step()
    assert lattice.population == 0
    assert result.births == 0 and result.deaths == 0


def _center_with_live_neighbors(center_alive, num_neighbors):
    live = [tuple(int(v) for v in o) for o in MOORE_OFFSETS_3D[:num_neighbors]]
    if center_alive:
        live.append((0, 0, 0))
    return make_lattice(8, live)


def test_live_cell_with_five_neighbors_survives():
    lattice = _center_with_live_neighbors(True, 5)
    with GenerationEngine(lattice, RuleTable.default()) as engine:
        engine.step()
    assert lattice.is_alive_at(0, 0, 0)


def test_dead_cell_with_six_neighbors_spawns():
    lattice = _center_with_live_neighbors(False, 6)
    with GenerationEngine(lattice, RuleTable.default()) as engine:
        engine.step()
    assert lattice.is_alive_at(0, 0, 0)


def test_live_cell_with_two_neighbors_dies():
    lattice = _center_with_live_neighbors(True, 2)
    with GenerationEngine(lattice, RuleTable.default()) as engine:
        engine.step()
    assert not lattice.is_alive_at(0, 0, 0)


def test_classify_does_not_write(rng):
    lattice = Lattice(8)
    lattice.cells[:] = rng.random(lattice.total_cells) < 0.3
    before = lattice.snapshot()
    with GenerationEngine(lattice, RuleTable.default()) as engine:
        result = engine.classify()
    assert np.array_equal(lattice.cells, before)
    # The three lists partition exactly the cells that are alive next tick or dying
    assert not set(result.stays) & set(result.spawns)
    assert set(result.stays) | set(result.dies) == set(np.flatnonzero(before))


def test_step_matches_simultaneous_reference(rng):
    """Compare against a straightforward count-everything-then-update pass."""
    lattice = Lattice(10)
    lattice.cells[:] = rng.random(lattice.total_cells) < 0.35
    rule = RuleTable.default()
    counts = NeighborCounter(lattice).count_all()
    expected = np.where(lattice.cells, rule.survival[counts], rule.spawn[counts])
    with GenerationEngine(lattice, rule, num_workers=4) as engine:
        engine.step()
    assert np.array_equal(lattice.cells, expected)


def test_threads_and_serial_agree(rng):
    start = rng.random(8 ** 3) < 0.4
    results = []
    for backend in BACKENDS:
        lattice = Lattice(8)
        lattice.cells[:] = start
        with GenerationEngine(lattice, RuleTable.default(), backend) as engine:
            for _ in range(3):
                engine.step()
        results.append(lattice.snapshot())
    assert np.array_equal(results[0], results[1])
