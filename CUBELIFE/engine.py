# =========== START of engine.py ===========
from __future__ import annotations
import concurrent.futures
from dataclasses import dataclass
from typing import Optional, Tuple
import numpy as np
import numpy.typing as npt
import setproctitle
from numba import njit

from .enums import ExecutorBackend, ScanKind
from .lattice import Lattice
from .logging_config import logger, LogSettings
from .neighbors import _njit_count_neighbors
from .rules import RuleTable
from .utils import timer_decorator


IndexArray = npt.NDArray[np.int64]


################################################
#            NUMBA CLASSIFICATION SCANS        #
################################################

# Both scans only read ``cells``; each returns freshly allocated arrays.

@njit(cache=True, nogil=True)
def _njit_scan_live(cells, size, survival) -> Tuple[IndexArray, IndexArray]:
    total = cells.shape[0]
    stays = np.empty(total, dtype=np.int64)
    dies = np.empty(total, dtype=np.int64)
    n_stay = 0
    n_die = 0
    for i in range(total):
        if cells[i]:
            if survival[_njit_count_neighbors(cells, i, size)]:
                stays[n_stay] = i
                n_stay += 1
            else:
                dies[n_die] = i
                n_die += 1
    return stays[:n_stay].copy(), dies[:n_die].copy()


@njit(cache=True, nogil=True)
def _njit_scan_dead(cells, size, spawn) -> IndexArray:
    total = cells.shape[0]
    spawns = np.empty(total, dtype=np.int64)
    n_spawn = 0
    for i in range(total):
        if not cells[i]:
            if spawn[_njit_count_neighbors(cells, i, size)]:
                spawns[n_spawn] = i
                n_spawn += 1
    return spawns[:n_spawn].copy()


@dataclass
class GenerationResult:
    """What one generation did to the lattice."""
    stays: IndexArray
    spawns: IndexArray
    dies: IndexArray

    @property
    def births(self) -> int:
        return int(self.spawns.size)

    @property
    def deaths(self) -> int:
        return int(self.dies.size)

    @property
    def population(self) -> int:
        return int(self.stays.size + self.spawns.size)


def _init_scan_worker():
    setproctitle.setthreadtitle("CUBELIFE Scan Worker")


################################################
#           GENERATION UPDATE ENGINE           #
################################################

class GenerationEngine:
    """Advances a lattice one generation at a time.

    Phase A runs two read-only scans of the current state, one over live
    cells (survive or die) and one over dead cells (spawn), as two tasks on
    a bounded worker pool. Phase B applies the collected transitions only
    after both tasks have been joined, so no cell's fate depends on scan
    order.
    """

    def __init__(self, lattice: Lattice, rule: RuleTable,
                 backend: ExecutorBackend = ExecutorBackend.THREADS,
                 num_workers: int = 2):
        self.lattice = lattice
        self.rule = rule
        self.backend = backend
        self._executor: Optional[concurrent.futures.ThreadPoolExecutor] = None
        if backend == ExecutorBackend.THREADS:
            self._executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=max(2, num_workers),
                thread_name_prefix="CUBELIFE-scan",
                initializer=_init_scan_worker,
            )
        logger.info(f"GenerationEngine initialized: rule={rule.notation}, backend={backend.name}, "
                    f"workers={max(2, num_workers) if self._executor else 1}")

    def _scan(self, kind: ScanKind):
        cells = self.lattice.cells
        if kind == ScanKind.LIVE:
            return _njit_scan_live(cells, self.lattice.size, self.rule.survival)
        return _njit_scan_dead(cells, self.lattice.size, self.rule.spawn)

    def classify(self) -> GenerationResult:
        """Phase A: classify every cell against the current state. No writes."""
        if self._executor is not None:
            live_future = self._executor.submit(self._scan, ScanKind.LIVE)
            dead_future = self._executor.submit(self._scan, ScanKind.DEAD)
            # Join both before anything touches the lattice
            stays, dies = live_future.result()
            spawns = dead_future.result()
        else:
            stays, dies = self._scan(ScanKind.LIVE)
            spawns = self._scan(ScanKind.DEAD)
        return GenerationResult(stays=stays, spawns=spawns, dies=dies)

    def apply(self, result: GenerationResult):
        """Phase B: write the classified transitions to the lattice."""
        alive = np.concatenate((result.stays, result.spawns))
        self.lattice.apply(alive, result.dies)

    @timer_decorator
    def step(self) -> GenerationResult:
        """Advance the lattice by exactly one generation."""
        result = self.classify()
        self.apply(result)
        if LogSettings.Performance.ENABLE_DETAILED_LOGGING:
            logger.detail(f"GenerationEngine.step: stays={result.stays.size}, spawns={result.births}, dies={result.deaths}") # type: ignore [attr-defined]
        return result

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
