# =========== START of neighbors.py ===========
from __future__ import annotations
from typing import TYPE_CHECKING
import numpy as np
import numpy.typing as npt
from numba import njit, prange

from .coordinates import _njit_decode, _njit_encode
from .exceptions import BoundsViolation
from .logging_config import logger

if TYPE_CHECKING:
    from .lattice import Lattice


# All 26 offsets of the 3D Moore neighborhood, (0, 0, 0) excluded.
MOORE_OFFSETS_3D: npt.NDArray[np.int64] = np.array(
    [(dx, dy, dz)
     for dz in (-1, 0, 1)
     for dy in (-1, 0, 1)
     for dx in (-1, 0, 1)
     if (dx, dy, dz) != (0, 0, 0)],
    dtype=np.int64,
)


################################################
#            NUMBA NEIGHBOR KERNELS            #
################################################

# Bounded edges: a neighbor whose |coordinate| on any axis is >= half is
# omitted from the count. Nothing wraps and nothing is padded.

@njit(cache=True, nogil=True)
def _njit_count_neighbors(cells: npt.NDArray[np.bool_], index: int, size: int) -> int:
    half = size // 2
    x, y, z = _njit_decode(index, size)
    count = 0
    for dz in range(-1, 2):
        for dy in range(-1, 2):
            for dx in range(-1, 2):
                if dx == 0 and dy == 0 and dz == 0:
                    continue
                nx = x + dx
                ny = y + dy
                nz = z + dz
                if abs(nx) >= half or abs(ny) >= half or abs(nz) >= half:
                    continue
                if cells[_njit_encode(nx, ny, nz, size)]:
                    count += 1
    return count


@njit(cache=True, nogil=True)
def _njit_neighbor_indices(index: int, size: int) -> npt.NDArray[np.int64]:
    half = size // 2
    x, y, z = _njit_decode(index, size)
    out = np.empty(26, dtype=np.int64)
    n = 0
    for dz in range(-1, 2):
        for dy in range(-1, 2):
            for dx in range(-1, 2):
                if dx == 0 and dy == 0 and dz == 0:
                    continue
                nx = x + dx
                ny = y + dy
                nz = z + dz
                if abs(nx) >= half or abs(ny) >= half or abs(nz) >= half:
                    continue
                out[n] = _njit_encode(nx, ny, nz, size)
                n += 1
    return out[:n]


@njit(parallel=True, cache=True)
def _njit_count_all_neighbors(cells: npt.NDArray[np.bool_], size: int) -> npt.NDArray[np.int64]:
    total = cells.shape[0]
    counts = np.zeros(total, dtype=np.int64)
    for i in prange(total): # Parallel loop
        counts[i] = _njit_count_neighbors(cells, i, size)
    return counts


################################################
#               NEIGHBOR COUNTER               #
################################################

class NeighborCounter:
    """Counts live cells in the 26-cell Moore neighborhood of a lattice index."""

    def __init__(self, lattice: 'Lattice'):
        self.lattice = lattice
        self.size = lattice.size

    def _check_index(self, index: int):
        if not 0 <= index < self.lattice.total_cells:
            raise BoundsViolation(int(index), self.size)

    def count_neighbors(self, index: int) -> int:
        """Number of live in-range neighbors of ``index``, in [0, 26]."""
        self._check_index(index)
        return int(_njit_count_neighbors(self.lattice.cells, int(index), self.size))

    def neighbor_indices(self, index: int) -> npt.NDArray[np.int64]:
        """Indices of the in-range neighbor candidates of ``index``."""
        self._check_index(index)
        return _njit_neighbor_indices(int(index), self.size)

    def count_all(self) -> npt.NDArray[np.int64]:
        """Neighbor count of every cell, in lattice index order."""
        counts = _njit_count_all_neighbors(self.lattice.cells, self.size)
        logger.debug(f"NeighborCounter.count_all: computed {counts.size} counts, max={int(counts.max()) if counts.size else 0}")
        return counts
