# =========== START of coordinates.py ===========
from __future__ import annotations
import math
from typing import Tuple
import numpy as np
import numpy.typing as npt
from numba import njit

from .exceptions import BoundsViolation
from .logging_config import logger


# Type aliases for improved type hints
CellIndex = int
Coordinates = Tuple[float, float, float]
IndexArray = npt.NDArray[np.int64]


################################################
#            NUMBA INDEX HELPERS               #
################################################

# These work on integer cell coordinates of an even-sided lattice centered
# at the origin: valid coordinates are [-half, half) on each axis.

@njit(cache=True, nogil=True)
def _njit_encode(x: int, y: int, z: int, size: int) -> int:
    half = size // 2
    return (x + half) + size * (y + half) + size * size * (z + half)


@njit(cache=True, nogil=True)
def _njit_decode(index: int, size: int) -> Tuple[int, int, int]:
    half = size // 2
    x = index % size - half
    y = (index // size) % size - half
    z = index // (size * size) - half
    return x, y, z


def validate_grid_size(size: int) -> int:
    """Grid side must be an even integer >= 2 so L/2 is a whole cell."""
    if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
        raise ValueError(f"Grid size must be an integer, got {size!r}")
    if size < 2 or size % 2 != 0:
        raise ValueError(f"Grid size must be an even integer >= 2, got {size}")
    return int(size)


################################################
#                  COORDINATES                 #
################################################

class CoordinateCodec:
    """Maps continuous world coordinates to flat lattice indices and back.

    The lattice is a cube of side ``size`` cells centered at the origin.
    World coordinates are floored to their cell, shifted by ``size / 2``
    and combined as ``x + L*y + L*L*z``. Anything that would land outside
    ``[0, L)`` on an axis raises :class:`BoundsViolation`.
    """

    def __init__(self, size: int, cell_size: float = 1.0):
        self.size = validate_grid_size(size)
        if cell_size <= 0:
            raise ValueError(f"Cell size must be positive, got {cell_size}")
        self.cell_size = float(cell_size)
        self.half = self.size // 2
        self.total_cells = self.size ** 3
        logger.debug(f"CoordinateCodec initialized: size={self.size}, cell_size={self.cell_size}, total_cells={self.total_cells}")

    def _shifted(self, value: float) -> int:
        # Non-finite values map to -1, which every bounds check rejects
        if not math.isfinite(value):
            return -1
        return math.floor(value / self.cell_size) + self.half

    def contains(self, x: float, y: float, z: float) -> bool:
        """True if the point lies inside the lattice. Never raises."""
        return all(0 <= self._shifted(v) < self.size for v in (x, y, z))

    def encode(self, x: float, y: float, z: float) -> CellIndex:
        """Convert a world coordinate to its flat lattice index."""
        sx, sy, sz = self._shifted(x), self._shifted(y), self._shifted(z)
        if not (0 <= sx < self.size and 0 <= sy < self.size and 0 <= sz < self.size):
            raise BoundsViolation((x, y, z), self.size)
        return sx + self.size * sy + self.size * self.size * sz

    def decode(self, index: CellIndex) -> Coordinates:
        """Convert a flat lattice index to the world coordinate of its cell."""
        if not 0 <= index < self.total_cells:
            raise BoundsViolation(int(index), self.size)
        x, y, z = _njit_decode(int(index), self.size)
        return (x * self.cell_size, y * self.cell_size, z * self.cell_size)

    def encode_many(self, points: npt.ArrayLike) -> IndexArray:
        """Vectorised encode of an (N, 3) array of world coordinates."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        finite = np.isfinite(pts)
        shifted = np.floor(np.where(finite, pts, 0.0) / self.cell_size).astype(np.int64) + self.half
        out_of_range = np.any(~finite | (shifted < 0) | (shifted >= self.size), axis=1)
        if np.any(out_of_range):
            bad = pts[np.argmax(out_of_range)]
            raise BoundsViolation(tuple(float(v) for v in bad), self.size)
        return shifted[:, 0] + self.size * shifted[:, 1] + self.size * self.size * shifted[:, 2]

    def decode_many(self, indices: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Vectorised decode of flat indices to an (N, 3) array of cell coordinates."""
        idx = np.asarray(indices, dtype=np.int64).ravel()
        if idx.size and (idx.min() < 0 or idx.max() >= self.total_cells):
            bad = idx[(idx < 0) | (idx >= self.total_cells)][0]
            raise BoundsViolation(int(bad), self.size)
        coords = np.empty((idx.size, 3), dtype=np.float64)
        coords[:, 0] = idx % self.size - self.half
        coords[:, 1] = (idx // self.size) % self.size - self.half
        coords[:, 2] = idx // (self.size * self.size) - self.half
        return coords * self.cell_size
