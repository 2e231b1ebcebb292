# =========== START of lattice.py ===========
from __future__ import annotations
import numpy as np
import numpy.typing as npt

from .coordinates import CoordinateCodec
from .exceptions import BoundsViolation
from .logging_config import logger


# Type aliases for improved type hints
LatticeArray = npt.NDArray[np.bool_]
IndexArray = npt.NDArray[np.int64]


################################################
#                    LATTICE                   #
################################################

class Lattice:
    """Flat boolean cell state of a cube of side ``size`` centered at the origin.

    One instance is owned by a simulation run and handed by reference to
    the components that read it. Only the update engine's apply step and
    start-up seeding write to it.
    """

    def __init__(self, size: int, cell_size: float = 1.0):
        self.codec = CoordinateCodec(size, cell_size)
        self.size = self.codec.size
        self.total_cells = self.codec.total_cells
        self.cells: LatticeArray = np.zeros(self.total_cells, dtype=np.bool_)
        logger.debug(f"Lattice created: {self.size}^3 = {self.total_cells} cells")

    @property
    def population(self) -> int:
        return int(np.count_nonzero(self.cells))

    def live_indices(self) -> IndexArray:
        """Indices of live cells in ascending index order."""
        return np.flatnonzero(self.cells).astype(np.int64)

    def is_alive_at(self, x: float, y: float, z: float) -> bool:
        return bool(self.cells[self.codec.encode(x, y, z)])

    def set_alive(self, x: float, y: float, z: float, alive: bool = True):
        self.cells[self.codec.encode(x, y, z)] = alive

    def seed(self, points: npt.ArrayLike) -> int:
        """Mark every point live. Points outside the lattice are skipped and
        logged; returns how many were rejected."""
        rejected = 0
        for x, y, z in np.asarray(points, dtype=np.float64).reshape(-1, 3):
            try:
                self.cells[self.codec.encode(x, y, z)] = True
            except BoundsViolation as e:
                rejected += 1
                logger.debug(f"Lattice.seed: rejected point: {e}")
        if rejected:
            logger.warning(f"Lattice.seed: {rejected} seed point(s) fell outside the {self.size}^3 lattice and were skipped")
        return rejected

    def apply(self, alive: IndexArray, dead: IndexArray):
        """Set ``alive`` indices live and ``dead`` indices dead."""
        self.cells[alive] = True
        self.cells[dead] = False

    def clear(self):
        self.cells[:] = False

    def snapshot(self) -> LatticeArray:
        return self.cells.copy()

    def __repr__(self):
        return f"<Lattice size={self.size} population={self.population}>"
