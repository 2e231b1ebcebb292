# =========== START of initial_conditions.py ===========
from __future__ import annotations
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import numpy as np
import numpy.typing as npt

from .lattice import Lattice
from .logging_config import logger
from .settings import GlobalSettings


################################################
#                SPAWN SAMPLER                 #
################################################

class SpawnSampler:
    """Draws random integer seed points inside a clamped axis-aligned cube.

    Points are world coordinates, so the clamp bound is the lattice
    half-width in world units (``L/2 * cell_size``).
    """

    def __init__(self, size: int, rng: Optional[np.random.Generator] = None, cell_size: float = 1.0):
        self.size = size
        self.cell_size = float(cell_size)
        self.half = int(size // 2 * self.cell_size)
        self.rng = rng if rng is not None else np.random.default_rng()

    def region_start(self, center: Sequence[int], extent: int) -> Tuple[int, int, int]:
        """Per-axis start of the sample range, clamped into the lattice half-width."""
        starts = []
        for axis in center:
            start = int(axis) - extent // 2
            starts.append(min(max(start, -self.half), self.half))
        return tuple(starts)  # type: ignore [return-value]

    def sample(self, count: int, center: Sequence[int], extent: int) -> npt.NDArray[np.int64]:
        """Return ``count`` points as an (count, 3) integer array. Each axis is
        drawn independently and uniformly from [start, start + extent)."""
        if count < 0:
            raise ValueError(f"Sample count must be non-negative, got {count}")
        if extent <= 0:
            raise ValueError(f"Sample extent must be positive, got {extent}")
        if len(center) != 3:
            raise ValueError(f"Center must have 3 coordinates, got {center}")
        starts = self.region_start(center, extent)
        points = np.empty((count, 3), dtype=np.int64)
        for axis, start in enumerate(starts):
            points[:, axis] = self.rng.integers(start, start + extent, size=count)
        logger.debug(f"SpawnSampler.sample: {count} points, center={tuple(center)}, extent={extent}, starts={starts}")
        return points


################################################
#              INITIAL CONDITIONS              #
################################################

InitialCondition = Callable[['InitialConditionManager', Lattice], None]


class InitialConditionManager:
    """Named strategies for populating a lattice before the first tick."""

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self._initial_conditions: Dict[str, InitialCondition] = {}
        self.last_rejected = 0
        self._register_defaults()

    def _register_defaults(self):
        self.register("Random Cube", InitialConditionManager.initialize_random_cube)
        self.register("Centered Block", InitialConditionManager.initialize_centered_block)
        self.register("Empty", InitialConditionManager.initialize_empty)

    def register(self, name: str, func: InitialCondition):
        """Register an initial condition function."""
        self._initial_conditions[name] = func
        logger.debug(f"Registered initial condition: {name}")

    def get_all_names(self) -> List[str]:
        return list(self._initial_conditions.keys())

    def apply(self, name: str, lattice: Lattice):
        """Apply the named initial condition to the lattice."""
        func = self._initial_conditions.get(name)
        if func is None:
            raise ValueError(f"Unknown initial condition '{name}'. Known: {self.get_all_names()}")
        logger.info(f"InitialConditionManager.apply: applying '{name}'")
        func(self, lattice)
        logger.info(f"InitialConditionManager.apply: '{name}' done, population={lattice.population}")

    def initialize_random_cube(self, lattice: Lattice):
        sampler = SpawnSampler(lattice.size, self.rng, lattice.codec.cell_size)
        points = sampler.sample(GlobalSettings.Seeding.POPULATION,
                                GlobalSettings.Seeding.CENTER,
                                GlobalSettings.Seeding.EXTENT)
        self.last_rejected = lattice.seed(points)

    def initialize_centered_block(self, lattice: Lattice):
        side = GlobalSettings.Seeding.BLOCK_SIDE
        if not 1 <= side <= lattice.size:
            raise ValueError(f"Block side {side} does not fit a lattice of side {lattice.size}")
        lo = -(side // 2)
        axis = np.arange(lo, lo + side)
        points = np.array(np.meshgrid(axis, axis, axis, indexing='ij')).reshape(3, -1).T * lattice.codec.cell_size
        self.last_rejected = lattice.seed(points)

    def initialize_empty(self, lattice: Lattice):
        lattice.clear()
        self.last_rejected = 0
