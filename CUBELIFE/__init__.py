"""
CUBELIFE: a 3D Game of Life on a fixed cubic lattice.

Each generation is classified by two read-only scans (live cells against
the survival table, dead cells against the spawn table) run side by side
on a small worker pool, then applied in one step. Live cells are projected
into positioned, colored instances for an external renderer.
"""
from __future__ import annotations

from .coordinates import CoordinateCodec
from .engine import GenerationEngine, GenerationResult
from .exceptions import BoundsViolation, EmptyRenderQuery
from .initial_conditions import InitialConditionManager, SpawnSampler
from .lattice import Lattice
from .neighbors import NeighborCounter
from .render import InstanceBuffer, RenderProjection, RenderRecord
from .rules import RuleTable, convert_to_dense_array
from .simulation import SimulationController

__version__ = "0.1.0"

__all__ = [
    "BoundsViolation",
    "CoordinateCodec",
    "EmptyRenderQuery",
    "GenerationEngine",
    "GenerationResult",
    "InitialConditionManager",
    "InstanceBuffer",
    "Lattice",
    "NeighborCounter",
    "RenderProjection",
    "RenderRecord",
    "RuleTable",
    "SimulationController",
    "SpawnSampler",
    "convert_to_dense_array",
]
