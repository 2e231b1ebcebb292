# =========== START of render.py ===========
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np
import numpy.typing as npt

from .exceptions import EmptyRenderQuery
from .lattice import Lattice
from .logging_config import logger


# Instance buffer layout handed to the renderer, one row per live cell.
INSTANCE_DTYPE = np.dtype([
    ('position', np.float32, (3,)),
    ('scale', np.float32),
    ('color', np.float32, (4,)),
])


@dataclass(frozen=True)
class RenderRecord:
    position: Tuple[float, float, float]
    scale: float
    color: Tuple[float, float, float, float]


def records_from_array(instances: npt.NDArray) -> List[RenderRecord]:
    return [
        RenderRecord(
            position=tuple(float(v) for v in row['position']),  # type: ignore [arg-type]
            scale=float(row['scale']),
            color=tuple(float(v) for v in row['color']),  # type: ignore [arg-type]
        )
        for row in instances
    ]


class InstanceBuffer:
    """Render output destination. Every publish replaces the whole contents."""

    def __init__(self):
        self.array: npt.NDArray = np.zeros(0, dtype=INSTANCE_DTYPE)
        self.version = 0

    def replace(self, instances: npt.NDArray):
        self.array = instances
        self.version += 1

    @property
    def records(self) -> List[RenderRecord]:
        return records_from_array(self.array)

    def __len__(self):
        return int(self.array.shape[0])


################################################
#               RENDER PROJECTION              #
################################################

class RenderProjection:
    """Turns live cells into positioned, colored instances.

    Color channels blend two random draws by the cell's Chebyshev distance
    from the center, normalized to the lattice half-width: cells near the
    center lean toward the first draw, cells near the edge toward the
    second. Colors are redrawn on every projection.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, alpha: float = 1.0):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.alpha = float(alpha)

    def project_array(self, lattice: Lattice) -> npt.NDArray:
        live = lattice.live_indices()
        coords = lattice.codec.decode_many(live)
        half_width = lattice.size / 2 * lattice.codec.cell_size
        distance = np.abs(coords).max(axis=1) / half_width if live.size else np.zeros(0)

        draws = self.rng.random((live.size, 3, 2))
        rgb = (1.0 - distance)[:, None] * draws[:, :, 0] + distance[:, None] * draws[:, :, 1]

        instances = np.empty(live.size, dtype=INSTANCE_DTYPE)
        instances['position'] = coords
        instances['scale'] = lattice.codec.cell_size
        instances['color'][:, :3] = rgb
        instances['color'][:, 3] = self.alpha
        return instances

    def project(self, lattice: Lattice) -> List[RenderRecord]:
        return records_from_array(self.project_array(lattice))

    def publish(self, lattice: Lattice, buffer: Optional[InstanceBuffer]) -> int:
        """Project the lattice into ``buffer``; returns the instance count."""
        if buffer is None:
            raise EmptyRenderQuery()
        instances = self.project_array(lattice)
        buffer.replace(instances)
        logger.debug(f"RenderProjection.publish: {instances.shape[0]} instances (buffer version {buffer.version})")
        return int(instances.shape[0])
