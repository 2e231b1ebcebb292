# =========== START of exceptions.py ===========
from __future__ import annotations
from typing import Tuple, Union


class BoundsViolation(IndexError):
    """A coordinate or index fell outside the lattice."""

    def __init__(self, value: Union[int, Tuple[float, ...]], size: int):
        self.value = value
        self.size = size
        if isinstance(value, tuple):
            message = f"Coordinate {value} lies outside the lattice of side {size} (valid range [{-size // 2}, {size // 2}) per axis)"
        else:
            message = f"Index {value} lies outside the lattice of side {size} (valid range [0, {size ** 3}))"
        super().__init__(message)


class EmptyRenderQuery(RuntimeError):
    """Render projection was asked to publish with no output destination."""

    def __init__(self, message: str = "No render output destination exists; create an InstanceBuffer before the first tick"):
        super().__init__(message)
