# =========== START of enums.py ===========
from __future__ import annotations
from enum import Enum, auto


################################################
#                       ENUMS                  #
################################################


class ExecutorBackend(Enum):
    """How the two classification scans of a generation are executed"""
    THREADS = auto()  # Both scans submitted to a bounded thread pool and joined
    SERIAL = auto()   # Both scans run one after the other in the calling thread

class ScanKind(Enum):
    """The two read-only passes over the lattice snapshot"""
    LIVE = auto()  # Live cells: survive or die
    DEAD = auto()  # Dead cells: spawn or stay dead
