# =========== START of rules.py ===========
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import ClassVar, Iterable, List
import numpy as np
import numpy.typing as npt

from .logging_config import logger


MAX_NEIGHBORS = 26  # Moore neighborhood in 3D
RULE_TABLE_SIZE = MAX_NEIGHBORS + 1

_NOTATION_PATTERN = re.compile(r"^\s*S(?P<survival>[0-9,\-\s]*)/B(?P<spawn>[0-9,\-\s]*)\s*$", re.IGNORECASE)


def convert_to_dense_array(counts: Iterable[int]) -> npt.NDArray[np.bool_]:
    """27-length lookup table, True at every listed neighbor count."""
    table = np.zeros(RULE_TABLE_SIZE, dtype=np.bool_)
    for count in counts:
        if not 0 <= count <= MAX_NEIGHBORS:
            raise ValueError(f"Neighbor count {count} outside [0, {MAX_NEIGHBORS}]")
        table[count] = True
    return table


def _parse_counts(text: str) -> List[int]:
    """Parse '5,6,7,8' or '5-8,10' into a sorted list of counts."""
    counts = set()
    for part in (p.strip() for p in text.split(',')):
        if not part:
            continue
        if '-' in part:
            lo_str, _, hi_str = part.partition('-')
            try:
                lo, hi = int(lo_str), int(hi_str)
            except ValueError:
                raise ValueError(f"Malformed count range '{part}'") from None
            if lo > hi:
                raise ValueError(f"Count range '{part}' is reversed")
            counts.update(range(lo, hi + 1))
        else:
            try:
                counts.add(int(part))
            except ValueError:
                raise ValueError(f"Malformed neighbor count '{part}'") from None
    return sorted(counts)


################################################
#                   RULE TABLE                 #
################################################

@dataclass(frozen=True)
class RuleTable:
    """Survival and spawn lookup tables indexed by live neighbor count (0-26).

    - Survival: a live cell stays alive if ``survival[count]`` is True.
    - Spawn: a dead cell becomes alive if ``spawn[count]`` is True.
    - Every other cell is dead in the next generation.
    """
    survival: npt.NDArray[np.bool_]
    spawn: npt.NDArray[np.bool_]

    DEFAULT_SURVIVAL: ClassVar[List[int]] = [5, 6, 7, 8]
    DEFAULT_SPAWN: ClassVar[List[int]] = [6, 7, 9]

    def __post_init__(self):
        for name in ('survival', 'spawn'):
            table = np.array(getattr(self, name), dtype=np.bool_)
            if table.shape != (RULE_TABLE_SIZE,):
                raise ValueError(f"{name} table must have {RULE_TABLE_SIZE} entries, got shape {table.shape}")
            table.flags.writeable = False
            object.__setattr__(self, name, table)

    @classmethod
    def default(cls) -> 'RuleTable':
        return cls(convert_to_dense_array(cls.DEFAULT_SURVIVAL), convert_to_dense_array(cls.DEFAULT_SPAWN))

    @classmethod
    def from_counts(cls, survival: Iterable[int], spawn: Iterable[int]) -> 'RuleTable':
        return cls(convert_to_dense_array(survival), convert_to_dense_array(spawn))

    @classmethod
    def parse(cls, notation: str) -> 'RuleTable':
        """Build a table from 'S<counts>/B<counts>' notation, e.g. 'S5-8/B6,7,9'."""
        match = _NOTATION_PATTERN.match(notation)
        if not match:
            raise ValueError(f"Rule notation '{notation}' is not of the form S<counts>/B<counts>")
        rule = cls.from_counts(_parse_counts(match.group('survival')), _parse_counts(match.group('spawn')))
        logger.debug(f"Parsed rule '{notation}' -> {rule.notation}")
        return rule

    @property
    def survival_counts(self) -> List[int]:
        return [int(i) for i in np.flatnonzero(self.survival)]

    @property
    def spawn_counts(self) -> List[int]:
        return [int(i) for i in np.flatnonzero(self.spawn)]

    @property
    def notation(self) -> str:
        survival = ','.join(str(c) for c in self.survival_counts)
        spawn = ','.join(str(c) for c in self.spawn_counts)
        return f"S{survival}/B{spawn}"

    def survives(self, count: int) -> bool:
        return bool(self.survival[count])

    def spawns(self, count: int) -> bool:
        return bool(self.spawn[count])

    def __eq__(self, other):
        if not isinstance(other, RuleTable):
            return NotImplemented
        return np.array_equal(self.survival, other.survival) and np.array_equal(self.spawn, other.spawn)

    def __hash__(self):
        return hash((self.survival.tobytes(), self.spawn.tobytes()))

    def __repr__(self):
        return f"RuleTable({self.notation})"
