# =========== START of settings.py ===========
from __future__ import annotations
import json
import multiprocessing as mp
from typing import Any, Dict, List, Tuple

from .enums import ExecutorBackend
from .logging_config import logger, LogSettings


################################################
#                 GLOBAL SETTINGS              #
################################################


class GlobalSettings:

    class Simulation:
        GRID_SIZE: int = 50  # Side length L of the cubic lattice. Must be even.
        CELL_SIZE: float = 1.0  # World units per lattice cell.

        NUM_STEPS: int = 100  # Number of generations to run from the command line.

        # Milliseconds between generations when driven by the built-in loop.
        # The core itself defines no timing policy; 0 runs back to back.
        STEP_DELAY: int = 0
        MIN_STEP_DELAY: int = 0
        MAX_STEP_DELAY: int = 1000

        # Size of the worker pool for the two classification scans (min 2).
        NUM_WORKERS: int = max(2, mp.cpu_count() - 1)
        EXECUTOR_BACKEND: ExecutorBackend = ExecutorBackend.THREADS

    class Rules:
        SURVIVAL_COUNTS: List[int] = [5, 6, 7, 8]  # Live cell stays alive with exactly these neighbor counts.
        SPAWN_COUNTS: List[int] = [6, 7, 9]  # Dead cell becomes alive with exactly these neighbor counts.

    class Seeding:
        INITIAL_CONDITION: str = "Random Cube"
        POPULATION: int = 900  # Number of random seed points.
        CENTER: Tuple[int, int, int] = (0, 0, 0)  # Center of the seed region.
        EXTENT: int = 20  # Side length of the seed region.
        BLOCK_SIDE: int = 3  # Side length of the "Centered Block" initial condition.
        RANDOM_SEED: Any = None  # None draws fresh entropy each run.


# Sections a settings file may override, and where they live.
_SECTIONS: Dict[str, type] = {
    "Simulation": GlobalSettings.Simulation,
    "Rules": GlobalSettings.Rules,
    "Seeding": GlobalSettings.Seeding,
    "Logging": LogSettings.Logging,
    "Performance": LogSettings.Performance,
}


def _coerce(section: str, key: str, current: Any, value: Any) -> Any:
    """Convert a JSON value to the type of the setting it replaces."""
    if isinstance(current, ExecutorBackend):
        try:
            return ExecutorBackend[str(value).upper()]
        except KeyError:
            raise ValueError(f"{section}.{key}: unknown executor backend '{value}'") from None
    if isinstance(current, tuple):
        return tuple(value)
    if isinstance(current, bool):
        if not isinstance(value, bool):
            raise ValueError(f"{section}.{key}: expected true/false, got {value!r}")
        return value
    if isinstance(current, float) and isinstance(value, (int, float)):
        return float(value)
    return value


def apply_settings(overrides: Dict[str, Dict[str, Any]]):
    """Apply a {section: {KEY: value}} mapping onto the settings classes."""
    for section, values in overrides.items():
        target = _SECTIONS.get(section)
        if target is None:
            raise ValueError(f"Unknown settings section '{section}'. Known sections: {sorted(_SECTIONS)}")
        if not isinstance(values, dict):
            raise ValueError(f"Settings section '{section}' must be an object")
        for key, value in values.items():
            if not hasattr(target, key) or key.startswith('_'):
                raise ValueError(f"Unknown setting '{section}.{key}'")
            new_value = _coerce(section, key, getattr(target, key), value)
            setattr(target, key, new_value)
            logger.debug(f"Settings override: {section}.{key} = {new_value!r}")


def load_settings_file(path: str):
    """Load JSON overrides from a file and apply them."""
    logger.info(f"Loading settings from {path}")
    with open(path, 'r', encoding='utf-8') as f:
        try:
            overrides = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Settings file {path} is not valid JSON: {e}") from e
    if not isinstance(overrides, dict):
        raise ValueError(f"Settings file {path} must contain a JSON object")
    apply_settings(overrides)
