# =========== START of utils.py ===========
from __future__ import annotations
import time
import traceback
from collections import defaultdict
from contextlib import contextmanager
from functools import wraps
from typing import Dict, List
import numpy as np
import psutil

from .logging_config import logger


class PerformanceLogger:
    """Keeps a bounded history of named timings."""

    def __init__(self):
        self.metrics: Dict[str, List[float]] = defaultdict(list)

    @contextmanager
    def measure(self, name: str):
        """Context manager for measuring execution time"""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.log_metric(name, time.perf_counter() - start_time)

    def log_metric(self, name: str, value: float, max_history: int = 1000):
        """Log a metric value, limiting the history size."""
        self.metrics[name].append(value)
        if len(self.metrics[name]) > max_history:
            self.metrics[name] = self.metrics[name][-max_history:]

    def get_average(self, name: str) -> float:
        values = self.metrics.get(name, [])
        if values:
            return float(sum(values) / len(values))
        return 0.0

perf_logger = PerformanceLogger()


def timer_decorator(func):
    """Record the execution time of ``func`` under '<name>_total_time'."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            execution_time = time.perf_counter() - start_time
            perf_logger.log_metric(f"{func.__name__}_total_time", execution_time)
            logger.debug(f"{func.__name__} took {execution_time:.4f}s")
    return wrapper


def log_errors(func):
    """Decorator to catch and log errors with context"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error(
                f"Error in {func.__name__}: {str(e)}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )
            raise
    return wrapper


def process_memory_mb() -> float:
    """Resident memory of this process in megabytes."""
    return psutil.Process().memory_info().rss / (1024 * 1024)


class SimulationStats:
    """Tracks simulation statistics"""

    def __init__(self, max_history: int = 1000):
        self.stats: Dict[str, List[float]] = defaultdict(list)
        self.current_stats: Dict[str, float] = {}
        self.max_history = max_history

    def update(self, **kwargs):
        """Update statistics with new values, limiting history."""
        for key, value in kwargs.items():
            if isinstance(value, (int, float, np.integer, np.floating)):
                float_value = float(value)
                self.stats[key].append(float_value)
                if len(self.stats[key]) > self.max_history:
                    self.stats[key] = self.stats[key][-self.max_history:]
                self.current_stats[key] = float_value
            else:
                logger.warning(f"Skipping non-numeric stat: {key} with value: {value}")

    def history(self, key: str) -> np.ndarray:
        return np.array(self.stats.get(key, []))

    def get_current(self) -> Dict[str, float]:
        """Get current statistics"""
        return self.current_stats.copy()
