"""Read-side operations: querying, scheduling and statistics."""

from .engine import SORT_KEYS, PitQuery, evaluate
from .scheduler import DEFAULT_PRIORITY, calculate_priority, next_pending
from .stats import PitStats, compute_stats

__all__ = [
    "DEFAULT_PRIORITY",
    "PitQuery",
    "PitStats",
    "SORT_KEYS",
    "calculate_priority",
    "compute_stats",
    "evaluate",
    "next_pending",
]
