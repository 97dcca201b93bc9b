"""Next-item selection and the default priority heuristic."""

import math
from collections.abc import Iterable

from ..models import DiscoveryRecord, EntryStatus, PitEntry, SortField, SortOrder
from .engine import PitQuery, evaluate

# Priority for entries immersed without scores or an explicit value.
DEFAULT_PRIORITY = 1

REVIVAL_WEIGHT = 0.4
HEALTH_WEIGHT = 0.3
POPULARITY_WEIGHT = 0.2
AGE_WEIGHT = 0.1

STARS_FOR_FULL_POPULARITY = 1000
DAYS_FOR_FULL_AGE = 365

NEXT_PENDING_QUERY = PitQuery(
    statuses=[EntryStatus.PENDING],
    sort_by=SortField.PRIORITY,
    sort_order=SortOrder.DESC,
    limit=1,
)


def calculate_priority(record: DiscoveryRecord) -> int:
    """Weighted priority score for a discovery record.

    Combines revival potential, the inverse of the abandonment score,
    popularity (stars, saturating at 1000) and inactivity age (saturating
    at one year), rounded half up to an integer.
    """
    popularity = min(
        record.repository.star_count / STARS_FOR_FULL_POPULARITY * 100, 100
    )
    age = min(record.last_commit_age_days / DAYS_FOR_FULL_AGE * 100, 100)

    score = (
        REVIVAL_WEIGHT * record.revival_potential
        + HEALTH_WEIGHT * (100 - record.abandonment_score)
        + POPULARITY_WEIGHT * popularity
        + AGE_WEIGHT * age
    )
    return math.floor(score + 0.5)


def next_pending(entries: Iterable[PitEntry]) -> PitEntry | None:
    """Return the highest-priority pending entry, or None."""
    results = evaluate(entries, NEXT_PENDING_QUERY)
    return results[0] if results else None
