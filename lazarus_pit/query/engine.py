"""Stateless filter, sort and paginate evaluation over entry snapshots.

All filter dimensions are optional and combine with logical AND. Sorting
is stable: entries that compare equal on the sort key keep the order of
the input snapshot, which is insertion order when it comes from the store.
"""

from collections.abc import Callable, Iterable
from typing import Any

from pydantic import AliasChoices, Field, StrictInt, model_validator

from ..models import (
    EntryCategory,
    EntrySource,
    EntryStatus,
    PitEntry,
    PitModel,
    SortField,
    SortOrder,
    Timestamp,
)


class PitQuery(PitModel):
    """Filter, sort and pagination parameters.

    Set filters also accept their singular key, so ``{"status": ["pending"]}``
    and ``{"statuses": ["pending"]}`` are the same query.
    """

    statuses: list[EntryStatus] | None = Field(
        default=None, validation_alias=AliasChoices("statuses", "status")
    )
    priority_min: StrictInt | None = None
    priority_max: StrictInt | None = None
    languages: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("languages", "language")
    )
    sources: list[EntrySource] | None = Field(
        default=None, validation_alias=AliasChoices("sources", "source")
    )
    tags: list[str] | None = None
    categories: list[EntryCategory] | None = Field(
        default=None, validation_alias=AliasChoices("categories", "category")
    )
    added_from: Timestamp | None = None
    added_to: Timestamp | None = None
    search: str | None = None

    sort_by: SortField = SortField.PRIORITY
    sort_order: SortOrder = SortOrder.DESC

    offset: int = Field(default=0, ge=0)
    limit: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_ranges(self) -> "PitQuery":
        """Reject inverted priority or date ranges."""
        if (
            self.priority_min is not None
            and self.priority_max is not None
            and self.priority_min > self.priority_max
        ):
            raise ValueError("priority_min must not exceed priority_max")
        if (
            self.added_from is not None
            and self.added_to is not None
            and self.added_from > self.added_to
        ):
            raise ValueError("added_from must not be later than added_to")
        return self


SORT_KEYS: dict[SortField, Callable[[PitEntry], Any]] = {
    SortField.PRIORITY: lambda entry: entry.workflow.priority,
    SortField.ADDED_AT: lambda entry: entry.workflow.added_at,
    SortField.PROGRESS: lambda entry: entry.workflow.progress,
    SortField.ESTIMATED_DURATION: lambda entry: entry.workflow.estimated_duration or 0,
    SortField.STAR_COUNT: lambda entry: entry.repository.star_count,
}


def _build_predicates(query: PitQuery) -> list[Callable[[PitEntry], bool]]:
    conditions: list[Callable[[PitEntry], bool]] = []

    if query.statuses is not None:
        statuses = set(query.statuses)
        conditions.append(lambda e: e.workflow.status in statuses)

    if query.priority_min is not None:
        low = query.priority_min
        conditions.append(lambda e: e.workflow.priority >= low)

    if query.priority_max is not None:
        high = query.priority_max
        conditions.append(lambda e: e.workflow.priority <= high)

    if query.languages is not None:
        languages = set(query.languages)
        conditions.append(lambda e: e.language in languages)

    if query.sources is not None:
        sources = set(query.sources)
        conditions.append(lambda e: e.metadata.source in sources)

    # An empty tag list places no constraint.
    if query.tags:
        tags = set(query.tags)
        conditions.append(lambda e: not tags.isdisjoint(e.metadata.tags))

    if query.categories is not None:
        categories = set(query.categories)
        conditions.append(lambda e: e.metadata.category in categories)

    if query.added_from is not None:
        start = query.added_from
        conditions.append(lambda e: e.workflow.added_at >= start)

    if query.added_to is not None:
        end = query.added_to
        conditions.append(lambda e: e.workflow.added_at <= end)

    if query.search:
        needle = query.search
        conditions.append(lambda e: e.matches_text(needle))

    return conditions


def evaluate(
    entries: Iterable[PitEntry], query: PitQuery | dict[str, Any] | None = None
) -> list[PitEntry]:
    """Filter, sort and paginate ``entries``.

    Args:
        entries: Snapshot to evaluate; it is not modified
        query: Query parameters; None selects everything, priority first

    Returns:
        Matching entries in result order

    Raises:
        EntryValidationError: If ``query`` is a malformed mapping
    """
    if query is None:
        query = PitQuery()
    elif not isinstance(query, PitQuery):
        query = PitQuery.from_dict(query)

    conditions = _build_predicates(query)
    results = [entry for entry in entries if all(cond(entry) for cond in conditions)]

    # sorted() is stable, including with reverse=True.
    results = sorted(
        results,
        key=SORT_KEYS[query.sort_by],
        reverse=query.sort_order == SortOrder.DESC,
    )

    end = None if query.limit is None else query.offset + query.limit
    return results[query.offset : end]
