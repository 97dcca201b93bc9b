"""Aggregate statistics over an entry snapshot."""

from collections.abc import Iterable

from pydantic import Field

from ..models import EntrySource, EntryStatus, PitEntry, PitModel


class PitStats(PitModel):
    """Cross-entry summary of the pit."""

    total: int = 0
    by_status: dict[EntryStatus, int] = Field(default_factory=dict)
    by_source: dict[EntrySource, int] = Field(default_factory=dict)
    by_language: dict[str, int] = Field(default_factory=dict)
    avg_progress: float = 0.0
    avg_priority: float = 0.0
    total_estimated_duration: float = 0.0
    total_actual_duration: float = 0.0
    success_rate: float = 0.0


def compute_stats(entries: Iterable[PitEntry]) -> PitStats:
    """Reduce ``entries`` to a ``PitStats`` summary.

    Every status and source is present in the breakdowns, zero-filled.
    Averages and the success rate are 0 for an empty collection.
    """
    by_status = {status: 0 for status in EntryStatus}
    by_source = {source: 0 for source in EntrySource}
    by_language: dict[str, int] = {}

    total = 0
    total_progress = 0
    total_priority = 0
    total_estimated = 0.0
    total_actual = 0.0

    for entry in entries:
        workflow = entry.workflow
        total += 1
        by_status[workflow.status] += 1
        by_source[entry.metadata.source] += 1
        by_language[entry.language] = by_language.get(entry.language, 0) + 1

        total_progress += workflow.progress
        total_priority += workflow.priority
        total_estimated += workflow.estimated_duration or 0
        total_actual += workflow.actual_duration or 0

    return PitStats(
        total=total,
        by_status=by_status,
        by_source=by_source,
        by_language=by_language,
        avg_progress=total_progress / total if total else 0.0,
        avg_priority=total_priority / total if total else 0.0,
        total_estimated_duration=total_estimated,
        total_actual_duration=total_actual,
        success_rate=by_status[EntryStatus.COMPLETED] / total * 100 if total else 0.0,
    )
