"""Mutable workflow state of a pit entry and its status state machine.

Statuses advance along a fixed pipeline::

    pending -> analyzing -> modernizing -> community-building -> completed

``failed`` and ``paused`` are reachable from any non-terminal status. A
paused entry resumes only to the status it was paused from. Progress
cannot change on entering ``paused`` and cannot drop below its paused
value on resume unless ``reset_progress`` is set. ``completed`` and
``failed`` are terminal: every attempt to leave them is rejected with
``InvalidTransitionError``.
"""

from typing import Any

from pydantic import Field, StrictInt

from ..exceptions import EntryValidationError, InvalidTransitionError
from .audit import AuditEvent
from .base import PitModel, Timestamp, utc_now
from .enums import EntryStatus

PIPELINE: tuple[EntryStatus, ...] = (
    EntryStatus.PENDING,
    EntryStatus.ANALYZING,
    EntryStatus.MODERNIZING,
    EntryStatus.COMMUNITY_BUILDING,
    EntryStatus.COMPLETED,
)


def allowed_transitions(
    current: EntryStatus, paused_from: EntryStatus | None = None
) -> frozenset[EntryStatus]:
    """Return the statuses reachable from ``current``."""
    if current.is_terminal:
        return frozenset()

    if current == EntryStatus.PAUSED:
        targets = {EntryStatus.FAILED}
        if paused_from is not None:
            targets.add(paused_from)
        return frozenset(targets)

    targets = {EntryStatus.FAILED, EntryStatus.PAUSED}
    position = PIPELINE.index(current)
    targets.add(PIPELINE[position + 1])
    return frozenset(targets)


def can_transition(
    current: EntryStatus, target: EntryStatus, paused_from: EntryStatus | None = None
) -> bool:
    """Check if ``current -> target`` is a legal status change."""
    return target in allowed_transitions(current, paused_from)


class WorkflowState(PitModel):
    """Mutable processing state of an entry."""

    priority: StrictInt = 1
    status: EntryStatus = EntryStatus.PENDING
    progress: int = Field(default=0, ge=0, le=100)
    added_at: Timestamp = Field(default_factory=utc_now)
    updated_at: Timestamp = Field(default_factory=utc_now)
    started_at: Timestamp | None = None
    completed_at: Timestamp | None = None
    estimated_duration: float | None = Field(default=None, ge=0)
    actual_duration: float | None = Field(default=None, ge=0)
    paused_from: EntryStatus | None = None
    issues: list[str] = Field(default_factory=list)
    log: list[AuditEvent] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        """Check if the entry reached a terminal status."""
        return self.status.is_terminal


class WorkflowUpdate(PitModel):
    """Partial update merged into a ``WorkflowState``.

    Only fields explicitly set by the caller are applied, so ``None`` can
    be used to clear optional values such as ``estimated_duration``.
    """

    priority: StrictInt | None = None
    status: EntryStatus | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    started_at: Timestamp | None = None
    completed_at: Timestamp | None = None
    estimated_duration: float | None = Field(default=None, ge=0)
    actual_duration: float | None = Field(default=None, ge=0)
    issues: list[str] | None = None
    reset_progress: bool = False

    def changes(self) -> dict[str, Any]:
        """Return the fields the caller supplied, excluding control flags."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "reset_progress"
        }


def apply_update(state: WorkflowState, update: WorkflowUpdate) -> EntryStatus | None:
    """Merge ``update`` into ``state`` in place.

    Callers are expected to pass a private copy: validation happens before
    the first field is written, so a rejected update leaves ``state`` as
    it was.

    Returns:
        The previous status if the status changed, otherwise None

    Raises:
        InvalidTransitionError: If the status change is not permitted
        EntryValidationError: If progress would move backwards within a
            status or across a pause, or changes on entering ``paused``
    """
    changes = update.changes()
    if "priority" in changes and changes["priority"] is None:
        raise EntryValidationError("Priority cannot be cleared")
    if "progress" in changes and changes["progress"] is None:
        raise EntryValidationError("Progress cannot be cleared")
    if "issues" in changes and changes["issues"] is None:
        changes["issues"] = []

    previous = state.status
    target = changes.pop("status", None) or previous
    status_changed = target != previous

    if status_changed and not can_transition(previous, target, state.paused_from):
        raise InvalidTransitionError(previous.value, target.value)

    new_progress = changes.get("progress")
    pausing = status_changed and target == EntryStatus.PAUSED
    resuming = (
        status_changed
        and previous == EntryStatus.PAUSED
        and target != EntryStatus.FAILED
    )

    # Progress is frozen across a pause and resume.
    if pausing and new_progress is not None and new_progress != state.progress:
        raise EntryValidationError(
            f"Progress cannot change when pausing (currently {state.progress})",
            details={"current": state.progress, "requested": new_progress},
        )

    if (
        (not status_changed or resuming)
        and new_progress is not None
        and new_progress < state.progress
        and not update.reset_progress
    ):
        raise EntryValidationError(
            f"Progress cannot decrease from {state.progress} to {new_progress} "
            f"within status '{target.value}'",
            details={"current": state.progress, "requested": new_progress},
        )

    now = utc_now()
    for key, value in changes.items():
        setattr(state, key, value)

    if status_changed:
        if target == EntryStatus.PAUSED:
            state.paused_from = previous
        elif previous == EntryStatus.PAUSED:
            state.paused_from = None

        if target in PIPELINE[1:] and state.started_at is None:
            state.started_at = now
        if target.is_terminal and state.completed_at is None:
            state.completed_at = now

        state.status = target

    state.updated_at = now
    return previous if status_changed else None
