"""Per-entry append-only audit log."""

from typing import TYPE_CHECKING, Any

from pydantic import ConfigDict, Field, JsonValue

from .base import PitModel, Timestamp, utc_now
from .enums import AuditLevel

if TYPE_CHECKING:
    from .entry import PitEntry


class AuditEvent(PitModel):
    """One audit record. Immutable once created."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    timestamp: Timestamp = Field(default_factory=utc_now)
    level: AuditLevel = AuditLevel.INFO
    message: str = Field(min_length=1)
    details: dict[str, JsonValue] | None = None

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<AuditEvent({self.level.value}: {self.message})>"


def append_event(
    entry: "PitEntry",
    level: AuditLevel | str,
    message: str,
    details: dict[str, Any] | None = None,
) -> AuditEvent:
    """Append an audit event to an entry's log.

    Only touches the in-memory entry; the store persists the container
    entry as part of the surrounding mutation.

    Args:
        entry: Entry whose log receives the event
        level: Severity of the event
        message: Human-readable description
        details: Optional structured context

    Returns:
        The appended event

    Raises:
        EntryValidationError: If the level is unknown, the message is empty,
            or ``details`` holds values that are not JSON-serializable
    """
    event = AuditEvent.from_dict(
        {"level": level, "message": message, "details": details}
    )
    entry.workflow.log.append(event)
    return event
