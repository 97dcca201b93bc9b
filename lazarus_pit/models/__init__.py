"""Pydantic models for Lazarus Pit entries."""

from .audit import AuditEvent, append_event
from .base import PitModel, Timestamp, utc_now
from .entry import (
    DiscoveryRecord,
    EntryMetadata,
    PitEntry,
    RepositorySummary,
    SourceAnalysis,
)
from .enums import (
    AuditLevel,
    EntryCategory,
    EntrySource,
    EntryStatus,
    SortField,
    SortOrder,
)
from .workflow import (
    PIPELINE,
    WorkflowState,
    WorkflowUpdate,
    allowed_transitions,
    apply_update,
    can_transition,
)

__all__ = [
    # Base classes
    "PitModel",
    "Timestamp",
    "utc_now",
    # Enums
    "AuditLevel",
    "EntryCategory",
    "EntrySource",
    "EntryStatus",
    "SortField",
    "SortOrder",
    # Core models
    "DiscoveryRecord",
    "EntryMetadata",
    "PitEntry",
    "RepositorySummary",
    "SourceAnalysis",
    # Workflow and audit
    "AuditEvent",
    "PIPELINE",
    "WorkflowState",
    "WorkflowUpdate",
    "allowed_transitions",
    "append_event",
    "apply_update",
    "can_transition",
]
