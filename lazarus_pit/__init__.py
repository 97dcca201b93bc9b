"""Lazarus Pit: embedded store for repositories queued for revival."""

from .discovery import RepositoryFetcher, categorize_repository, offline_repository_summary
from .export import export_web_snapshot
from .exceptions import (
    EntryValidationError,
    InvalidTransitionError,
    PersistenceError,
    PersistenceReadError,
    PersistenceWriteError,
    PitError,
)
from .models import (
    AuditEvent,
    AuditLevel,
    DiscoveryRecord,
    EntryCategory,
    EntryMetadata,
    EntrySource,
    EntryStatus,
    PitEntry,
    RepositorySummary,
    SortField,
    SortOrder,
    SourceAnalysis,
    WorkflowState,
    WorkflowUpdate,
)
from .query import (
    DEFAULT_PRIORITY,
    PitQuery,
    PitStats,
    calculate_priority,
    compute_stats,
    evaluate,
    next_pending,
)
from .storage import BasePersistence, JsonFilePersistence, MemoryPersistence
from .store import LazarusPit, create_pit

__version__ = "0.1.0"

__all__ = [
    # Store
    "LazarusPit",
    "create_pit",
    # Persistence
    "BasePersistence",
    "JsonFilePersistence",
    "MemoryPersistence",
    # Models
    "AuditEvent",
    "AuditLevel",
    "DiscoveryRecord",
    "EntryCategory",
    "EntryMetadata",
    "EntrySource",
    "EntryStatus",
    "PitEntry",
    "RepositorySummary",
    "SortField",
    "SortOrder",
    "SourceAnalysis",
    "WorkflowState",
    "WorkflowUpdate",
    # Read side
    "DEFAULT_PRIORITY",
    "PitQuery",
    "PitStats",
    "calculate_priority",
    "compute_stats",
    "evaluate",
    "next_pending",
    # Web export
    "export_web_snapshot",
    # Discovery intake
    "RepositoryFetcher",
    "categorize_repository",
    "offline_repository_summary",
    # Errors
    "EntryValidationError",
    "InvalidTransitionError",
    "PersistenceError",
    "PersistenceReadError",
    "PersistenceWriteError",
    "PitError",
]
