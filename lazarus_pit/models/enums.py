"""Enums for pit entry models."""

import enum


class EntryStatus(str, enum.Enum):
    """Workflow status of a pit entry."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    MODERNIZING = "modernizing"
    COMMUNITY_BUILDING = "community-building"
    COMPLETED = "completed"
    FAILED = "failed"
    PAUSED = "paused"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition is permitted."""
        return self in (EntryStatus.COMPLETED, EntryStatus.FAILED)


class EntrySource(str, enum.Enum):
    """How an entry got into the pit."""

    DISCOVERED = "discovered"
    MANUAL = "manual"
    PROGRAMMATIC = "programmatic"


class EntryCategory(str, enum.Enum):
    """Kind of project a repository holds."""

    CLI_TOOL = "cli-tool"
    LIBRARY = "library"
    FRAMEWORK = "framework"
    APPLICATION = "application"
    OTHER = "other"


class AuditLevel(str, enum.Enum):
    """Severity of an audit log event."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    SUCCESS = "success"


class SortField(str, enum.Enum):
    """Keys the query engine can sort by."""

    PRIORITY = "priority"
    ADDED_AT = "added_at"
    PROGRESS = "progress"
    ESTIMATED_DURATION = "estimated_duration"
    STAR_COUNT = "star_count"


class SortOrder(str, enum.Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"
