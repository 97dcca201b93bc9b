"""Exceptions raised by the Lazarus Pit.

Not-found conditions are never raised: operations that reference an
unknown entry id report ``False`` or ``None`` instead.
"""

from typing import Any


class PitError(Exception):
    """Base exception for all Lazarus Pit errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize pit error.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.details = details or {}


class EntryValidationError(PitError):
    """Exception raised when input to a mutation is malformed."""

    def __init__(
        self,
        message: str,
        validation_errors: list[Any] | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize entry validation error.

        Args:
            message: Human-readable error message
            validation_errors: List of specific validation errors
            details: Optional dictionary with additional error details
        """
        super().__init__(message, details)
        self.validation_errors = validation_errors or []


class InvalidTransitionError(EntryValidationError):
    """Exception raised when a workflow status change is not permitted."""

    def __init__(self, current: str, requested: str):
        """Initialize invalid transition error.

        Args:
            current: Status the entry is currently in
            requested: Status the caller asked for
        """
        super().__init__(
            f"Cannot transition from '{current}' to '{requested}'",
            details={"current": current, "requested": requested},
        )
        self.current = current
        self.requested = requested


class PersistenceError(PitError):
    """Exception raised when the backing store cannot be read or written."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize persistence error.

        Args:
            message: Human-readable error message
            path: Path to the backing file, when there is one
            details: Optional dictionary with additional error details
        """
        super().__init__(message, details)
        self.path = path


class PersistenceReadError(PersistenceError):
    """Backing store exists but could not be read or decoded."""

    pass


class PersistenceWriteError(PersistenceError):
    """Backing store could not be written; previous contents are intact."""

    pass
