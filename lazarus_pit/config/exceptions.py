"""Errors raised while reading pit configuration.

All of them derive from ``PitError`` so callers can catch pit failures,
configuration included, with a single except clause.
"""

from typing import Any

from ..exceptions import PitError


class ConfigurationError(PitError):
    """Configuration could not be turned into a ``PitConfig``."""


class ConfigurationFileError(ConfigurationError):
    """A YAML configuration file is missing, unreadable or not a mapping."""

    def __init__(self, message: str, file_path: str | None = None):
        """Initialize configuration file error.

        Args:
            message: What went wrong with the file
            file_path: The configuration file that was being loaded
        """
        super().__init__(message)
        self.file_path = file_path


class ConfigurationValidationError(ConfigurationError):
    """Configuration values do not fit the ``PitConfig`` schema."""

    def __init__(self, message: str, validation_errors: list[Any] | None = None):
        """Initialize configuration validation error.

        Args:
            message: Summary of the rejected configuration
            validation_errors: Pydantic error dicts, one per bad field
        """
        super().__init__(message)
        self.validation_errors = validation_errors or []


class EnvironmentVariableError(ConfigurationError):
    """A ``${VAR}`` placeholder names an unset variable and has no default."""

    def __init__(self, message: str, variable_name: str | None = None):
        """Initialize environment variable error.

        Args:
            message: Which placeholder could not be resolved
            variable_name: Name of the unset variable
        """
        super().__init__(message)
        self.variable_name = variable_name
