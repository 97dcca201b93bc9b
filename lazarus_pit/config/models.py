"""Pydantic configuration models for the Lazarus Pit.

The configuration hierarchy follows this structure:
- PitConfig: Root configuration
- StorageConfig: Backing file location and formatting
- SchedulingConfig: Priority defaults
- LoggingConfig: Log level and format

Environment variables are substituted using the format ${VAR_NAME} with
optional defaults: ${VAR_NAME:default_value}
"""

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .exceptions import EnvironmentVariableError

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in string values, recursively.

    Supports formats:
    - ${VAR_NAME} - Required environment variable
    - ${VAR_NAME:default} - Optional with default value

    Raises:
        EnvironmentVariableError: If a required variable is not set
    """
    if isinstance(value, str):

        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)

            env_value = os.getenv(var_name)
            if env_value is not None:
                return env_value
            elif default_value is not None:
                return default_value
            else:
                raise EnvironmentVariableError(
                    f"Config placeholder '${{{var_name}}}' has no default "
                    "and the variable is unset",
                    variable_name=var_name,
                )

        return ENV_VAR_PATTERN.sub(replacer, value)
    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    else:
        return value


class BaseConfigModel(BaseModel):
    """Base configuration model with environment variable substitution."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def resolve_env_vars(cls, values: Any) -> Any:
        """Substitute environment variables in raw configuration values."""
        if isinstance(values, dict):
            return substitute_env_vars(values)
        return values


class StorageConfig(BaseConfigModel):
    """Backing file configuration."""

    path: Path = Field(
        default=Path(".phoenix/lazarus-pit/pit-data.json"),
        description="Backing file; always a file path, never a directory",
    )

    indent: int | None = Field(
        default=2, ge=0, le=8, description="JSON indentation, null for compact"
    )


class SchedulingConfig(BaseConfigModel):
    """Priority defaults."""

    default_priority: int = Field(
        default=1,
        description="Priority for entries with no explicit value and no scores",
    )


class LoggingConfig(BaseConfigModel):
    """Logging configuration."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Root log level")

    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="logging.Formatter format string",
    )


class PitConfig(BaseConfigModel):
    """Root configuration."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
