"""Configuration management for the Lazarus Pit.

Example usage:
    from lazarus_pit.config import load_config

    config = load_config("lazarus-pit.yaml")
    backing_file = config.storage.path
"""

from .exceptions import (
    ConfigurationError,
    ConfigurationFileError,
    ConfigurationValidationError,
    EnvironmentVariableError,
)
from .loader import ConfigurationLoader, load_config
from .models import (
    LoggingConfig,
    LogLevel,
    PitConfig,
    SchedulingConfig,
    StorageConfig,
    substitute_env_vars,
)
from .utils import configure_logging

__all__ = [
    "ConfigurationError",
    "ConfigurationFileError",
    "ConfigurationLoader",
    "ConfigurationValidationError",
    "EnvironmentVariableError",
    "LogLevel",
    "LoggingConfig",
    "PitConfig",
    "SchedulingConfig",
    "StorageConfig",
    "configure_logging",
    "load_config",
    "substitute_env_vars",
]
