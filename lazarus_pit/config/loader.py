"""Configuration loading.

The loading hierarchy is:
1. Default values from Pydantic models
2. Configuration file (YAML), with environment variable substitution
3. Runtime overrides passed as a dictionary
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import (
    ConfigurationFileError,
    ConfigurationValidationError,
    EnvironmentVariableError,
)
from .models import PitConfig

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV_VAR = "LAZARUS_PIT_CONFIG_PATH"
DEFAULT_CONFIG_FILENAME = "lazarus-pit.yaml"


class ConfigurationLoader:
    """Handles loading and validation of configuration from various sources."""

    def __init__(self) -> None:
        """Initialize configuration loader."""
        self._config: PitConfig | None = None
        self._config_file_path: Path | None = None

    def load_from_file(
        self, config_path: str | Path, overrides: dict[str, Any] | None = None
    ) -> PitConfig:
        """Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file
            overrides: Values merged over the file contents

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationFileError: If file cannot be read or parsed
            ConfigurationValidationError: If configuration validation fails
            EnvironmentVariableError: If a required variable is not set
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationFileError(
                f"Pit config file {config_path} does not exist",
                file_path=str(config_path),
            )

        if not config_path.is_file():
            raise ConfigurationFileError(
                f"Pit config path {config_path} is not a regular file",
                file_path=str(config_path),
            )

        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationFileError(
                f"Pit config {config_path} is not valid YAML: {e}",
                file_path=str(config_path),
            ) from e
        except OSError as e:
            raise ConfigurationFileError(
                f"Cannot read pit config {config_path}: {e}",
                file_path=str(config_path),
            ) from e

        if config_data is None:
            config_data = {}

        if not isinstance(config_data, dict):
            raise ConfigurationFileError(
                f"Pit config {config_path} must be a mapping of sections",
                file_path=str(config_path),
            )

        config = self.load_from_dict(_deep_merge(config_data, overrides or {}))
        self._config_file_path = config_path.resolve()
        logger.debug(f"Loaded configuration from {self._config_file_path}")
        return config

    def load_from_dict(self, config_data: dict[str, Any]) -> PitConfig:
        """Load configuration from a dictionary.

        Raises:
            ConfigurationValidationError: If configuration validation fails
            EnvironmentVariableError: If a required variable is not set
        """
        try:
            self._config = PitConfig(**config_data)
        except EnvironmentVariableError:
            raise
        except ValidationError as e:
            raise ConfigurationValidationError(
                f"Pit config rejected: {e.error_count()} invalid value(s)",
                validation_errors=e.errors(include_url=False),
            ) from e

        return self._config

    def load_default(self) -> PitConfig:
        """Load configuration with default values only."""
        self._config = PitConfig()
        return self._config

    def find_config_file(self, filename: str = DEFAULT_CONFIG_FILENAME) -> Path | None:
        """Find configuration file in standard locations.

        Search order:
        1. Current working directory
        2. LAZARUS_PIT_CONFIG_PATH environment variable
        3. ~/.lazarus-pit/

        Returns:
            Path to found configuration file, or None if not found
        """
        search_paths = [Path.cwd() / filename]

        env_path_str = os.getenv(CONFIG_PATH_ENV_VAR)
        if env_path_str:
            env_path = Path(env_path_str)
            if env_path.is_file():
                search_paths.append(env_path)
            else:
                search_paths.append(env_path / filename)

        search_paths.append(Path.home() / ".lazarus-pit" / filename)

        for path in search_paths:
            if path.exists() and path.is_file():
                return path

        return None

    def auto_load(self, filename: str = DEFAULT_CONFIG_FILENAME) -> PitConfig:
        """Load the first configuration file found, or defaults if none exists."""
        config_path = self.find_config_file(filename)

        if config_path is None:
            logger.debug("No configuration file found, using defaults")
            return self.load_default()

        return self.load_from_file(config_path)

    @property
    def config(self) -> PitConfig | None:
        """Get the loaded configuration."""
        return self._config

    @property
    def config_file_path(self) -> Path | None:
        """Get the path to the loaded configuration file."""
        return self._config_file_path

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._config is not None


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(
    config_path: str | Path | None = None, overrides: dict[str, Any] | None = None
) -> PitConfig:
    """Load configuration from ``config_path`` or the standard locations."""
    loader = ConfigurationLoader()
    if config_path is not None:
        return loader.load_from_file(config_path, overrides)

    config = loader.auto_load()
    if overrides:
        config = loader.load_from_dict(
            _deep_merge(config.model_dump(mode="json"), overrides)
        )
    return config
