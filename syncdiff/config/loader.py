"""Configuration loading from YAML files.

The loading hierarchy is:
1. Default values from Pydantic models
2. Configuration file (YAML), with environment variable substitution
3. Command line overrides (applied by the CLI)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationFileError, ConfigurationValidationError
from .models import Config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "syncdiff.yaml"
CONFIG_PATH_ENV_VAR = "SYNCDIFF_CONFIG_PATH"


class ConfigurationLoader:
    """Handles loading and validation of configuration from various sources."""

    def __init__(self) -> None:
        self._config: Config | None = None
        self._config_file_path: Path | None = None

    @property
    def config_file_path(self) -> Path | None:
        """Resolved path of the file the configuration was loaded from."""
        return self._config_file_path

    def load_from_file(self, config_path: str | Path, validate: bool = True) -> Config:
        """Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file
            validate: Whether to run the checks beyond model validation

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationFileError: If file cannot be read or parsed
            ConfigurationValidationError: If configuration validation fails
            EnvironmentVariableError: If a referenced variable is not set
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationFileError(
                f"Configuration file not found: {config_path}",
                file_path=str(config_path),
            )

        if not config_path.is_file():
            raise ConfigurationFileError(
                f"Configuration path is not a file: {config_path}",
                file_path=str(config_path),
            )

        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f)

            if config_data is None:
                config_data = {}

        except yaml.YAMLError as e:
            raise ConfigurationFileError(
                f"Failed to parse YAML configuration: {e}", file_path=str(config_path)
            ) from e
        except OSError as e:
            raise ConfigurationFileError(
                f"Failed to read configuration file: {e}", file_path=str(config_path)
            ) from e

        if not isinstance(config_data, dict):
            raise ConfigurationFileError(
                "Configuration file must contain a mapping at the top level",
                file_path=str(config_path),
            )

        config = self.load_from_dict(config_data, validate=validate)
        self._config_file_path = config_path.resolve()
        logger.info(f"Loaded configuration from {self._config_file_path}")
        return config

    def load_from_dict(
        self, config_data: dict[str, Any], validate: bool = True
    ) -> Config:
        """Load configuration from a dictionary.

        Args:
            config_data: Configuration data dictionary
            validate: Whether to run the checks beyond model validation

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationValidationError: If configuration validation fails
            EnvironmentVariableError: If a referenced variable is not set
        """
        try:
            self._config = Config(**config_data)
        except ValidationError as e:
            raise ConfigurationValidationError(
                f"Configuration validation failed: {e}",
                validation_errors=e.errors(),
            ) from e

        if validate:
            self.validate(self._config)

        return self._config

    def load_default(self) -> Config:
        """Configuration with default values only."""
        self._config = Config()
        return self._config

    def find_config_file(self, filename: str = DEFAULT_CONFIG_FILENAME) -> Path | None:
        """Find configuration file in standard locations.

        Search order:
        1. SYNCDIFF_CONFIG_PATH environment variable
        2. Current working directory

        Args:
            filename: Configuration filename to search for

        Returns:
            Path to found configuration file, or None if not found
        """
        search_paths = []

        env_path_str = os.getenv(CONFIG_PATH_ENV_VAR)
        if env_path_str:
            env_path = Path(env_path_str)
            if env_path.is_file():
                search_paths.append(env_path)
            else:
                search_paths.append(env_path / filename)

        search_paths.append(Path.cwd() / filename)

        for path in search_paths:
            if path.exists() and path.is_file():
                return path

        return None

    def validate(self, config: Config) -> None:
        """Validate runtime constraints the models cannot check.

        Raises:
            ConfigurationValidationError: If validation fails
        """
        output_directory = config.output.directory
        if output_directory.exists() and not output_directory.is_dir():
            raise ConfigurationValidationError(
                f"Output directory is not a directory: {output_directory}",
                setting="output.directory",
            )

        for label, setting, path in (
            ("Pilot", "input.pilot_path", config.input.pilot_path),
            ("Production", "input.production_path", config.input.production_path),
        ):
            if path is not None and path.exists() and not path.is_file():
                raise ConfigurationValidationError(
                    f"{label} snapshot path is not a file: {path}",
                    setting=setting,
                )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a file, a standard location or defaults.

    Args:
        config_path: Explicit configuration file. When omitted the standard
            locations are searched and defaults are used if nothing is found.

    Returns:
        Loaded configuration
    """
    loader = ConfigurationLoader()

    if config_path is not None:
        return loader.load_from_file(config_path)

    found = loader.find_config_file()
    if found is not None:
        return loader.load_from_file(found)

    logger.debug("No configuration file found, using defaults")
    return loader.load_default()
