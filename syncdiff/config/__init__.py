"""Report configuration.

This module provides type-safe configuration with support for:
- YAML configuration files with environment variable substitution
- Pydantic-based validation and type safety

Example usage:
    from syncdiff.config import load_config

    config = load_config("syncdiff.yaml")
    output_path = config.output.path
"""

from ..exceptions import (
    ConfigurationError,
    ConfigurationFileError,
    ConfigurationValidationError,
    EnvironmentVariableError,
)
from .loader import ConfigurationLoader, load_config
from .models import (
    Config,
    InputConfig,
    LogLevel,
    OutputConfig,
    ReportOptions,
    SystemConfig,
    substitute_env_vars,
)

__all__ = [
    "Config",
    "ConfigurationError",
    "ConfigurationFileError",
    "ConfigurationLoader",
    "ConfigurationValidationError",
    "EnvironmentVariableError",
    "InputConfig",
    "LogLevel",
    "OutputConfig",
    "ReportOptions",
    "SystemConfig",
    "load_config",
    "substitute_env_vars",
]
