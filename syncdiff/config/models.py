"""Pydantic configuration models for report generation.

The configuration hierarchy follows this structure:
- Config: Root configuration
- SystemConfig: Logging
- InputConfig: Locations of the pilot and production exports
- OutputConfig: Where and under which title the report is written
- ReportOptions: Which connectors and rows appear in the report

Environment variables are substituted using the format ${VAR_NAME} with
optional defaults: ${VAR_NAME:default_value}
"""

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..exceptions import EnvironmentVariableError

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")

DEFAULT_REPORT_FILE_NAME = "sync-config-report.html"
DEFAULT_REPORT_TITLE = "Sync Configuration Report"


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def substitute_env_vars(value: Any) -> Any:
    """Recursively replace ``${VAR}`` and ``${VAR:default}`` in strings.

    Raises:
        EnvironmentVariableError: If a variable without default is not set
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
                    f"Required environment variable '{var_name}' not found",
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
    def substitute_environment(cls, values: Any) -> Any:
        """Substitute environment variables in string values."""
        if isinstance(values, dict):
            return {key: substitute_env_vars(value) for key, value in values.items()}
        return values


class SystemConfig(BaseConfigModel):
    """Process-wide settings."""

    log_level: LogLevel = Field(
        default=LogLevel.INFO, description="Logging level of the report run"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.upper()
        return v


class InputConfig(BaseConfigModel):
    """Locations of the exported server configurations."""

    pilot_path: Path | None = Field(
        default=None, description="Exported configuration of the pilot server"
    )
    production_path: Path | None = Field(
        default=None, description="Exported configuration of the production server"
    )


class OutputConfig(BaseConfigModel):
    """Report output settings."""

    directory: Path = Field(
        default=Path("."), description="Directory the report is written to"
    )
    file_name: str = Field(
        default=DEFAULT_REPORT_FILE_NAME, description="File name of the report"
    )
    title: str = Field(default=DEFAULT_REPORT_TITLE, description="Report title")

    @field_validator("file_name")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """Require a bare file name without directory components."""
        if not v or not v.strip():
            raise ValueError("Report file name must not be empty")
        if "/" in v or "\\" in v:
            raise ValueError(
                "Report file name must not contain path separators; "
                "use output.directory instead"
            )
        return v

    @property
    def path(self) -> Path:
        return self.directory / self.file_name


class ReportOptions(BaseConfigModel):
    """Report content options."""

    changes_only: bool = Field(
        default=False,
        description="Only show rows that differ between pilot and production",
    )
    connectors: list[str] = Field(
        default_factory=list,
        description="Connectors to document (empty means all connectors)",
    )
    exclude_connectors: list[str] = Field(
        default_factory=list, description="Connectors never documented"
    )

    @model_validator(mode="after")
    def validate_connector_filters(self) -> "ReportOptions":
        """Reject connectors that are both included and excluded."""
        overlap = sorted(set(self.connectors) & set(self.exclude_connectors))
        if overlap:
            raise ValueError(
                f"Connectors both included and excluded: {', '.join(overlap)}"
            )
        return self

    def includes(self, connector_name: str) -> bool:
        """Whether a connector passes the include and exclude filters."""
        if connector_name in self.exclude_connectors:
            return False
        return not self.connectors or connector_name in self.connectors


class Config(BaseConfigModel):
    """Root configuration."""

    system: SystemConfig = Field(
        default_factory=SystemConfig, description="Process-wide settings"
    )
    input: InputConfig = Field(
        default_factory=InputConfig, description="Input snapshot locations"
    )
    output: OutputConfig = Field(
        default_factory=OutputConfig, description="Report output settings"
    )
    report: ReportOptions = Field(
        default_factory=ReportOptions, description="Report content options"
    )
