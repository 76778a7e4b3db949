"""Exceptions raised while configuring, diffing and rendering a report.

Every error derives from :class:`SyncDiffError`, so callers can handle a
whole report run with a single ``except`` clause.
"""

from typing import Any


class SyncDiffError(Exception):
    """Base exception for all report generation errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize report generation error.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.details = details or {}


class SchemaError(SyncDiffError):
    """Raised when a table schema definition is malformed."""


class DuplicateKeyError(SchemaError):
    """Raised when two rows of one table share a primary key value."""

    def __init__(
        self,
        table_name: str,
        key: tuple[Any, ...],
        details: dict[str, Any] | None = None,
    ):
        """Initialize duplicate key error.

        Args:
            table_name: Name of the table being populated
            key: The primary key value that appeared twice
            details: Optional dictionary with additional error details
        """
        super().__init__(
            f"Duplicate primary key {key!r} in table '{table_name}'", details
        )
        self.table_name = table_name
        self.key = key


class SchemaMismatchError(SchemaError):
    """Raised when diffing two tables that do not share a schema."""


class BookmarkError(SyncDiffError):
    """Raised when a bookmark code cannot be resolved."""


class SnapshotError(SyncDiffError):
    """Raised when a configuration snapshot cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize snapshot error.

        Args:
            message: Human-readable error message
            source: Path or label of the problematic snapshot
            details: Optional dictionary with additional error details
        """
        super().__init__(message, details)
        self.source = source


class RenderError(SyncDiffError):
    """Raised when a diff result cannot be rendered."""


class ConnectorDocumentationError(SyncDiffError):
    """Raised when documenting a single connector fails."""

    def __init__(
        self,
        connector_name: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        """Initialize connector documentation error.

        Args:
            connector_name: Name of the connector that failed
            message: Human-readable error message
            details: Optional dictionary with additional error details
        """
        super().__init__(f"Connector '{connector_name}': {message}", details)
        self.connector_name = connector_name


class ConfigurationError(SyncDiffError):
    """Base exception for report configuration errors."""


class ConfigurationFileError(ConfigurationError):
    """The configuration file is missing, unreadable or not valid YAML."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.file_path = file_path


class ConfigurationValidationError(ConfigurationError):
    """Configuration values that the models or runtime checks reject."""

    def __init__(
        self,
        message: str,
        validation_errors: list[Any] | None = None,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize configuration validation error.

        Args:
            message: Human-readable error message
            validation_errors: Individual errors as reported by pydantic
            setting: Dotted path of the offending setting for runtime checks,
                e.g. ``output.directory``
            details: Optional dictionary with additional error details
        """
        super().__init__(message, details)
        self.validation_errors = validation_errors or []
        self.setting = setting

    @property
    def settings(self) -> list[str]:
        """Dotted paths of every rejected setting, e.g. ``report.connectors``."""
        paths = [
            ".".join(str(part) for part in error["loc"])
            for error in self.validation_errors
            if isinstance(error, dict) and error.get("loc")
        ]
        if self.setting is not None:
            paths.insert(0, self.setting)
        return list(dict.fromkeys(paths))


class EnvironmentVariableError(ConfigurationError):
    """A ``${VAR}`` reference names an unset variable and has no default."""

    def __init__(
        self,
        message: str,
        variable_name: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.variable_name = variable_name
