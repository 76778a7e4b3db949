"""Typed, keyed table schemas.

A schema is an ordered list of typed columns with a primary key, an optional
sort key and an optional link to a parent table. Schemas are validated once at
definition time; a malformed schema is a programming error and raises
:class:`~syncdiff.exceptions.SchemaError` immediately.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..exceptions import SchemaError

_TRUE_VALUES = {"true", "yes", "1", "on"}
_FALSE_VALUES = {"false", "no", "0", "off"}


class ColumnType(str, Enum):
    """Semantic value types supported by table columns."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class Column:
    """A named, typed table column.

    Hidden columns take part in keys, sorting and diffing but are not shown
    in rendered tables.
    """

    name: str
    type: ColumnType = ColumnType.STRING
    hidden: bool = False
    header: str | None = None

    @property
    def display_name(self) -> str:
        """Header text used when rendering this column."""
        return self.header or self.name

    def coerce(self, value: Any) -> Any:
        """Convert a raw extracted value to this column's type.

        ``None`` is preserved for every type. Empty strings are kept for
        string columns and mapped to ``None`` for the others.
        """
        if value is None:
            return None

        if self.type is ColumnType.STRING:
            return str(value)

        if isinstance(value, str):
            value = value.strip()
            if value == "":
                return None

        if self.type is ColumnType.INTEGER:
            try:
                return int(value)
            except (TypeError, ValueError) as e:
                raise SchemaError(
                    f"Column '{self.name}' expects an integer, got {value!r}"
                ) from e

        if isinstance(value, bool):
            return value
        lowered = str(value).lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise SchemaError(f"Column '{self.name}' expects a boolean, got {value!r}")


@dataclass(frozen=True)
class ParentLink:
    """Foreign key joining a child table to its parent table.

    ``columns`` name the child columns whose values, in order, equal the
    parent table's primary key.
    """

    table: str
    columns: tuple[str, ...]


@dataclass(frozen=True)
class TableSchema:
    """Validated table definition. Build instances with :func:`define_schema`."""

    name: str
    columns: tuple[Column, ...]
    primary_key: tuple[str, ...]
    sort_key: str | None = None
    parent_link: ParentLink | None = None

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    @property
    def value_columns(self) -> tuple[str, ...]:
        """Names of the columns that are not part of the primary key."""
        return tuple(
            column.name
            for column in self.columns
            if column.name not in self.primary_key
        )

    @property
    def visible_columns(self) -> tuple[Column, ...]:
        return tuple(column for column in self.columns if not column.hidden)

    def column(self, name: str) -> Column:
        for column in self.columns:
            if column.name == name:
                return column
        raise SchemaError(f"Table '{self.name}' has no column '{name}'")

    def index_of(self, name: str) -> int:
        try:
            return self.column_names.index(name)
        except ValueError as e:
            raise SchemaError(f"Table '{self.name}' has no column '{name}'") from e


def define_schema(
    name: str,
    columns: Sequence[Column | str],
    primary_key: Iterable[str],
    sort_key: str | None = None,
    parent_link: ParentLink | None = None,
) -> TableSchema:
    """Define and validate a table schema.

    Args:
        name: Table name, unique within a table set
        columns: Ordered columns; plain strings become string columns
        primary_key: Names of the columns forming the row identity
        sort_key: Optional column rows are ordered by
        parent_link: Optional foreign key to a parent table

    Returns:
        The validated schema

    Raises:
        SchemaError: If the primary key is empty or not a subset of the
            columns, a column name repeats, or the sort key or parent link
            refers to an unknown column
    """
    resolved = tuple(
        column if isinstance(column, Column) else Column(column) for column in columns
    )
    names = [column.name for column in resolved]

    if not names:
        raise SchemaError(f"Table '{name}' must declare at least one column")

    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise SchemaError(f"Table '{name}' declares duplicate columns: {duplicates}")

    key = tuple(primary_key)
    if not key:
        raise SchemaError(f"Table '{name}' must declare a primary key")

    unknown = [column for column in key if column not in names]
    if unknown:
        raise SchemaError(
            f"Primary key columns {unknown} are not columns of table '{name}'"
        )

    if sort_key is not None and sort_key not in names:
        raise SchemaError(f"Sort key '{sort_key}' is not a column of table '{name}'")

    if parent_link is not None:
        if not parent_link.columns:
            raise SchemaError(f"Parent link of table '{name}' names no columns")
        missing = [column for column in parent_link.columns if column not in names]
        if missing:
            raise SchemaError(
                f"Parent link columns {missing} are not columns of table '{name}'"
            )
        if parent_link.table == name:
            raise SchemaError(f"Table '{name}' cannot be its own parent")

    return TableSchema(
        name=name,
        columns=resolved,
        primary_key=key,
        sort_key=sort_key,
        parent_link=parent_link,
    )
