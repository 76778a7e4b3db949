"""In-memory tables and the table builder.

Tables are append-only row arrays with a primary-key to row-index map. They
are populated once from a snapshot through an externally supplied extraction
function and never mutated afterwards.
"""

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from typing import Any

from ..exceptions import DuplicateKeyError, SchemaError
from .context import OperationContext, trace_span
from .schema import TableSchema

logger = logging.getLogger(__name__)

RawRow = Sequence[Any] | Mapping[str, Any]
Extractor = Callable[[Any, OperationContext], Iterable[RawRow]]


class Row:
    """One table row: typed values in schema column order."""

    __slots__ = ("schema", "values")

    def __init__(self, schema: TableSchema, values: tuple[Any, ...]):
        self.schema = schema
        self.values = values

    def __getitem__(self, column: str) -> Any:
        return self.values[self.schema.index_of(column)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self.schema == other.schema and self.values == other.values

    def __hash__(self) -> int:
        return hash((self.schema.name, self.values))

    def __repr__(self) -> str:
        return f"Row({self.schema.name}, {self.as_dict()!r})"

    @property
    def key(self) -> tuple[Any, ...]:
        return tuple(self[column] for column in self.schema.primary_key)

    def get(self, column: str, default: Any = None) -> Any:
        value = self[column]
        return default if value is None else value

    def as_dict(self) -> dict[str, Any]:
        return dict(zip(self.schema.column_names, self.values, strict=True))


class Table:
    """Ordered rows conforming to one schema, indexed by primary key."""

    def __init__(self, schema: TableSchema):
        self.schema = schema
        self._rows: list[Row] = []
        self._index: dict[tuple[Any, ...], int] = {}

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def __repr__(self) -> str:
        return f"Table({self.schema.name}, rows={len(self._rows)})"

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def rows(self) -> tuple[Row, ...]:
        return tuple(self._rows)

    def add_row(self, raw: RawRow) -> Row:
        """Append a row, coercing values to the column types.

        Args:
            raw: Values in column order, or a mapping of column name to value
                (missing columns become ``None``)

        Returns:
            The appended row

        Raises:
            SchemaError: If the value count does not match the schema or a
                mapping names an unknown column
            DuplicateKeyError: If the primary key is already present
        """
        columns = self.schema.columns

        if isinstance(raw, Mapping):
            unknown = set(raw) - set(self.schema.column_names)
            if unknown:
                raise SchemaError(
                    f"Unknown columns {sorted(unknown)} for table '{self.name}'"
                )
            raw_values = [raw.get(column.name) for column in columns]
        else:
            raw_values = list(raw)
            if len(raw_values) != len(columns):
                raise SchemaError(
                    f"Table '{self.name}' expects {len(columns)} values, "
                    f"got {len(raw_values)}"
                )

        values = tuple(
            column.coerce(value)
            for column, value in zip(columns, raw_values, strict=True)
        )
        row = Row(self.schema, values)

        key = row.key
        if key in self._index:
            raise DuplicateKeyError(self.name, key)

        self._index[key] = len(self._rows)
        self._rows.append(row)
        return row

    def get(self, key: tuple[Any, ...]) -> Row | None:
        position = self._index.get(key)
        return None if position is None else self._rows[position]

    def position_of(self, key: tuple[Any, ...]) -> int | None:
        return self._index.get(key)

    def keys(self) -> list[tuple[Any, ...]]:
        return [row.key for row in self._rows]

    def sort_in_place(self) -> None:
        """Stable-sort rows by the schema's sort key, if one is declared.

        Only used by :func:`build_table` while the table is being populated.
        """
        sort_key = self.schema.sort_key
        if sort_key is None:
            return

        position = self.schema.index_of(sort_key)
        self._rows.sort(key=lambda row: sort_value(row.values[position]))
        self._index = {row.key: i for i, row in enumerate(self._rows)}


class TableSet:
    """Ordered, name-addressable tables in which parents precede children."""

    def __init__(self, tables: Iterable[Table] = ()):
        self._tables: dict[str, Table] = {}
        for table in tables:
            self.add(table)

    def __iter__(self) -> Iterator[Table]:
        return iter(self._tables.values())

    def __len__(self) -> int:
        return len(self._tables)

    def __getitem__(self, name: str) -> Table:
        try:
            return self._tables[name]
        except KeyError as e:
            raise SchemaError(f"Table set has no table '{name}'") from e

    def __contains__(self, name: object) -> bool:
        return name in self._tables

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._tables)

    def add(self, table: Table) -> None:
        """Add a table; its parent, if any, must already be present.

        Raises:
            SchemaError: If the name repeats or the parent table is missing
                or has a primary key the link cannot join
        """
        schema = table.schema
        if schema.name in self._tables:
            raise SchemaError(f"Table set already contains '{schema.name}'")

        link = schema.parent_link
        if link is not None:
            if link.table not in self._tables:
                raise SchemaError(
                    f"Parent table '{link.table}' of '{schema.name}' must be "
                    f"added before its children"
                )
            parent_key = self._tables[link.table].schema.primary_key
            if len(parent_key) != len(link.columns):
                raise SchemaError(
                    f"Parent link of '{schema.name}' has {len(link.columns)} "
                    f"columns but '{link.table}' has a {len(parent_key)}-column key"
                )

        self._tables[schema.name] = table


def sort_value(value: Any) -> tuple[bool, Any]:
    """Sort key placing ``None`` after every real value."""
    return (value is None, value if value is not None else 0)


def build_table(
    schema: TableSchema,
    snapshot: Any,
    extract: Extractor,
    context: OperationContext,
) -> Table:
    """Populate a table from a snapshot.

    Args:
        schema: Schema of the table to build
        snapshot: Snapshot to extract from; ``None`` yields an empty table
        extract: Function yielding raw rows for the schema
        context: Operation context; extraction records diagnostics on it

    Returns:
        The populated table, sorted by the schema's sort key if declared
    """
    table = Table(schema)

    if snapshot is None:
        logger.debug(
            f"No snapshot for table '{schema.name}', building empty table",
            extra=context.log_extra(),
        )
        return table

    with trace_span(f"build_table({schema.name})", context, logger):
        for raw in extract(snapshot, context):
            table.add_row(raw)
        table.sort_in_place()

    return table


def build_table_set(
    schemas: Sequence[TableSchema],
    snapshot: Any,
    extracts: Mapping[str, Extractor],
    context: OperationContext,
) -> TableSet:
    """Build every table of a parent/child table set from one snapshot.

    Args:
        schemas: Schemas in parent-before-child order
        snapshot: Snapshot to extract from
        extracts: Extraction function per table name
        context: Operation context

    Returns:
        The populated table set

    Raises:
        SchemaError: If a schema has no extraction function
    """
    table_set = TableSet()
    for schema in schemas:
        if schema.name not in extracts:
            raise SchemaError(f"No extraction function for table '{schema.name}'")
        table_set.add(build_table(schema, snapshot, extracts[schema.name], context))
    return table_set
