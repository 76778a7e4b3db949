"""Row and cell level diff between pilot and production tables.

The diff of two tables is computed by indexing both sides by primary key:
keys only in pilot are ``DELETED``, keys only in production are ``ADDED``,
and keys in both are ``MODIFIED`` or ``UNCHANGED`` depending on their
non-key columns. The result order is fully determined by the inputs, so
rerunning a diff always yields the same sequence of rows.

Parent/child table sets are diffed table by table. A parent row's state
reflects only its own columns; whether it has changed descendants is a
separate query on :class:`DiffResult`.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..exceptions import SchemaError, SchemaMismatchError
from .schema import TableSchema
from .table import Row, Table, TableSet, sort_value

logger = logging.getLogger(__name__)


class DiffState(str, Enum):
    """State of a row in the production snapshot relative to pilot."""

    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class DiffRow:
    """One row of a diffgram.

    ``pilot`` and ``production`` are set only for the sides where the row
    exists; ``changed_columns`` is non-empty only for modified rows.
    """

    state: DiffState
    key: tuple[Any, ...]
    pilot: Row | None = None
    production: Row | None = None
    changed_columns: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.pilot is None and self.production is None:
            raise SchemaError(
                f"Diff row {self.key!r} has neither a pilot nor a production row"
            )

    @property
    def current(self) -> Row:
        """The row as it should be displayed: production side when present."""
        if self.production is not None:
            return self.production
        return self.pilot

    def value(self, column: str) -> Any:
        return self.current[column]

    def pilot_value(self, column: str) -> Any:
        return None if self.pilot is None else self.pilot[column]

    def production_value(self, column: str) -> Any:
        return None if self.production is None else self.production[column]

    def is_changed(self) -> bool:
        return self.state is not DiffState.UNCHANGED

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "key": list(self.key),
            "pilot": self.pilot.as_dict() if self.pilot else None,
            "production": self.production.as_dict() if self.production else None,
            "changed_columns": sorted(self.changed_columns),
        }


class TableDiff:
    """Ordered diff rows of one table with key and parent-key indexes."""

    def __init__(self, schema: TableSchema, rows: list[DiffRow]):
        self.schema = schema
        self.rows = tuple(rows)
        self._index = {row.key: i for i, row in enumerate(self.rows)}
        self._by_parent: dict[tuple[Any, ...], list[DiffRow]] | None = None

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[DiffRow]:
        return iter(self.rows)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TableDiff):
            return NotImplemented
        return self.schema == other.schema and self.rows == other.rows

    def __repr__(self) -> str:
        return f"TableDiff({self.schema.name}, rows={len(self.rows)})"

    @property
    def name(self) -> str:
        return self.schema.name

    def get(self, key: tuple[Any, ...]) -> DiffRow | None:
        position = self._index.get(key)
        return None if position is None else self.rows[position]

    def rows_for_parent(self, parent_key: tuple[Any, ...]) -> list[DiffRow]:
        """Rows whose parent-link columns equal ``parent_key``, in table order."""
        link = self.schema.parent_link
        if link is None:
            raise SchemaError(f"Table '{self.name}' has no parent link")

        if self._by_parent is None:
            by_parent: dict[tuple[Any, ...], list[DiffRow]] = {}
            for row in self.rows:
                foreign_key = tuple(row.value(column) for column in link.columns)
                by_parent.setdefault(foreign_key, []).append(row)
            self._by_parent = by_parent

        return list(self._by_parent.get(parent_key, ()))

    def summary(self) -> dict[str, int]:
        counts = {state.value: 0 for state in DiffState}
        for row in self.rows:
            counts[row.state.value] += 1
        return counts


class DiffResult:
    """Diffs of every table of a table set, keeping the parent/child linkage."""

    def __init__(self, tables: list[TableDiff]):
        self._tables = {table.name: table for table in tables}
        self._children: dict[str, list[str]] = {name: [] for name in self._tables}
        for table in tables:
            link = table.schema.parent_link
            if link is not None:
                if link.table not in self._children:
                    raise SchemaError(
                        f"Parent table '{link.table}' of '{table.name}' is missing"
                    )
                self._children[link.table].append(table.name)

    def __iter__(self) -> Iterator[TableDiff]:
        return iter(self._tables.values())

    def __len__(self) -> int:
        return len(self._tables)

    def __getitem__(self, name: str) -> TableDiff:
        try:
            return self._tables[name]
        except KeyError as e:
            raise SchemaError(f"Diff result has no table '{name}'") from e

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DiffResult):
            return NotImplemented
        return list(self._tables.items()) == list(other._tables.items())

    @property
    def roots(self) -> list[TableDiff]:
        """Tables without a parent, in set order."""
        return [table for table in self if table.schema.parent_link is None]

    def child_tables(self, table_name: str) -> list[TableDiff]:
        return [self._tables[name] for name in self._children[table_name]]

    def children(self, child_table: str, parent_row: DiffRow) -> list[DiffRow]:
        """Rows of ``child_table`` joined to ``parent_row`` by foreign key."""
        return self[child_table].rows_for_parent(parent_row.key)

    def has_changed_descendants(self, table_name: str, row: DiffRow) -> bool:
        """Whether any row below ``row``, at any depth, is not unchanged."""
        for child in self.child_tables(table_name):
            for child_row in child.rows_for_parent(row.key):
                if child_row.is_changed():
                    return True
                if self.has_changed_descendants(child.name, child_row):
                    return True
        return False

    def is_empty(self) -> bool:
        return all(len(table) == 0 for table in self)


def values_equal(pilot_value: Any, production_value: Any) -> bool:
    """Cell equality in which ``None`` and the empty string are the same."""
    if pilot_value in (None, "") and production_value in (None, ""):
        return True
    return pilot_value == production_value


def _compare_rows(schema: TableSchema, pilot: Row, production: Row) -> DiffRow:
    changed = frozenset(
        column
        for column in schema.value_columns
        if not values_equal(pilot[column], production[column])
    )
    state = DiffState.MODIFIED if changed else DiffState.UNCHANGED
    return DiffRow(
        state=state,
        key=pilot.key,
        pilot=pilot,
        production=production,
        changed_columns=changed,
    )


def diff_tables(pilot: Table, production: Table) -> TableDiff:
    """Compute the diffgram of a pilot and a production table.

    Args:
        pilot: Table built from the pilot snapshot
        production: Table built from the production snapshot

    Returns:
        Ordered diff rows. With a sort key, rows are ascending by it. Without
        one, production order is kept and each deleted row follows the
        nearest preceding pilot row that also exists in production.

    Raises:
        SchemaMismatchError: If the tables do not share a schema
    """
    if pilot.schema != production.schema:
        raise SchemaMismatchError(
            f"Cannot diff table '{pilot.name}' against '{production.name}': "
            f"schemas differ"
        )
    schema = production.schema

    # (anchor position in production, tie-break, row); pilot positions are unique
    positioned: list[tuple[int, tuple[Any, ...], DiffRow]] = []

    for position, production_row in enumerate(production):
        pilot_row = pilot.get(production_row.key)
        if pilot_row is None:
            diff_row = DiffRow(
                state=DiffState.ADDED,
                key=production_row.key,
                production=production_row,
            )
        else:
            diff_row = _compare_rows(schema, pilot_row, production_row)
        positioned.append((position, (0,), diff_row))

    anchor = -1
    for pilot_position, pilot_row in enumerate(pilot):
        production_position = production.position_of(pilot_row.key)
        if production_position is not None:
            anchor = production_position
            continue
        diff_row = DiffRow(state=DiffState.DELETED, key=pilot_row.key, pilot=pilot_row)
        positioned.append((anchor, (1, pilot_position), diff_row))

    positioned.sort(key=lambda item: (item[0], item[1]))
    rows = [diff_row for _, _, diff_row in positioned]

    if schema.sort_key is not None:
        sort_column = schema.sort_key
        rows.sort(key=lambda row: sort_value(row.value(sort_column)))

    table_diff = TableDiff(schema, rows)
    logger.debug(f"Diffed table '{schema.name}': {table_diff.summary()}")
    return table_diff


def diff_table_sets(pilot: TableSet, production: TableSet) -> DiffResult:
    """Diff every table of two table sets built from the same schemas.

    Raises:
        SchemaMismatchError: If the sets do not contain the same tables
    """
    if pilot.names != production.names:
        raise SchemaMismatchError(
            f"Table sets differ: pilot {list(pilot.names)}, "
            f"production {list(production.names)}"
        )

    return DiffResult(
        [diff_tables(pilot[name], production[name]) for name in production.names]
    )
