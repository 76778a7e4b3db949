"""Structured configuration diff engine and report renderer.

Pipeline: build typed tables from each snapshot, diff pilot against
production table by table, and render the diff as (body, TOC) fragments.

Example usage:
    from syncdiff.core import build_table, diff_tables, define_schema

    schema = define_schema("Settings", ["Setting", "Value"], ["Setting"])
    pilot = build_table(schema, pilot_snapshot, extract, context)
    production = build_table(schema, production_snapshot, extract, context)
    diff = diff_tables(pilot, production)
"""

from .bookmarks import Bookmark, BookmarkLocation, BookmarkManager
from .context import Diagnostic, OperationContext, SnapshotSide, trace_span
from .diff import (
    DiffResult,
    DiffRow,
    DiffState,
    TableDiff,
    diff_table_sets,
    diff_tables,
    values_equal,
)
from .render import Fragment, ReportRenderer, SectionSpec, format_value
from .schema import Column, ColumnType, ParentLink, TableSchema, define_schema
from .table import Row, Table, TableSet, build_table, build_table_set

__all__ = [
    "Bookmark",
    "BookmarkLocation",
    "BookmarkManager",
    "Column",
    "ColumnType",
    "Diagnostic",
    "DiffResult",
    "DiffRow",
    "DiffState",
    "Fragment",
    "OperationContext",
    "ParentLink",
    "ReportRenderer",
    "Row",
    "SectionSpec",
    "SnapshotSide",
    "Table",
    "TableDiff",
    "TableSchema",
    "TableSet",
    "build_table",
    "build_table_set",
    "define_schema",
    "diff_table_sets",
    "diff_tables",
    "format_value",
    "trace_span",
    "values_equal",
]
