"""HTML rendering of diff results.

The renderer turns a :class:`~syncdiff.core.diff.DiffResult` into a pair of
HTML fragments: the report body and the matching table of contents entries.
Markup lives in Jinja2 templates under ``syncdiff/templates``; this module
builds the view model the templates iterate over.

Visual treatment of rows and cells (styled by ``document.html.j2``):

- ``added``: row exists only in production (green)
- ``deleted``: row exists only in pilot (red, struck through)
- ``modified``: cell differs between pilot and production (amber); the pilot
  value is shown struck through before the production value
- no class: unchanged
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateError
from markupsafe import Markup

from ..exceptions import RenderError
from .bookmarks import BookmarkLocation, BookmarkManager
from .diff import DiffResult, DiffRow, DiffState, TableDiff

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

NO_CHANGES_MESSAGE = "There are no differences between pilot and production."


@dataclass(frozen=True)
class SectionSpec:
    """Static metadata of one report section.

    Attributes:
        title: Heading text
        heading_level: HTML heading level; TOC entries indent accordingly
        empty_message: Sentence rendered instead of an empty table. May
            contain inline HTML.
        tables: Root tables to render, in order (default: every root table)
        bookmark_title: Text the bookmark code is derived from, when it must
            differ from the heading (e.g. the same heading under two groups)
        table_class: CSS class of the outer table
        show_captions: Caption each root table with its table name
    """

    title: str
    heading_level: int = 3
    empty_message: str = "There are no settings configured."
    tables: tuple[str, ...] | None = None
    bookmark_title: str | None = None
    table_class: str = "outer-table"
    show_captions: bool = False


@dataclass(frozen=True)
class Fragment:
    """Rendered body and table of contents for one section or entity."""

    body: str
    toc: str


@dataclass
class CellView:
    text: str
    css_class: str = ""
    previous: str | None = None


@dataclass
class RowView:
    state: str
    cells: list[CellView]
    nested: list["TableView"] = field(default_factory=list)


@dataclass
class TableView:
    name: str
    headers: list[str]
    rows: list[RowView]
    css_class: str
    has_children: bool = False
    caption: str | None = None


def format_value(value: Any) -> str:
    """Display text of a cell value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def create_environment(template_dir: Path | None = None) -> Environment:
    """Create the Jinja2 environment used for every rendered fragment."""
    return Environment(
        loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class ReportRenderer:
    """Render diff results as (body, TOC) HTML fragment pairs."""

    def __init__(
        self,
        bookmarks: BookmarkManager,
        changes_only: bool = False,
        environment: Environment | None = None,
    ):
        """Initialize the renderer.

        Args:
            bookmarks: Run-scoped bookmark manager
            changes_only: Omit unchanged rows that have no changed descendants
            environment: Jinja2 environment (defaults to the packaged templates)
        """
        self.bookmarks = bookmarks
        self.changes_only = changes_only
        self.env = environment or create_environment()

    def render_heading(
        self,
        title: str,
        heading_level: int,
        context_id: str | None,
        bookmark_title: str | None = None,
    ) -> Fragment:
        """Render a heading and its TOC entry with no content below it."""
        return self._render(
            self._heading(title, heading_level, context_id, bookmark_title)
        )

    def render_message(
        self,
        section: SectionSpec,
        context_id: str | None,
        message: str,
    ) -> Fragment:
        """Render a section heading followed by a sentence instead of a table."""
        return self._render(
            self._section_heading(section, context_id), message=Markup(message)
        )

    def render_section(
        self,
        result: DiffResult,
        section: SectionSpec,
        context_id: str | None,
    ) -> Fragment:
        """Render one section: heading, then the diff tables or a placeholder.

        Args:
            result: Diff of the section's table set
            section: Section metadata
            context_id: Bookmark context, usually the connector GUID

        Returns:
            The complete body and TOC fragments

        Raises:
            RenderError: If a template fails to render
        """
        root_names = section.tables or tuple(table.name for table in result.roots)
        roots = [result[name] for name in root_names]
        heading = self._section_heading(section, context_id)

        if all(len(table) == 0 for table in roots):
            return self._render(heading, message=Markup(section.empty_message))

        views = [
            self._table_view(result, table, section.table_class) for table in roots
        ]
        views = [view for view in views if view.rows]
        if section.show_captions:
            for view in views:
                view.caption = view.name
        if not views:
            return self._render(heading, message=Markup(NO_CHANGES_MESSAGE))

        return self._render(heading, tables=views)

    def _section_heading(
        self, section: SectionSpec, context_id: str | None
    ) -> dict[str, Any]:
        return self._heading(
            section.title, section.heading_level, context_id, section.bookmark_title
        )

    def _heading(
        self,
        title: str,
        heading_level: int,
        context_id: str | None,
        bookmark_title: str | None,
    ) -> dict[str, Any]:
        code = self.bookmarks.allocate(context_id, bookmark_title or title)
        return {
            "title": title,
            "level": heading_level,
            "body_id": self.bookmarks.resolve(code, BookmarkLocation.BODY),
            "toc_id": self.bookmarks.resolve(code, BookmarkLocation.TOC),
        }

    def _table_view(
        self,
        result: DiffResult,
        table: TableDiff,
        css_class: str,
        rows: list[DiffRow] | None = None,
    ) -> TableView:
        schema = table.schema
        visible = schema.visible_columns
        child_tables = result.child_tables(table.name)

        row_views = []
        for diff_row in table.rows if rows is None else rows:
            if self.changes_only and not (
                diff_row.is_changed()
                or result.has_changed_descendants(table.name, diff_row)
            ):
                continue

            nested = []
            for child in child_tables:
                child_rows = child.rows_for_parent(diff_row.key)
                if not child_rows:
                    continue
                child_view = self._table_view(
                    result, child, "inner-table", rows=child_rows
                )
                if child_view.rows:
                    nested.append(child_view)

            row_views.append(
                RowView(
                    state=diff_row.state.value,
                    cells=[self._cell_view(diff_row, column.name) for column in visible],
                    nested=nested,
                )
            )

        return TableView(
            name=table.name,
            headers=[column.display_name for column in visible],
            rows=row_views,
            css_class=css_class,
            has_children=bool(child_tables),
        )

    @staticmethod
    def _cell_view(diff_row: DiffRow, column: str) -> CellView:
        if diff_row.state is DiffState.ADDED:
            return CellView(format_value(diff_row.production_value(column)), "added")

        if diff_row.state is DiffState.DELETED:
            return CellView(format_value(diff_row.pilot_value(column)), "deleted")

        if column in diff_row.changed_columns:
            return CellView(
                format_value(diff_row.production_value(column)),
                "modified",
                previous=format_value(diff_row.pilot_value(column)),
            )

        return CellView(format_value(diff_row.value(column)))

    def render_template(self, template_name: str, **context: Any) -> str:
        """Render a named template with the given variables.

        Raises:
            RenderError: If the template is missing or fails to render
        """
        try:
            return self.env.get_template(template_name).render(**context)
        except TemplateError as e:
            raise RenderError(f"Failed to render '{template_name}': {e}") from e

    def _render(
        self,
        heading: dict[str, Any],
        tables: list[TableView] | None = None,
        message: Markup | None = None,
    ) -> Fragment:
        body = self.render_template(
            "section.html.j2", heading=heading, tables=tables or [], message=message
        )
        toc = self.render_template("toc_entry.html.j2", heading=heading)
        return Fragment(body=body, toc=toc)
