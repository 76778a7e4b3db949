"""Assembly of the full report document.

The assembler documents every selected connector, isolates per-connector
failures behind an error note, and embeds the collected TOC and body in the
document template.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from markupsafe import Markup

from .config.models import DEFAULT_REPORT_TITLE, ReportOptions
from .core.bookmarks import BookmarkManager
from .core.context import Diagnostic
from .core.render import ReportRenderer
from .documenter import ConnectorDocumenter, error_note
from .entities import CONNECTOR_PATH
from .exceptions import ConnectorDocumentationError, SyncDiffError
from .rules import merge_by_name
from .snapshot import Snapshot

logger = logging.getLogger(__name__)


@dataclass
class ConnectorFailure:
    """A connector that could not be documented."""

    connector_name: str
    error: str


@dataclass
class ReportResult:
    """Outcome of one report run.

    Attributes:
        html: The complete report document
        connectors: Connectors documented, in report order
        failures: Connectors replaced by an error note
        diagnostics: Rows skipped while extracting, over all connectors
        output_path: Where the report was written, once written
    """

    html: str
    connectors: list[str] = field(default_factory=list)
    failures: list[ConnectorFailure] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    output_path: Path | None = None

    @property
    def succeeded(self) -> bool:
        return not self.failures


def connector_names(snapshot: Snapshot | None) -> list[str]:
    """Names of the connectors in a snapshot, in document order."""
    if snapshot is None:
        return []
    return [
        connector.text("name") or ""
        for connector in snapshot.select_all(CONNECTOR_PATH)
    ]


class DocumentAssembler:
    """Build the report document from the pilot and production snapshots."""

    def __init__(
        self,
        pilot: Snapshot | None,
        production: Snapshot | None,
        options: ReportOptions | None = None,
        title: str = DEFAULT_REPORT_TITLE,
        renderer: ReportRenderer | None = None,
    ):
        """Initialize the assembler.

        Args:
            pilot: Pilot snapshot
            production: Production snapshot
            options: Connector filters and rendering options
            title: Report title
            renderer: Renderer to use; a new one with a fresh bookmark
                manager is created by default
        """
        self.pilot = pilot
        self.production = production
        self.options = options or ReportOptions()
        self.title = title
        self.renderer = renderer or ReportRenderer(
            BookmarkManager(), changes_only=self.options.changes_only
        )

    def connector_names(self) -> list[str]:
        """Connectors to document: pilot names sorted, then production-only.

        Names are filtered by the include and exclude lists of the options.
        """
        names = [
            name
            for name, _ in merge_by_name(
                connector_names(self.pilot), connector_names(self.production)
            )
            if name
        ]

        missing = sorted(set(self.options.connectors) - set(names))
        for name in missing:
            logger.warning(f"Requested connector '{name}' not found in either snapshot")

        return [name for name in names if self.options.includes(name)]

    def assemble(self) -> ReportResult:
        """Document every selected connector and render the document.

        Returns:
            Report result holding the document and any failures

        Raises:
            RenderError: If the document template fails to render
        """
        documenter = ConnectorDocumenter(self.pilot, self.production, self.renderer)
        names = self.connector_names()
        logger.info(f"Documenting {len(names)} connectors")

        toc_parts = []
        body_parts = []
        failures = []
        diagnostics = []

        for name in names:
            try:
                fragment, context = documenter.document(name)
            except ConnectorDocumentationError as e:
                logger.error(f"Failed to document connector '{name}': {e}", exc_info=True)
                failures.append(ConnectorFailure(connector_name=name, error=str(e)))
                body_parts.append(error_note(self.renderer, name, e))
                continue

            toc_parts.append(fragment.toc)
            body_parts.append(fragment.body)
            diagnostics.extend(context.diagnostics)

        html = self.renderer.render_template(
            "document.html.j2",
            title=self.title,
            generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
            pilot_source=self.pilot.source if self.pilot is not None else "",
            production_source=(
                self.production.source if self.production is not None else ""
            ),
            toc=Markup("".join(toc_parts)),
            body=Markup("".join(body_parts)),
        )

        if failures:
            logger.warning(f"{len(failures)} of {len(names)} connectors failed")

        return ReportResult(
            html=html,
            connectors=names,
            failures=failures,
            diagnostics=diagnostics,
        )

    def write(self, output_path: str | Path) -> ReportResult:
        """Assemble the document and write it to ``output_path``.

        Raises:
            SyncDiffError: If the report file cannot be written
        """
        result = self.assemble()
        output_path = Path(output_path)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(result.html, encoding="utf-8")
        except OSError as e:
            raise SyncDiffError(
                f"Failed to write report: {e}", {"output_path": str(output_path)}
            ) from e

        result.output_path = output_path
        logger.info(f"Report written to {output_path}")
        return result
