"""Entity capabilities and the generic build, diff and render pipeline.

An entity is everything needed to document one kind of configuration item:
the schemas of its tables, one extraction function per table and the static
section metadata. Every entity goes through the same :func:`document_entity`
pipeline.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from ..core.context import OperationContext, SnapshotSide, trace_span
from ..core.diff import DiffResult, diff_table_sets
from ..core.render import Fragment, ReportRenderer, SectionSpec
from ..core.schema import TableSchema
from ..core.table import Extractor, build_table_set
from ..snapshot import Eq, Node, Snapshot

logger = logging.getLogger(__name__)

CONNECTOR_PATH = ".//ma-data"


@dataclass(frozen=True)
class Entity:
    """Capability describing how to document one configuration entity.

    Attributes:
        key: Identifier used in logs
        section: Heading and placeholder metadata
        schemas: Table schemas, parents before children
        extracts: Extraction function per table name
    """

    key: str
    section: SectionSpec
    schemas: tuple[TableSchema, ...]
    extracts: Mapping[str, Extractor]


def find_connector(snapshot: Snapshot | None, connector_name: str | None) -> Node | None:
    """Look up a connector by name; None when absent from the snapshot."""
    if snapshot is None or not connector_name:
        return None
    return snapshot.select_one(CONNECTOR_PATH, where=Eq("name", connector_name))


def connector_guid(connector: Node | None) -> str:
    """Uppercased connector GUID, or an empty string when unavailable."""
    if connector is None:
        return ""
    return (connector.text("id") or "").upper()


def diff_entity(
    entity: Entity,
    pilot: Snapshot | None,
    production: Snapshot | None,
    context: OperationContext,
) -> DiffResult:
    """Build the entity's tables from both snapshots and diff them."""
    pilot_tables = build_table_set(
        entity.schemas, pilot, entity.extracts, context.for_side(SnapshotSide.PILOT)
    )
    production_tables = build_table_set(
        entity.schemas,
        production,
        entity.extracts,
        context.for_side(SnapshotSide.PRODUCTION),
    )
    return diff_table_sets(pilot_tables, production_tables)


def document_entity(
    entity: Entity,
    pilot: Snapshot | None,
    production: Snapshot | None,
    context: OperationContext,
    renderer: ReportRenderer,
) -> Fragment:
    """Run the build, diff and render pipeline for one entity.

    Args:
        entity: Entity capability
        pilot: Pilot snapshot
        production: Production snapshot
        context: Operation context of the connector being documented
        renderer: Renderer producing the fragments

    Returns:
        The entity's complete (body, TOC) fragment
    """
    with trace_span(f"document_entity({entity.key})", context, logger):
        result = diff_entity(entity, pilot, production, context)
        return renderer.render_section(result, entity.section, context.connector_guid)
