"""Per-connector documentation.

The connector documenter renders one connector's section of the report: the
connector heading, then every entity in canonical order (properties,
provisioning hierarchy, selected object types, selected attributes, the sync
rule groups, run profiles) and finally any diagnostics recorded on the way.
"""

import logging
from collections.abc import Callable
from io import StringIO
from types import TracebackType

from markupsafe import Markup

from .core.context import OperationContext, trace_span
from .core.render import Fragment, ReportRenderer, SectionSpec
from .entities import (
    Entity,
    connector_guid,
    connector_properties,
    document_entity,
    find_connector,
    ordered_run_profile_names,
    provisioning_hierarchy,
    run_profile,
    selected_attributes,
    selected_object_types,
    sync_rule,
)
from .exceptions import ConnectorDocumentationError
from .rules import (
    RuleCategory,
    RuleDirection,
    empty_direction_message,
    section_title,
    select_sync_rules,
)
from .snapshot import Snapshot

logger = logging.getLogger(__name__)

CONNECTOR_ENTITIES: tuple[Callable[[], Entity], ...] = (
    connector_properties,
    provisioning_hierarchy,
    selected_object_types,
    selected_attributes,
)

RULE_CATEGORIES = (
    RuleCategory.PROVISIONING,
    RuleCategory.STICKY_JOIN,
    RuleCategory.CONDITIONAL_JOIN,
    RuleCategory.ALL,
)

RULE_DIRECTIONS = (RuleDirection.INBOUND, RuleDirection.OUTBOUND)

RUN_PROFILES_TITLE = "Run Profiles"
NO_RUN_PROFILES_MESSAGE = "There are no run profiles configured."


class FragmentWriter:
    """Scoped body and TOC buffers for one connector.

    The buffers are closed when the ``with`` block exits, whatever the exit
    path. The collected fragment is only available after a successful exit.

    Example:
        with FragmentWriter() as writer:
            writer.write(renderer.render_heading("Title", 2, guid))
        fragment = writer.fragment
    """

    def __init__(self) -> None:
        self._body = StringIO()
        self._toc = StringIO()
        self._fragment: Fragment | None = None

    def __enter__(self) -> "FragmentWriter":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self._fragment = Fragment(
                body=self._body.getvalue(), toc=self._toc.getvalue()
            )
        self._body.close()
        self._toc.close()

    def write(self, fragment: Fragment) -> None:
        self._body.write(fragment.body)
        self._toc.write(fragment.toc)

    def write_body(self, html: str) -> None:
        self._body.write(html)

    @property
    def fragment(self) -> Fragment:
        if self._fragment is None:
            raise RuntimeError("Fragment is only available after a successful close")
        return self._fragment


class ConnectorDocumenter:
    """Render the report section of one connector."""

    def __init__(
        self,
        pilot: Snapshot | None,
        production: Snapshot | None,
        renderer: ReportRenderer,
    ):
        """Initialize the documenter.

        Args:
            pilot: Pilot snapshot
            production: Production snapshot
            renderer: Renderer shared by every connector of the report
        """
        self.pilot = pilot
        self.production = production
        self.renderer = renderer

    def create_context(self, connector_name: str) -> OperationContext:
        """Build the operation context of a connector.

        Identity comes from the pilot connector, or from production when the
        connector only exists there.
        """
        connector = find_connector(self.pilot, connector_name)
        if connector is None:
            connector = find_connector(self.production, connector_name)
        if connector is None:
            raise ConnectorDocumentationError(
                connector_name, "Connector not found in either snapshot"
            )

        return OperationContext(
            connector_name=connector_name,
            connector_guid=connector_guid(connector),
            category=connector.text("category"),
        )

    def document(self, connector_name: str) -> tuple[Fragment, OperationContext]:
        """Document one connector.

        Args:
            connector_name: Name of the connector

        Returns:
            The connector's fragment and the context holding its diagnostics

        Raises:
            ConnectorDocumentationError: If any part of the connector fails
        """
        logger.info(f"Documenting connector '{connector_name}'")
        context = self.create_context(connector_name)

        try:
            with trace_span(
                f"document_connector({connector_name})", context, logger
            ), FragmentWriter() as writer:
                writer.write(
                    self.renderer.render_heading(
                        f"{connector_name} Connector Configuration",
                        2,
                        context.connector_guid,
                    )
                )

                for create_entity in CONNECTOR_ENTITIES:
                    writer.write(self._document(create_entity(), context))

                for category in RULE_CATEGORIES:
                    self._document_rules(
                        writer, context.with_category(category.value), category
                    )

                self._document_run_profiles(writer, context)

                writer.write_body(
                    self.renderer.render_template(
                        "diagnostics.html.j2", diagnostics=context.diagnostics
                    )
                )
        except ConnectorDocumentationError:
            raise
        except Exception as e:
            raise ConnectorDocumentationError(connector_name, str(e)) from e

        if context.diagnostics:
            logger.warning(
                f"Connector '{connector_name}' documented with "
                f"{len(context.diagnostics)} skipped rows",
                extra=context.log_extra(),
            )
        return writer.fragment, context

    def _document(self, entity: Entity, context: OperationContext) -> Fragment:
        return document_entity(
            entity, self.pilot, self.production, context, self.renderer
        )

    def _document_rules(
        self,
        writer: FragmentWriter,
        context: OperationContext,
        category: RuleCategory,
    ) -> None:
        title = section_title(category)
        writer.write(self.renderer.render_heading(title, 3, context.connector_guid))

        pilot_id = connector_guid(find_connector(self.pilot, context.connector_name))
        production_id = connector_guid(
            find_connector(self.production, context.connector_name)
        )

        for direction in RULE_DIRECTIONS:
            rules = select_sync_rules(
                self.pilot,
                self.production,
                pilot_id,
                production_id,
                direction,
                category,
            )
            direction_section = SectionSpec(
                title=direction.value,
                heading_level=4,
                bookmark_title=f"{direction.value} {title}",
            )

            if not rules:
                writer.write(
                    self.renderer.render_message(
                        direction_section,
                        context.connector_guid,
                        empty_direction_message(direction, category),
                    )
                )
                continue

            writer.write(
                self.renderer.render_heading(
                    direction_section.title,
                    direction_section.heading_level,
                    context.connector_guid,
                    direction_section.bookmark_title,
                )
            )
            for rule in rules:
                writer.write(self._document(sync_rule(rule, direction, category), context))

    def _document_run_profiles(
        self, writer: FragmentWriter, context: OperationContext
    ) -> None:
        names = ordered_run_profile_names(
            self.pilot, self.production, context.connector_name
        )
        section = SectionSpec(title=RUN_PROFILES_TITLE, heading_level=3)

        if not names:
            writer.write(
                self.renderer.render_message(
                    section, context.connector_guid, NO_RUN_PROFILES_MESSAGE
                )
            )
            return

        writer.write(
            self.renderer.render_heading(
                section.title, section.heading_level, context.connector_guid
            )
        )
        for name in names:
            writer.write(self._document(run_profile(name), context))


def error_note(renderer: ReportRenderer, connector_name: str, error: Exception) -> str:
    """Body HTML standing in for a connector that failed to document."""
    return Markup(
        renderer.render_template(
            "error_note.html.j2", connector_name=connector_name, error=str(error)
        )
    )
