"""Unit tests for connector-level entities."""

import pytest

from syncdiff.core.diff import DiffState
from syncdiff.core.context import SnapshotSide
from syncdiff.entities import (
    attribute_type_label,
    connector_properties,
    diff_entity,
    document_entity,
    provisioning_hierarchy,
    selected_attributes,
    selected_object_types,
)
from syncdiff.entities.connector import (
    ATTRIBUTES_TABLE,
    OBJECT_TYPES_TABLE,
    PROPERTIES_TABLE,
)


def states(table_diff):
    return [(row.key[0], row.state) for row in table_diff]


class TestConnectorProperties:
    """Tests for the connector properties entity."""

    def test_properties_diff(self, pilot_snapshot, production_snapshot, operation_context):
        """
        Why: Changed connector settings are the first thing a reviewer checks
        What: Tests row order, omitted empty optional rows and modified values
        How: Diffs the sample connector's properties
        """
        result = diff_entity(
            connector_properties(), pilot_snapshot, production_snapshot, operation_context
        )

        assert states(result[PROPERTIES_TABLE]) == [
            ("Connector Name", DiffState.UNCHANGED),
            ("Connector Type", DiffState.UNCHANGED),
            ("Description", DiffState.MODIFIED),
            ("Creation Time", DiffState.UNCHANGED),
            ("Last Modification Time", DiffState.MODIFIED),
        ]

    def test_connector_missing_in_production(self, pilot_snapshot, operation_context):
        """
        Why: A connector removed from production is reported as deleted
        What: Tests that every property row is DELETED without a production side
        How: Diffs against a missing production snapshot
        """
        result = diff_entity(connector_properties(), pilot_snapshot, None, operation_context)

        assert {row.state for row in result[PROPERTIES_TABLE]} == {DiffState.DELETED}


class TestProvisioningHierarchy:
    """Tests for the provisioning hierarchy entity."""

    def test_placeholder_when_not_enabled(
        self, pilot_snapshot, production_snapshot, operation_context, renderer
    ):
        """
        Why: Most connectors have no provisioning hierarchy
        What: Tests the placeholder sentence for an empty hierarchy
        How: Documents the entity for the sample connector
        """
        fragment = document_entity(
            provisioning_hierarchy(),
            pilot_snapshot,
            production_snapshot,
            operation_context,
            renderer,
        )

        assert "The provisioning hierarchy is not enabled." in fragment.body
        assert "Provisioning Hierarchy" in fragment.toc


class TestSelectedObjectTypes:
    """Tests for the selected object types entity."""

    def test_object_type_changes(self, pilot_snapshot, production_snapshot, operation_context):
        """
        Why: Object type selection changes alter what the connector imports
        What: Tests deleted and added object types and their placement
        How: Diffs pilot {user, group} against production {user, contact}
        """
        result = diff_entity(
            selected_object_types(), pilot_snapshot, production_snapshot, operation_context
        )

        assert states(result[OBJECT_TYPES_TABLE]) == [
            ("user", DiffState.UNCHANGED),
            ("group", DiffState.DELETED),
            ("contact", DiffState.ADDED),
        ]


class TestSelectedAttributes:
    """Tests for the selected attributes entity."""

    def test_attribute_rows_and_flows(
        self, pilot_snapshot, production_snapshot, operation_context
    ):
        """
        Why: Reviewers need to see which selected attributes actually flow
        What: Tests type labels, flow detection and row states
        How: Diffs the sample connector's selected attributes
        """
        result = diff_entity(
            selected_attributes(), pilot_snapshot, production_snapshot, operation_context
        )
        table = result[ATTRIBUTES_TABLE]

        assert states(table) == [
            ("displayName", DiffState.UNCHANGED),
            ("mail", DiffState.MODIFIED),
            ("objectSid", DiffState.DELETED),
        ]
        display_name = table.get(("displayName",))
        assert display_name.value("Type") == "String (indexable)"
        assert display_name.value("Multi-valued") == "No"
        assert display_name.value("Flows Configured?") == "Import"

        mail = table.get(("mail",))
        assert mail.changed_columns == frozenset({"Flows Configured?"})
        assert mail.pilot_value("Flows Configured?") == "Import"
        assert mail.production_value("Flows Configured?") == "No"

        assert table.get(("objectSid",)).value("Type") == "Binary (non-indexable)"

    def test_attribute_without_schema_is_skipped_with_diagnostic(
        self, pilot_snapshot, production_snapshot, operation_context
    ):
        """
        Why: One unresolvable attribute must not abort the whole table
        What: Tests that the row is skipped and a pilot-side diagnostic recorded
        How: Diffs attributes where extensionAttribute1 has no DSML definition
        """
        result = diff_entity(
            selected_attributes(), pilot_snapshot, production_snapshot, operation_context
        )

        assert result[ATTRIBUTES_TABLE].get(("extensionAttribute1",)) is None
        assert len(operation_context.diagnostics) == 1
        diagnostic = operation_context.diagnostics[0]
        assert diagnostic.side is SnapshotSide.PILOT
        assert "extensionAttribute1" in diagnostic.message


@pytest.mark.parametrize(
    "syntax,indexable,expected",
    [
        ("1.3.6.1.4.1.1466.115.121.1.15", "true", "String (indexable)"),
        ("1.3.6.1.4.1.1466.115.121.1.15", None, "String (non-indexable)"),
        ("1.3.6.1.4.1.1466.115.121.1.5", "false", "Binary (non-indexable)"),
        ("1.3.6.1.4.1.1466.115.121.1.27", None, "Integer"),
        ("1.3.6.1.4.1.1466.115.121.1.7", None, "Boolean"),
        ("1.3.6.1.4.1.1466.115.121.1.12", None, "Reference (DN)"),
        ("1.2.3", None, "1.2.3"),
    ],
)
def test_attribute_type_label(syntax, indexable, expected):
    """
    Why: DSML syntaxes are OIDs that mean nothing to reviewers
    What: Tests the display label of each known syntax
    How: Maps each syntax and indexable flag
    """
    assert attribute_type_label(syntax, indexable) == expected
