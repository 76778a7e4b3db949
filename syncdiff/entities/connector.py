"""Connector-level entities: properties, provisioning hierarchy and selections."""

from collections.abc import Iterator

from ..core.context import OperationContext
from ..core.render import SectionSpec
from ..core.schema import Column, ColumnType, define_schema
from ..core.table import RawRow
from ..rules.selector import SYNC_RULE_PATH, RuleDirection
from ..snapshot import Eq, Snapshot
from .base import Entity, connector_guid, find_connector

# DSML attribute syntax OIDs
_SYNTAX_NAMES = {
    "1.3.6.1.4.1.1466.115.121.1.5": "Binary",
    "1.3.6.1.4.1.1466.115.121.1.7": "Boolean",
    "1.3.6.1.4.1.1466.115.121.1.12": "Reference (DN)",
    "1.3.6.1.4.1.1466.115.121.1.15": "String",
    "1.3.6.1.4.1.1466.115.121.1.27": "Integer",
}
_INDEXABLE_SYNTAXES = {"Binary", "String"}


def attribute_type_label(syntax: str | None, indexable: str | None) -> str:
    """Display type of a connector space attribute from its DSML syntax."""
    name = _SYNTAX_NAMES.get(syntax or "", syntax or "")
    if name in _INDEXABLE_SYNTAXES:
        suffix = "indexable" if (indexable or "").lower() == "true" else "non-indexable"
        return f"{name} ({suffix})"
    return name


# Connector properties

PROPERTIES_TABLE = "Connector Properties"

properties_schema = define_schema(
    PROPERTIES_TABLE,
    [
        Column("Display Order", ColumnType.INTEGER, hidden=True),
        Column("Setting"),
        Column("Configuration"),
    ],
    primary_key=["Setting"],
    sort_key="Display Order",
)

# (display order, setting, element, include when empty)
_PROPERTY_ELEMENTS = (
    (0, "Connector Name", "name", True),
    (1, "Connector Type", "category", True),
    (2, "Description", "description", True),
    (3, "Sub Type", "subtype", False),
    (4, "List Name", "ma-listname", False),
    (5, "Company", "ma-companyname", False),
    (6, "Creation Time", "creation-time", True),
    (7, "Last Modification Time", "last-modification-time", True),
)


def extract_connector_properties(
    snapshot: Snapshot, context: OperationContext
) -> Iterator[RawRow]:
    connector = find_connector(snapshot, context.connector_name)
    if connector is None:
        return

    for order, setting, element, include_empty in _PROPERTY_ELEMENTS:
        value = connector.text(element)
        if value or include_empty:
            yield (order, setting, value)


def connector_properties() -> Entity:
    return Entity(
        key="connector-properties",
        section=SectionSpec(
            title="Connector Properties",
            heading_level=3,
            empty_message="The connector properties are not available.",
        ),
        schemas=(properties_schema,),
        extracts={PROPERTIES_TABLE: extract_connector_properties},
    )


# Provisioning hierarchy

HIERARCHY_TABLE = "Provisioning Hierarchy"

hierarchy_schema = define_schema(
    HIERARCHY_TABLE,
    ["DN Component", "Object Class Mapping"],
    primary_key=["DN Component"],
)


def extract_provisioning_hierarchy(
    snapshot: Snapshot, context: OperationContext
) -> Iterator[RawRow]:
    connector = find_connector(snapshot, context.connector_name)
    if connector is None:
        return

    for mapping in connector.select_all("component_mappings/mapping"):
        yield (mapping.text("dn_component"), mapping.text("object_class"))


def provisioning_hierarchy() -> Entity:
    return Entity(
        key="provisioning-hierarchy",
        section=SectionSpec(
            title="Provisioning Hierarchy",
            heading_level=3,
            empty_message="The provisioning hierarchy is not enabled.",
        ),
        schemas=(hierarchy_schema,),
        extracts={HIERARCHY_TABLE: extract_provisioning_hierarchy},
    )


# Selected object types

OBJECT_TYPES_TABLE = "Selected Object Types"

object_types_schema = define_schema(
    OBJECT_TYPES_TABLE,
    [Column("Object Type", header="Object Types")],
    primary_key=["Object Type"],
)


def extract_selected_object_types(
    snapshot: Snapshot, context: OperationContext
) -> Iterator[RawRow]:
    connector = find_connector(snapshot, context.connector_name)
    if connector is None:
        return

    partition = connector.select_one("ma-partition-data/partition")
    if partition is None:
        return

    for object_class in partition.select_all("filter/object-classes/object-class"):
        yield (object_class.text(),)


def selected_object_types() -> Entity:
    return Entity(
        key="selected-object-types",
        section=SectionSpec(
            title="Selected Object Types",
            heading_level=3,
            empty_message="There are no object types selected.",
        ),
        schemas=(object_types_schema,),
        extracts={OBJECT_TYPES_TABLE: extract_selected_object_types},
    )


# Selected attributes

ATTRIBUTES_TABLE = "Selected Attributes"

attributes_schema = define_schema(
    ATTRIBUTES_TABLE,
    ["Attribute Name", "Type", "Multi-valued", "Flows Configured?"],
    primary_key=["Attribute Name"],
)


def _flow_label(has_inbound: bool, has_outbound: bool) -> str:
    if has_inbound and has_outbound:
        return "Import / Export"
    if has_inbound:
        return "Import"
    if has_outbound:
        return "Export"
    return "No"


def extract_selected_attributes(
    snapshot: Snapshot, context: OperationContext
) -> Iterator[RawRow]:
    connector = find_connector(snapshot, context.connector_name)
    if connector is None:
        return

    guid = connector_guid(connector)

    def has_flows(direction: RuleDirection, attribute_name: str) -> bool:
        if not guid:
            return False
        rule = snapshot.select_one(
            SYNC_RULE_PATH,
            where=Eq("connector", guid, case_insensitive=True)
            & Eq("direction", direction.value)
            & Eq("attribute-mappings/mapping/src/attr", attribute_name),
        )
        return rule is not None

    for attribute in connector.select_all("attribute-inclusion/attribute"):
        attribute_name = attribute.text() or ""
        attribute_info = connector.select_one(
            ".//dsml:attribute-type", where=Eq("dsml:name", attribute_name)
        )
        if attribute_info is None:
            context.report_diagnostic(
                ATTRIBUTES_TABLE,
                f"Selected attribute '{attribute_name}' has no schema definition",
            )
            continue

        single_value = (attribute_info.attr("single-value") or "").lower() == "true"
        yield (
            attribute_name,
            attribute_type_label(
                attribute_info.text("dsml:syntax"),
                attribute_info.attr("ms-dsml:indexable"),
            ),
            "No" if single_value else "Yes",
            _flow_label(
                has_flows(RuleDirection.INBOUND, attribute_name),
                has_flows(RuleDirection.OUTBOUND, attribute_name),
            ),
        )


def selected_attributes() -> Entity:
    return Entity(
        key="selected-attributes",
        section=SectionSpec(
            title="Selected Attributes",
            heading_level=3,
            empty_message="There are no attributes selected.",
        ),
        schemas=(attributes_schema,),
        extracts={ATTRIBUTES_TABLE: extract_selected_attributes},
    )
