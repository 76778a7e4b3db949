"""Synchronization rule entity: settings, scoping, join rules and attribute flows.

Each selected rule becomes its own section. The rule is located in each
snapshot through the node the selector matched, so a rule present on one
side only builds empty tables on the other side.
"""

from collections.abc import Callable, Iterator

from ..core.context import OperationContext, SnapshotSide
from ..core.render import SectionSpec
from ..core.schema import Column, ColumnType, define_schema
from ..core.table import RawRow
from ..rules.selector import RuleCategory, RuleDirection, SelectedRule
from ..snapshot import Node, Snapshot
from .base import Entity

SETTINGS_TABLE = "Rule Settings"
SCOPING_TABLE = "Scoping Filter"
JOIN_TABLE = "Join Rules"
FLOWS_TABLE = "Attribute Flows"

settings_schema = define_schema(
    SETTINGS_TABLE,
    [
        Column("Setting Number", ColumnType.INTEGER, hidden=True),
        Column("Setting"),
        Column("Configuration"),
    ],
    primary_key=["Setting"],
    sort_key="Setting Number",
)

scoping_schema = define_schema(
    SCOPING_TABLE,
    ["Attribute", "Operator", "Value"],
    primary_key=["Attribute", "Operator", "Value"],
)

join_schema = define_schema(
    JOIN_TABLE,
    [
        Column("Source Attribute"),
        Column("Target Attribute"),
        Column("Case Sensitive", ColumnType.BOOLEAN),
    ],
    primary_key=["Source Attribute", "Target Attribute"],
)

flows_schema = define_schema(
    FLOWS_TABLE,
    [
        Column("Target Attribute"),
        Column("Source"),
        Column("Flow Type"),
        Column("Apply Once", ColumnType.BOOLEAN),
        Column("Merge Type"),
    ],
    primary_key=["Target Attribute"],
)


def _object_types(rule: Node) -> tuple[str | None, str | None]:
    """(connected system object type, metaverse object type) of a rule."""
    source = rule.text("sourceObjectType")
    target = rule.text("targetObjectType")
    if (rule.text("direction") or "") == RuleDirection.OUTBOUND.value:
        return target, source
    return source, target


def _settings_rows(rule: Node, context: OperationContext) -> Iterator[RawRow]:
    cs_type, mv_type = _object_types(rule)
    settings = (
        ("Name", rule.text("name")),
        ("Description", rule.text("description")),
        ("Connected System", context.connector_name),
        ("Connected System Object Type", cs_type),
        ("Metaverse Object Type", mv_type),
        ("Link Type", rule.text("linkType")),
        ("Precedence", rule.text("precedence")),
        ("Disabled", rule.text("disabled")),
        ("Enable Password Sync", rule.text("EnablePasswordSync")),
    )
    for number, (setting, value) in enumerate(settings):
        yield (number, setting, value)


def _scoping_rows(rule: Node, context: OperationContext) -> Iterator[RawRow]:
    seen = set()
    for scope in rule.select_all("synchronizationCriteria/conditions/scope"):
        row = (scope.text("csAttribute"), scope.text("csOperator"), scope.text("csValue"))
        if row in seen:
            continue
        seen.add(row)
        yield row


def _join_rows(rule: Node, context: OperationContext) -> Iterator[RawRow]:
    seen = set()
    for condition in rule.select_all("relationshipCriteria/conditions/condition"):
        key = (condition.text("csAttribute"), condition.text("mvAttribute"))
        if key in seen:
            continue
        seen.add(key)
        yield (*key, condition.text("caseSensitive"))


def _flow_rows(rule: Node, context: OperationContext) -> Iterator[RawRow]:
    seen = set()
    for mapping in rule.select_all("attribute-mappings/mapping"):
        target = mapping.text("dest")
        if target in seen:
            context.report_diagnostic(
                FLOWS_TABLE,
                f"Rule '{rule.text('name')}' maps '{target}' more than once",
            )
            continue
        seen.add(target)

        expression = mapping.text("expression")
        if expression:
            source = expression
        else:
            source = ", ".join(
                attr.text() or "" for attr in mapping.select_all("src/attr")
            )
        yield (
            target,
            source,
            mapping.text("mappingType"),
            mapping.text("executeOnce"),
            mapping.text("valueMergeType"),
        )


RowSource = Callable[[Node, OperationContext], Iterator[RawRow]]


def _rule_extractor(rule: SelectedRule, rows: RowSource):
    def extract(snapshot: Snapshot, context: OperationContext) -> Iterator[RawRow]:
        node = rule.pilot if context.side is SnapshotSide.PILOT else rule.production
        if node is None:
            return
        yield from rows(node, context)

    return extract


def sync_rule(
    rule: SelectedRule,
    direction: RuleDirection,
    category: RuleCategory,
    heading_level: int = 5,
) -> Entity:
    """Entity documenting one selected synchronization rule."""
    return Entity(
        key=f"sync-rule:{rule.name}",
        section=SectionSpec(
            title=rule.name,
            heading_level=heading_level,
            empty_message="The synchronization rule has no configuration.",
            bookmark_title=f"{category.value} {direction.value} {rule.name}",
            show_captions=True,
        ),
        schemas=(settings_schema, scoping_schema, join_schema, flows_schema),
        extracts={
            SETTINGS_TABLE: _rule_extractor(rule, _settings_rows),
            SCOPING_TABLE: _rule_extractor(rule, _scoping_rows),
            JOIN_TABLE: _rule_extractor(rule, _join_rows),
            FLOWS_TABLE: _rule_extractor(rule, _flow_rows),
        },
    )
