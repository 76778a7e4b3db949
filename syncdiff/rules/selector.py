"""Selection and ordering of synchronization rules for one connector.

Rules are matched across snapshots by name only. A rule renamed between
pilot and production is therefore reported as one deleted rule and one added
rule, never as a modification.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from ..snapshot import Eq, Exists, Node, Predicate, Snapshot

logger = logging.getLogger(__name__)

SYNC_RULE_PATH = ".//synchronizationRule"


class RuleDirection(str, Enum):
    """Direction a synchronization rule flows data in."""

    INBOUND = "Inbound"
    OUTBOUND = "Outbound"


class RuleCategory(str, Enum):
    """Report sections synchronization rules are grouped into."""

    PROVISIONING = "Provisioning"
    STICKY_JOIN = "StickyJoin"
    CONDITIONAL_JOIN = "ConditionalJoin"
    ALL = "All"


_LINK_TYPES = {
    RuleCategory.PROVISIONING: "Provision",
    RuleCategory.STICKY_JOIN: "StickyJoin",
    RuleCategory.CONDITIONAL_JOIN: "Join",
}

_SECTION_TITLES = {
    RuleCategory.PROVISIONING: "Provisioning Rules Summary",
    RuleCategory.STICKY_JOIN: "Sticky Join Rules Summary",
    RuleCategory.CONDITIONAL_JOIN: "Conditional Join Rules Summary",
    RuleCategory.ALL: "Synchronization Rules",
}


def section_title(category: RuleCategory) -> str:
    return _SECTION_TITLES[category]


def empty_direction_message(direction: RuleDirection, category: RuleCategory) -> str:
    """Sentence shown when a direction has no rules of a category."""
    title = section_title(category).replace(" Summary", "")
    return f"There are no <b>{direction.value} {title}</b> configured."


@dataclass(frozen=True)
class RuleFilter:
    """Declarative filter selecting one connector's rules of a category."""

    connector_id: str
    direction: RuleDirection
    category: RuleCategory

    def predicate(self) -> Predicate:
        predicate = Eq("connector", self.connector_id, case_insensitive=True) & Eq(
            "direction", self.direction.value
        )

        link_type = _LINK_TYPES.get(self.category)
        if link_type is not None:
            predicate = predicate & Eq("linkType", link_type)

        if self.category is RuleCategory.CONDITIONAL_JOIN:
            predicate = predicate & (
                Exists("synchronizationCriteria/conditions/scope")
                | Exists("relationshipCriteria/conditions/condition")
            )

        return predicate

    def matches(self, node: Node) -> bool:
        return self.predicate().matches(node)


@dataclass(frozen=True)
class SelectedRule:
    """A rule to document, with its node in each snapshot where it exists."""

    name: str
    rule_id: str | None
    production_only: bool
    pilot: Node | None = None
    production: Node | None = None


def name_sort_key(name: str) -> tuple[str, str]:
    """Case-insensitive name order; names differing only in case keep a fixed order."""
    return (name.casefold(), name)


def merge_by_name(
    pilot_names: Iterable[str], production_names: Iterable[str]
) -> list[tuple[str, bool]]:
    """Order names for rendering: pilot names sorted, then production-only names.

    Sorting ignores case, so "in from AD" precedes "Out to AAD".

    Returns:
        ``(name, production_only)`` pairs with each name appearing once
    """
    pilot_sorted = sorted(dict.fromkeys(pilot_names), key=name_sort_key)
    pilot_set = set(pilot_sorted)
    production_only = sorted(
        (name for name in dict.fromkeys(production_names) if name not in pilot_set),
        key=name_sort_key,
    )
    return [(name, False) for name in pilot_sorted] + [
        (name, True) for name in production_only
    ]


def _rules_by_name(rules: list[Node], source: str) -> dict[str, Node]:
    by_name: dict[str, Node] = {}
    for rule in rules:
        name = rule.text("name") or ""
        if name in by_name:
            logger.warning(
                f"Ignoring duplicate synchronization rule '{name}' in {source}"
            )
            continue
        by_name[name] = rule
    return by_name


def select_sync_rules(
    pilot: Snapshot | None,
    production: Snapshot | None,
    pilot_connector_id: str | None,
    production_connector_id: str | None,
    direction: RuleDirection,
    category: RuleCategory,
) -> list[SelectedRule]:
    """Select a connector's rules of one direction and category from both snapshots.

    Pilot rules come first, sorted by name; production rules whose name does
    not appear among the selected pilot rules follow, also sorted by name.

    Args:
        pilot: Pilot snapshot (None if unavailable)
        production: Production snapshot (None if unavailable)
        pilot_connector_id: Connector GUID in the pilot snapshot
        production_connector_id: Connector GUID in the production snapshot
        direction: Rule direction to select
        category: Rule category to select

    Returns:
        Selected rules in rendering order
    """

    def select(snapshot: Snapshot | None, connector_id: str | None) -> list[Node]:
        if snapshot is None or not connector_id:
            return []
        rule_filter = RuleFilter(connector_id, direction, category)
        return snapshot.select_all(SYNC_RULE_PATH, where=rule_filter.predicate())

    pilot_rules = _rules_by_name(select(pilot, pilot_connector_id), "pilot")
    production_rules = _rules_by_name(
        select(production, production_connector_id), "production"
    )

    selected = []
    for name, production_only in merge_by_name(pilot_rules, production_rules):
        pilot_rule = pilot_rules.get(name)
        production_rule = production_rules.get(name)
        primary = production_rules[name] if production_only else pilot_rules[name]
        selected.append(
            SelectedRule(
                name=name,
                rule_id=primary.text("id"),
                production_only=production_only,
                pilot=pilot_rule,
                production=production_rule,
            )
        )

    logger.debug(
        f"Selected {len(selected)} {direction.value} {category.value} rules "
        f"({len(pilot_rules)} pilot, {len(production_rules)} production)"
    )
    return selected
