"""Typed predicates for filtering snapshot nodes.

Predicates compare node values in Python rather than splicing them into
query strings, so names containing quotes or other query syntax are matched
literally.

Example:
    rule_filter = Eq("connector", guid, case_insensitive=True) & Eq(
        "direction", "Inbound"
    )
    rules = snapshot.select_all(".//synchronizationRule", where=rule_filter)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .base import Node


class Predicate(ABC):
    """Boolean condition evaluated against a snapshot node."""

    @abstractmethod
    def matches(self, node: "Node") -> bool:
        """Return True if the node satisfies the condition."""

    def __and__(self, other: "Predicate") -> "Predicate":
        return And((self, other))

    def __or__(self, other: "Predicate") -> "Predicate":
        return Or((self, other))

    def __invert__(self) -> "Predicate":
        return Not(self)


@dataclass(frozen=True)
class Eq(Predicate):
    """Text of any element at ``path`` (relative to the node) equals ``value``.

    A missing element never matches.
    """

    path: str
    value: str
    case_insensitive: bool = False

    def matches(self, node: "Node") -> bool:
        expected = self.value.upper() if self.case_insensitive else self.value
        for candidate in node.select_all(self.path):
            actual = candidate.text() or ""
            if self.case_insensitive:
                actual = actual.upper()
            if actual == expected:
                return True
        return False


@dataclass(frozen=True)
class Exists(Predicate):
    """At least one element exists at ``path``."""

    path: str

    def matches(self, node: "Node") -> bool:
        return node.select_one(self.path) is not None


@dataclass(frozen=True)
class And(Predicate):
    predicates: tuple[Predicate, ...]

    def matches(self, node: "Node") -> bool:
        return all(predicate.matches(node) for predicate in self.predicates)


@dataclass(frozen=True)
class Or(Predicate):
    predicates: tuple[Predicate, ...]

    def matches(self, node: "Node") -> bool:
        return any(predicate.matches(node) for predicate in self.predicates)


@dataclass(frozen=True)
class Not(Predicate):
    predicate: Predicate

    def matches(self, node: "Node") -> bool:
        return not self.predicate.matches(node)
