"""Read-only interface of a configuration snapshot.

The diff engine only ever sees snapshots through these protocols. Paths use
ElementTree path syntax relative to the node they are evaluated on, with
optional ``prefix:`` namespace qualifiers.
"""

from typing import Protocol

from .predicates import Predicate


class Node(Protocol):
    """One element of a configuration tree."""

    @property
    def tag(self) -> str: ...

    def text(self, path: str | None = None, default: str | None = None) -> str | None:
        """Text of this node, or of the first element at ``path``."""
        ...

    def attr(self, name: str, default: str | None = None) -> str | None: ...

    def select_one(
        self, path: str, where: Predicate | None = None
    ) -> "Node | None": ...

    def select_all(self, path: str, where: Predicate | None = None) -> list["Node"]: ...


class Snapshot(Protocol):
    """An immutable, queryable configuration tree."""

    @property
    def source(self) -> str: ...

    def select_one(self, path: str, where: Predicate | None = None) -> Node | None: ...

    def select_all(self, path: str, where: Predicate | None = None) -> list[Node]: ...
