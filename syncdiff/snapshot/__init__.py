"""Configuration snapshot access.

Snapshots are read-only configuration trees queried by path with optional
typed predicates.
"""

from .base import Node, Snapshot
from .predicates import And, Eq, Exists, Not, Or, Predicate
from .xml_snapshot import (
    DEFAULT_NAMESPACES,
    DSML_NAMESPACE,
    MS_DSML_NAMESPACE,
    XmlNode,
    XmlSnapshot,
)

__all__ = [
    "DEFAULT_NAMESPACES",
    "DSML_NAMESPACE",
    "MS_DSML_NAMESPACE",
    "And",
    "Eq",
    "Exists",
    "Node",
    "Not",
    "Or",
    "Predicate",
    "Snapshot",
    "XmlNode",
    "XmlSnapshot",
]
