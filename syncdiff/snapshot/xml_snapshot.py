"""ElementTree-backed snapshots of exported server configuration XML."""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from ..exceptions import SnapshotError
from .predicates import Predicate

logger = logging.getLogger(__name__)

DSML_NAMESPACE = "http://www.dsml.org/DSML"
MS_DSML_NAMESPACE = "http://www.microsoft.com/MMS/DSML"

DEFAULT_NAMESPACES = {
    "dsml": DSML_NAMESPACE,
    "ms-dsml": MS_DSML_NAMESPACE,
}


class XmlNode:
    """Read-only view of one XML element."""

    __slots__ = ("_element", "_namespaces")

    def __init__(self, element: ET.Element, namespaces: dict[str, str]):
        self._element = element
        self._namespaces = namespaces

    def __repr__(self) -> str:
        return f"XmlNode({self._element.tag})"

    @property
    def tag(self) -> str:
        return self._element.tag

    def text(self, path: str | None = None, default: str | None = None) -> str | None:
        element = self._element if path is None else self._find(path)
        if element is None:
            return default
        return "".join(element.itertext())

    def attr(self, name: str, default: str | None = None) -> str | None:
        return self._element.get(self._qualify(name), default)

    def select_one(self, path: str, where: Predicate | None = None) -> "XmlNode | None":
        for node in self._select(path):
            if where is None or where.matches(node):
                return node
        return None

    def select_all(self, path: str, where: Predicate | None = None) -> list["XmlNode"]:
        return [
            node for node in self._select(path) if where is None or where.matches(node)
        ]

    def _find(self, path: str) -> ET.Element | None:
        return self._element.find(path, self._namespaces)

    def _select(self, path: str) -> list["XmlNode"]:
        return [
            XmlNode(element, self._namespaces)
            for element in self._element.findall(path, self._namespaces)
        ]

    def _qualify(self, name: str) -> str:
        prefix, sep, local = name.partition(":")
        if sep and prefix in self._namespaces:
            return f"{{{self._namespaces[prefix]}}}{local}"
        return name


class XmlSnapshot:
    """A configuration snapshot loaded from an XML document."""

    def __init__(
        self,
        root: ET.Element,
        source: str = "<memory>",
        namespaces: dict[str, str] | None = None,
    ):
        self._namespaces = {**DEFAULT_NAMESPACES, **(namespaces or {})}
        self._root = XmlNode(root, self._namespaces)
        self._source = source

    def __repr__(self) -> str:
        return f"XmlSnapshot({self._source})"

    @property
    def source(self) -> str:
        return self._source

    @property
    def root(self) -> XmlNode:
        return self._root

    def select_one(self, path: str, where: Predicate | None = None) -> XmlNode | None:
        return self._root.select_one(path, where)

    def select_all(self, path: str, where: Predicate | None = None) -> list[XmlNode]:
        return self._root.select_all(path, where)

    @classmethod
    def from_file(cls, path: str | Path) -> "XmlSnapshot":
        """Load a snapshot from an XML file.

        Raises:
            SnapshotError: If the file cannot be read or is not well-formed XML
        """
        path = Path(path)

        if not path.is_file():
            raise SnapshotError(f"Snapshot file not found: {path}", source=str(path))

        try:
            tree = ET.parse(path)
        except ET.ParseError as e:
            raise SnapshotError(
                f"Failed to parse snapshot XML: {e}", source=str(path)
            ) from e
        except OSError as e:
            raise SnapshotError(
                f"Failed to read snapshot file: {e}", source=str(path)
            ) from e

        logger.info(f"Loaded configuration snapshot: {path}")
        return cls(tree.getroot(), source=str(path))

    @classmethod
    def from_string(cls, content: str, source: str = "<memory>") -> "XmlSnapshot":
        """Load a snapshot from an XML string.

        Raises:
            SnapshotError: If the content is not well-formed XML
        """
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise SnapshotError(
                f"Failed to parse snapshot XML: {e}", source=source
            ) from e
        return cls(root, source=source)
