"""Pilot versus production synchronization configuration reports.

Example usage:
    from syncdiff import DocumentAssembler, XmlSnapshot

    pilot = XmlSnapshot.from_file("pilot.xml")
    production = XmlSnapshot.from_file("production.xml")
    result = DocumentAssembler(pilot, production).write("report.html")
"""

from .assembler import DocumentAssembler, ReportResult
from .documenter import ConnectorDocumenter
from .exceptions import SyncDiffError
from .snapshot import XmlSnapshot

__version__ = "0.1.0"

__all__ = [
    "ConnectorDocumenter",
    "DocumentAssembler",
    "ReportResult",
    "SyncDiffError",
    "XmlSnapshot",
]
