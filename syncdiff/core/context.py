"""Operation context and tracing spans.

The operation context carries the identity of the connector being documented
and collects non-fatal diagnostics. It is passed explicitly to extraction and
rendering code instead of living in module-level state.
"""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class SnapshotSide(str, Enum):
    """Which configuration snapshot a value came from."""

    PILOT = "pilot"
    PRODUCTION = "production"


@dataclass(frozen=True)
class Diagnostic:
    """A reportable but non-fatal problem found while extracting rows."""

    entity: str
    message: str
    side: SnapshotSide | None = None
    connector_name: str | None = None

    def __str__(self) -> str:
        side = f" [{self.side.value}]" if self.side else ""
        return f"{self.entity}{side}: {self.message}"


@dataclass(frozen=True)
class OperationContext:
    """Identity of the current documentation operation.

    Copies made with :meth:`for_side` or :meth:`with_category` share the same
    diagnostics list, so every diagnostic recorded during one connector run
    ends up in one place.
    """

    connector_name: str | None = None
    connector_guid: str | None = None
    category: str | None = None
    side: SnapshotSide | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def for_side(self, side: SnapshotSide) -> "OperationContext":
        return replace(self, side=side)

    def with_category(self, category: str) -> "OperationContext":
        return replace(self, category=category)

    def report_diagnostic(self, entity: str, message: str) -> Diagnostic:
        """Record a non-fatal extraction problem.

        Args:
            entity: Name of the entity (table) being extracted
            message: Description of the problem

        Returns:
            The recorded diagnostic
        """
        diagnostic = Diagnostic(
            entity=entity,
            message=message,
            side=self.side,
            connector_name=self.connector_name,
        )
        self.diagnostics.append(diagnostic)
        logger.warning(f"Skipped row: {diagnostic}", extra=self.log_extra())
        return diagnostic

    def log_extra(self) -> dict[str, Any]:
        """Context fields suitable for the ``extra`` argument of logging calls."""
        return {
            "connector_name": self.connector_name,
            "connector_guid": self.connector_guid,
            "connector_category": self.category,
            "snapshot_side": self.side.value if self.side else None,
        }


@contextmanager
def trace_span(
    operation: str,
    context: OperationContext | None = None,
    span_logger: logging.Logger | None = None,
) -> Iterator[None]:
    """Log entry to and exit from an operation with its elapsed time.

    Exit is logged on every path; exceptions propagate unchanged.

    Args:
        operation: Name of the traced operation
        context: Optional operation context added to the log records
        span_logger: Logger to write to (defaults to this module's logger)
    """
    log = span_logger or logger
    extra = context.log_extra() if context else {}
    start_time = time.perf_counter()
    success = True

    log.debug(f"Entering {operation}", extra=extra)
    try:
        yield
    except Exception:
        success = False
        raise
    finally:
        duration = time.perf_counter() - start_time
        outcome = "completed" if success else "failed"
        log.debug(f"Exiting {operation} ({outcome} in {duration:.3f}s)", extra=extra)
