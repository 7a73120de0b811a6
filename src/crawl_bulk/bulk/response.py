"""Bulk response returned by an engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from crawl_bulk.bulk.operation import Operation

logger = logging.getLogger(__name__)


@dataclass
class BulkItemResponse:
    """Outcome of one operation inside a bulk call."""

    operation: Operation
    failed: bool = False
    failure_message: str | None = None


@dataclass
class BulkResponse:
    """Outcome of a whole bulk call.

    ``exception`` is set when the call itself did not go through (transport
    or protocol error); ``items`` then stays empty.
    """

    errors: bool = False
    items: list[BulkItemResponse] = field(default_factory=list)
    exception: Exception | None = None

    def has_failures(self) -> bool:
        if self.errors or self.exception is not None:
            return True
        return any(item.failed for item in self.items)

    def failed_items(self) -> list[BulkItemResponse]:
        return [item for item in self.items if item.failed]

    def build_failure_message(self) -> Exception:
        if self.exception is not None:
            return self.exception
        failed = self.failed_items()
        if logger.isEnabledFor(logging.DEBUG):
            details = "; ".join(
                f"{item.operation.key}: {item.failure_message}" for item in failed
            )
            return RuntimeError(f"{len(failed)} failures: {details}")
        return RuntimeError(f"{len(failed)} failures")
