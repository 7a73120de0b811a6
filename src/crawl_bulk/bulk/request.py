"""Bulk request: a threshold-aware accumulator of operations."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from crawl_bulk.bulk.operation import Operation
from crawl_bulk.units import ByteSizeValue

logger = logging.getLogger(__name__)


def _max_bytes_value(max_bytes: int | ByteSizeValue | None) -> int | None:
    if isinstance(max_bytes, ByteSizeValue):
        return max_bytes.bytes
    return max_bytes


class BulkRequest:
    """Ordered batch of operations with optional count and byte limits.

    A limit that is ``None``, zero or negative is disabled. With both
    disabled the request never reports itself as over the limit.
    """

    def __init__(
        self,
        max_actions: int | None = None,
        max_bytes: int | ByteSizeValue | None = None,
    ) -> None:
        self._operations: list[Operation] = []
        self._total_bytes = 0
        self._max_actions = max_actions
        self._max_bytes = _max_bytes_value(max_bytes)

    def max_actions(self, max_actions: int | None) -> None:
        self._max_actions = max_actions

    def max_bytes(self, max_bytes: int | ByteSizeValue | None) -> None:
        self._max_bytes = _max_bytes_value(max_bytes)

    @property
    def limits(self) -> tuple[int | None, int | None]:
        """Configured ``(max_actions, max_bytes)``."""
        return self._max_actions, self._max_bytes

    def add(self, operation: Operation) -> None:
        self._operations.append(operation)
        self._total_bytes += operation.size

    def count(self) -> int:
        return len(self._operations)

    def total_bytes(self) -> int:
        return self._total_bytes

    @property
    def operations(self) -> list[Operation]:
        return list(self._operations)

    def is_over_limit(self) -> bool:
        logger.debug(
            "Checking bulk limits: [%d] >= [%s] actions, [%d] >= [%s] bytes",
            self.count(),
            self._max_actions,
            self._total_bytes,
            self._max_bytes,
        )
        if self._max_actions is not None and self._max_actions > 0:
            if self.count() >= self._max_actions:
                return True
        if self._max_bytes is not None and self._max_bytes > 0:
            if self._total_bytes >= self._max_bytes:
                return True
        return False

    def __len__(self) -> int:
        return len(self._operations)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._operations)

    def __repr__(self) -> str:
        return (
            f"BulkRequest(actions={self.count()}, bytes={self._total_bytes}, "
            f"max_actions={self._max_actions}, max_bytes={self._max_bytes})"
        )
