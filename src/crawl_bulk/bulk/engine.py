"""Engine: the capability that actually ships a bulk request."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from crawl_bulk.bulk.request import BulkRequest
from crawl_bulk.bulk.response import BulkResponse


@runtime_checkable
class Engine(Protocol):
    """Transmits a bulk request to the backend and returns its response.

    Implementations do the network I/O and may raise; the bulk processor
    calls ``execute`` synchronously outside of its lock.
    """

    def execute(self, request: BulkRequest) -> BulkResponse:
        ...
