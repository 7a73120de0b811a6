"""Bulk batching and flushing engine."""
from crawl_bulk.bulk.engine import Engine
from crawl_bulk.bulk.listener import (
    AdvancedBulkListener,
    BulkListener,
    RetryBulkListener,
    SimpleBulkListener,
)
from crawl_bulk.bulk.operation import DeleteOperation, IndexOperation, Operation
from crawl_bulk.bulk.processor import BulkProcessor, FlushScheduler
from crawl_bulk.bulk.request import BulkRequest
from crawl_bulk.bulk.response import BulkItemResponse, BulkResponse

__all__ = [
    "AdvancedBulkListener",
    "BulkItemResponse",
    "BulkListener",
    "BulkProcessor",
    "BulkRequest",
    "BulkResponse",
    "DeleteOperation",
    "Engine",
    "FlushScheduler",
    "IndexOperation",
    "Operation",
    "RetryBulkListener",
    "SimpleBulkListener",
]
