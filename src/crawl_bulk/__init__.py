"""crawl_bulk - Crawl documents and ship them to a search backend in bulk."""
from crawl_bulk.bulk import (
    BulkProcessor,
    BulkRequest,
    BulkResponse,
    DeleteOperation,
    IndexOperation,
)
from crawl_bulk.models import Document

__version__ = "0.1.0"

__all__ = [
    "BulkProcessor",
    "BulkRequest",
    "BulkResponse",
    "DeleteOperation",
    "Document",
    "IndexOperation",
]
