"""Custom exceptions for crawl_bulk."""


class CrawlBulkError(Exception):
    """Base exception for crawl_bulk."""
    pass


class ConfigError(CrawlBulkError):
    """Configuration errors."""
    pass


class BulkProcessorClosedError(CrawlBulkError, RuntimeError):
    """Raised when an operation is added to a closed bulk processor."""
    pass


class EngineError(CrawlBulkError):
    """Backend transport or protocol errors."""
    pass


class IndexingError(CrawlBulkError):
    """Indexing-related errors."""
    pass
