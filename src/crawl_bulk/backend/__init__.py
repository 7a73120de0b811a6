"""Search backend engines."""
from crawl_bulk.backend.elasticsearch import ElasticsearchEngine, create_client

__all__ = ["ElasticsearchEngine", "create_client"]
