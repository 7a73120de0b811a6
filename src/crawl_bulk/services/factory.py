"""Service factory for dependency injection."""
from __future__ import annotations

from crawl_bulk.backend import ElasticsearchEngine, create_client
from crawl_bulk.bulk import BulkListener, BulkProcessor, RetryBulkListener
from crawl_bulk.bulk.engine import Engine
from crawl_bulk.config import CrawlBulkConfig, get_config


class ServiceFactory:
    """Factory for creating service instances with dependency injection."""

    def __init__(self, config: CrawlBulkConfig | None = None):
        """Initialize the service factory."""
        self._config = config if config is not None else get_config()

    @property
    def config(self) -> CrawlBulkConfig:
        return self._config

    def create_engine(self) -> ElasticsearchEngine:
        """Create an Elasticsearch engine bound to the configured cluster."""
        client = create_client(self._config.elasticsearch_url, api_key=self._config.api_key)
        return ElasticsearchEngine(client)

    def create_listener(self) -> BulkListener:
        """Create the listener retrying documents rejected under load."""
        return RetryBulkListener(*self._config.retry_on)

    def create_bulk_processor(
        self,
        engine: Engine | None = None,
        listener: BulkListener | None = None,
    ) -> BulkProcessor:
        """Create a BulkProcessor using the configured flush triggers.

        Args:
            engine: Engine to use. Defaults to ``create_engine()``.
            listener: Listener to use. Defaults to ``create_listener()``.
        """
        return BulkProcessor(
            engine=engine if engine is not None else self.create_engine(),
            listener=listener if listener is not None else self.create_listener(),
            max_actions=self._config.bulk_size,
            flush_interval=self._config.flush_interval,
            max_bytes=self._config.byte_size,
        )


def get_service_factory(config: CrawlBulkConfig | None = None) -> ServiceFactory:
    """Create a ServiceFactory instance."""
    return ServiceFactory(config=config)
