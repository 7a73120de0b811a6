"""Service layer for crawl_bulk."""
from crawl_bulk.services.factory import ServiceFactory, get_service_factory

__all__ = ["ServiceFactory", "get_service_factory"]
