"""Configuration management."""
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from crawl_bulk.exceptions import ConfigError
from crawl_bulk.units import ByteSizeValue, TimeValue

DEFAULT_BULK_SIZE = 100
DEFAULT_BYTE_SIZE = "10mb"
DEFAULT_FLUSH_INTERVAL = "5s"


class CrawlBulkConfig(BaseSettings):
    """Configuration for the crawler and its bulk processor.

    A ``bulk_size``, ``byte_size`` or ``flush_interval`` of zero disables
    that flush trigger. With all three disabled, documents only reach the
    backend when the processor is closed.
    """

    model_config = SettingsConfigDict(
        env_prefix="CRAWL_BULK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Crawl settings
    root_path: Path = Path(".")
    extensions: list[str] = Field(default_factory=lambda: [".txt", ".md", ".rst", ".html"])
    excludes: list[str] = Field(default_factory=list)

    # Backend settings
    elasticsearch_url: str = "http://127.0.0.1:9200"
    index: str = "documents"
    api_key: str | None = None

    # Bulk settings
    bulk_size: int = DEFAULT_BULK_SIZE
    byte_size: Annotated[ByteSizeValue | None, NoDecode] = Field(
        default_factory=lambda: ByteSizeValue.parse(DEFAULT_BYTE_SIZE)
    )
    flush_interval: Annotated[TimeValue | None, NoDecode] = Field(
        default_factory=lambda: TimeValue.parse(DEFAULT_FLUSH_INTERVAL)
    )
    retry_on: list[str] = Field(
        default_factory=lambda: ["es_rejected_execution_exception"]
    )

    # Logging
    verbose: bool = False

    @field_validator("byte_size", mode="before")
    @classmethod
    def _parse_byte_size(cls, value: object) -> ByteSizeValue | None:
        if value is None or value == "":
            return None
        if not isinstance(value, (str, int, ByteSizeValue)):
            raise ValueError(f"invalid byte size: {value!r}")
        return ByteSizeValue.parse(value)

    @field_validator("flush_interval", mode="before")
    @classmethod
    def _parse_flush_interval(cls, value: object) -> TimeValue | None:
        if value is None or value == "":
            return None
        if not isinstance(value, (str, int, TimeValue)):
            raise ValueError(f"invalid flush interval: {value!r}")
        return TimeValue.parse(value)


@lru_cache
def _get_config_cached() -> CrawlBulkConfig:
    """Cached configuration lookup from environment and .env."""
    return _load_config()


def _load_config(**overrides: object) -> CrawlBulkConfig:
    try:
        return CrawlBulkConfig(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def get_config(clear_cache: bool = False, **overrides: object) -> CrawlBulkConfig:
    """Get configuration instance.

    Args:
        clear_cache: If True, clear the cache before returning config.
        **overrides: Explicit values (e.g. from CLI options). When given,
            a fresh uncached config is built.

    Raises:
        ConfigError: If a setting cannot be parsed.
    """
    if clear_cache:
        _get_config_cached.cache_clear()

    explicit = {key: value for key, value in overrides.items() if value is not None}
    if explicit:
        return _load_config(**explicit)

    return _get_config_cached()
