"""CLI service layer for crawl_bulk.

Shared consoles, exit codes, logging setup and the context manager that
owns the bulk processor for the duration of a command.
"""
from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.logging import RichHandler

from crawl_bulk.bulk import BulkProcessor
from crawl_bulk.config import CrawlBulkConfig
from crawl_bulk.services import get_service_factory

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_INVALID_ARG = 2

console = Console(stderr=False)  # stdout for normal output
error_console = Console(stderr=True)  # stderr for errors and logs


def _escape_rich(text: str) -> str:
    """Escape brackets to prevent Rich markup interpretation."""
    return text.replace("[", "\\[").replace("]", "\\]")


def configure_logging(verbose: bool = False) -> None:
    """Route log records to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_path=verbose)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


class CLIContext:
    """Invocation-scoped context for CLI state."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose


@contextmanager
def open_bulk_processor(
    config: CrawlBulkConfig,
) -> Generator[BulkProcessor, None, None]:
    """Context manager for a bulk processor bound to the configured backend.

    The processor is closed (flushing remaining operations) and the HTTP
    client released on exit.

    Raises:
        typer.Exit: If the backend client cannot be created.
    """
    factory = get_service_factory(config)
    try:
        engine = factory.create_engine()
    except Exception as e:
        error_console.print(f"[red]Error creating backend client:[/red] {_escape_rich(str(e))}")
        raise typer.Exit(code=EXIT_ERROR)

    processor = factory.create_bulk_processor(engine=engine)
    try:
        yield processor
    finally:
        try:
            processor.close()
        finally:
            engine.close()
