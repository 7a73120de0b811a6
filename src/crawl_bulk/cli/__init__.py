"""CLI entry point for crawl_bulk."""

from __future__ import annotations

from pathlib import Path

import typer

from crawl_bulk import __version__
from crawl_bulk.cli_services import (
    EXIT_ERROR,
    EXIT_INVALID_ARG,
    EXIT_SUCCESS,
    CLIContext,
    _escape_rich,
    configure_logging,
    console,
    error_console,
    open_bulk_processor,
)
from crawl_bulk.config import CrawlBulkConfig, get_config
from crawl_bulk.exceptions import ConfigError, CrawlBulkError
from crawl_bulk.indexing import crawl_directory

app = typer.Typer(
    name="crawl-bulk",
    help="Crawl documents and ship them to a search backend in bulk",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _load_config(**overrides: object) -> CrawlBulkConfig:
    try:
        return get_config(**overrides)
    except ConfigError as e:
        error_console.print("[red]Error: Invalid configuration[/red]")
        error_console.print(f"[dim]{_escape_rich(str(e))}[/dim]")
        raise typer.Exit(code=EXIT_INVALID_ARG)


def _describe(config: CrawlBulkConfig) -> list[tuple[str, str]]:
    return [
        ("Root path", str(config.root_path)),
        ("Elasticsearch", config.elasticsearch_url),
        ("Index", config.index),
        ("Bulk size", str(config.bulk_size) if config.bulk_size > 0 else "disabled"),
        (
            "Byte size",
            str(config.byte_size)
            if config.byte_size and config.byte_size.enabled
            else "disabled",
        ),
        (
            "Flush interval",
            str(config.flush_interval)
            if config.flush_interval and config.flush_interval.enabled
            else "disabled",
        ),
    ]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logs, including every bulk request",
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        help="Show version information",
        is_flag=True,
    ),
):
    """crawl-bulk - Crawl documents into a search index."""
    if version:
        console.print(f"crawl-bulk version {__version__}")
        raise typer.Exit(code=EXIT_SUCCESS)

    configure_logging(verbose)
    ctx.obj = CLIContext(verbose=verbose)

    if ctx.invoked_subcommand is None:
        console.print("[bold]crawl-bulk[/bold] - Crawl documents into a search index")
        console.print("Use --help for usage information")
        raise typer.Exit(code=EXIT_SUCCESS)


@app.command()
def settings() -> None:
    """Show the effective configuration."""
    config = _load_config()
    console.print("[bold]crawl-bulk settings[/bold]")
    for label, value in _describe(config):
        console.print(f"  {label}: {_escape_rich(value)}")


@app.command()
def crawl(
    path: str | None = typer.Argument(
        None,
        help="Directory to crawl (default: configured root path)",
    ),
    index: str | None = typer.Option(None, "--index", "-i", help="Target index name"),
    url: str | None = typer.Option(None, "--url", help="Elasticsearch URL"),
    bulk_size: int | None = typer.Option(
        None, "--bulk-size", help="Flush after this many operations (0 disables)"
    ),
    byte_size: str | None = typer.Option(
        None, "--byte-size", help="Flush after this many bytes, e.g. 10mb (0 disables)"
    ),
    flush_interval: str | None = typer.Option(
        None, "--flush-interval", help="Flush at least this often, e.g. 5s (0 disables)"
    ),
    exclude: list[str] = typer.Option(
        None,
        "--exclude",
        "-e",
        help="Additional patterns to exclude (can be specified multiple times)",
    ),
) -> None:
    """Crawl a directory and index every document found."""
    config = _load_config(
        root_path=path,
        index=index,
        elasticsearch_url=url,
        bulk_size=bulk_size,
        byte_size=byte_size,
        flush_interval=flush_interval,
    )

    root_path = Path(config.root_path).expanduser().resolve()
    if not root_path.is_dir():
        error_console.print(
            f"[red]Error: Path is not a directory: {_escape_rich(str(root_path))}[/red]"
        )
        raise typer.Exit(code=EXIT_INVALID_ARG)

    excludes = frozenset(config.excludes) | frozenset(exclude or ())
    with open_bulk_processor(config) as processor:
        try:
            stats = crawl_directory(
                root_path,
                processor,
                config.index,
                extensions=frozenset(config.extensions),
                exclude_patterns=excludes,
            )
        except CrawlBulkError as e:
            error_console.print(f"[red]Error crawling:[/red] {_escape_rich(str(e))}")
            raise typer.Exit(code=EXIT_ERROR)

    console.print(
        f"[green]Crawled {stats.nb_docs} documents into index {_escape_rich(config.index)}[/green]"
    )
    console.print(f"  Bulk requests: {processor.execution_count}")
    if stats.nb_deleted:
        console.print(f"  Deleted: {stats.nb_deleted}")
    if stats.errors:
        console.print(f"[yellow]  Skipped {stats.errors} file(s) that could not be read[/yellow]")


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
