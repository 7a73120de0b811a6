"""CLI tests for crawl-bulk."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import pytest
from typer.testing import CliRunner

import crawl_bulk.cli as cli
from crawl_bulk import __version__
from crawl_bulk.bulk import BulkProcessor
from crawl_bulk.config import CrawlBulkConfig

from .conftest import RecordingEngine

runner = CliRunner()


@pytest.fixture
def recorded(monkeypatch: pytest.MonkeyPatch) -> dict:
    """Replace the backend with a recording engine and capture the config used."""
    state: dict = {"engine": RecordingEngine()}

    @contextmanager
    def fake_open(config: CrawlBulkConfig) -> Iterator[BulkProcessor]:
        state["config"] = config
        processor = BulkProcessor(
            state["engine"],
            max_actions=config.bulk_size,
            max_bytes=config.byte_size,
        )
        try:
            yield processor
        finally:
            processor.close()

    monkeypatch.setattr(cli, "open_bulk_processor", fake_open)
    return state


def _docs(root: Path, count: int) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for n in range(count):
        (root / f"doc{n}.txt").write_text(f"document {n}")
    return root


class TestMain:
    def test_version(self):
        result = runner.invoke(cli.app, ["--version"])
        assert result.exit_code == 0
        assert f"crawl-bulk version {__version__}" in result.output

    def test_no_command_prints_usage_hint(self):
        result = runner.invoke(cli.app, [])
        assert result.exit_code == 0
        assert "Use --help" in result.output


class TestSettings:
    def test_shows_defaults(self):
        result = runner.invoke(cli.app, ["settings"])
        assert result.exit_code == 0
        assert "Bulk size: 100" in result.output
        assert "Byte size: 10mb" in result.output
        assert "Flush interval: 5s" in result.output
        assert "Index: documents" in result.output

    def test_disabled_triggers(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CRAWL_BULK_BULK_SIZE", "0")
        monkeypatch.setenv("CRAWL_BULK_FLUSH_INTERVAL", "0")
        result = runner.invoke(cli.app, ["settings"])
        assert result.exit_code == 0
        assert "Bulk size: disabled" in result.output
        assert "Flush interval: disabled" in result.output

    def test_invalid_env_exits_with_invalid_arg(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CRAWL_BULK_FLUSH_INTERVAL", "soon")
        result = runner.invoke(cli.app, ["settings"])
        assert result.exit_code == 2
        assert "Invalid configuration" in result.output


class TestCrawl:
    def test_crawl_directory(self, tmp_path: Path, recorded: dict):
        root = _docs(tmp_path / "docs", 5)

        result = runner.invoke(cli.app, ["crawl", str(root), "--index", "library"])

        assert result.exit_code == 0, result.output
        assert "Crawled 5 documents into index library" in result.output
        assert "Bulk requests: 1" in result.output
        operations = [op for request in recorded["engine"].requests for op in request]
        assert {op.index for op in operations} == {"library"}
        assert len(operations) == 5

    def test_cli_options_override_config(self, tmp_path: Path, recorded: dict):
        root = _docs(tmp_path / "docs", 5)

        result = runner.invoke(
            cli.app,
            [
                "crawl",
                str(root),
                "--bulk-size",
                "2",
                "--byte-size",
                "1mb",
                "--flush-interval",
                "0",
            ],
        )

        assert result.exit_code == 0, result.output
        config = recorded["config"]
        assert config.bulk_size == 2
        assert config.byte_size.bytes == 1024 * 1024
        assert not config.flush_interval.enabled
        assert recorded["engine"].batch_sizes == [2, 2, 1]
        assert "Bulk requests: 3" in result.output

    def test_exclude_option(self, tmp_path: Path, recorded: dict):
        root = _docs(tmp_path / "docs", 2)
        _docs(root / "private", 3)

        result = runner.invoke(cli.app, ["crawl", str(root), "-e", "private"])

        assert result.exit_code == 0, result.output
        assert "Crawled 2 documents" in result.output

    def test_missing_directory(self, tmp_path: Path, recorded: dict):
        result = runner.invoke(cli.app, ["crawl", str(tmp_path / "missing")])
        assert result.exit_code == 2
        assert "not a directory" in result.output
        assert "config" not in recorded

    def test_invalid_byte_size_option(self, tmp_path: Path, recorded: dict):
        result = runner.invoke(cli.app, ["crawl", str(tmp_path), "--byte-size", "huge"])
        assert result.exit_code == 2
        assert "Invalid configuration" in result.output

    def test_verbose_flag(self, tmp_path: Path, recorded: dict):
        root = _docs(tmp_path / "docs", 1)
        result = runner.invoke(cli.app, ["--verbose", "crawl", str(root)])
        assert result.exit_code == 0, result.output
        assert "Crawled 1 documents" in result.output
