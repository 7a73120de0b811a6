"""Pytest configuration and fixtures for crawl_bulk tests."""
from __future__ import annotations

import os
import tempfile
import threading
import time
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from crawl_bulk.bulk import BulkRequest, BulkResponse, IndexOperation
from crawl_bulk.bulk.response import BulkItemResponse
from crawl_bulk.config import _get_config_cached

PAYLOAD = {"foo": "bar"}


def make_operation(index: int, payload: dict | None = None) -> IndexOperation:
    """Index operation whose size only depends on the payload.

    Ids are zero-padded so every operation built here has the same size.
    """
    return IndexOperation(
        index="test",
        id=f"doc-{index:06d}",
        document=dict(PAYLOAD if payload is None else payload),
    )


PAYLOAD_SIZE = make_operation(0).size


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` seconds elapse."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class RecordingEngine:
    """Engine that records every request it is asked to execute."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.requests: list[BulkRequest] = []
        self._lock = threading.Lock()

    def execute(self, request: BulkRequest) -> BulkResponse:
        with self._lock:
            self.requests.append(request)
        if self.error is not None:
            raise self.error
        return BulkResponse(items=[BulkItemResponse(operation=op) for op in request])

    @property
    def executions(self) -> int:
        with self._lock:
            return len(self.requests)

    @property
    def batch_sizes(self) -> list[int]:
        with self._lock:
            return [request.count() for request in self.requests]


class RecordingListener:
    """Listener recording callbacks as ``(event, execution_id, actions)``."""

    def __init__(self) -> None:
        self.events: list[tuple[str, int, int]] = []
        self.failures: list[BaseException] = []
        self._lock = threading.Lock()

    def before_bulk(self, execution_id: int, request: BulkRequest) -> None:
        with self._lock:
            self.events.append(("before", execution_id, request.count()))

    def after_bulk(self, execution_id: int, request: BulkRequest, response: BulkResponse) -> None:
        with self._lock:
            self.events.append(("after", execution_id, request.count()))

    def after_bulk_failure(
        self, execution_id: int, request: BulkRequest, failure: BaseException
    ) -> None:
        with self._lock:
            self.events.append(("failure", execution_id, request.count()))
            self.failures.append(failure)

    @property
    def nb_successful_executions(self) -> int:
        with self._lock:
            return sum(1 for event, _, _ in self.events if event == "after")


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture
def engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture(autouse=True)
def _clean_config_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Isolate tests from CRAWL_BULK_* variables and any local .env file."""
    for name in list(os.environ):
        if name.startswith("CRAWL_BULK_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    _get_config_cached.cache_clear()
    yield
    _get_config_cached.cache_clear()
