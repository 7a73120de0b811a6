"""Thread-safe bulk processor.

Operations are accumulated into the current ``BulkRequest``. The request is
swapped out and sent through the engine as soon as one of three triggers
fires: the number of actions, the cumulated byte size, or the periodic
flush interval. Closing the processor sends whatever is left.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from types import TracebackType

from crawl_bulk.bulk.engine import Engine
from crawl_bulk.bulk.listener import BulkListener, SimpleBulkListener
from crawl_bulk.bulk.operation import Operation
from crawl_bulk.bulk.request import BulkRequest
from crawl_bulk.exceptions import BulkProcessorClosedError
from crawl_bulk.units import ByteSizeValue, TimeValue

logger = logging.getLogger(__name__)


class FlushScheduler:
    """Calls ``action`` every ``interval`` seconds on a daemon thread."""

    def __init__(
        self,
        interval: float,
        action: Callable[[], None],
        *,
        name: str = "bulk-flush-scheduler",
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be greater than 0")
        self.interval = interval
        self._action = action
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self._action()
            except Exception:
                logger.exception("Scheduled bulk flush failed")

    def stop(self) -> None:
        """Stop ticking and wait for a tick in progress to finish.

        Once this returns no further tick will run.
        """
        self._stop_event.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join()

    @property
    def running(self) -> bool:
        return self._thread.is_alive() and not self._stop_event.is_set()


def _interval_seconds(flush_interval: TimeValue | float | None) -> float | None:
    if flush_interval is None:
        return None
    if isinstance(flush_interval, TimeValue):
        seconds = flush_interval.seconds
    else:
        seconds = float(flush_interval)
    return seconds if seconds > 0 else None


class BulkProcessor:
    """Accumulates operations and ships them in bounded bulk requests.

    ``max_actions``, ``max_bytes`` and ``flush_interval`` are all optional;
    ``None`` or zero disables the corresponding trigger. With every trigger
    disabled nothing is sent until ``flush()`` or ``close()``.

    A single lock guards the current request and the execution id counter.
    The engine and listener are always called outside of it, on the thread
    that triggered the flush, so slow backend calls never block producers.
    """

    def __init__(
        self,
        engine: Engine,
        listener: BulkListener | None = None,
        max_actions: int | None = None,
        flush_interval: TimeValue | float | None = None,
        max_bytes: int | ByteSizeValue | None = None,
        request_factory: Callable[[], BulkRequest] = BulkRequest,
    ) -> None:
        if engine is None:
            raise ValueError("engine is required")
        self._engine = engine
        self._listener: BulkListener = listener if listener is not None else SimpleBulkListener()
        self._max_actions = max_actions
        self._max_bytes = max_bytes
        self._request_factory = request_factory

        self._lock = threading.Lock()
        self._close_lock = threading.RLock()
        self._closed = False
        self._execution_id = 0
        self._request = self._new_request()

        set_bulk_processor = getattr(self._listener, "set_bulk_processor", None)
        if callable(set_bulk_processor):
            set_bulk_processor(self)

        self._scheduler: FlushScheduler | None = None
        interval = _interval_seconds(flush_interval)
        if interval is not None:
            self._scheduler = FlushScheduler(interval, self._flush_when_needed)
            self._scheduler.start()

    @property
    def listener(self) -> BulkListener:
        return self._listener

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def execution_count(self) -> int:
        """Last execution id handed out (0 until the first flush)."""
        with self._lock:
            return self._execution_id

    def pending_count(self) -> int:
        """Number of operations waiting in the current request."""
        with self._lock:
            return self._request.count()

    def _new_request(self) -> BulkRequest:
        request = self._request_factory()
        request.max_actions(self._max_actions)
        request.max_bytes(self._max_bytes)
        return request

    def _ensure_open(self) -> None:
        if self._closed:
            raise BulkProcessorClosedError("bulk processor already closed")

    def _swap(self) -> tuple[int, BulkRequest]:
        """Swap in a fresh request. Caller must hold ``self._lock``."""
        request = self._request
        self._request = self._new_request()
        self._execution_id += 1
        return self._execution_id, request

    def _swap_if_not_empty(self) -> tuple[int, BulkRequest] | None:
        if self._request.count() == 0:
            return None
        return self._swap()

    def add(self, operation: Operation) -> BulkProcessor:
        """Add an operation, flushing the current request if it is full.

        Raises:
            BulkProcessorClosedError: If ``close()`` has been called.
        """
        with self._lock:
            self._ensure_open()
            self._request.add(operation)
            if not self._request.is_over_limit():
                return self
            execution_id, request = self._swap()
        logger.debug("Bulk [%d] reached its limits", execution_id)
        self._execute(execution_id, request)
        return self

    def flush(self) -> None:
        """Send the current request now if it holds any operation."""
        with self._lock:
            self._ensure_open()
            swapped = self._swap_if_not_empty()
        if swapped is not None:
            self._execute(*swapped)

    def _flush_when_needed(self) -> None:
        with self._lock:
            if self._closed:
                return
            swapped = self._swap_if_not_empty()
        if swapped is not None:
            logger.debug("Flush interval elapsed for bulk [%d]", swapped[0])
            self._execute(*swapped)

    def _execute(self, execution_id: int, request: BulkRequest) -> None:
        try:
            self._listener.before_bulk(execution_id, request)
            response = self._engine.execute(request)
        except Exception as e:
            self._notify(self._listener.after_bulk_failure, execution_id, request, e)
            return
        self._notify(self._listener.after_bulk, execution_id, request, response)

    def _notify(self, callback: Callable[..., None], *args: object) -> None:
        try:
            callback(*args)
        except Exception:
            logger.warning("Bulk listener %r failed", callback, exc_info=True)

    def close(self) -> None:
        """Stop the flush timer and send the remaining operations.

        Blocks until that last flush is done. Calling it again is a no-op,
        including from a listener during that flush.
        """
        with self._close_lock:
            with self._lock:
                if self._closed:
                    return
                self._closed = True

            if self._scheduler is not None:
                logger.debug("Stopping bulk flush scheduler")
                self._scheduler.stop()

            with self._lock:
                swapped = self._swap_if_not_empty()
            if swapped is not None:
                logger.debug("Executing [%d] remaining actions", swapped[1].count())
                self._execute(*swapped)
            logger.debug("Bulk processor is now closed")

    def __enter__(self) -> BulkProcessor:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
