"""Listeners notified around each bulk execution.

For a given execution id ``before_bulk`` is always called before
``after_bulk`` or ``after_bulk_failure``. Listener calls happen on whichever
thread performs the flush, outside of the processor lock.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from crawl_bulk.bulk.request import BulkRequest
from crawl_bulk.bulk.response import BulkResponse
from crawl_bulk.exceptions import BulkProcessorClosedError

if TYPE_CHECKING:
    from crawl_bulk.bulk.processor import BulkProcessor

logger = logging.getLogger(__name__)


@runtime_checkable
class BulkListener(Protocol):
    """Callbacks around a bulk execution."""

    def before_bulk(self, execution_id: int, request: BulkRequest) -> None:
        ...

    def after_bulk(
        self, execution_id: int, request: BulkRequest, response: BulkResponse
    ) -> None:
        ...

    def after_bulk_failure(
        self, execution_id: int, request: BulkRequest, failure: BaseException
    ) -> None:
        ...


class SimpleBulkListener:
    """Logs every bulk execution and its failures."""

    def __init__(self) -> None:
        self.bulk_processor: BulkProcessor | None = None

    def set_bulk_processor(self, bulk_processor: BulkProcessor) -> None:
        self.bulk_processor = bulk_processor

    def before_bulk(self, execution_id: int, request: BulkRequest) -> None:
        logger.debug(
            "Going to execute bulk [%d] composed of %d actions", execution_id, request.count()
        )

    def after_bulk(
        self, execution_id: int, request: BulkRequest, response: BulkResponse
    ) -> None:
        logger.debug("Executed bulk [%d] composed of %d actions", execution_id, request.count())
        if response.has_failures():
            logger.warning(
                "There were failures while executing bulk [%d]: %s",
                execution_id,
                response.build_failure_message(),
            )
            for item in response.failed_items():
                logger.debug("Error for %s: %s", item.operation.key, item.failure_message)

    def after_bulk_failure(
        self, execution_id: int, request: BulkRequest, failure: BaseException
    ) -> None:
        logger.warning(
            "Error executing bulk [%d] of %d actions",
            execution_id,
            request.count(),
            exc_info=failure,
        )


class AdvancedBulkListener(SimpleBulkListener):
    """Tracks how many successive bulk responses reported failures.

    Producers can read ``errors`` to slow down while the backend struggles.
    """

    def __init__(self) -> None:
        super().__init__()
        self._errors = 0
        self._errors_lock = threading.Lock()

    @property
    def errors(self) -> int:
        with self._errors_lock:
            return self._errors

    def after_bulk(
        self, execution_id: int, request: BulkRequest, response: BulkResponse
    ) -> None:
        super().after_bulk(execution_id, request, response)
        with self._errors_lock:
            previous_errors = self._errors
            if response.has_failures():
                self._errors += 1
            else:
                self._errors = 0
        if response.has_failures():
            logger.warning(
                "Throttling is activated. Got [%d] successive errors so far.", previous_errors
            )
        elif previous_errors > 0:
            logger.debug("Back to normal behavior after [%d] errors.", previous_errors)


class RetryBulkListener(AdvancedBulkListener):
    """Re-adds operations rejected with a retryable error message.

    An item is retried when its failure message contains one of
    ``error_messages``. The operation is looked up in the originating
    request and added again to the attached processor.
    """

    def __init__(self, *error_messages: str) -> None:
        super().__init__()
        self.error_messages = error_messages

    def _is_retryable(self, failure_message: str | None) -> bool:
        if not failure_message:
            return False
        return any(message in failure_message for message in self.error_messages)

    def after_bulk(
        self, execution_id: int, request: BulkRequest, response: BulkResponse
    ) -> None:
        super().after_bulk(execution_id, request, response)
        if not response.has_failures():
            return

        by_key = {operation.key: operation for operation in request}
        for item in response.failed_items():
            if not self._is_retryable(item.failure_message):
                continue
            operation = by_key.get(item.operation.key)
            if operation is None:
                logger.warning(
                    "Can not retry document %s because it is not in bulk [%d] anymore.",
                    item.operation.key,
                    execution_id,
                )
                continue
            if self.bulk_processor is None:
                logger.warning(
                    "Can not retry document %s: no bulk processor attached.",
                    item.operation.key,
                )
                continue
            logger.debug(
                "Retrying document %s because of [%s]", operation.key, item.failure_message
            )
            try:
                self.bulk_processor.add(operation)
            except BulkProcessorClosedError:
                logger.warning(
                    "Can not retry document %s: bulk processor is closed.", operation.key
                )
