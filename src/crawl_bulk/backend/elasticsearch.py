"""Elasticsearch engine: turns a bulk request into a ``_bulk`` call."""
from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from crawl_bulk.bulk.operation import IndexOperation, Operation
from crawl_bulk.bulk.request import BulkRequest
from crawl_bulk.bulk.response import BulkItemResponse, BulkResponse
from crawl_bulk.exceptions import EngineError

logger = logging.getLogger(__name__)

NDJSON_CONTENT_TYPE = "application/x-ndjson"
DEFAULT_TIMEOUT = 30.0


def create_client(
    url: str,
    api_key: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> httpx.Client:
    """Create an HTTP client bound to an Elasticsearch cluster."""
    headers = {"Accept": "application/json"}
    if api_key:
        headers["Authorization"] = f"ApiKey {api_key}"
    return httpx.Client(base_url=url, headers=headers, timeout=timeout)


def build_ndjson(request: BulkRequest) -> str:
    """Serialize operations as the newline delimited body of a bulk call."""
    lines: list[str] = []
    for operation in request:
        lines.append(json.dumps(operation.action(), separators=(",", ":")))
        if isinstance(operation, IndexOperation):
            lines.append(json.dumps(operation.document, separators=(",", ":"), default=str))
    return "\n".join(lines) + "\n"


def _failure_message(error: Any) -> str:
    if isinstance(error, dict):
        error_type = error.get("type")
        reason = error.get("reason", "")
        return f"{error_type}: {reason}" if error_type else str(reason)
    return str(error)


def parse_bulk_response(request: BulkRequest, body: dict[str, Any]) -> BulkResponse:
    """Map a ``_bulk`` JSON response back onto the request's operations.

    Items come back in request order; the id is used as a fallback when the
    counts do not line up.
    """
    operations = request.operations
    by_key: dict[tuple[str, str], Operation] = {op.key: op for op in operations}
    raw_items = body.get("items", [])

    response = BulkResponse(errors=bool(body.get("errors", False)))
    for position, raw_item in enumerate(raw_items):
        # Each item is {"<kind>": {...}}
        result = next(iter(raw_item.values()), {}) if raw_item else {}
        if len(raw_items) == len(operations):
            operation = operations[position]
        else:
            key = (result.get("_index", ""), str(result.get("_id", "")))
            operation = by_key.get(key)
            if operation is None:
                logger.debug("Ignoring bulk item for unknown document %s", key)
                continue
        error = result.get("error")
        response.items.append(
            BulkItemResponse(
                operation=operation,
                failed=error is not None,
                failure_message=_failure_message(error) if error is not None else None,
            )
        )
    return response


class ElasticsearchEngine:
    """Engine that sends bulk requests to the Elasticsearch ``_bulk`` API.

    Transport and HTTP errors are reported on the returned response (its
    ``exception`` is set) rather than raised.
    """

    def __init__(self, client: httpx.Client, refresh: bool = False) -> None:
        self._client = client
        self._refresh = refresh

    def execute(self, request: BulkRequest) -> BulkResponse:
        body = build_ndjson(request)
        logger.debug(
            "Sending a bulk request of [%d] documents to Elasticsearch", request.count()
        )
        params = {"refresh": "true"} if self._refresh else None
        try:
            http_response = self._client.post(
                "/_bulk",
                content=body.encode("utf-8"),
                headers={"Content-Type": NDJSON_CONTENT_TYPE},
                params=params,
            )
            http_response.raise_for_status()
        except httpx.HTTPStatusError as e:
            return BulkResponse(
                exception=EngineError(
                    f"Bulk request failed with status {e.response.status_code}: {e.response.text}"
                )
            )
        except httpx.HTTPError as e:
            return BulkResponse(exception=EngineError(f"Bulk request failed: {e}"))

        try:
            payload = http_response.json()
        except ValueError as e:
            return BulkResponse(exception=EngineError(f"Invalid bulk response: {e}"))
        return parse_bulk_response(request, payload)

    def close(self) -> None:
        self._client.close()
