"""Tests for bulk request limits."""
from __future__ import annotations

import pytest

from crawl_bulk.bulk import BulkRequest, DeleteOperation
from crawl_bulk.units import ByteSizeUnit, ByteSizeValue

from .conftest import PAYLOAD_SIZE, make_operation


def _generate_and_check(
    bulk: BulkRequest, start: int, size: int, over_the_limit: bool
) -> None:
    for index in range(start, start + size):
        bulk.add(make_operation(index))
    assert bulk.is_over_limit() is over_the_limit
    assert bulk.count() == start + size - 1


def _bulk(max_actions: int | None, max_bytes: int | ByteSizeValue | None) -> BulkRequest:
    bulk = BulkRequest()
    bulk.max_actions(max_actions)
    bulk.max_bytes(max_bytes)
    return bulk


@pytest.mark.parametrize("max_actions", [1, 2, 5, 137])
def test_limits_max_actions(max_actions: int) -> None:
    bulk = _bulk(max_actions, ByteSizeValue(1, ByteSizeUnit.MB))
    _generate_and_check(bulk, 1, max_actions - 1, False)
    _generate_and_check(bulk, max_actions, 1, True)


def test_max_actions_is_false_until_nth_add() -> None:
    bulk = _bulk(5, None)
    states = []
    for index in range(5):
        bulk.add(make_operation(index))
        states.append(bulk.is_over_limit())
    assert states == [False, False, False, False, True]


@pytest.mark.parametrize("first_size", [1, 3, 250])
def test_limits_max_size(first_size: int) -> None:
    bulk = _bulk(0, ByteSizeValue(first_size * PAYLOAD_SIZE))
    _generate_and_check(bulk, 1, first_size - 1, False)
    _generate_and_check(bulk, first_size, 1, True)
    assert bulk.total_bytes() == first_size * PAYLOAD_SIZE


@pytest.mark.parametrize(
    "max_bytes",
    [None, 0, ByteSizeValue(0, ByteSizeUnit.KB), -1],
    ids=["null", "zero", "zero-kb", "negative"],
)
def test_disabled_byte_limit_defers_to_max_actions(max_bytes) -> None:
    bulk = _bulk(42, max_bytes)
    _generate_and_check(bulk, 1, 41, False)
    _generate_and_check(bulk, 42, 1, True)


def test_no_limits_is_never_over() -> None:
    bulk = _bulk(0, None)
    _generate_and_check(bulk, 1, 500, False)


def test_add_tracks_count_and_bytes_in_order() -> None:
    bulk = BulkRequest()
    first = make_operation(1)
    second = DeleteOperation(index="test", id="doc-2")

    bulk.add(first)
    bulk.add(second)

    assert bulk.count() == 2
    assert bulk.total_bytes() == first.size + second.size
    assert bulk.operations == [first, second]
    assert list(bulk) == [first, second]


def test_constructor_limits_match_setters() -> None:
    bulk = BulkRequest(max_actions=3, max_bytes=ByteSizeValue(1, ByteSizeUnit.KB))
    assert bulk.limits == (3, 1024)


def test_operations_returns_a_copy() -> None:
    bulk = BulkRequest()
    bulk.add(make_operation(1))
    bulk.operations.clear()
    assert bulk.count() == 1


def test_operation_size_is_deterministic() -> None:
    assert make_operation(1).size == make_operation(1).size
    assert make_operation(1).size == make_operation(2).size
    bigger = make_operation(1, payload={"foo": "bar" * 100})
    assert bigger.size > make_operation(1).size
    assert DeleteOperation(index="test", id="x").size > 0
