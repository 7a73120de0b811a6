"""Bulk operations: the unit of work accumulated by a bulk request."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, ClassVar


def _serialize(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True, default=str)


@dataclass(frozen=True)
class Operation:
    """Single write against the search backend.

    The size estimate is the UTF-8 length of the operation's JSON form and is
    computed once, so it is deterministic for a given payload.
    """

    kind: ClassVar[str] = "operation"

    index: str
    id: str
    size: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "size", len(_serialize(self.to_dict()).encode("utf-8")))

    def action(self) -> dict[str, Any]:
        """Bulk action header, e.g. ``{"delete": {"_index": ..., "_id": ...}}``."""
        return {self.kind: {"_index": self.index, "_id": self.id}}

    def to_dict(self) -> dict[str, Any]:
        return self.action()

    @property
    def key(self) -> tuple[str, str]:
        """Identity used to match a backend item response to its operation."""
        return self.index, self.id


@dataclass(frozen=True)
class IndexOperation(Operation):
    """Index (create or replace) a document."""

    kind: ClassVar[str] = "index"

    document: dict[str, Any] = field(default_factory=dict, compare=False)
    pipeline: str | None = None

    def action(self) -> dict[str, Any]:
        header: dict[str, Any] = {"_index": self.index, "_id": self.id}
        if self.pipeline is not None:
            header["pipeline"] = self.pipeline
        return {self.kind: header}

    def to_dict(self) -> dict[str, Any]:
        return {**self.action(), "payload": self.document}


@dataclass(frozen=True)
class DeleteOperation(Operation):
    """Delete a document by id."""

    kind: ClassVar[str] = "delete"
