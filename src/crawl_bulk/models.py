"""Domain entities for crawl_bulk."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class FileMeta(BaseModel):
    """Filesystem attributes of a crawled file."""
    filename: str
    extension: str
    path: str
    virtual_path: str
    filesize: int
    last_modified: datetime
    indexing_date: datetime = Field(default_factory=datetime.now)


class Document(BaseModel):
    """Represents a crawled document as sent to the search backend."""
    id: str
    content: str
    file: FileMeta
    meta: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def to_source(self) -> dict[str, Any]:
        """JSON-ready body for an index operation (the id travels separately)."""
        return self.model_dump(mode="json", exclude={"id"})
