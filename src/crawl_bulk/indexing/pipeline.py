"""Crawl pipeline: scan files, extract their content, feed the bulk processor."""

from __future__ import annotations

import hashlib
import logging
import os
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from crawl_bulk.bulk.operation import DeleteOperation, IndexOperation
from crawl_bulk.bulk.processor import BulkProcessor
from crawl_bulk.exceptions import IndexingError
from crawl_bulk.indexing.file_scanner import scan_files
from crawl_bulk.models import Document, FileMeta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileWorkItem:
    """Represents one file scheduled for extraction."""

    sequence: int
    path: str
    relative_path: str
    doc_id: str
    file_type: str


@dataclass(frozen=True)
class ExtractedContent:
    """Text and metadata produced by an extractor."""

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ParsedFileResult:
    """Extractor output for a single source file."""

    work_item: FileWorkItem
    content: ExtractedContent | None = None
    error: str | None = None

    @property
    def has_error(self) -> bool:
        return self.error is not None


@dataclass
class ScanStatistic:
    """Counters for one crawl run."""

    nb_docs: int = 0
    nb_deleted: int = 0
    errors: int = 0
    started_at: datetime = field(default_factory=datetime.now)


Extractor = Callable[[Path], ExtractedContent]


def build_doc_id(relative_path: str) -> str:
    """Stable document id derived from the root-relative path."""
    return hashlib.sha256(relative_path.encode("utf-8")).hexdigest()[:16]


def build_file_work_items(files: Iterable[Path], root_path: Path) -> list[FileWorkItem]:
    """Build ordered work items from file scan output."""

    work_items: list[FileWorkItem] = []
    for sequence, file_path in enumerate(files):
        relative_path = file_path.relative_to(root_path).as_posix()
        work_items.append(
            FileWorkItem(
                sequence=sequence,
                path=str(file_path),
                relative_path=relative_path,
                doc_id=build_doc_id(relative_path),
                file_type=file_path.suffix.lower(),
            )
        )
    return work_items


def extract_plain_text(path: Path) -> ExtractedContent:
    """Default extractor: the file decoded as UTF-8."""
    return ExtractedContent(
        text=path.read_text(encoding="utf-8", errors="replace"),
        metadata={"content_type": "text/plain; charset=UTF-8"},
    )


def parse_work_item(work_item: FileWorkItem, extractor: Extractor) -> ParsedFileResult:
    """Run the extractor on one work item, capturing its failure."""

    try:
        content = extractor(Path(work_item.path))
    except Exception as exc:
        return ParsedFileResult(work_item=work_item, error=str(exc))
    return ParsedFileResult(work_item=work_item, content=content)


def parse_files(
    work_items: list[FileWorkItem],
    extractor: Extractor = extract_plain_text,
    *,
    max_workers: int | None = None,
) -> Iterator[ParsedFileResult]:
    """Extract files on a thread pool, yielding results in work item order."""

    if not work_items:
        return

    worker_count = max(max_workers or (os.cpu_count() or 1), 1)
    max_in_flight = worker_count * 2

    pending = iter(work_items)
    in_flight: dict[Future[ParsedFileResult], int] = {}
    buffered: dict[int, ParsedFileResult] = {}
    next_sequence = work_items[0].sequence
    exhausted = False

    with ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="extract") as executor:
        while True:
            while not exhausted and len(in_flight) < max_in_flight:
                item = next(pending, None)
                if item is None:
                    exhausted = True
                    break
                in_flight[executor.submit(parse_work_item, item, extractor)] = item.sequence

            if not in_flight:
                break

            done_futures, _ = wait(tuple(in_flight), return_when=FIRST_COMPLETED)
            for future in done_futures:
                sequence = in_flight.pop(future)
                buffered[sequence] = future.result()

            while next_sequence in buffered:
                yield buffered.pop(next_sequence)
                next_sequence += 1


def build_document(result: ParsedFileResult) -> Document:
    """Build the indexed document for a successfully extracted file."""
    if result.content is None:
        raise IndexingError(f"No content extracted for {result.work_item.path}")

    path = Path(result.work_item.path)
    stat = path.stat()
    return Document(
        id=result.work_item.doc_id,
        content=result.content.text,
        file=FileMeta(
            filename=path.name,
            extension=result.work_item.file_type.lstrip("."),
            path=str(path),
            virtual_path=result.work_item.relative_path,
            filesize=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime),
        ),
        meta=result.content.metadata,
    )


def crawl_directory(
    root_path: Path,
    processor: BulkProcessor,
    index: str,
    *,
    extractor: Extractor = extract_plain_text,
    extensions: frozenset[str] | None = None,
    exclude_patterns: frozenset[str] | None = None,
    known_ids: Iterable[str] = (),
    pipeline: str | None = None,
    max_workers: int | None = None,
) -> ScanStatistic:
    """Crawl ``root_path`` and add one operation per document to ``processor``.

    Every file found is indexed. Ids in ``known_ids`` that no longer match
    a file are deleted. Per-file extraction failures are counted, logged and
    skipped.

    Raises:
        IndexingError: If ``root_path`` is not a directory.
    """
    if not root_path.is_dir():
        raise IndexingError(f"Not a directory: {root_path}")

    stats = ScanStatistic()
    files = scan_files(root_path, extensions=extensions, exclude_patterns=exclude_patterns)
    work_items = build_file_work_items(files, root_path)
    logger.info("Found %d files to crawl in %s", len(work_items), root_path)

    seen_ids: set[str] = set()
    for result in parse_files(work_items, extractor, max_workers=max_workers):
        seen_ids.add(result.work_item.doc_id)
        if result.has_error:
            stats.errors += 1
            logger.warning("Failed to extract %s: %s", result.work_item.path, result.error)
            continue
        try:
            document = build_document(result)
        except OSError as e:
            stats.errors += 1
            logger.warning("Failed to read %s: %s", result.work_item.path, e)
            continue
        processor.add(
            IndexOperation(
                index=index,
                id=document.id,
                document=document.to_source(),
                pipeline=pipeline,
            )
        )
        stats.nb_docs += 1

    for doc_id in sorted(set(known_ids) - seen_ids):
        logger.debug("Removing document %s from index %s", doc_id, index)
        processor.add(DeleteOperation(index=index, id=doc_id))
        stats.nb_deleted += 1

    return stats
