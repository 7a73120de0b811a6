"""Crawling: file listing and content extraction."""
from crawl_bulk.indexing.file_scanner import scan_files
from crawl_bulk.indexing.pipeline import (
    ExtractedContent,
    FileWorkItem,
    ParsedFileResult,
    ScanStatistic,
    build_doc_id,
    build_file_work_items,
    crawl_directory,
    extract_plain_text,
    parse_files,
)

__all__ = [
    "ExtractedContent",
    "FileWorkItem",
    "ParsedFileResult",
    "ScanStatistic",
    "build_doc_id",
    "build_file_work_items",
    "crawl_directory",
    "extract_plain_text",
    "parse_files",
    "scan_files",
]
