"""Tests for the file scanner."""
from pathlib import Path

from crawl_bulk.indexing.file_scanner import (
    DEFAULT_EXCLUDES,
    get_default_excludes,
    get_default_extensions,
    scan_files,
)


def _touch(root: Path, relative: str, text: str = "x") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def test_scan_finds_matching_extensions(temp_dir: Path) -> None:
    _touch(temp_dir, "notes.txt")
    _touch(temp_dir, "readme.md")
    _touch(temp_dir, "script.py")

    files = scan_files(temp_dir, extensions=frozenset({".txt", ".md"}))

    assert [f.name for f in files] == ["notes.txt", "readme.md"]


def test_scan_is_recursive_and_sorted(temp_dir: Path) -> None:
    _touch(temp_dir, "b/second.txt")
    _touch(temp_dir, "a/deep/first.txt")
    _touch(temp_dir, "c.txt")

    files = scan_files(temp_dir, extensions=frozenset({".txt"}))

    assert [f.relative_to(temp_dir).as_posix() for f in files] == [
        "a/deep/first.txt",
        "b/second.txt",
        "c.txt",
    ]


def test_extension_matching_ignores_case(temp_dir: Path) -> None:
    _touch(temp_dir, "LOUD.TXT")

    assert scan_files(temp_dir, extensions=frozenset({".Txt"})) == [temp_dir / "LOUD.TXT"]


def test_default_excludes_apply(temp_dir: Path) -> None:
    _touch(temp_dir, ".git/config.txt")
    _touch(temp_dir, "node_modules/pkg/readme.md")
    _touch(temp_dir, "~lock.txt")
    _touch(temp_dir, "kept.txt")

    files = scan_files(temp_dir)

    assert files == [temp_dir / "kept.txt"]


def test_extra_exclude_patterns(temp_dir: Path) -> None:
    _touch(temp_dir, "drafts/wip.txt")
    _touch(temp_dir, "final.txt")
    _touch(temp_dir, "final.bak.txt")

    files = scan_files(temp_dir, exclude_patterns=frozenset({"drafts", "*.bak.txt"}))

    assert files == [temp_dir / "final.txt"]


def test_exclusion_is_relative_to_root(tmp_path: Path) -> None:
    root = tmp_path / "node_modules" / "project"
    _touch(root, "doc.txt")

    assert scan_files(root) == [root / "doc.txt"]


def test_defaults_accessors() -> None:
    assert get_default_excludes() is DEFAULT_EXCLUDES
    assert ".txt" in get_default_extensions()
