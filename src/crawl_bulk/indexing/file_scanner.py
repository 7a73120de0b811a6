"""Local filesystem listing for the crawler."""

from __future__ import annotations

import fnmatch
from pathlib import Path

# Default file extensions to crawl
DEFAULT_EXTENSIONS = frozenset({".txt", ".md", ".rst", ".html", ".csv", ".json"})

# Default exclusion patterns (directory names and glob patterns)
DEFAULT_EXCLUDES = frozenset({
    ".git",
    ".hg",
    ".svn",
    "__pycache__",
    "node_modules",
    "~*",
    "*.tmp",
})


def _should_exclude(relative_path: Path, exclude_patterns: frozenset[str]) -> bool:
    """Check if any component of a root-relative path matches an exclusion.

    Plain names match a path component exactly; patterns containing
    ``*``, ``?`` or ``[`` are glob matched against each component.
    """
    for part in relative_path.parts:
        for pattern in exclude_patterns:
            if any(char in pattern for char in "*?["):
                if fnmatch.fnmatch(part, pattern):
                    return True
            elif part == pattern:
                return True
    return False


def scan_files(
    root_path: Path,
    extensions: frozenset[str] | None = None,
    exclude_patterns: frozenset[str] | None = None,
) -> list[Path]:
    """Scan a directory for files with matching extensions.

    Args:
        root_path: Root directory to scan.
        extensions: File extensions to include (default: DEFAULT_EXTENSIONS).
            Matching is case-insensitive.
        exclude_patterns: Patterns to exclude, added to DEFAULT_EXCLUDES.

    Returns:
        Matching files sorted by path for deterministic ordering.
    """
    if extensions is None:
        extensions = DEFAULT_EXTENSIONS
    wanted = frozenset(ext.lower() for ext in extensions)

    effective_excludes = DEFAULT_EXCLUDES
    if exclude_patterns:
        effective_excludes = effective_excludes | exclude_patterns

    files = [
        path
        for path in root_path.rglob("*")
        if path.is_file()
        and path.suffix.lower() in wanted
        and not _should_exclude(path.relative_to(root_path), effective_excludes)
    ]
    files.sort(key=lambda p: str(p))
    return files


def get_default_excludes() -> frozenset[str]:
    """Return the default exclusion patterns."""
    return DEFAULT_EXCLUDES


def get_default_extensions() -> frozenset[str]:
    """Return the default file extensions."""
    return DEFAULT_EXTENSIONS
