"""Source tree traversal shared by the scanner and the locators.

Every component that reads the tree goes through ``iter_source_files`` so the
extension filter and the excluded-directory rule are applied identically.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from todo_assist.core.markers import DEFAULT_EXCLUDED_DIRS, DEFAULT_EXTENSIONS

logger = logging.getLogger(__name__)


def normalize_extensions(extensions: Iterable[str]) -> tuple[str, ...]:
    """Normalize extensions to lowercase with a leading dot.

    Blank entries are dropped and duplicates collapse to their first
    occurrence.

    Args:
        extensions: Extensions with or without the leading dot.

    Returns:
        Tuple like ``(".swift", ".m")``, input order preserved.

    """
    result: list[str] = []
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        ext = ext if ext.startswith(".") else f".{ext}"
        if ext not in result:
            result.append(ext)
    return tuple(result)


def iter_source_files(
    root: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> Iterator[Path]:
    """Yield source files under ``root`` in sorted, deterministic order.

    Excluded directories are pruned before descending. A directory that
    cannot be listed is skipped with a warning instead of aborting the walk.

    Args:
        root: Directory to walk.
        extensions: Allowed file extensions.
        excluded_dirs: Directory names never descended into.

    Yields:
        Paths of matching files.

    """
    allowed = frozenset(normalize_extensions(extensions))
    excluded = set(excluded_dirs)

    def _on_error(err: OSError) -> None:
        logger.warning("Skipping unreadable directory %s: %s", err.filename, err.strerror)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for name in sorted(filenames):
            if Path(name).suffix.lower() in allowed:
                yield Path(dirpath) / name


def read_text(path: Path) -> str | None:
    """Read a source file, returning None if it vanished or is unreadable.

    Args:
        path: File to read.

    Returns:
        File content, or None (a warning is logged).

    """
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Skipping unreadable file %s: %s", path, e)
        return None
