"""Scope resolution: which directories to search for definitions.

The primary root is the nearest ancestor package (a directory holding the
boundary marker file), or the top-level root when there is none or when
whole-repository mode is forced. Nested packages below the chosen root are
added as independent search roots.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from todo_assist.core.markers import DEFAULT_EXCLUDED_DIRS, DEFAULT_PACKAGE_MARKER
from todo_assist.core.types import SearchScope

logger = logging.getLogger(__name__)


def find_package_root(
    file_path: Path,
    stop_at: Path | None = None,
    package_marker: str = DEFAULT_PACKAGE_MARKER,
) -> Path | None:
    """Walk upward from ``file_path`` to the nearest package root.

    Args:
        file_path: File whose package is wanted.
        stop_at: Highest directory to check (inclusive), usually the git root.
        package_marker: Boundary marker file name.

    Returns:
        Package root directory, or None if no ancestor holds the marker.

    """
    directory = file_path.parent.resolve()
    stop = stop_at.resolve() if stop_at is not None else None

    while True:
        if (directory / package_marker).is_file():
            return directory
        if directory == stop or directory.parent == directory:
            return None
        directory = directory.parent


def find_nested_packages(
    root: Path,
    package_marker: str = DEFAULT_PACKAGE_MARKER,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> list[Path]:
    """List descendant directories of ``root`` holding the boundary marker.

    Args:
        root: Directory to search below.
        package_marker: Boundary marker file name.
        excluded_dirs: Directory names never descended into.

    Returns:
        Sorted package directories, excluding ``root`` itself.

    """
    excluded = set(excluded_dirs)
    root = root.resolve()
    found: list[Path] = []

    def _on_error(err: OSError) -> None:
        logger.warning("Skipping unreadable directory %s: %s", err.filename, err.strerror)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        directory = Path(dirpath)
        if directory != root and package_marker in filenames:
            found.append(directory)
    return sorted(found)


def resolve_scope(
    instruction_path: Path,
    top_root: Path,
    force_global: bool = False,
    package_marker: str = DEFAULT_PACKAGE_MARKER,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> SearchScope:
    """Determine the ordered list of directories to search.

    Args:
        instruction_path: File holding the instruction.
        top_root: Top-level (repository) root.
        force_global: Always use ``top_root`` as the primary root.
        package_marker: Boundary marker file name.
        excluded_dirs: Directory names skipped when looking for nested packages.

    Returns:
        SearchScope with the primary root first, nested package roots after.

    """
    top_root = top_root.resolve()
    if force_global:
        logger.info("Force global enabled: ignoring package boundaries")
        primary = top_root
    else:
        package_root = find_package_root(instruction_path, top_root, package_marker)
        if package_root is not None:
            logger.info("Found package root: %s", package_root)
        primary = package_root or top_root

    roots: list[Path] = [primary]
    for nested in find_nested_packages(primary, package_marker, excluded_dirs):
        if nested not in roots:
            roots.append(nested)

    logger.debug("Search scope: %s", [str(r) for r in roots])
    return SearchScope(roots=tuple(roots))
