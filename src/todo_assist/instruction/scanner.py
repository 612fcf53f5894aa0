"""Marker scanner: find instruction marker lines across a source tree."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from todo_assist.core.markers import DEFAULT_EXCLUDED_DIRS, DEFAULT_EXTENSIONS, TODO_MARKER_WS
from todo_assist.core.walk import iter_source_files, read_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MarkerHit:
    """One line carrying the marker.

    Attributes:
        path: File the line was found in.
        line_number: 1-indexed line number.
        line: The raw line (untrimmed).

    """

    path: Path
    line_number: int
    line: str


def find_marker_lines(content: str, marker: str = TODO_MARKER_WS) -> list[tuple[int, str]]:
    """Return (line_number, line) pairs for every line containing ``marker``."""
    return [
        (number, line)
        for number, line in enumerate(content.splitlines(), start=1)
        if marker in line
    ]


def scan_markers(
    root: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
    marker: str = TODO_MARKER_WS,
) -> Iterator[MarkerHit]:
    """Scan ``root`` recursively and yield every marker line.

    Args:
        root: Directory to scan.
        extensions: Allowed source file extensions.
        excluded_dirs: Directory names skipped by path-segment match.
        marker: Marker token to look for.

    Yields:
        MarkerHit for each matching line, files in sorted path order.

    """
    for path in iter_source_files(root, extensions, excluded_dirs):
        content = read_text(path)
        if content is None:
            continue
        for number, line in find_marker_lines(content, marker):
            yield MarkerHit(path=path, line_number=number, line=line)
