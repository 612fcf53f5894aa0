"""Instruction locator: pick exactly one active instruction file.

When several files carry the marker, the most recently modified one wins and
the rest are reported as ignored. Identical timestamps fall back to
lexicographic path order so repeated runs choose the same file.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from todo_assist.core.exceptions import NoInstructionFoundError
from todo_assist.core.markers import DEFAULT_EXCLUDED_DIRS, DEFAULT_EXTENSIONS, TODO_MARKER_WS
from todo_assist.core.types import IgnoredInstruction, Instruction, InstructionLocation
from todo_assist.core.walk import read_text
from todo_assist.instruction.scanner import MarkerHit, find_marker_lines, scan_markers

logger = logging.getLogger(__name__)


def _mtime(path: Path) -> float:
    try:
        return path.stat().st_mtime
    except OSError as e:
        logger.warning("Cannot stat %s: %s", path, e)
        return 0.0


def _recency_key(path: Path) -> tuple[float, str]:
    # Newest first, ties broken by path order
    return (-_mtime(path), path.as_posix())


def locate_instruction(
    root: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
    marker: str = TODO_MARKER_WS,
) -> InstructionLocation:
    """Find the single active instruction under ``root``.

    Args:
        root: Directory to scan (usually the git root).
        extensions: Allowed source file extensions.
        excluded_dirs: Directory names skipped during the scan.
        marker: Marker token to look for.

    Returns:
        InstructionLocation with the chosen instruction and ignored duplicates.

    Raises:
        NoInstructionFoundError: If no file contains the marker.

    """
    first_hits: dict[Path, MarkerHit] = {}
    for hit in scan_markers(root, extensions, excluded_dirs, marker):
        first_hits.setdefault(hit.path, hit)

    if not first_hits:
        raise NoInstructionFoundError(
            f"No files found containing '{marker}' under {root}",
            root=root,
            marker=marker,
        )

    ordered = sorted(first_hits, key=_recency_key)
    chosen = ordered[0]
    hit = first_hits[chosen]

    ignored = tuple(
        IgnoredInstruction(path=path, line=first_hits[path].line.strip())
        for path in ordered[1:]
    )

    if ignored:
        logger.warning(
            "%d files contain an instruction; using the most recent: %s",
            len(first_hits),
            chosen,
        )
        for entry in ignored:
            logger.warning("  ignoring %s: %s", entry.path.name, entry.line)
    else:
        logger.debug("Only one matching file found: %s", chosen)

    instruction = Instruction(
        path=chosen,
        line=hit.line.strip(),
        line_number=hit.line_number,
        mtime=_mtime(chosen),
    )
    return InstructionLocation(instruction=instruction, ignored=ignored)


def load_instruction(path: Path, marker: str = TODO_MARKER_WS) -> Instruction:
    """Build an Instruction from an explicitly chosen file.

    Used when the instruction file is overridden instead of scanned for.

    Args:
        path: File expected to contain the marker.
        marker: Marker token to look for.

    Returns:
        Instruction for the first marker line in ``path``.

    Raises:
        NoInstructionFoundError: If the file is unreadable or has no marker.

    """
    content = read_text(path)
    hits = find_marker_lines(content, marker) if content is not None else []
    if not hits:
        raise NoInstructionFoundError(
            f"Instruction file {path} does not contain '{marker}'",
            root=path.parent,
            marker=marker,
        )
    number, line = hits[0]
    return Instruction(path=path, line=line.strip(), line_number=number, mtime=_mtime(path))
