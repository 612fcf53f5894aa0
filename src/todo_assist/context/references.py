"""Reference locator: files that mention the type enclosing the instruction.

Only used when callers explicitly ask for call sites in addition to
definitions (``--include-references``).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from todo_assist.core.markers import DEFAULT_EXCLUDED_DIRS, DEFAULT_EXTENSIONS, TODO_MARKER_WS
from todo_assist.core.types import SearchScope
from todo_assist.core.walk import iter_source_files, read_text

logger = logging.getLogger(__name__)

_ENCLOSING_DECL_RE = re.compile(
    r"^\s*(?:@\w+\s+)*(?:(?:public|private|internal|fileprivate|open|final)\s+)*"
    r"(?:class|struct|enum|protocol|extension|@interface|@implementation)\s+([A-Za-z_]\w*)"
)


def find_enclosing_type(content: str, marker: str = TODO_MARKER_WS) -> str | None:
    """Return the name of the last declaration preceding the marker line.

    Args:
        content: Instruction file content.
        marker: Marker token locating the instruction.

    Returns:
        Declared type name, or None if no declaration precedes the marker.

    """
    lines = content.splitlines()
    todo_index = next((i for i, line in enumerate(lines) if marker in line), None)
    if todo_index is None:
        return None
    for line in reversed(lines[:todo_index]):
        match = _ENCLOSING_DECL_RE.match(line)
        if match:
            return match.group(1)
    return None


def enclosing_symbol(path: Path, content: str) -> str:
    """Return the enclosing type name, falling back to the file's base name."""
    return find_enclosing_type(content) or path.stem


def find_referencing_files(
    symbol: str,
    scope: SearchScope | Iterable[Path],
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> set[Path]:
    """Find files that mention ``symbol`` as a whole word.

    Args:
        symbol: Name to search for.
        scope: Directories to search.
        extensions: Allowed source file extensions.
        excluded_dirs: Directory names skipped by path-segment match.

    Returns:
        Set of referencing file paths.

    """
    if not symbol:
        return set()

    pattern = re.compile(rf"\b{re.escape(symbol)}\b")
    extensions = tuple(extensions)
    excluded_dirs = tuple(excluded_dirs)
    seen: set[Path] = set()
    matches: set[Path] = set()

    for root in scope:
        for path in iter_source_files(Path(root), extensions, excluded_dirs):
            if path in seen:
                continue
            seen.add(path)
            content = read_text(path)
            if content is not None and pattern.search(content):
                matches.add(path)

    logger.info("Found %d files referencing '%s'", len(matches), symbol)
    return matches
