"""Definition locator: files that declare any candidate symbol.

A file matches when one of its lines holds a declaration keyword followed by
a candidate name as a whole word. All symbols are folded into one alternation
pattern so every file is read and searched once per run.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from todo_assist.core.markers import DEFAULT_EXCLUDED_DIRS, DEFAULT_EXTENSIONS
from todo_assist.core.types import SearchScope
from todo_assist.core.walk import iter_source_files, read_text

logger = logging.getLogger(__name__)

# class-like, struct-like, enum-like, protocol/interface-like, type-alias-like
DECLARATION_KEYWORDS: tuple[str, ...] = (
    "class",
    "struct",
    "enum",
    "protocol",
    "interface",
    "@interface",
    "@protocol",
    "typealias",
    "type",
)


def build_definition_pattern(
    symbols: Iterable[str],
    keywords: Iterable[str] = DECLARATION_KEYWORDS,
) -> re.Pattern[str] | None:
    """Compile a single same-line ``keyword <blanks> symbol`` alternation pattern.

    Args:
        symbols: Candidate symbol names.
        keywords: Declaration keywords.

    Returns:
        Compiled multiline pattern, or None when there are no symbols.

    """
    names = sorted(set(symbols), key=lambda s: (-len(s), s))
    if not names:
        return None
    kws = sorted(set(keywords), key=lambda s: (-len(s), s))
    keyword_alt = "|".join(re.escape(k) for k in kws)
    symbol_alt = "|".join(re.escape(n) for n in names)
    return re.compile(rf"(?<![\w@])(?:{keyword_alt})[ \t]+(?:{symbol_alt})\b", re.MULTILINE)


def file_defines(content: str, pattern: re.Pattern[str]) -> bool:
    """Return True if ``content`` declares any symbol in ``pattern``."""
    return pattern.search(content) is not None


def find_definition_files(
    symbols: Iterable[str],
    scope: SearchScope | Iterable[Path],
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> set[Path]:
    """Find files inside ``scope`` that declare any of ``symbols``.

    Args:
        symbols: Candidate symbol names.
        scope: Directories to search.
        extensions: Allowed source file extensions.
        excluded_dirs: Directory names skipped by path-segment match.

    Returns:
        Set of matching file paths; empty when nothing matches.

    """
    symbols = frozenset(symbols)
    pattern = build_definition_pattern(symbols)
    if pattern is None:
        logger.info("No candidate symbols; skipping definition search")
        return set()

    extensions = tuple(extensions)
    excluded_dirs = tuple(excluded_dirs)
    seen: set[Path] = set()
    matches: set[Path] = set()

    for root in scope:
        if not Path(root).is_dir():
            logger.warning("Search root %s is not a directory, skipping", root)
            continue
        for path in iter_source_files(Path(root), extensions, excluded_dirs):
            if path in seen:
                continue
            seen.add(path)
            content = read_text(path)
            if content is not None and file_defines(content, pattern):
                matches.add(path)

    if matches:
        logger.debug("Definition files: %s", sorted(p.name for p in matches))
    else:
        logger.info("No definition files found for %d symbols", len(symbols))
    return matches
