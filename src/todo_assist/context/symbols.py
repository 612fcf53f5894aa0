"""Lexical symbol extraction from the instruction file.

This is a heuristic, not a parser: it over-approximates candidate type names
and relies on the definition locator to discard anything without a real
declaration. The tokenizer and the matcher are separate so a parser-backed
``SymbolExtractor`` can replace them without touching the assembler.

Pipeline: drop import lines -> tokenize -> match -> frozenset
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

from todo_assist.core.markers import TODO_MARKER_WS

logger = logging.getLogger(__name__)

IMPORT_PREFIXES: tuple[str, ...] = ("import ", "@import", "#import", "#include")

_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")
_TYPE_NAME_RE = re.compile(r"^[A-Z][A-Za-z0-9]+$")
_IDENT_RE = re.compile(r"^[A-Za-z][A-Za-z0-9]*$")


@dataclass(frozen=True, slots=True)
class Token:
    """A word from the cleaned text plus the raw line it came from."""

    text: str
    source_line: str


class SymbolExtractor(Protocol):
    """Anything that turns file text into a set of candidate symbol names."""

    def extract(self, text: str) -> frozenset[str]:
        """Return candidate symbols found in ``text``."""
        ...


def is_import_line(line: str) -> bool:
    """Return True for import/include directives."""
    return line.lstrip().startswith(IMPORT_PREFIXES)


def tokenize_lines(lines: Iterable[str]) -> Iterator[Token]:
    """Split lines into alphanumeric words, skipping import directives.

    Every non-alphanumeric character becomes whitespace before splitting.

    Args:
        lines: Raw source lines.

    Yields:
        Token for each word, carrying its original line.

    """
    for line in lines:
        if is_import_line(line):
            continue
        cleaned = _NON_ALNUM_RE.sub(" ", line)
        for word in cleaned.split():
            yield Token(text=word, source_line=line)


class SymbolMatcher:
    """Decide whether a token looks like a type name.

    A token is kept if it is a capitalized identifier, or if its raw line
    held it as a single-element bracket annotation such as ``[Widget]``.
    """

    def matches(self, token: Token) -> bool:
        """Return True if ``token`` is a candidate symbol."""
        if _TYPE_NAME_RE.match(token.text):
            return True
        if not _IDENT_RE.match(token.text):
            return False
        return re.search(rf"\[\s*{re.escape(token.text)}\s*\]", token.source_line) is not None


class LexicalSymbolExtractor:
    """Default SymbolExtractor: tokenizer plus matcher."""

    def __init__(self, matcher: SymbolMatcher | None = None) -> None:  # noqa: D107
        self._matcher = matcher or SymbolMatcher()

    def extract(self, text: str) -> frozenset[str]:
        """Return the deduplicated candidate symbols in ``text``."""
        symbols = frozenset(
            token.text
            for token in tokenize_lines(text.splitlines())
            if self._matcher.matches(token)
        )
        logger.debug("Extracted %d candidate symbols", len(symbols))
        return symbols


def extract_symbols(text: str, extractor: SymbolExtractor | None = None) -> frozenset[str]:
    """Extract candidate symbol names from source text.

    Args:
        text: Full text of the instruction file (or a slice of it).
        extractor: Optional alternative extractor.

    Returns:
        Unordered set of candidate names; empty if none were found.

    """
    return (extractor or LexicalSymbolExtractor()).extract(text)


def extract_inner_block(content: str, marker: str = TODO_MARKER_WS) -> str | None:
    """Return the body of the innermost ``{ ... }`` block around the marker.

    Args:
        content: File content.
        marker: Marker token locating the instruction.

    Returns:
        Text between the enclosing braces, or None if the marker is missing,
        not inside a block, or the block is never closed.

    """
    pos = content.find(marker)
    if pos < 0:
        return None

    stack: list[int] = []
    for index, ch in enumerate(content[:pos]):
        if ch == "{":
            stack.append(index)
        elif ch == "}" and stack:
            stack.pop()
    if not stack:
        return None

    open_brace = stack[-1]
    depth = 1
    index = open_brace + 1
    while index < len(content) and depth > 0:
        if content[index] == "{":
            depth += 1
        elif content[index] == "}":
            depth -= 1
        index += 1

    if depth != 0:
        return None
    return content[open_brace + 1 : index - 1]


def extract_targeted_symbols(content: str, extractor: SymbolExtractor | None = None) -> frozenset[str]:
    """Extract symbols from the block enclosing the marker only.

    Falls back to the whole file when the marker is not inside a block.
    """
    inner = extract_inner_block(content)
    if inner is None:
        logger.debug("No enclosing block around the instruction; using whole file")
        return extract_symbols(content, extractor)
    return extract_symbols(inner, extractor)
