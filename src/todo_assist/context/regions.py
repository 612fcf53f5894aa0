"""Region filter: keep only ``// v`` ... ``// ^`` spans of a file.

Lines outside a region are dropped and each elided span is replaced by a
single placeholder block (blank line, ``// ...``, blank line). Files without
an opening marker pass through unchanged.
"""

from __future__ import annotations

import logging
import re

from todo_assist.core.markers import (
    REGION_CLOSE_MARKERS,
    REGION_OPEN_MARKERS,
    REGION_PLACEHOLDER,
    TODO_MARKER_WS,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_LINES: tuple[str, ...] = ("", REGION_PLACEHOLDER, "")

ENCLOSING_CONTEXT_LABEL = "// Enclosing context:"

# Declaration lines that can open an enclosing block (Swift, JS, Objective-C)
_CANDIDATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"^\s*(?:@\w+\s+)*(?:(?:public|private|internal|fileprivate|open|final|static|"
        r"override|mutating)\s+)*(?:func|init|class|struct|enum|extension|protocol)\b.*\{"
    ),
    re.compile(r"^\s*(?:(?:const|var|let)\s+)?\w+\s*=\s*(?:async\s+)?function\s*\([^)]*\)\s*\{"),
    re.compile(r"^\s*(?:export\s+)?(?:async\s+)?function\s+\w+\s*\([^)]*\)\s*\{"),
    re.compile(r"^\s*[\w.]+\s*\(\s*(?:\"[^\"]*\"|'[^']*'|[\w.]+)\s*,\s*(?:async\s+)?\([^)]*\)\s*=>\s*\{"),
    re.compile(r"^\s*[-+]\s*\([^)]*\)\s*\w+.*\{"),
)


def is_open_marker(line: str) -> bool:
    """Return True if ``line`` opens a visible region."""
    return line.strip() in REGION_OPEN_MARKERS


def is_close_marker(line: str) -> bool:
    """Return True if ``line`` closes a visible region."""
    return line.strip() in REGION_CLOSE_MARKERS


def uses_regions(content: str) -> bool:
    """Return True if the content has at least one opening marker line."""
    return any(is_open_marker(line) for line in content.splitlines())


def filter_regions(content: str) -> str:
    """Extract marked regions, collapsing omitted spans to placeholders.

    Rules:
    - No opening marker: content is returned unchanged.
    - A placeholder precedes the first region only if non-blank content
      came before it, and follows the last region only if non-blank content
      comes after it.
    - Adjacent regions are separated by exactly one placeholder.
    - Two placeholders are never emitted back to back.
    - An unclosed region extends to the end of the file.

    Args:
        content: Full file content.

    Returns:
        Filtered content.

    """
    lines = content.splitlines()
    if not any(is_open_marker(line) for line in lines):
        return content

    output: list[str] = []
    inside = False
    seen_region = False
    omitted = False
    last_was_placeholder = False

    def _placeholder() -> None:
        nonlocal last_was_placeholder
        if not last_was_placeholder:
            output.extend(PLACEHOLDER_LINES)
            last_was_placeholder = True

    for line in lines:
        if is_open_marker(line):
            if inside:
                continue
            if omitted or seen_region:
                _placeholder()
            inside = True
            omitted = False
            continue
        if is_close_marker(line):
            if inside:
                inside = False
                seen_region = True
                omitted = False
            continue
        if inside:
            output.append(line)
            last_was_placeholder = False
        elif line.strip():
            omitted = True

    if not inside and seen_region and omitted:
        _placeholder()

    result = "\n".join(output)
    if content.endswith("\n") and output:
        result += "\n"
    return result


def marker_line_index(content: str, marker: str = TODO_MARKER_WS) -> int | None:
    """Return the 0-indexed line holding the first marker, or None."""
    for index, line in enumerate(content.splitlines()):
        if marker in line:
            return index
    return None


def is_inside_region(content: str, line_index: int) -> bool:
    """Return True if line ``line_index`` falls inside a visible region."""
    depth = 0
    for index, line in enumerate(content.splitlines()):
        if index == line_index:
            break
        if is_open_marker(line):
            depth += 1
        elif is_close_marker(line) and depth > 0:
            depth -= 1
    return depth > 0


def _is_candidate_line(line: str) -> bool:
    return any(p.match(line) for p in _CANDIDATE_PATTERNS)


def extract_enclosing_block(content: str, marker: str = TODO_MARKER_WS) -> str | None:
    """Extract the declaration block that encloses an out-of-region marker.

    Scans upward from the marker for the nearest candidate declaration line,
    then counts braces forward to its matching close.

    Args:
        content: Full file content.
        marker: Marker token locating the instruction.

    Returns:
        The block text, or None if the marker is missing, already inside a
        region, has no preceding declaration, or braces never balance.

    """
    todo_index = marker_line_index(content, marker)
    if todo_index is None or is_inside_region(content, todo_index):
        return None

    lines = content.splitlines()
    start = next(
        (i for i in range(todo_index - 1, -1, -1) if _is_candidate_line(lines[i])),
        None,
    )
    if start is None:
        return None

    depth = 0
    opened = False
    block: list[str] = []
    for line in lines[start:]:
        block.append(line)
        depth += line.count("{") - line.count("}")
        if "{" in line:
            opened = True
        if opened and depth <= 0:
            return "\n".join(block)
    return None


def filter_with_context(content: str, is_instruction: bool = False) -> str:
    """Region-filter a file, keeping an out-of-region instruction visible.

    For the instruction file, when regions are used and the marker sits
    outside them, the enclosing declaration block is appended after a label
    so the live instruction still reaches the bundle.

    Args:
        content: Full file content.
        is_instruction: Whether this is the instruction file.

    Returns:
        Filtered content, possibly with the enclosing block appended.

    """
    if not uses_regions(content):
        return content
    filtered = filter_regions(content)
    if not is_instruction:
        return filtered

    todo_index = marker_line_index(content)
    if todo_index is None or is_inside_region(content, todo_index):
        return filtered

    enclosing = extract_enclosing_block(content)
    if enclosing is None:
        # No declaration to anchor on; keep at least the instruction line
        enclosing = content.splitlines()[todo_index]
    logger.debug("Instruction outside marked regions; appending enclosing context")
    return f"{filtered.rstrip()}\n\n{ENCLOSING_CONTEXT_LABEL}\n{enclosing}"
