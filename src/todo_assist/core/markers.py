"""Marker tokens and file-selection defaults shared across the tool chain."""

from __future__ import annotations

# Exact form without the trailing space; used for counting and scrubbing.
TODO_MARKER: str = "// TODO: -"

# Form with the trailing space; what the scanner looks for in source files.
TODO_MARKER_WS: str = "// TODO: - "

# Region markers (trimmed line must equal one of these)
REGION_OPEN_MARKERS: frozenset[str] = frozenset({"// v", "//v"})
REGION_CLOSE_MARKERS: frozenset[str] = frozenset({"// ^", "//^"})

REGION_PLACEHOLDER: str = "// ..."

DEFAULT_EXTENSIONS: tuple[str, ...] = (".swift", ".h", ".m", ".js")

# Directory names skipped by every walk (dependency caches, build output, VCS)
DEFAULT_EXCLUDED_DIRS: tuple[str, ...] = (
    "Pods",
    ".build",
    "node_modules",
    "DerivedData",
    "build",
    ".git",
)

DEFAULT_PACKAGE_MARKER: str = "Package.swift"

SEPARATOR: str = "--------------------------------------------------"

FIXED_INSTRUCTION: str = (
    "Can you do the TODO:- in the above code? But ignoring all FIXMEs and other "
    "TODOs...i.e. only do the one and only one TODO that is marked by "
    '"// TODO: - ", i.e. ignore things like "// TODO: example" because it '
    "doesn't have the hyphen"
)


def is_marker_line(line: str) -> bool:
    """Return True if the line carries the instruction marker."""
    return TODO_MARKER in line
