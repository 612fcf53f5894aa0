"""Core data types passed between pipeline stages.

Defines the instruction, scope, block and bundle value objects. Every instance
is created and discarded within a single run; nothing here is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from todo_assist.core.markers import SEPARATOR

__all__ = [
    "Instruction",
    "IgnoredInstruction",
    "InstructionLocation",
    "SearchScope",
    "ContentBlock",
    "AssemblyBudget",
    "ExclusionSuggestion",
    "PromptBundle",
]


@dataclass(frozen=True, slots=True)
class Instruction:
    """The single active marker comment driving one run.

    Attributes:
        path: File containing the marker.
        line: First marker line, trimmed.
        line_number: 1-indexed line number of ``line``.
        mtime: Modification timestamp of ``path`` (seconds since epoch).

    """

    path: Path
    line: str
    line_number: int
    mtime: float = 0.0

    @property
    def stem(self) -> str:
        """File base name without extension."""
        return self.path.stem


@dataclass(frozen=True, slots=True)
class IgnoredInstruction:
    """A marker file that lost the recency tie-break."""

    path: Path
    line: str


@dataclass(frozen=True, slots=True)
class InstructionLocation:
    """Result of instruction lookup: the winner plus the ignored duplicates."""

    instruction: Instruction
    ignored: tuple[IgnoredInstruction, ...] = ()


@dataclass(frozen=True, slots=True)
class SearchScope:
    """Ordered, deduplicated set of directories to search.

    Attributes:
        roots: Primary scope root first, then nested package roots.

    """

    roots: tuple[Path, ...]

    @property
    def primary(self) -> Path:
        """The scope root chosen for the instruction."""
        return self.roots[0]

    def __iter__(self):  # noqa: D105
        return iter(self.roots)

    def __len__(self) -> int:  # noqa: D105
        return len(self.roots)


@dataclass(frozen=True, slots=True)
class ContentBlock:
    """Text placed in the bundle for one file.

    Attributes:
        path: Source file the block was built from.
        body: Region-filtered (or raw) content with markers scrubbed.
        diff: Diff report body, or None when there is no diff section.
        branch: Branch the diff was taken against.

    """

    path: Path
    body: str
    diff: str | None = None
    branch: str | None = None

    @property
    def basename(self) -> str:
        """File name shown in the header."""
        return self.path.name

    @property
    def header(self) -> str:
        """Header line naming the file."""
        return f"\nThe contents of {self.basename} is as follows:\n\n"

    @property
    def text(self) -> str:
        """Render the block exactly as it appears in the bundle."""
        parts = [self.header, self.body, "\n\n"]
        if self.diff:
            parts.append(
                f"\n{SEPARATOR}\nThe diff for {self.basename} "
                f"(against branch {self.branch}) is as follows:\n\n{self.diff}\n\n"
            )
        parts.append(f"\n{SEPARATOR}\n")
        return "".join(parts)

    def __len__(self) -> int:  # noqa: D105
        return len(self.text)


@dataclass(frozen=True, slots=True)
class AssemblyBudget:
    """Character limits for the bundle.

    ``limit`` gates inclusion of non-primary files. ``warning_threshold``
    only triggers exclusion suggestions after assembly; it never drops a file.

    Attributes:
        limit: Hard character ceiling, or None for unbounded.
        warning_threshold: Advisory threshold for exclusion suggestions.

    """

    limit: int | None = None
    warning_threshold: int = 600_000


@dataclass(frozen=True, slots=True)
class ExclusionSuggestion:
    """Advice to drop one file to get under the warning threshold.

    Attributes:
        path: File whose exclusion is suggested.
        saved: Characters saved by excluding it.
        percent: Resulting bundle size as a percentage of the threshold.

    """

    path: Path
    saved: int
    percent: int

    def render(self) -> str:
        """Render as a copy-pasteable CLI hint."""
        return f"--exclude {self.path.name} (will get you to {self.percent}% of threshold)"


@dataclass
class PromptBundle:
    """Final assembled prompt plus its diagnostics.

    Attributes:
        blocks: Included blocks; the instruction block is always first.
        trailer: Fixed instruction sentence appended once at the end.
        chopped: Files dropped because they would exceed the budget.
        suggestions: Exclusion advice, largest saving first.

    """

    blocks: list[ContentBlock]
    trailer: str
    chopped: list[Path] = field(default_factory=list)
    suggestions: list[ExclusionSuggestion] = field(default_factory=list)

    @property
    def text(self) -> str:
        """The externally observable prompt text."""
        return "".join(block.text for block in self.blocks) + f"\n\n{self.trailer}"

    @property
    def paths(self) -> list[Path]:
        """Paths of included files, in bundle order."""
        return [block.path for block in self.blocks]

    def __len__(self) -> int:  # noqa: D105
        return len(self.text)
