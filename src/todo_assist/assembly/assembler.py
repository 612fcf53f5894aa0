"""Budgeted assembler: pack candidate files into the final prompt bundle.

Pipeline: build blocks (region filter -> marker scrub -> diff) -> classify
into tiers -> greedy packing under the budget -> trailer -> exclusion advice.

The instruction block is always first and always included. PRIMARY files are
budget-exempt; SEGMENT, ROOT and OTHER files are appended tier by tier only
while the running character count stays within the limit. There is no
backtracking: a rejected file is recorded as chopped and packing moves on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from todo_assist.assembly.advisory import suggest_exclusions
from todo_assist.assembly.tiers import Tier, classify
from todo_assist.context.regions import filter_with_context
from todo_assist.core.exceptions import MarkerValidationError
from todo_assist.core.markers import FIXED_INSTRUCTION, TODO_MARKER, is_marker_line
from todo_assist.core.types import AssemblyBudget, ContentBlock, Instruction, PromptBundle
from todo_assist.core.walk import read_text
from todo_assist.git.repo import diff_file_against_branch

logger = logging.getLogger(__name__)

# (path, branch) -> unified diff text, or None when there is nothing to show
DiffProvider = Callable[[Path, str], str | None]


def scrub_markers(text: str, keep: str | None = None) -> str:
    """Remove marker lines from ``text``.

    Args:
        text: Content to scrub.
        keep: Trimmed instruction line to preserve once. When given, the
            first line equal to it survives (or, if none is equal, the first
            marker line). When None, every marker line is removed.

    Returns:
        Scrubbed text.

    """
    lines = text.split("\n")
    keep_index: int | None = None
    if keep is not None:
        marker_indexes = [i for i, line in enumerate(lines) if is_marker_line(line)]
        exact = [i for i in marker_indexes if lines[i].strip() == keep]
        candidates = exact or marker_indexes
        keep_index = candidates[0] if candidates else None

    return "\n".join(
        line
        for i, line in enumerate(lines)
        if i == keep_index or not is_marker_line(line)
    )


def build_block(
    path: Path,
    instruction: Instruction,
    diff_branch: str | None = None,
    diff_provider: DiffProvider | None = None,
) -> ContentBlock | None:
    """Build the bundle block for one file.

    Args:
        path: File to include.
        instruction: Active instruction (decides marker handling).
        diff_branch: Baseline branch, or None to skip diffs.
        diff_provider: Diff callable; defaults to git.

    Returns:
        ContentBlock, or None if the file cannot be read.

    """
    content = read_text(path)
    if content is None:
        return None

    is_instruction = path == instruction.path
    body = filter_with_context(content, is_instruction=is_instruction)
    body = scrub_markers(body, keep=instruction.line if is_instruction else None)

    diff: str | None = None
    if diff_branch:
        provider = diff_provider or diff_file_against_branch
        raw_diff = provider(path, diff_branch)
        if raw_diff and raw_diff.strip():
            diff = scrub_markers(raw_diff.strip())

    return ContentBlock(path=path, body=body, diff=diff, branch=diff_branch)


def _dedupe(files: Iterable[Path]) -> list[Path]:
    seen: set[Path] = set()
    ordered: list[Path] = []
    for path in files:
        if path not in seen:
            seen.add(path)
            ordered.append(path)
    return ordered


def assemble_bundle(
    files: Iterable[Path],
    instruction: Instruction,
    budget: AssemblyBudget | None = None,
    diff_branch: str | None = None,
    diff_provider: DiffProvider | None = None,
) -> PromptBundle:
    """Assemble the prompt bundle from candidate files.

    Args:
        files: Candidate files (instruction, definitions, references).
        instruction: Active instruction; its file is always included first.
        budget: Character budget; ``limit=None`` (or no budget) means
            unbounded.
        diff_branch: Branch to diff each included file against.
        diff_provider: Diff callable; defaults to git.

    Returns:
        PromptBundle with blocks, trailer, chopped files and suggestions.

    """
    budget = budget or AssemblyBudget()
    candidates = sorted(p for p in _dedupe(files) if p != instruction.path)

    blocks: list[ContentBlock] = []
    chopped: list[Path] = []

    instruction_block = build_block(instruction.path, instruction, diff_branch, diff_provider)
    if instruction_block is None:
        logger.error("Instruction file %s could not be read", instruction.path)
    else:
        blocks.append(instruction_block)

    built: list[tuple[Tier, int, ContentBlock]] = []
    for index, path in enumerate(candidates):
        block = build_block(path, instruction, diff_branch, diff_provider)
        if block is None:
            continue
        built.append((classify(path, instruction), index, block))

    if budget.limit is None:
        blocks.extend(block for _, _, block in built)
    else:
        total = sum(len(b) for b in blocks)
        for tier, _, block in sorted(built, key=lambda item: (item[0], item[1])):
            size = len(block)
            if tier.budget_exempt or total + size <= budget.limit:
                blocks.append(block)
                total += size
            else:
                chopped.append(block.path)
                logger.warning(
                    "Chopped %s (%d chars, tier %s): would exceed budget of %d",
                    block.basename,
                    size,
                    tier.name,
                    budget.limit,
                )

    bundle = PromptBundle(blocks=blocks, trailer=FIXED_INSTRUCTION, chopped=chopped)
    bundle.suggestions = suggest_exclusions(bundle, budget.warning_threshold, instruction.path)
    return bundle


def count_marker_lines(text: str) -> int:
    """Count lines carrying the marker."""
    return sum(1 for line in text.splitlines() if TODO_MARKER in line)


def validate_marker_count(text: str, diff_enabled: bool = False) -> int:
    """Check the bundle holds the instruction marker plus the trailer's.

    Args:
        text: Final bundle text.
        diff_enabled: Whether diff sections were requested (allows one extra).

    Returns:
        The number of marker lines found.

    Raises:
        MarkerValidationError: If the count is not acceptable.

    """
    expected = (2, 3) if diff_enabled else (2,)
    found = count_marker_lines(text)
    if found not in expected:
        accepted = " or ".join(str(n) for n in expected)
        raise MarkerValidationError(
            f"Expected {accepted} '{TODO_MARKER}' markers, but found {found}.",
            found=found,
            expected=expected,
        )
    return found
