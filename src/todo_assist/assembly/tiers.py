"""Priority tiers for candidate files.

Tiers have a total order: PRIMARY files are exempt from the budget, the
remaining tiers are packed greedily in ascending order.
"""

from __future__ import annotations

import re
from enum import IntEnum
from pathlib import Path

from todo_assist.core.types import Instruction

__all__ = ["Tier", "classify", "leading_segment"]

_SEGMENT_RE = re.compile(r"^[A-Z][a-z]+")


class Tier(IntEnum):
    """Priority class of a candidate file (lower sorts first).

    Attributes:
        PRIMARY: Base name referenced in the instruction text; never chopped.
        SEGMENT: Shares the instruction file's leading capitalized segment.
        ROOT: Base name contains, or is contained in, the instruction's.
        OTHER: Everything else.

    """

    PRIMARY = 1
    SEGMENT = 2
    ROOT = 3
    OTHER = 4

    @property
    def budget_exempt(self) -> bool:
        """True if files in this tier bypass the budget."""
        return self is Tier.PRIMARY


def leading_segment(stem: str) -> str:
    """Return the leading capitalized word of a base name.

    ``HandleView`` gives ``Handle``. Names without a capitalized lowercase
    run (``HTTPClient``, ``main``) fall back to the whole name.
    """
    match = _SEGMENT_RE.match(stem)
    return match.group(0) if match else stem


def classify(path: Path, instruction: Instruction) -> Tier:
    """Classify a non-instruction file into its priority tier.

    Args:
        path: Candidate file.
        instruction: The active instruction.

    Returns:
        The first tier whose rule matches, evaluated PRIMARY to OTHER.

    """
    stem = path.stem
    todo_stem = instruction.stem
    if not stem:
        return Tier.OTHER
    if stem in instruction.line:
        return Tier.PRIMARY
    if leading_segment(stem) == leading_segment(todo_stem):
        return Tier.SEGMENT
    if stem in todo_stem or todo_stem in stem:
        return Tier.ROOT
    return Tier.OTHER
