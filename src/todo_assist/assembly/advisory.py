"""Post-assembly advice: which files to exclude to shrink an oversized prompt.

The warning threshold is independent of the hard budget. It never removes
anything from the bundle; it only produces suggestions for the next run.
"""

from __future__ import annotations

import logging
from pathlib import Path

from todo_assist.core.types import ExclusionSuggestion, PromptBundle

logger = logging.getLogger(__name__)


def suggest_exclusions(bundle: PromptBundle, threshold: int, instruction_path: Path) -> list[ExclusionSuggestion]:
    """Rank included files by how much excluding them would save.

    Args:
        bundle: The assembled bundle.
        threshold: Warning threshold in characters (must be positive).
        instruction_path: Never suggested for exclusion.

    Returns:
        Suggestions sorted by descending savings; empty if the bundle is
        within the threshold.

    """
    total = len(bundle.text)
    if threshold <= 0 or total <= threshold:
        return []

    suggestions = [
        ExclusionSuggestion(
            path=block.path,
            saved=len(block),
            percent=(total - len(block)) * 100 // threshold,
        )
        for block in bundle.blocks
        if block.path != instruction_path
    ]
    suggestions.sort(key=lambda s: (-s.saved, s.path.name))

    logger.warning(
        "The prompt is %d characters long (threshold %d). This may exceed what the AI can handle effectively.",
        total,
        threshold,
    )
    for suggestion in suggestions:
        logger.warning("  %s", suggestion.render())
    return suggestions
