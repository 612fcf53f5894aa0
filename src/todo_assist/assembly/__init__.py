"""Prompt assembly: tiers, greedy budgeted packing and exclusion advice."""

from todo_assist.assembly.advisory import suggest_exclusions
from todo_assist.assembly.assembler import assemble_bundle, build_block, validate_marker_count
from todo_assist.assembly.tiers import Tier, classify

__all__ = [
    "Tier",
    "assemble_bundle",
    "build_block",
    "classify",
    "suggest_exclusions",
    "validate_marker_count",
]
