"""Instruction discovery: marker scanning and single-instruction selection."""

from todo_assist.instruction.locator import load_instruction, locate_instruction
from todo_assist.instruction.scanner import MarkerHit, scan_markers

__all__ = [
    "MarkerHit",
    "load_instruction",
    "locate_instruction",
    "scan_markers",
]
