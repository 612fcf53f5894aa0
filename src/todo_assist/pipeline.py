"""End-to-end prompt generation.

Stages run in order:

1. Resolve the git root and verify the diff branch (if any)
2. Locate (or load) the single active instruction
3. Resolve the search scope
4. Extract candidate symbols and find definition files
5. Optionally add files referencing the enclosing type
6. Apply exclusion and slim filters
7. Assemble the bundle and validate its marker count

Only fatal errors propagate; everything else is logged and degraded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from todo_assist.assembly import assemble_bundle, validate_marker_count
from todo_assist.assembly.assembler import DiffProvider
from todo_assist.context import (
    enclosing_symbol,
    extract_symbols,
    extract_targeted_symbols,
    find_definition_files,
    find_referencing_files,
    resolve_scope,
)
from todo_assist.core.config import PromptConfig
from todo_assist.core.types import (
    AssemblyBudget,
    Instruction,
    InstructionLocation,
    PromptBundle,
    SearchScope,
)
from todo_assist.core.walk import read_text
from todo_assist.git import get_git_root, verify_branch
from todo_assist.instruction import load_instruction, locate_instruction

logger = logging.getLogger(__name__)

# Basename fragments dropped in slim mode (UI and coordinator layers)
SLIM_EXCLUDED_PATTERNS: tuple[str, ...] = (
    "ViewController",
    "Manager",
    "Presenter",
    "Router",
    "Interactor",
    "Configurator",
    "DataSource",
    "Delegate",
    "View",
)

SINGULAR_ONLY_EXTENSIONS: frozenset[str] = frozenset({".js"})


@dataclass
class PromptResult:
    """Everything produced by one pipeline run.

    Attributes:
        bundle: The assembled prompt bundle.
        location: Chosen instruction and ignored duplicates.
        git_root: Repository root used for the run.
        scope: Search scope (None in singular mode).
        symbols: Candidate symbols extracted from the instruction file.
        files: Final candidate list handed to the assembler.
        singular: Whether the run ended up in singular mode.

    """

    bundle: PromptBundle
    location: InstructionLocation
    git_root: Path
    scope: SearchScope | None = None
    symbols: frozenset[str] = frozenset()
    files: list[Path] = field(default_factory=list)
    singular: bool = False

    @property
    def instruction(self) -> Instruction:
        """The active instruction."""
        return self.location.instruction

    @property
    def text(self) -> str:
        """Final prompt text."""
        return self.bundle.text


def is_slim_excluded(path: Path) -> bool:
    """Return True if ``path`` is dropped in slim mode."""
    return any(pattern in path.name for pattern in SLIM_EXCLUDED_PATTERNS)


def filter_files(
    files: list[Path],
    instruction_path: Path,
    excludes: tuple[str, ...] = (),
    slim: bool = False,
) -> list[Path]:
    """Apply basename exclusions and slim filtering.

    The instruction file always survives.

    Args:
        files: Candidate files in order.
        instruction_path: The active instruction's file.
        excludes: Basenames to drop.
        slim: Drop view/controller-style files.

    Returns:
        Filtered list, order preserved.

    """
    excluded = set(excludes)
    kept: list[Path] = []
    for path in files:
        if path == instruction_path:
            kept.append(path)
        elif path.name in excluded:
            logger.info("Excluding %s", path.name)
        elif slim and is_slim_excluded(path):
            logger.info("Slim mode: excluding %s", path.name)
        else:
            kept.append(path)
    return kept


def _find_instruction(config: PromptConfig, git_root: Path, cwd: Path) -> InstructionLocation:
    if config.instruction_file:
        path = Path(config.instruction_file)
        if not path.is_absolute():
            path = cwd / path
        path = path.resolve()
        logger.info("Using instruction file override: %s", path)
        return InstructionLocation(instruction=load_instruction(path))
    return locate_instruction(git_root, config.scan.extensions, config.scan.excluded_dirs)


def generate_prompt(
    config: PromptConfig,
    cwd: Path | None = None,
    diff_provider: DiffProvider | None = None,
    git_root: Path | None = None,
) -> PromptResult:
    """Run the full pipeline and return the assembled prompt.

    Args:
        config: Resolved configuration.
        cwd: Working directory used to find the git root (defaults to the
            process working directory).
        diff_provider: Diff callable override; defaults to git.
        git_root: Repository root already resolved by the caller; looked up
            from ``cwd`` and ``config.git_root`` when omitted.

    Returns:
        PromptResult with the bundle and run diagnostics.

    Raises:
        GitRootError: If no repository root can be determined.
        BranchNotFoundError: If the diff branch does not exist.
        NoInstructionFoundError: If no instruction marker is found.
        MarkerValidationError: If the bundle's marker count is wrong.

    """
    cwd = (cwd or Path.cwd()).resolve()
    if git_root is None:
        git_root = get_git_root(cwd, override=config.git_root)
    logger.debug("Git root: %s", git_root)

    if config.diff_branch:
        verify_branch(config.diff_branch, git_root)

    location = _find_instruction(config, git_root, cwd)
    instruction = location.instruction
    logger.info("Instruction file: %s", instruction.path)
    logger.info("Instruction: %s", instruction.line)

    singular = config.singular
    if not singular and instruction.path.suffix.lower() in SINGULAR_ONLY_EXTENSIONS:
        logger.warning("JavaScript instruction file detected; enabling singular mode")
        singular = True

    scope: SearchScope | None = None
    symbols: frozenset[str] = frozenset()
    files: list[Path] = [instruction.path]

    if singular:
        logger.info("Singular mode: only including the instruction file")
    else:
        content = read_text(instruction.path) or ""
        scope = resolve_scope(
            instruction.path,
            git_root,
            force_global=config.force_global,
            package_marker=config.scan.package_marker,
            excluded_dirs=config.scan.excluded_dirs,
        )

        symbols = extract_targeted_symbols(content) if config.targeted else extract_symbols(content)
        logger.info("Found %d candidate symbols", len(symbols))
        logger.debug("Symbols: %s", sorted(symbols))

        found = find_definition_files(symbols, scope, config.scan.extensions, config.scan.excluded_dirs)
        if config.include_references:
            symbol = enclosing_symbol(instruction.path, content)
            logger.info("Including files referencing '%s'", symbol)
            found |= find_referencing_files(symbol, scope, config.scan.extensions, config.scan.excluded_dirs)

        files.extend(sorted(p for p in found if p != instruction.path))
        files = filter_files(files, instruction.path, config.excludes, config.slim)

    logger.info("Final list of files: %s", [p.name for p in files])

    budget = AssemblyBudget(limit=config.assembly.budget, warning_threshold=config.assembly.warn_threshold)
    bundle = assemble_bundle(
        files,
        instruction,
        budget=budget,
        diff_branch=config.diff_branch,
        diff_provider=diff_provider,
    )
    validate_marker_count(bundle.text, diff_enabled=bool(config.diff_branch))

    return PromptResult(
        bundle=bundle,
        location=location,
        git_root=git_root,
        scope=scope,
        symbols=symbols,
        files=files,
        singular=singular,
    )


__all__ = [
    "PromptResult",
    "SLIM_EXCLUDED_PATTERNS",
    "filter_files",
    "generate_prompt",
    "is_slim_excluded",
]
