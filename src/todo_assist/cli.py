"""Command-line entry point for todo-assist.

Writes the assembled prompt to stdout and, unless disabled, to the system
clipboard. Diagnostics go to stderr through the shared rich console.

Examples:
    todo-assist
    todo-assist --include-references --exclude AppDelegate.swift
    todo-assist --diff-with main --budget 200000
    todo-assist --singular --no-clipboard > prompt.txt

"""

import logging
import os
from pathlib import Path

import typer

from todo_assist.cli_utils import (
    EXIT_BRANCH_NOT_FOUND,
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    EXIT_GIT_ROOT_ERROR,
    EXIT_MARKER_VALIDATION_ERROR,
    EXIT_NO_INSTRUCTION,
    EXIT_SIGINT,
    _error,
    _info,
    _setup_logging,
    _success,
    _warning,
)
from todo_assist.clipboard import copy_to_clipboard
from todo_assist.core.config import PromptConfig, env_overrides, load_config
from todo_assist.core.exceptions import (
    BranchNotFoundError,
    ConfigError,
    GitRootError,
    MarkerValidationError,
    NoInstructionFoundError,
    TodoAssistError,
)
from todo_assist.git import get_git_root
from todo_assist.pipeline import PromptResult, generate_prompt

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="todo-assist",
    help="Assemble an AI prompt around the single '// TODO: - ' instruction in a repository.",
    add_completion=False,
)

# (exception type, exit code), most specific first
_EXIT_CODES: tuple[tuple[type[TodoAssistError], int], ...] = (
    (ConfigError, EXIT_CONFIG_ERROR),
    (NoInstructionFoundError, EXIT_NO_INSTRUCTION),
    (GitRootError, EXIT_GIT_ROOT_ERROR),
    (BranchNotFoundError, EXIT_BRANCH_NOT_FOUND),
    (MarkerValidationError, EXIT_MARKER_VALIDATION_ERROR),
)


def exit_code_for(error: TodoAssistError) -> int:
    """Map a todo-assist error to its process exit code."""
    for error_type, code in _EXIT_CODES:
        if isinstance(error, error_type):
            return code
    return EXIT_ERROR


def _discover_git_root(cwd: Path, env_root: str | None) -> Path | None:
    """Resolve the repository root once, or None when it cannot be found."""
    try:
        return get_git_root(cwd, override=env_root)
    except GitRootError:
        return None


def _report(result: PromptResult, quiet: bool) -> None:
    if quiet:
        return
    _info(f"Instruction file: {result.instruction.path}")
    _info(f"Instruction: {result.instruction.line}")
    if not result.singular:
        _info(f"Candidate symbols: {', '.join(sorted(result.symbols)) or '(none)'}")
    _info(f"Included files: {', '.join(p.name for p in result.bundle.paths)}")
    if result.bundle.chopped:
        _warning(f"Chopped to fit the budget: {', '.join(p.name for p in result.bundle.chopped)}")


@app.command()
def main(
    singular: bool = typer.Option(
        False,
        "--singular",
        "-s",
        help="Only include the file containing the instruction",
    ),
    force_global: bool = typer.Option(
        False,
        "--force-global",
        "-g",
        help="Search the whole repository, ignoring package boundaries",
    ),
    include_references: bool = typer.Option(
        False,
        "--include-references",
        "-r",
        help="Also include files referencing the enclosing type",
    ),
    diff_with: str | None = typer.Option(
        None,
        "--diff-with",
        "-d",
        help="Append each file's diff against this branch",
    ),
    exclude: list[str] | None = typer.Option(
        None,
        "--exclude",
        "-e",
        help="Basename to exclude (repeatable)",
    ),
    slim: bool = typer.Option(
        False,
        "--slim",
        help="Drop view, controller and coordinator files",
    ),
    targeted: bool = typer.Option(
        False,
        "--targeted",
        "-t",
        help="Extract symbols only from the block enclosing the instruction",
    ),
    budget: int | None = typer.Option(
        None,
        "--budget",
        "-b",
        help="Character budget for non-primary files (default: unbounded)",
    ),
    warn_threshold: int | None = typer.Option(
        None,
        "--warn-threshold",
        help="Prompt length that triggers exclusion suggestions (default: 600000)",
    ),
    instruction_file: str | None = typer.Option(
        None,
        "--instruction-file",
        "-i",
        help="Use this file as the instruction instead of scanning",
    ),
    no_clipboard: bool = typer.Option(
        False,
        "--no-clipboard",
        help="Do not copy the prompt to the clipboard",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a YAML config file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug output",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only show errors",
    ),
) -> None:
    """Generate the prompt for the most recent '// TODO: - ' instruction."""
    _setup_logging(verbose=verbose, quiet=quiet and not verbose)
    cwd = Path.cwd()

    overrides = {
        "singular": singular or None,
        "force_global": force_global or None,
        "include_references": include_references or None,
        "diff_branch": diff_with,
        "excludes": tuple(exclude) if exclude else None,
        "slim": slim or None,
        "targeted": targeted or None,
        "assembly.budget": budget,
        "assembly.warn_threshold": warn_threshold,
        "instruction_file": instruction_file,
        "clipboard": False if no_clipboard else None,
    }

    env_root = env_overrides(os.environ).get("git_root")
    # .todo-assist.yaml lives at the git root; an explicit --config skips the lookup
    git_root = None if config_path else _discover_git_root(cwd, env_root)

    try:
        config: PromptConfig = load_config(
            config_path=config_path,
            search_dir=None if config_path else (git_root or cwd),
            overrides=overrides,
        )
        if config.git_root != env_root:
            # The YAML file picked a different root
            git_root = None
        result = generate_prompt(config, cwd=cwd, git_root=git_root)
    except KeyboardInterrupt:
        _error("Interrupted")
        raise typer.Exit(code=EXIT_SIGINT) from None
    except TodoAssistError as e:
        _error(str(e))
        raise typer.Exit(code=exit_code_for(e)) from e

    typer.echo(result.text)
    _report(result, quiet)

    if config.clipboard:
        if copy_to_clipboard(result.text) and not quiet:
            _success(f"Prompt copied to clipboard ({len(result.text)} characters)")
    else:
        logger.debug("Clipboard copy disabled")


if __name__ == "__main__":
    app()
