"""Shared CLI utilities for todo-assist.

This module contains exit codes, the console singleton, and helper functions
used by the CLI entry point.
"""

import logging
import os
import sys

from rich.console import Console
from rich.logging import RichHandler

# Exit codes following Unix conventions
EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1  # Unexpected TodoAssistError
EXIT_CONFIG_ERROR: int = 2  # ConfigError / ConfigValidationError
EXIT_NO_INSTRUCTION: int = 3  # NoInstructionFoundError
EXIT_GIT_ROOT_ERROR: int = 4  # GitRootError
EXIT_BRANCH_NOT_FOUND: int = 5  # BranchNotFoundError
EXIT_MARKER_VALIDATION_ERROR: int = 6  # MarkerValidationError
EXIT_SIGINT: int = 130  # 128 + SIGINT (2) - Interrupted by Ctrl+C

# The prompt owns stdout; diagnostics go to stderr
_is_tty = sys.stderr.isatty()

console = Console(stderr=True, force_terminal=_is_tty, no_color=not _is_tty)

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "TODO_ASSIST_LOG_LEVEL"


def _error(message: str) -> None:
    """Display error message with red styling.

    Args:
        message: Error message to display.

    """
    console.print(f"[red]Error:[/red] {message}")


def _info(message: str) -> None:
    """Display info message with blue styling.

    Args:
        message: Info message to display.

    """
    console.print(f"[blue]Info:[/blue] {message}")


def _success(message: str) -> None:
    """Display success message with green styling.

    Args:
        message: Success message to display.

    """
    console.print(f"[green]✓[/green] {message}")


def _warning(message: str) -> None:
    """Display warning message with yellow styling.

    Args:
        message: Warning message to display.

    """
    console.print(f"[yellow]Warning:[/yellow] {message}")


def _resolve_log_level(verbose: bool, quiet: bool) -> int:
    env_level = os.environ.get(LOG_LEVEL_ENV, "").upper()
    if env_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        return int(getattr(logging, env_level))
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def _setup_logging(verbose: bool, quiet: bool) -> None:
    """Configure logging based on verbosity flags.

    Args:
        verbose: If True, set DEBUG level.
        quiet: If True, set ERROR level.

    Note:
        verbose and quiet are mutually exclusive. If both are True,
        verbose takes precedence.

        TODO_ASSIST_LOG_LEVEL env var overrides both flags.

    """
    level = _resolve_log_level(verbose, quiet)

    # Clear any existing handlers to avoid duplicates
    logging.root.handlers.clear()

    # basicConfig doesn't set the handler level
    handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    handler.setLevel(level)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
    )
