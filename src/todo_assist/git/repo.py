"""Git plumbing: repository root, branch verification and per-file diffs.

Only the handful of git calls the prompt pipeline needs live here. Every
call goes through ``_run_git`` so timeouts and a missing git binary are
handled in one place.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from todo_assist.core.exceptions import BranchNotFoundError, GitRootError

logger = logging.getLogger(__name__)

# Default timeout for git commands
_GIT_TIMEOUT = 30


def _run_git(args: list[str], cwd: Path) -> tuple[int, str, str]:
    """Run a git command and return exit code, stdout, stderr.

    Args:
        args: Git command arguments (without 'git' prefix).
        cwd: Working directory for git command.

    Returns:
        Tuple of (exit_code, stdout, stderr).

    """
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=_GIT_TIMEOUT,
            errors="replace",
        )
        return result.returncode, result.stdout.strip(), result.stderr.strip()
    except subprocess.TimeoutExpired:
        return 1, "", "Git command timed out"
    except FileNotFoundError:
        return 1, "", "Git not found in PATH"


def get_git_root(cwd: Path, override: str | None = None) -> Path:
    """Return the version-control root for ``cwd``.

    Args:
        cwd: Directory inside the repository.
        override: Explicit root to use instead of asking git.

    Returns:
        Absolute repository root.

    Raises:
        GitRootError: If the override is not a directory or git fails.

    """
    if override:
        root = Path(override).expanduser().resolve()
        if not root.is_dir():
            raise GitRootError(f"Git root override is not a directory: {override}")
        return root

    exit_code, stdout, stderr = _run_git(["rev-parse", "--show-toplevel"], cwd)
    if exit_code != 0 or not stdout:
        raise GitRootError(f"Failed to determine git root from {cwd}: {stderr or 'not a git repository'}")
    return Path(stdout).resolve()


def branch_exists(branch: str, cwd: Path) -> bool:
    """Check whether ``branch`` resolves to a commit.

    Args:
        branch: Branch (or any revision) name.
        cwd: Working directory inside the repository.

    Returns:
        True if ``git rev-parse --verify`` succeeds.

    """
    exit_code, _, _ = _run_git(["rev-parse", "--verify", "--quiet", branch], cwd)
    return exit_code == 0


def verify_branch(branch: str, cwd: Path) -> None:
    """Raise BranchNotFoundError if ``branch`` does not exist."""
    if not branch_exists(branch, cwd):
        raise BranchNotFoundError(f"Branch '{branch}' does not exist.", branch=branch)


def is_tracked(path: Path) -> bool:
    """Return True if ``path`` is tracked by git."""
    exit_code, _, _ = _run_git(["ls-files", "--error-unmatch", path.name], path.parent)
    return exit_code == 0


def diff_file_against_branch(path: Path, branch: str) -> str | None:
    """Diff the working copy of ``path`` against ``branch``.

    Args:
        path: File to diff.
        branch: Baseline branch.

    Returns:
        Unified diff text, or None if the file is untracked, identical to
        the baseline, or git fails (logged).

    """
    if not is_tracked(path):
        logger.debug("%s is not tracked; no diff", path)
        return None

    exit_code, stdout, stderr = _run_git(["diff", "--no-ext-diff", branch, "--", path.name], path.parent)
    if exit_code != 0:
        logger.error("Error running diff on %s: %s", path, stderr)
        return None
    return stdout or None
