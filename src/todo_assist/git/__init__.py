"""Git collaborators used by the prompt pipeline."""

from todo_assist.git.repo import (
    branch_exists,
    diff_file_against_branch,
    get_git_root,
    is_tracked,
    verify_branch,
)

__all__ = [
    "branch_exists",
    "diff_file_against_branch",
    "get_git_root",
    "is_tracked",
    "verify_branch",
]
