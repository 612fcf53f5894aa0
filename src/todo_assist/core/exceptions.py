"""Custom exception hierarchy for todo-assist.

All custom exceptions inherit from TodoAssistError to enable:
- Unified exception handling in the CLI layer
- Clear distinction from built-in exceptions
- Consistent error messaging patterns

Fatal conditions: a missing instruction, a missing git root, an unknown diff
branch, invalid configuration and a bundle with the wrong marker count.
Everything else (unreadable files, empty definition sets, chopped files)
degrades to a logged diagnostic.
"""

from pathlib import Path
from typing import Any

__all__ = [
    "TodoAssistError",
    "ConfigError",
    "ConfigValidationError",
    "NoInstructionFoundError",
    "GitRootError",
    "BranchNotFoundError",
    "MarkerValidationError",
]


class TodoAssistError(Exception):
    """Base exception for all todo-assist errors."""

    pass


class ConfigError(TodoAssistError):
    """Configuration loading or validation error.

    Raised when:
    - The YAML config file cannot be read or parsed
    - The YAML root is not a mapping
    - An environment variable holds a value of the wrong type
    """

    pass


class ConfigValidationError(ConfigError):
    """Validation error with structured Pydantic details.

    Attributes:
        errors: List of error dicts with 'loc', 'msg', and 'type' fields,
            as produced by ``pydantic.ValidationError.errors()``.

    """

    def __init__(self, message: str, errors: list[dict[str, Any]]) -> None:
        """Initialize ConfigValidationError with message and structured errors.

        Args:
            message: Human-readable error message.
            errors: List of error dicts from Pydantic ValidationError.

        """
        super().__init__(message)
        self.errors = errors


class NoInstructionFoundError(TodoAssistError):
    """No file in scope contains the instruction marker.

    Attributes:
        root: Directory that was scanned.
        marker: Marker token that was searched for.

    Example:
        >>> try:
        ...     locate_instruction(Path("/repo"))
        ... except NoInstructionFoundError as e:
        ...     print(f"Nothing to do under {e.root}")

    """

    def __init__(self, message: str, root: Path | None = None, marker: str = "") -> None:
        """Initialize NoInstructionFoundError.

        Args:
            message: Human-readable error message.
            root: Directory that was scanned.
            marker: Marker token that was searched for.

        """
        super().__init__(message)
        self.root = root
        self.marker = marker


class GitRootError(TodoAssistError):
    """The version-control root of the working directory cannot be determined.

    Raised when:
    - git is not installed or not in PATH
    - The working directory is not inside a git repository
    - The git-root override points at a missing directory
    """

    pass


class BranchNotFoundError(TodoAssistError):
    """The branch requested for diff augmentation does not exist.

    Attributes:
        branch: Branch name that failed ``git rev-parse --verify``.

    """

    def __init__(self, message: str, branch: str = "") -> None:
        """Initialize BranchNotFoundError.

        Args:
            message: Human-readable error message.
            branch: Branch name that failed verification.

        """
        super().__init__(message)
        self.branch = branch


class MarkerValidationError(TodoAssistError):
    """The assembled bundle carries an unexpected number of marker lines.

    Attributes:
        found: Number of marker lines present in the bundle.
        expected: Accepted marker counts.

    """

    def __init__(self, message: str, found: int, expected: tuple[int, ...]) -> None:
        """Initialize MarkerValidationError.

        Args:
            message: Human-readable error message.
            found: Number of marker lines present in the bundle.
            expected: Accepted marker counts.

        """
        super().__init__(message)
        self.found = found
        self.expected = expected
