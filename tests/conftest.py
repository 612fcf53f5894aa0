"""Shared fixtures for todo-assist tests."""

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from todo_assist.core.types import Instruction

WriteFile = Callable[..., Path]


@pytest.fixture
def write_file(tmp_path: Path) -> WriteFile:
    """Create a file under tmp_path, optionally pinning its mtime."""

    def _write(relative: str, content: str, mtime: float | None = None) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path.resolve()

    return _write


@pytest.fixture
def make_instruction() -> Callable[..., Instruction]:
    """Build an Instruction for a file, reading the marker line from disk."""

    def _make(path: Path, line: str | None = None) -> Instruction:
        if line is None:
            line = next(
                (raw.strip() for raw in path.read_text(encoding="utf-8").splitlines() if "// TODO: - " in raw),
                "// TODO: - ",
            )
        return Instruction(path=path, line=line, line_number=1)

    return _make


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment variables from leaking into config loading."""
    for name in (
        "TODO_ASSIST_BUDGET",
        "PROMPT_BUDGET",
        "TODO_ASSIST_WARN_THRESHOLD",
        "PROMPT_LENGTH_THRESHOLD",
        "TODO_ASSIST_FORCE_GLOBAL",
        "TODO_ASSIST_INCLUDE_REFERENCES",
        "TODO_ASSIST_TARGETED",
        "TARGETED",
        "TODO_ASSIST_DIFF_WITH",
        "DIFF_WITH_BRANCH",
        "TODO_ASSIST_GIT_ROOT",
        "GET_GIT_ROOT",
        "TODO_ASSIST_INSTRUCTION_FILE",
        "GET_INSTRUCTION_FILE",
        "DISABLE_PBCOPY",
        "TODO_ASSIST_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
