"""Tests for the todo-assist command line."""

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from todo_assist.cli import app, exit_code_for
from todo_assist.cli_utils import (
    EXIT_BRANCH_NOT_FOUND,
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    EXIT_GIT_ROOT_ERROR,
    EXIT_MARKER_VALIDATION_ERROR,
    EXIT_NO_INSTRUCTION,
    EXIT_SUCCESS,
)
from todo_assist.core.exceptions import (
    BranchNotFoundError,
    ConfigValidationError,
    MarkerValidationError,
    NoInstructionFoundError,
    TodoAssistError,
)
from todo_assist.core.markers import FIXED_INSTRUCTION

runner = CliRunner()


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, write_file) -> Path:
    """A minimal project with one instruction, used as git root and cwd."""
    write_file("Todo.swift", "struct Todo {\n    let w: Widget\n    // TODO: - use Widget\n}\n")
    write_file("Widget.swift", "struct Widget {}\n")
    write_file("Gadget.swift", "struct Gadget {}\n")
    monkeypatch.setenv("TODO_ASSIST_GIT_ROOT", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestMain:
    """Tests for the main command."""

    def test_prints_prompt(self, repo: Path) -> None:
        """The assembled prompt goes to stdout."""
        result = runner.invoke(app, ["--no-clipboard"])

        assert result.exit_code == EXIT_SUCCESS, result.output
        assert "The contents of Todo.swift is as follows:" in result.output
        assert "The contents of Widget.swift is as follows:" in result.output
        assert "Gadget.swift is as follows" not in result.output
        assert FIXED_INSTRUCTION in result.output

    def test_reports_candidate_symbols(self, repo: Path) -> None:
        """Diagnostics list the symbols extracted from the instruction file."""
        result = runner.invoke(app, ["--no-clipboard"])

        assert result.exit_code == EXIT_SUCCESS, result.output
        report = next(line for line in result.output.splitlines() if "Candidate symbols:" in line)
        assert "Widget" in report

    def test_git_root_is_resolved_once(self, repo: Path) -> None:
        """The root found for config lookup is reused by the pipeline."""
        with patch("todo_assist.pipeline.get_git_root", side_effect=AssertionError("resolved twice")):
            result = runner.invoke(app, ["--no-clipboard"])

        assert result.exit_code == EXIT_SUCCESS, result.output

    def test_copies_to_clipboard_by_default(self, repo: Path) -> None:
        """Without --no-clipboard the prompt is copied."""
        with patch("todo_assist.cli.copy_to_clipboard", return_value=True) as mock_copy:
            result = runner.invoke(app, [])

        assert result.exit_code == EXIT_SUCCESS, result.output
        mock_copy.assert_called_once()
        assert mock_copy.call_args[0][0].endswith(FIXED_INSTRUCTION)

    def test_disable_pbcopy_env(self, repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """The legacy env switch disables the clipboard."""
        monkeypatch.setenv("DISABLE_PBCOPY", "1")

        with patch("todo_assist.cli.copy_to_clipboard") as mock_copy:
            result = runner.invoke(app, [])

        assert result.exit_code == EXIT_SUCCESS, result.output
        mock_copy.assert_not_called()

    def test_singular_and_exclude_flags(self, repo: Path) -> None:
        """Flags reach the pipeline."""
        singular = runner.invoke(app, ["--no-clipboard", "--singular"])
        excluded = runner.invoke(app, ["--no-clipboard", "--exclude", "Widget.swift"])

        assert singular.exit_code == EXIT_SUCCESS
        assert "Widget.swift is as follows" not in singular.output
        assert excluded.exit_code == EXIT_SUCCESS
        assert "Widget.swift is as follows" not in excluded.output

    def test_config_file_option(self, repo: Path) -> None:
        """Settings can come from an explicit YAML file."""
        config = repo / "alt.yaml"
        config.write_text("singular: true\n", encoding="utf-8")

        result = runner.invoke(app, ["--no-clipboard", "--config", str(config)])

        assert result.exit_code == EXIT_SUCCESS, result.output
        assert "Widget.swift is as follows" not in result.output

    def test_no_instruction_exit_code(self, repo: Path) -> None:
        """A repository without a marker exits with the dedicated code."""
        (repo / "Todo.swift").write_text("struct Todo {}\n", encoding="utf-8")

        result = runner.invoke(app, ["--no-clipboard"])

        assert result.exit_code == EXIT_NO_INSTRUCTION

    def test_bad_git_root_exit_code(self, repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """An unusable root override is fatal."""
        monkeypatch.setenv("TODO_ASSIST_GIT_ROOT", str(repo / "missing"))

        result = runner.invoke(app, ["--no-clipboard"])

        assert result.exit_code == EXIT_GIT_ROOT_ERROR

    def test_invalid_budget_exit_code(self, repo: Path) -> None:
        """Config validation failures exit with the config code."""
        result = runner.invoke(app, ["--no-clipboard", "--budget", "0"])

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_unknown_branch_exit_code(self, repo: Path) -> None:
        """A missing diff branch stops the run."""
        with patch(
            "todo_assist.pipeline.verify_branch",
            side_effect=BranchNotFoundError("Branch 'nope' does not exist.", branch="nope"),
        ):
            result = runner.invoke(app, ["--no-clipboard", "--diff-with", "nope"])

        assert result.exit_code == EXIT_BRANCH_NOT_FOUND
        assert "Branch 'nope' does not exist." in result.output


class TestExitCodeFor:
    """Tests for exit_code_for()."""

    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (ConfigValidationError("bad", []), EXIT_CONFIG_ERROR),
            (NoInstructionFoundError("none"), EXIT_NO_INSTRUCTION),
            (BranchNotFoundError("nope"), EXIT_BRANCH_NOT_FOUND),
            (MarkerValidationError("count", found=1, expected=(2,)), EXIT_MARKER_VALIDATION_ERROR),
            (TodoAssistError("other"), EXIT_ERROR),
        ],
    )
    def test_mapping(self, error: TodoAssistError, code: int) -> None:
        """Each fatal error has its own exit code."""
        assert exit_code_for(error) == code
