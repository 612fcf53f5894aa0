"""Tests for the budgeted assembler and marker validation."""

from pathlib import Path

import pytest

from todo_assist.assembly.assembler import (
    assemble_bundle,
    build_block,
    count_marker_lines,
    scrub_markers,
    validate_marker_count,
)
from todo_assist.core.exceptions import MarkerValidationError
from todo_assist.core.markers import FIXED_INSTRUCTION, SEPARATOR
from todo_assist.core.types import AssemblyBudget

TODO_SOURCE = "struct Todo {\n    let widget: Widget\n    // TODO: - render the Widget\n}\n"


def _sentinel_lines(text: str) -> int:
    return sum(1 for line in text.splitlines() if "// TODO: -" in line)


class TestScrubMarkers:
    """Tests for scrub_markers()."""

    def test_removes_all_without_keep(self) -> None:
        """Non-instruction content loses every marker line."""
        text = "a\n// TODO: - one\nb\n  // TODO: - two\n// TODO: keep me\n"

        assert scrub_markers(text) == "a\nb\n// TODO: keep me\n"

    def test_keeps_matching_instruction_line_once(self) -> None:
        """Only the active instruction line survives."""
        text = "// TODO: - stale\nx\n    // TODO: - active\n// TODO: - active\n"

        assert scrub_markers(text, keep="// TODO: - active") == "x\n    // TODO: - active\n"

    def test_keeps_first_marker_when_no_exact_match(self) -> None:
        """Falls back to the first marker line."""
        assert scrub_markers("// TODO: - a\n// TODO: - b", keep="// TODO: - zzz") == "// TODO: - a"


class TestBuildBlock:
    """Tests for build_block()."""

    def test_block_layout(self, write_file, make_instruction) -> None:
        """Header, body, and separator frame every block."""
        todo = write_file("Todo.swift", TODO_SOURCE)
        instruction = make_instruction(todo)

        block = build_block(todo, instruction)

        assert block is not None
        assert block.text == (
            f"\nThe contents of Todo.swift is as follows:\n\n{TODO_SOURCE}\n\n\n{SEPARATOR}\n"
        )

    def test_unreadable_file_gives_none(self, tmp_path: Path, write_file, make_instruction) -> None:
        """Files that vanished are skipped."""
        instruction = make_instruction(write_file("Todo.swift", TODO_SOURCE))

        assert build_block(tmp_path / "Gone.swift", instruction) is None

    def test_diff_section_is_appended_and_scrubbed(self, write_file, make_instruction) -> None:
        """Diffs get their own section with marker lines removed."""
        todo = write_file("Todo.swift", TODO_SOURCE)
        helper = write_file("Helper.swift", "struct Helper {}\n")
        instruction = make_instruction(todo)

        def provider(path: Path, branch: str) -> str | None:
            return f"--- a/{path.name}\n+++ b/{path.name}\n+// TODO: - render the Widget\n+let x = 1\n"

        block = build_block(helper, instruction, diff_branch="main", diff_provider=provider)

        assert block is not None
        assert "The diff for Helper.swift (against branch main) is as follows:" in block.text
        assert "+let x = 1" in block.text
        assert _sentinel_lines(block.text) == 0

    def test_empty_diff_adds_no_section(self, write_file, make_instruction) -> None:
        """Unchanged or untracked files have no diff section."""
        todo = write_file("Todo.swift", TODO_SOURCE)
        instruction = make_instruction(todo)

        block = build_block(todo, instruction, diff_branch="main", diff_provider=lambda p, b: None)

        assert block is not None
        assert block.diff is None
        assert "The diff for" not in block.text


class TestAssembleBundle:
    """Tests for assemble_bundle()."""

    def test_unbounded_includes_everything_in_full(self, write_file, make_instruction) -> None:
        """Without a budget every file appears, instruction first, then the trailer."""
        todo = write_file("Todo.swift", TODO_SOURCE)
        definition = write_file("Definition.swift", "struct Widget {\n    let id: Int\n}\n")
        instruction = make_instruction(todo)

        bundle = assemble_bundle([definition, todo], instruction)

        assert bundle.paths == [todo, definition]
        assert TODO_SOURCE in bundle.text
        assert "struct Widget {\n    let id: Int\n}\n" in bundle.text
        assert bundle.text.endswith(f"\n\n{FIXED_INSTRUCTION}")
        assert bundle.text.count(FIXED_INSTRUCTION) == 1
        assert bundle.chopped == []

    def test_duplicates_are_included_once(self, write_file, make_instruction) -> None:
        """The same path given twice yields one block."""
        todo = write_file("Todo.swift", TODO_SOURCE)
        other = write_file("Other.swift", "struct Other {}\n")
        instruction = make_instruction(todo)

        bundle = assemble_bundle([todo, other, other, todo], instruction)

        assert bundle.paths == [todo, other]

    def test_instruction_keeps_exactly_one_marker(self, write_file, make_instruction) -> None:
        """Extra markers are scrubbed from every block."""
        todo = write_file("Todo.swift", "// TODO: - old idea\nstruct Todo {}\n// TODO: - the real one\n")
        other = write_file("Other.swift", "// TODO: - someone else's\nstruct Other {}\n")
        instruction = make_instruction(todo, line="// TODO: - the real one")

        bundle = assemble_bundle([todo, other], instruction)

        instruction_block, other_block = bundle.blocks
        assert _sentinel_lines(instruction_block.text) == 1
        assert "// TODO: - the real one" in instruction_block.text
        assert _sentinel_lines(other_block.text) == 0
        assert validate_marker_count(bundle.text) == 2

    def test_primary_files_ignore_the_budget(self, write_file, make_instruction) -> None:
        """Referenced files are included even when larger than the budget."""
        todo = write_file("Todo.swift", TODO_SOURCE)
        widget = write_file("Widget.swift", "struct Widget {}\n" + "// padding\n" * 50)
        other = write_file("Other.swift", "struct Other {}\n")
        instruction = make_instruction(todo)

        bundle = assemble_bundle([todo, widget, other], instruction, budget=AssemblyBudget(limit=1))

        assert bundle.paths == [todo, widget]
        assert bundle.chopped == [other]

    def test_budget_is_never_exceeded_by_non_primary_files(self, write_file, make_instruction) -> None:
        """Non-primary blocks are added only while the total stays within the limit."""
        todo = write_file("Todo.swift", TODO_SOURCE)
        helper = write_file("TodoHelper.swift", "struct TodoHelper {}\n")
        other = write_file("Other.swift", "struct Other {}\n" * 5)
        instruction = make_instruction(todo)

        limit = len(build_block(todo, instruction)) + len(build_block(helper, instruction))
        bundle = assemble_bundle([todo, helper, other], instruction, budget=AssemblyBudget(limit=limit))

        assert bundle.paths == [todo, helper]
        assert bundle.chopped == [other]
        assert sum(len(b) for b in bundle.blocks) <= limit

    def test_tiers_pack_before_others_without_backtracking(self, write_file, make_instruction) -> None:
        """A rejected large file does not stop a smaller later one from fitting."""
        todo = write_file("Todo.swift", TODO_SOURCE)
        big = write_file("TodoCache.swift", "struct TodoCache {}\n" + "// filler\n" * 200)
        small = write_file("Zed.swift", "struct Zed {}\n")
        instruction = make_instruction(todo)

        limit = len(build_block(todo, instruction)) + len(build_block(small, instruction)) + 1
        bundle = assemble_bundle([big, small, todo], instruction, budget=AssemblyBudget(limit=limit))

        assert bundle.paths == [todo, small]
        assert bundle.chopped == [big]

    def test_chopped_files_are_logged(self, write_file, make_instruction, caplog: pytest.LogCaptureFixture) -> None:
        """Every chop leaves a warning."""
        todo = write_file("Todo.swift", TODO_SOURCE)
        other = write_file("Other.swift", "struct Other {}\n")
        instruction = make_instruction(todo)

        with caplog.at_level("WARNING"):
            assemble_bundle([todo, other], instruction, budget=AssemblyBudget(limit=1))

        assert "Chopped Other.swift" in caplog.text

    def test_warning_threshold_produces_suggestions_only(self, write_file, make_instruction) -> None:
        """Exceeding the threshold never removes files."""
        todo = write_file("Todo.swift", TODO_SOURCE)
        other = write_file("Other.swift", "struct Other {}\n" * 20)
        instruction = make_instruction(todo)

        bundle = assemble_bundle([todo, other], instruction, budget=AssemblyBudget(warning_threshold=10))

        assert bundle.paths == [todo, other]
        assert [s.path for s in bundle.suggestions] == [other]


class TestValidateMarkerCount:
    """Tests for validate_marker_count()."""

    def test_instruction_plus_trailer_is_valid(self) -> None:
        """Two marker lines: the instruction and the trailer."""
        text = f"// TODO: - do it\n\n{FIXED_INSTRUCTION}"

        assert count_marker_lines(text) == 2
        assert validate_marker_count(text) == 2

    def test_missing_instruction_marker_fails(self) -> None:
        """Only the trailer's marker is not enough."""
        with pytest.raises(MarkerValidationError) as exc_info:
            validate_marker_count(f"code\n\n{FIXED_INSTRUCTION}")

        assert exc_info.value.found == 1
        assert exc_info.value.expected == (2,)

    def test_three_allowed_only_with_diff(self) -> None:
        """Diff mode tolerates one extra marker line."""
        text = f"// TODO: - a\n// TODO: - b\n{FIXED_INSTRUCTION}"

        assert validate_marker_count(text, diff_enabled=True) == 3
        with pytest.raises(MarkerValidationError):
            validate_marker_count(text)
