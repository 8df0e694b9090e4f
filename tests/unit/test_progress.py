"""Unit tests for checkbox counting and the completion marker."""

import pytest

from kit.errors import IOFailure
from kit.progress import (
    COMPLETION_MARKER,
    append_completion_marker,
    count,
    has_completion_marker,
    read_progress,
)


class TestCount:
    """Test cases for checkbox counting."""

    def test_mixed_lines(self):
        progress = count("- [ ] a\n- [x] b\n- [X] c\n- plain bullet\n")
        assert progress.total == 3
        assert progress.complete == 2
        assert progress.incomplete == 1

    def test_indented_and_spaced_boxes(self):
        progress = count("  - [ ] nested\n\t-   [x] tabbed\n-[ ] tight\n- [  ] wide\n")
        assert progress.total == 4
        assert progress.complete == 1

    @pytest.mark.parametrize("line", ["* [ ] star", "1. [ ] numbered", "+ [x] plus", "text - [ ] inline"])
    def test_other_list_markers_are_ignored(self, line):
        assert count(line).total == 0

    def test_empty_content(self):
        progress = count("")
        assert not progress.has_tasks
        assert not progress.all_complete


class TestCompletionMarker:
    """Test cases for the completion marker."""

    def test_detects_marker_anywhere(self):
        assert has_completion_marker(f"text {COMPLETION_MARKER} more")
        assert not has_completion_marker("<!-- REFLECTION -->")

    def test_append_is_idempotent(self, tmp_path):
        path = tmp_path / "TASKS.md"
        path.write_text("- [x] done")

        assert append_completion_marker(path) is True
        assert append_completion_marker(path) is False

        content = path.read_text()
        assert content.count(COMPLETION_MARKER) == 1
        assert content == f"- [x] done\n\n{COMPLETION_MARKER}\n"

    def test_append_keeps_existing_newline(self, tmp_path):
        path = tmp_path / "TASKS.md"
        path.write_text("- [x] done\n")
        append_completion_marker(path)
        assert path.read_text() == f"- [x] done\n\n{COMPLETION_MARKER}\n"

    def test_append_to_empty_file(self, tmp_path):
        path = tmp_path / "TASKS.md"
        path.write_text("")
        append_completion_marker(path)
        assert path.read_text() == f"\n\n{COMPLETION_MARKER}\n"

    def test_append_to_missing_file(self, tmp_path):
        with pytest.raises(IOFailure):
            append_completion_marker(tmp_path / "TASKS.md")


class TestReadProgress:
    """Test cases for read_progress."""

    def test_reads_counts_and_marker(self, tmp_path):
        path = tmp_path / "TASKS.md"
        path.write_text(f"- [x] a\n- [x] b\n{COMPLETION_MARKER}\n")
        progress, marker = read_progress(path)
        assert progress.total == 2
        assert progress.all_complete
        assert marker

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(IOFailure):
            read_progress(tmp_path / "nope.md")

    def test_undecodable_file_raises(self, tmp_path):
        path = tmp_path / "TASKS.md"
        path.write_bytes(b"- [x] caf\xe9\n")
        with pytest.raises(IOFailure):
            read_progress(path)
