"""Tests for LineBuffer and the change model."""

import pytest

from markdown_todo.models import LineEdit, TextChange
from markdown_todo.text_source import LineBuffer


class TestLineBuffer:
    def test_empty_text_has_one_line(self):
        buffer = LineBuffer("")
        assert buffer.line_count() == 1
        assert buffer.line_text(0) == ""

    def test_trailing_newline_gives_empty_last_line(self):
        buffer = LineBuffer("a\nb\n")
        assert buffer.lines == ("a", "b", "")

    def test_negative_line_rejected(self):
        with pytest.raises(IndexError):
            LineBuffer("a").line_text(-1)

    def test_line_past_end_rejected(self):
        with pytest.raises(IndexError):
            LineBuffer("a").line_text(1)

    def test_get_text_round_trip(self):
        text = "# TODO a\n\n- b\n"
        assert LineBuffer(text).get_text() == text

    def test_from_file(self, tmp_path):
        path = tmp_path / "notes.md"
        path.write_text("# TODO a\nbody", encoding="utf-8")
        assert LineBuffer.from_file(str(path)).lines == ("# TODO a", "body")

    def test_from_file_latin1_fallback(self, tmp_path):
        path = tmp_path / "old.md"
        path.write_bytes(b"- TODO caf\xe9")
        assert LineBuffer.from_file(str(path)).line_text(0) == "- TODO café"


class TestApplyChange:
    def test_replace_within_line(self):
        buffer = LineBuffer("- TODO task")
        edit = buffer.apply_change(TextChange(0, 0, "DONE", 2, 6))
        assert buffer.lines == ("- DONE task",)
        assert edit == LineEdit(start_line=0, end_line_before=0, new_line_count=1)

    def test_whole_line_default_columns(self):
        buffer = LineBuffer("a\nb\nc")
        buffer.apply_change(TextChange(1, 1, "B"))
        assert buffer.lines == ("a", "B", "c")

    def test_split_line(self):
        buffer = LineBuffer("ab")
        edit = buffer.apply_change(TextChange(0, 0, "\n", 1, 1))
        assert buffer.lines == ("a", "b")
        assert edit.delta == 1

    def test_delete_across_lines(self):
        buffer = LineBuffer("one\ntwo\nthree")
        edit = buffer.apply_change(TextChange(0, 2, "", 1, 2))
        assert buffer.lines == ("oree",)
        assert edit.delta == -2

    def test_lines_out_of_range(self):
        buffer = LineBuffer("a\nb")
        with pytest.raises(ValueError):
            buffer.apply_change(TextChange(2, 2, "x"))
        with pytest.raises(ValueError):
            buffer.apply_change(TextChange(1, 0, "x"))
        with pytest.raises(ValueError):
            buffer.apply_change(TextChange(-1, 0, "x"))

    def test_columns_out_of_range(self):
        buffer = LineBuffer("abc")
        with pytest.raises(ValueError):
            buffer.apply_change(TextChange(0, 0, "x", 4, 4))
        with pytest.raises(ValueError):
            buffer.apply_change(TextChange(0, 0, "x", 2, 1))

    def test_rejected_change_leaves_text(self):
        buffer = LineBuffer("abc\ndef")
        with pytest.raises(ValueError):
            buffer.apply_change(TextChange(0, 1, "x", 0, 9))
        assert buffer.lines == ("abc", "def")


class TestReplaceLineRange:
    def test_replace_lines(self):
        buffer = LineBuffer("a\nb\nc\nd")
        change = buffer.replace_line_range(1, 3, "X")
        assert buffer.lines == ("a", "X", "d")
        assert change.to_line_edit().delta == -1

    def test_insert_before(self):
        buffer = LineBuffer("a\nb")
        change = buffer.replace_line_range(1, 1, "new")
        assert buffer.lines == ("a", "new", "b")
        assert change.to_line_edit() == LineEdit(start_line=1, end_line_before=1, new_line_count=2)

    def test_append_after_last(self):
        buffer = LineBuffer("a\nb")
        change = buffer.replace_line_range(2, 2, "c\nd")
        assert buffer.lines == ("a", "b", "c", "d")
        assert change.start_line == 1
        assert change.to_line_edit().delta == 2

    def test_invalid_range(self):
        buffer = LineBuffer("a")
        with pytest.raises(ValueError):
            buffer.replace_line_range(1, 0, "x")
        with pytest.raises(ValueError):
            buffer.replace_line_range(0, 2, "x")


class TestLineEndings:
    def test_crlf_text_split_without_terminators(self):
        buffer = LineBuffer("- task\r\n- TODO b\r\n")
        assert buffer.lines == ("- task", "- TODO b", "")

    def test_lone_cr_is_a_line_break(self):
        assert LineBuffer("a\rb").lines == ("a", "b")

    def test_inserted_crlf_normalized(self):
        buffer = LineBuffer("a\nd")
        edit = buffer.apply_change(TextChange(0, 0, "\r\nb\r\nc", 1, 1))
        assert buffer.lines == ("a", "b", "c", "d")
        assert edit == LineEdit(start_line=0, end_line_before=0, new_line_count=3)

    def test_lone_cr_counts_toward_new_lines(self):
        buffer = LineBuffer("a")
        edit = buffer.apply_change(TextChange(0, 0, "\rb", 1, 1))
        assert buffer.lines == ("a", "b")
        assert edit.delta == 1
