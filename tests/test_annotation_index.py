"""Tests for the incrementally maintained keyword index."""

import random

import pytest

from markdown_todo.annotation_index import AnnotationIndex
from markdown_todo.keywords import KeywordSet
from markdown_todo.models import AnnotationSpan, LineEdit, TextChange
from markdown_todo.text_source import LineBuffer


def _lines_of(index):
    return [(s.line_number, s.keyword) for s in index]


def _apply(index, buffer, change):
    edit = buffer.apply_change(change)
    index.update(edit, buffer)
    return edit


def _assert_matches_rebuild(index, buffer):
    rebuilt = AnnotationIndex.build_full(buffer, index.keyword_set)
    assert index.spans == rebuilt.spans


@pytest.fixture
def keyword_set():
    return KeywordSet.default()


# ---------------------------------------------------------------------------
# Full build
# ---------------------------------------------------------------------------


class TestBuildFull:
    def test_spans_in_line_order(self, keyword_set):
        buffer = LineBuffer("# TODO a\ntext\n- DONE b\n- c\n  * TODO d")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        assert index.spans == (
            AnnotationSpan(line_number=0, keyword="TODO", start_column=2, end_column=6),
            AnnotationSpan(line_number=2, keyword="DONE", start_column=2, end_column=6),
            AnnotationSpan(line_number=4, keyword="TODO", start_column=4, end_column=8),
        )

    def test_empty_document(self, keyword_set):
        index = AnnotationIndex.build_full(LineBuffer(""), keyword_set)
        assert len(index) == 0
        assert index.spans == ()

    def test_find(self, keyword_set):
        buffer = LineBuffer("- TODO a\nx\n- DONE b")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        assert index.find(2).keyword == "DONE"
        assert index.find(1) is None
        assert index.find(10) is None

    def test_spans_by_keyword_lists_every_keyword(self, keyword_set):
        buffer = LineBuffer("- TODO a\n- TODO b")
        grouped = AnnotationIndex.build_full(buffer, keyword_set).spans_by_keyword()
        assert list(grouped) == ["TODO", "DONE"]
        assert [s.line_number for s in grouped["TODO"]] == [0, 1]
        assert grouped["DONE"] == []

    def test_spans_snapshot_is_detached(self, keyword_set):
        buffer = LineBuffer("- TODO a\n- TODO b")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        snapshot = index.spans
        _apply(index, buffer, TextChange(0, 0, "new\n", 0, 0))
        assert [s.line_number for s in snapshot] == [0, 1]
        assert _lines_of(index) == [(1, "TODO"), (2, "TODO")]


# ---------------------------------------------------------------------------
# Incremental updates
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_delete_keyword_line(self, keyword_set):
        buffer = LineBuffer("# H1\n- TODO fix\nbody")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        assert _lines_of(index) == [(1, "TODO")]

        # Delete line 1 entirely: from end of line 0 to end of line 1
        _apply(index, buffer, TextChange(0, 1, "", start_column=4))
        assert buffer.lines == ("# H1", "body")
        assert _lines_of(index) == []

    def test_insert_line_shifts_later_spans(self, keyword_set):
        buffer = LineBuffer("- TODO a\nplain\n- DONE b\n- TODO c")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        edit = _apply(index, buffer, TextChange(1, 1, "inserted\n", 0, 0))
        assert edit.delta == 1
        assert _lines_of(index) == [(0, "TODO"), (3, "DONE"), (4, "TODO")]
        _assert_matches_rebuild(index, buffer)

    def test_shift_keeps_columns(self, keyword_set):
        buffer = LineBuffer("x\n    - DONE indented")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        _apply(index, buffer, TextChange(0, 0, "a\nb\nc\n", 0, 0))
        span = index.find(4)
        assert (span.start_column, span.end_column) == (6, 10)

    def test_typing_creates_keyword(self, keyword_set):
        buffer = LineBuffer("intro\n- task\noutro")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        _apply(index, buffer, TextChange(1, 1, "TODO ", 2, 2))
        assert buffer.line_text(1) == "- TODO task"
        assert _lines_of(index) == [(1, "TODO")]

    def test_typing_breaks_keyword(self, keyword_set):
        buffer = LineBuffer("- TODO task\n- DONE other")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        _apply(index, buffer, TextChange(0, 0, "X", 6, 6))
        assert buffer.line_text(0) == "- TODOX task"
        assert _lines_of(index) == [(1, "DONE")]

    def test_multi_line_paste(self, keyword_set):
        buffer = LineBuffer("# TODO top\nmiddle\n- DONE end")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        _apply(index, buffer, TextChange(1, 1, "- TODO one\n- two\n- DONE three", 0, 6))
        assert _lines_of(index) == [(0, "TODO"), (1, "TODO"), (3, "DONE"), (4, "DONE")]
        _assert_matches_rebuild(index, buffer)

    def test_replace_block_spanning_keywords(self, keyword_set):
        buffer = LineBuffer("- TODO 0\n- TODO 1\n- TODO 2\n- TODO 3\n- TODO 4")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        _apply(index, buffer, TextChange(1, 3, "gone"))
        assert buffer.lines == ("- TODO 0", "gone", "- TODO 4")
        assert _lines_of(index) == [(0, "TODO"), (2, "TODO")]

    def test_join_lines(self, keyword_set):
        buffer = LineBuffer("- \nTODO joined")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        assert len(index) == 0
        _apply(index, buffer, TextChange(0, 1, "", start_column=2, end_column=0))
        assert buffer.lines == ("- TODO joined",)
        assert _lines_of(index) == [(0, "TODO")]

    def test_append_at_end(self, keyword_set):
        buffer = LineBuffer("- TODO a")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        _apply(index, buffer, TextChange(0, 0, "\n- DONE b", 8, 8))
        assert _lines_of(index) == [(0, "TODO"), (1, "DONE")]

    def test_clear_document(self, keyword_set):
        buffer = LineBuffer("- TODO a\n- DONE b\n- TODO c")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        _apply(index, buffer, TextChange(0, 2, ""))
        assert buffer.lines == ("",)
        assert len(index) == 0

    def test_invalid_edit_rejected(self, keyword_set):
        buffer = LineBuffer("- TODO a")
        index = AnnotationIndex.build_full(buffer, keyword_set)
        with pytest.raises(ValueError):
            index.update(LineEdit(start_line=2, end_line_before=1, new_line_count=1), buffer)
        with pytest.raises(ValueError):
            index.update(LineEdit(start_line=-1, end_line_before=0, new_line_count=1), buffer)
        assert _lines_of(index) == [(0, "TODO")]


class TestLineEdit:
    def test_delta_and_rematch_end(self):
        edit = LineEdit(start_line=3, end_line_before=5, new_line_count=1)
        assert edit.delta == -2
        assert edit.rematch_end == 3

    def test_from_text_change(self):
        change = TextChange(start_line=2, end_line=2, text="a\nb\nc")
        edit = change.to_line_edit()
        assert edit == LineEdit(start_line=2, end_line_before=2, new_line_count=3)
        assert edit.delta == 2
        assert edit.rematch_end == 4


# ---------------------------------------------------------------------------
# Randomized equivalence with a full rebuild
# ---------------------------------------------------------------------------

_LINE_POOL = [
    "# TODO heading",
    "## DONE heading",
    "###### WIP deep",
    "- TODO item",
    "  - DONE nested",
    "* TO short",
    "+ TODOX not a keyword",
    "- plain item",
    "TODO no marker",
    "prose line",
    "",
    "---",
]

_FRAGMENTS = ["TODO ", "DONE ", "WIP ", "- ", "# ", "\n", "\n- TODO x\n", "x", " ", "TO "]

_KEYWORD_SETS = [
    [{"keyword": "TODO"}, {"keyword": "DONE"}],
    [{"keyword": "TO"}, {"keyword": "TODO"}],
    [{"keyword": "WIP"}],
    [{"keyword": "DONE"}, {"keyword": "TODO"}, {"keyword": "WIP"}],
]


def _random_document(rng):
    return "\n".join(rng.choice(_LINE_POOL) for _ in range(rng.randint(1, 30)))


def _random_text(rng):
    if rng.random() < 0.3:
        return "\n".join(rng.choice(_LINE_POOL) for _ in range(rng.randint(1, 4)))
    return "".join(rng.choice(_FRAGMENTS) for _ in range(rng.randint(0, 4)))


def _random_change(rng, buffer):
    last = buffer.line_count() - 1
    start = rng.randint(0, last)
    end = rng.randint(start, min(last, start + rng.randint(0, 4)))
    start_column = rng.randint(0, len(buffer.line_text(start)))
    if start == end:
        end_column = rng.randint(start_column, len(buffer.line_text(end)))
    else:
        end_column = rng.randint(0, len(buffer.line_text(end)))
    return TextChange(start, end, _random_text(rng), start_column, end_column)


class TestRandomizedEquivalence:
    @pytest.mark.parametrize("seed", range(40))
    def test_incremental_equals_rebuild(self, seed):
        rng = random.Random(seed)
        keyword_set = KeywordSet.from_raw(rng.choice(_KEYWORD_SETS))
        buffer = LineBuffer(_random_document(rng))
        index = AnnotationIndex.build_full(buffer, keyword_set)

        for _ in range(60):
            _apply(index, buffer, _random_change(rng, buffer))
            _assert_matches_rebuild(index, buffer)
            lines = [s.line_number for s in index]
            assert lines == sorted(set(lines))
