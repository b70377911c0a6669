# markdown-todo - Keyword cycling and a live keyword index for Markdown
# Copyright (C) 2026 Michael Doyle
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Sorted index of keyword occurrences, updated incrementally after edits.

The index holds at most one AnnotationSpan per line, ordered by strictly
increasing line number. After every update it equals what build_full would
produce for the edited text.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterator
from dataclasses import replace

from markdown_todo.keywords import KeywordSet
from markdown_todo.models import AnnotationSpan, LineEdit
from markdown_todo.text_source import TextSource

logger = logging.getLogger(__name__)


def _span_line(span: AnnotationSpan) -> int:
    return span.line_number


class AnnotationIndex:
    """Keyword spans of one document for one KeywordSet."""

    def __init__(self, keyword_set: KeywordSet):
        self.keyword_set = keyword_set
        self._spans: list[AnnotationSpan] = []

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    @classmethod
    def build_full(cls, source: TextSource, keyword_set: KeywordSet) -> AnnotationIndex:
        """Scan every line of source once."""
        index = cls(keyword_set)
        index.rebuild(source)
        return index

    def rebuild(self, source: TextSource) -> None:
        self._spans = self._match_lines(source, 0, source.line_count() - 1)

    def _match_lines(self, source: TextSource, first: int, last: int) -> list[AnnotationSpan]:
        """Spans for lines first..last inclusive."""
        spans: list[AnnotationSpan] = []
        for line_number in range(first, last + 1):
            match = self.keyword_set.match_line(source.line_text(line_number))
            if match is None:
                continue
            spans.append(
                AnnotationSpan(
                    line_number=line_number,
                    keyword=match.keyword,
                    start_column=match.keyword_start,
                    end_column=match.keyword_end,
                )
            )
        return spans

    # ------------------------------------------------------------------
    # Incremental update
    # ------------------------------------------------------------------

    def update(self, edit: LineEdit, source: TextSource) -> None:
        """Bring the index in line with source after edit was applied to it.

        Steps:
        1. Rematch the lines the edit produced, [start_line, rematch_end]
        2. Binary-search the first span after the replaced old lines
        3. Shift that span and every later one by the line delta
        4. Binary-search the first span at or after start_line and splice
           the rematched spans over the replaced old ones

        Raises:
            ValueError: the edit's line range is negative or inverted.
        """
        if edit.start_line < 0 or edit.end_line_before < edit.start_line:
            raise ValueError(f"Invalid line edit {edit}")
        if edit.new_line_count < 1:
            raise ValueError(f"Line edit must produce at least one line: {edit}")

        delta = edit.delta
        rematch_end = min(edit.rematch_end, source.line_count() - 1)
        replacement = self._match_lines(source, edit.start_line, rematch_end)

        keep_from = bisect.bisect_left(
            self._spans, edit.end_line_before + 1, key=_span_line
        )
        if delta != 0:
            for span in self._spans[keep_from:]:
                span.line_number += delta

        splice_from = bisect.bisect_left(self._spans, edit.start_line, key=_span_line)
        self._spans[splice_from:keep_from] = replacement

        logger.debug(
            "Updated lines %d-%d (delta %+d): %d span(s) replaced by %d",
            edit.start_line,
            rematch_end,
            delta,
            keep_from - splice_from,
            len(replacement),
        )

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def spans(self) -> tuple[AnnotationSpan, ...]:
        return tuple(replace(span) for span in self._spans)

    def __len__(self) -> int:
        return len(self._spans)

    def __iter__(self) -> Iterator[AnnotationSpan]:
        return iter(self._spans)

    def find(self, line_number: int) -> AnnotationSpan | None:
        """The span on line_number, if that line holds a keyword."""
        pos = bisect.bisect_left(self._spans, line_number, key=_span_line)
        if pos < len(self._spans) and self._spans[pos].line_number == line_number:
            return self._spans[pos]
        return None

    def spans_by_keyword(self) -> dict[str, list[AnnotationSpan]]:
        """Spans grouped per keyword; every keyword of the set is present."""
        grouped: dict[str, list[AnnotationSpan]] = {kw: [] for kw in self.keyword_set.keywords}
        for span in self._spans:
            grouped.setdefault(span.keyword, []).append(span)
        return grouped
