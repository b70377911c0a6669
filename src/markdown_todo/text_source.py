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

"""Line-oriented text sources and an in-memory buffer implementation."""

from __future__ import annotations

from typing import Protocol

from markdown_todo.models import LineEdit, TextChange


class TextSource(Protocol):
    """Line access to a document (0-indexed lines)."""

    def line_count(self) -> int: ...

    def line_text(self, line_number: int) -> str: ...

    def replace_line_range(
        self, start_line: int, end_line_exclusive: int, text: str
    ) -> TextChange: ...


def normalize_newlines(text: str) -> str:
    """Convert "\\r\\n" and lone "\\r" line endings to "\\n"."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


class LineBuffer:
    """A document held as a list of lines.

    Line endings are normalized to "\\n" before splitting, so line text never
    carries a terminator. An empty document still has one (empty) line and a
    trailing newline produces a final empty line.
    """

    def __init__(self, text: str = ""):
        self._lines: list[str] = normalize_newlines(text).split("\n")

    @classmethod
    def from_file(cls, path: str) -> LineBuffer:
        """Read a file as text, trying UTF-8 first then latin-1 as fallback."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                return cls(f.read())
        except UnicodeDecodeError:
            with open(path, "r", encoding="latin-1") as f:
                return cls(f.read())

    def line_count(self) -> int:
        return len(self._lines)

    def line_text(self, line_number: int) -> str:
        if line_number < 0:
            raise IndexError(f"line {line_number} out of range")
        return self._lines[line_number]

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    def get_text(self) -> str:
        return "\n".join(self._lines)

    def apply_change(self, change: TextChange) -> LineEdit:
        """Apply one change event and describe it as a line edit.

        Raises:
            ValueError: the change refers to lines or columns outside the text.
        """
        start, end = change.start_line, change.end_line
        if start < 0 or end < start or end >= len(self._lines):
            raise ValueError(
                f"Change lines {start}-{end} outside document of {len(self._lines)} lines"
            )
        start_line_text = self._lines[start]
        end_line_text = self._lines[end]
        end_column = len(end_line_text) if change.end_column is None else change.end_column
        if not 0 <= change.start_column <= len(start_line_text):
            raise ValueError(f"Start column {change.start_column} outside line {start}")
        if not 0 <= end_column <= len(end_line_text):
            raise ValueError(f"End column {end_column} outside line {end}")
        if start == end and end_column < change.start_column:
            raise ValueError("Change ends before it starts")

        text = normalize_newlines(change.text)
        head = start_line_text[: change.start_column]
        tail = end_line_text[end_column:]
        new_lines = (head + text + tail).split("\n")
        self._lines[start : end + 1] = new_lines
        return LineEdit(
            start_line=start,
            end_line_before=end,
            new_line_count=text.count("\n") + 1,
        )

    def replace_line_range(
        self, start_line: int, end_line_exclusive: int, text: str
    ) -> TextChange:
        """Replace whole lines [start_line, end_line_exclusive) and return the change applied."""
        change = TextChange.from_line_range(self, start_line, end_line_exclusive, text)
        self.apply_change(change)
        return change
