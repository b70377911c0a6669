"""Data models for keyword definitions, matches, spans and edits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from markdown_todo.keywords import KeywordSet
    from markdown_todo.text_source import TextSource


@dataclass(frozen=True)
class KeywordDefinition:
    """A validated state keyword and how to style it."""

    keyword: str
    color: str | None = None
    background_color: str | None = None
    bold: bool = True


@dataclass(frozen=True)
class KeywordMatch:
    """A keyword found on a heading or list-item line."""

    prefix_length: int  # Length of marker plus whitespace, e.g. 2 for "- "
    keyword: str
    keyword_start: int
    keyword_end: int


@dataclass(frozen=True)
class CyclableLine:
    """A heading or list-item line split into marker prefix and the rest."""

    prefix: str  # Marker followed by exactly one space, e.g. "  - "
    rest: str


@dataclass(frozen=True)
class StrippedKeyword:
    """Result of removing a leading keyword from the text after the marker."""

    index: int | None  # Position in the keyword list, None if nothing stripped
    remainder: str


@dataclass
class AnnotationSpan:
    """Column range of a keyword on one line (0-indexed line and columns)."""

    line_number: int
    keyword: str
    start_column: int
    end_column: int


@dataclass(frozen=True)
class LineEdit:
    """Lines [start_line, end_line_before] of the old text became new_line_count lines."""

    start_line: int
    end_line_before: int
    new_line_count: int

    @property
    def delta(self) -> int:
        return self.new_line_count - (self.end_line_before - self.start_line + 1)

    @property
    def rematch_end(self) -> int:
        """Last line of the new text that may have changed."""
        return self.end_line_before + self.delta


@dataclass(frozen=True)
class TextChange:
    """One change-feed event, positions relative to the text before it.

    The replaced range runs from (start_line, start_column) to
    (end_line, end_column). An end_column of None means the end of end_line,
    so the default columns replace whole lines.
    """

    start_line: int
    end_line: int
    text: str
    start_column: int = 0
    end_column: int | None = None

    @property
    def new_line_count(self) -> int:
        return self.text.count("\n") + 1

    def to_line_edit(self) -> LineEdit:
        return LineEdit(
            start_line=self.start_line,
            end_line_before=self.end_line,
            new_line_count=self.new_line_count,
        )

    @classmethod
    def from_line_range(
        cls,
        source: TextSource,
        start_line: int,
        end_line_exclusive: int,
        text: str,
    ) -> TextChange:
        """Build the change that replaces lines [start_line, end_line_exclusive) with text.

        An empty range inserts text as new lines before start_line, or after
        the last line when start_line equals the line count.
        """
        if not 0 <= start_line <= end_line_exclusive <= source.line_count():
            raise ValueError(
                f"Line range {start_line}-{end_line_exclusive} outside document "
                f"of {source.line_count()} lines"
            )
        if end_line_exclusive > start_line:
            return cls(start_line=start_line, end_line=end_line_exclusive - 1, text=text)
        if start_line < source.line_count():
            return cls(
                start_line=start_line,
                end_line=start_line,
                text=text + "\n",
                start_column=0,
                end_column=0,
            )
        last = source.line_count() - 1
        last_length = len(source.line_text(last))
        return cls(
            start_line=last,
            end_line=last,
            text="\n" + text,
            start_column=last_length,
            end_column=last_length,
        )


@dataclass(frozen=True)
class DocumentKeywordInfo:
    """What the front matter of a document says about keywords."""

    keyword_set: KeywordSet | None  # None when there is no usable override
    main_content_start_line: int  # 0 when there is no front matter
