"""Split heading and list-item lines into marker, keyword and text, and put them back."""

from collections.abc import Sequence

from markdown_todo.constants import CYCLABLE_LINE_REGEX
from markdown_todo.models import CyclableLine, StrippedKeyword


def split_cyclable_line(line_text: str) -> CyclableLine | None:
    """Split a heading or unordered list item into marker prefix and rest.

    The prefix keeps leading indentation and the marker, followed by exactly
    one space whatever whitespace the line had. Returns None for any other line.
    """
    match = CYCLABLE_LINE_REGEX.match(line_text)
    if match is None:
        return None
    return CyclableLine(prefix=match.group(2) + " ", rest=match.group(3))


def strip_leading_keyword(rest: str, keywords: Sequence[str]) -> StrippedKeyword:
    """Remove the first keyword (in list order) that rest starts with, plus its space.

    The remainder is trimmed when a keyword was removed and returned as-is
    otherwise.
    """
    for i, keyword in enumerate(keywords):
        if rest.startswith(keyword + " "):
            return StrippedKeyword(index=i, remainder=rest[len(keyword) + 1 :].strip())
    return StrippedKeyword(index=None, remainder=rest)


def compose_line(prefix: str, keyword: str, remainder: str) -> str:
    if keyword:
        return f"{prefix}{keyword} {remainder}"
    return f"{prefix}{remainder}"
