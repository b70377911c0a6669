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

"""Keyword state transitions for a single line."""

from markdown_todo.errors import NotCyclableLine
from markdown_todo.keywords import KeywordSet
from markdown_todo.line_matcher import compose_line, split_cyclable_line, strip_leading_keyword


def cycle_keyword(line_text: str, keyword_set: KeywordSet, forward: bool = True) -> str:
    """Return line_text with its keyword moved one step through the cycle.

    Forward order is: no keyword -> keywords[0] -> ... -> keywords[-1] -> no
    keyword. Backward is the exact reverse. The caller replaces the whole
    original line with the result.

    Raises:
        NotCyclableLine: the line is not a heading or unordered list item.
    """
    parts = split_cyclable_line(line_text)
    if parts is None:
        raise NotCyclableLine()

    keywords = keyword_set.keywords
    stripped = strip_leading_keyword(parts.rest, keywords)

    if stripped.index is None:
        index = 0 if forward else len(keywords) - 1
    else:
        index = stripped.index + (1 if forward else -1)

    keyword = keywords[index] if 0 <= index < len(keywords) else ""
    return compose_line(parts.prefix, keyword, stripped.remainder)
