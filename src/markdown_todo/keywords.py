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

"""Ordered, validated keyword sets and the per-line keyword grammar."""

from __future__ import annotations

import re

from markdown_todo.constants import DEFAULT_KEYWORD_DEFINITIONS
from markdown_todo.errors import NoUsableKeywordSet
from markdown_todo.models import KeywordDefinition, KeywordMatch
from markdown_todo.styling import DecorationStyle


def _validate_definitions(raw: object) -> list[KeywordDefinition]:
    """Keep the usable entries of a raw definition list, first occurrence wins."""
    if not isinstance(raw, list):
        return []

    used_keywords: set[str] = set()
    definitions: list[KeywordDefinition] = []
    for item in raw:
        if not isinstance(item, dict):
            continue

        keyword = item.get("keyword")
        if not isinstance(keyword, str):
            continue
        keyword = keyword.strip()
        if not keyword or keyword in used_keywords:
            continue

        color = item.get("color")
        if not isinstance(color, str):
            color = None

        background_color = item.get("backgroundColor")
        if not isinstance(background_color, str):
            background_color = None

        bold = item.get("bold")
        if not isinstance(bold, bool):
            bold = True

        definitions.append(
            KeywordDefinition(
                keyword=keyword,
                color=color,
                background_color=background_color,
                bold=bold,
            )
        )
        used_keywords.add(keyword)

    return definitions


class KeywordSet:
    """An immutable, ordered list of keyword definitions.

    Derives the keyword list used for cycling, one DecorationStyle per
    keyword, and the regular expression that finds a keyword right after a
    heading or list marker.
    """

    def __init__(self, definitions: list[KeywordDefinition]):
        if not definitions:
            raise NoUsableKeywordSet()
        self._definitions: tuple[KeywordDefinition, ...] = tuple(definitions)
        self.keywords: tuple[str, ...] = tuple(d.keyword for d in definitions)
        if len(set(self.keywords)) != len(self.keywords):
            raise ValueError("Keyword definitions must have unique keywords")
        self.styles: dict[str, DecorationStyle] = {
            d.keyword: DecorationStyle(d) for d in definitions
        }
        alternatives = "|".join(re.escape(kw) for kw in self.keywords)
        self.decorate_line_regex = re.compile(
            rf"^((#{{1,6}}|\s*[-+*])\s+)({alternatives})\s+.*"
        )
        self._disposed = False

    @classmethod
    def from_raw(cls, raw: object) -> KeywordSet:
        """Build a set from unvalidated configuration data.

        Raises:
            NoUsableKeywordSet: raw is not a list or no entry survives validation.
        """
        return cls(_validate_definitions(raw))

    @classmethod
    def default(cls) -> KeywordSet:
        """A new instance of the built-in TODO/DONE pair."""
        return cls.from_raw(DEFAULT_KEYWORD_DEFINITIONS)

    @property
    def definitions(self) -> tuple[KeywordDefinition, ...]:
        return self._definitions

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def match_line(self, line_text: str) -> KeywordMatch | None:
        """Find this set's keyword directly after a heading or list marker."""
        match = self.decorate_line_regex.match(line_text)
        if match is None:
            return None
        prefix_length = len(match.group(1))
        keyword = match.group(3)
        return KeywordMatch(
            prefix_length=prefix_length,
            keyword=keyword,
            keyword_start=prefix_length,
            keyword_end=prefix_length + len(keyword),
        )

    def equals(self, other: KeywordSet) -> bool:
        """Order-sensitive comparison of every field of every definition."""
        if self is other:
            return True
        return self._definitions == other._definitions

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeywordSet):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash(self._definitions)

    def __len__(self) -> int:
        return len(self.keywords)

    def __repr__(self) -> str:
        return f"KeywordSet({list(self.keywords)!r})"

    def dispose(self) -> None:
        """Release the decoration styles."""
        for style in self.styles.values():
            style.dispose()
        self._disposed = True
