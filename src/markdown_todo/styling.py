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

"""Decoration styles and the sink that receives keyword spans for rendering."""

from __future__ import annotations

from typing import Protocol

from markdown_todo.models import AnnotationSpan, KeywordDefinition


class DecorationStyle:
    """Rendering options for one keyword. Released with dispose()."""

    def __init__(self, definition: KeywordDefinition):
        self.keyword = definition.keyword
        self.color = definition.color
        self.background_color = definition.background_color
        self.bold = definition.bold
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def render_options(self) -> dict[str, str]:
        """Options in the shape editors expect; unset fields are omitted."""
        options: dict[str, str] = {}
        if self.color is not None:
            options["color"] = self.color
        if self.background_color is not None:
            options["backgroundColor"] = self.background_color
        if self.bold:
            options["fontWeight"] = "bold"
        return options

    def dispose(self) -> None:
        self._disposed = True

    def __repr__(self) -> str:
        state = " disposed" if self._disposed else ""
        return f"<DecorationStyle {self.keyword!r}{state}>"


class StylingSink(Protocol):
    """Receives the complete current span set of one keyword in one document."""

    def set_decorations(
        self, document_id: str, style: DecorationStyle, spans: list[AnnotationSpan]
    ) -> None: ...


class DecorationStore:
    """In-memory styling sink keeping the latest submission per document and keyword."""

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, tuple[DecorationStyle, list[tuple[int, int, int]]]]] = {}

    def set_decorations(
        self, document_id: str, style: DecorationStyle, spans: list[AnnotationSpan]
    ) -> None:
        if style.disposed:
            raise ValueError(f"Decoration style for '{style.keyword}' has been disposed")
        ranges = [(s.line_number, s.start_column, s.end_column) for s in spans]
        per_keyword = self._documents.setdefault(document_id, {})
        if ranges:
            per_keyword[style.keyword] = (style, ranges)
        else:
            per_keyword.pop(style.keyword, None)
            if not per_keyword:
                del self._documents[document_id]

    def get(self, document_id: str) -> dict[str, dict]:
        """Current decorations of a document: keyword -> {style, ranges}."""
        return {
            keyword: {"style": style.render_options(), "ranges": [list(r) for r in ranges]}
            for keyword, (style, ranges) in self._documents.get(document_id, {}).items()
        }

    def documents(self) -> list[str]:
        return sorted(self._documents)

    def clear(self, document_id: str | None = None) -> None:
        if document_id is None:
            self._documents.clear()
        else:
            self._documents.pop(document_id, None)
