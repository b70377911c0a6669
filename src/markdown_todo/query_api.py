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

"""Read-only queries over an open workspace.

Provides a factory that creates a dictionary of query functions bound to a
Workspace and the decorations submitted for it. All functions return plain
dicts/strings; line numbers in results are 1-indexed, columns 0-indexed.
"""

from __future__ import annotations

from typing import Callable

from markdown_todo.styling import DecorationStore
from markdown_todo.workspace import Workspace


def create_workspace_query_functions(
    workspace: Workspace, decorations: DecorationStore
) -> dict[str, Callable]:
    """Create query functions bound to a workspace.

    Returns a dict mapping function names to callables.
    """

    def _session_or_error(document: str):
        if workspace.get_buffer(document) is None:
            return None, f"Error: document '{document}' is not open"
        session = workspace.get_session(document)
        if session is None:
            return None, f"Error: document '{document}' is not a markdown document"
        return session, None

    def get_workspace_summary() -> str:
        """Open documents, keyword counts per document, active document."""
        default_keywords = ", ".join(workspace.default_keyword_set.keywords)
        parts = [
            f"Open documents: {len(workspace.documents)}",
            f"Workspace keywords: {default_keywords}",
        ]
        if workspace.active_document is not None:
            parts.append(
                f"Active: {workspace.active_document} (line {workspace.cursor_line + 1})"
            )
        for document in workspace.documents:
            session = workspace.get_session(document)
            if session is None:
                parts.append(f"  {document}: not tracked")
                continue
            counts = {kw: len(spans) for kw, spans in session.index.spans_by_keyword().items()}
            counts_text = ", ".join(f"{kw}: {n}" for kw, n in counts.items())
            source = "front matter" if session.owns_keyword_set else "workspace"
            parts.append(f"  {document} ({source} keywords) {counts_text}")
        return "\n".join(parts)

    def list_documents() -> list[dict]:
        """All open documents with tracking state and line count."""
        result = []
        for document in workspace.documents:
            session = workspace.get_session(document)
            result.append(
                {
                    "document": document,
                    "lines": workspace.get_buffer(document).line_count(),
                    "tracked": session is not None,
                    "active": document == workspace.active_document,
                }
            )
        return result

    def get_annotations(document: str, keyword: str | None = None) -> list[dict] | str:
        """Keyword occurrences of a document, optionally for one keyword."""
        session, error = _session_or_error(document)
        if error:
            return error
        buffer = workspace.get_buffer(document)
        return [
            {
                "line": span.line_number + 1,
                "keyword": span.keyword,
                "columns": [span.start_column, span.end_column],
                "text": buffer.line_text(span.line_number),
            }
            for span in session.index
            if keyword is None or span.keyword == keyword
        ]

    def get_document_keywords(document: str) -> dict | str:
        """Keyword set in effect for a document and where it comes from."""
        session, error = _session_or_error(document)
        if error:
            return error
        return {
            "source": "front matter" if session.owns_keyword_set else "workspace",
            "main_content_start_line": session.main_content_start_line + 1,
            "keywords": [
                {
                    "keyword": d.keyword,
                    "color": d.color,
                    "backgroundColor": d.background_color,
                    "bold": d.bold,
                }
                for d in session.keyword_set.definitions
            ],
        }

    def get_decorations(document: str) -> dict | str:
        """Styles and ranges last submitted for rendering."""
        _, error = _session_or_error(document)
        if error:
            return error
        return decorations.get(document)

    def get_lines(document: str, start: int, end: int) -> str:
        """Get specific lines (1-indexed, inclusive)."""
        buffer = workspace.get_buffer(document)
        if buffer is None:
            return f"Error: document '{document}' is not open"
        if start < 1:
            return "Error: start must be >= 1"
        if end > buffer.line_count():
            end = buffer.line_count()
        if start > end:
            return f"Error: start ({start}) > end ({end})"
        return "\n".join(buffer.line_text(n) for n in range(start - 1, end))

    return {
        "get_workspace_summary": get_workspace_summary,
        "list_documents": list_documents,
        "get_annotations": get_annotations,
        "get_document_keywords": get_document_keywords,
        "get_decorations": get_decorations,
        "get_lines": get_lines,
    }


# ---------------------------------------------------------------------------
# Usage instructions for tool-calling clients
# ---------------------------------------------------------------------------

WORKSPACE_QUERY_INSTRUCTIONS = """\
The workspace tracks TODO-style state keywords on Markdown headings and list
items ("# TODO title", "- DONE item") and keeps an index of them as you edit.

WORKSPACE:
  get_workspace_summary() -> str                # Open documents, keyword counts, active document
  list_documents() -> list[dict]                # Open documents, tracked state, line counts

PER DOCUMENT:
  get_annotations(document, keyword?) -> list   # Keyword occurrences: line, keyword, columns
  get_document_keywords(document) -> dict       # Keyword set in effect and its source
  get_decorations(document) -> dict             # Styles and ranges submitted for rendering
  get_lines(document, start, end) -> str        # Specific lines (1-indexed, inclusive)

STRATEGY: Open a document, move the cursor with set_cursor, then cycle the
keyword forward (none -> TODO -> DONE -> none) or backward. Use
get_annotations to review every keyword without reading the whole document.
"""
