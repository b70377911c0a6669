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

"""Registry of open documents and their keyword sessions.

The workspace owns the text of every open document, creates a
DocumentSession for each Markdown document when it opens and destroys it
when it closes, routes change events to the session in delivery order, and
implements the cycle command on the active document's cursor line.
"""

from __future__ import annotations

import logging

from markdown_todo.constants import MARKDOWN_LANGUAGE_ID, detect_language
from markdown_todo.cycle import cycle_keyword
from markdown_todo.errors import NoActiveDocument, NoUsableKeywordSet, UntrackedDocument
from markdown_todo.keywords import KeywordSet
from markdown_todo.models import TextChange
from markdown_todo.session import DocumentSession
from markdown_todo.styling import StylingSink
from markdown_todo.text_source import LineBuffer

logger = logging.getLogger(__name__)


def load_default_keyword_set(raw: object) -> KeywordSet:
    """Workspace keywords from raw settings, or the built-in pair when unusable."""
    if raw is None:
        return KeywordSet.default()
    try:
        return KeywordSet.from_raw(raw)
    except NoUsableKeywordSet:
        logger.warning("Workspace keyword settings are unusable, using TODO/DONE")
        return KeywordSet.default()


class Workspace:
    """Open documents, their sessions, and the active document with its cursor."""

    def __init__(
        self,
        default_keywords: object = None,
        styling_sink: StylingSink | None = None,
    ):
        self.default_keyword_set = load_default_keyword_set(default_keywords)
        self.styling_sink = styling_sink
        self._buffers: dict[str, LineBuffer] = {}
        self._languages: dict[str, str | None] = {}
        self._sessions: dict[str, DocumentSession] = {}
        self._active_document: str | None = None
        self._cursor_line = 0

    # ------------------------------------------------------------------
    # Registry access
    # ------------------------------------------------------------------

    @property
    def documents(self) -> list[str]:
        return sorted(self._buffers)

    @property
    def active_document(self) -> str | None:
        return self._active_document

    @property
    def cursor_line(self) -> int:
        return self._cursor_line

    def get_buffer(self, document_id: str) -> LineBuffer | None:
        return self._buffers.get(document_id)

    def get_session(self, document_id: str) -> DocumentSession | None:
        return self._sessions.get(document_id)

    def is_tracked(self, document_id: str) -> bool:
        return document_id in self._sessions

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------

    def open_document(
        self, document_id: str, text: str, language_id: str | None = None
    ) -> DocumentSession | None:
        """Register a document and make it active.

        Returns the new session, or None when the document is not Markdown.
        Reopening an open document replaces its text and session.
        """
        if document_id in self._buffers:
            self.close_document(document_id)

        self._buffers[document_id] = LineBuffer(text)
        self._languages[document_id] = detect_language(document_id, language_id)
        self.set_active_document(document_id)

        if self._languages[document_id] != MARKDOWN_LANGUAGE_ID:
            logger.debug("Not tracking %s (language %s)", document_id, self._languages[document_id])
            return None
        return self._start_session(document_id)

    def close_document(self, document_id: str) -> None:
        """Forget a document; its session is undecorated and closed."""
        self._end_session(document_id)
        self._buffers.pop(document_id, None)
        self._languages.pop(document_id, None)
        if self._active_document == document_id:
            self._active_document = None
            self._cursor_line = 0

    def close_all(self) -> None:
        for document_id in list(self._buffers):
            self.close_document(document_id)

    def _start_session(self, document_id: str) -> DocumentSession:
        session = DocumentSession(document_id)
        session.open(self._buffers[document_id], self.default_keyword_set)
        self._sessions[document_id] = session
        if self.styling_sink is not None:
            session.decorate(self.styling_sink)
        return session

    def _end_session(self, document_id: str) -> None:
        session = self._sessions.pop(document_id, None)
        if session is None:
            return
        if self.styling_sink is not None:
            session.undecorate(self.styling_sink)
        session.close()

    def _restart_session(self, document_id: str) -> DocumentSession:
        self._end_session(document_id)
        return self._start_session(document_id)

    # ------------------------------------------------------------------
    # Change feed
    # ------------------------------------------------------------------

    def apply_changes(self, document_id: str, changes: list[TextChange]) -> None:
        """Apply ordered change events to a document and keep its index current.

        Each change is positioned relative to the text left by the previous
        one. Once a change alters the keyword set, the remaining changes only
        update the text and the session is recreated from the final text.

        Raises:
            KeyError: the document is not open.
            ValueError: a change lies outside the text; earlier changes of
                the batch stay applied.
        """
        buffer = self._buffers.get(document_id)
        if buffer is None:
            raise KeyError(f"Document not open: {document_id}")
        if not changes:
            return

        session = self._sessions.get(document_id)
        needs_rebuild = False
        try:
            for change in changes:
                edit = buffer.apply_change(change)
                if session is None or needs_rebuild:
                    continue
                if not session.on_change(change, edit, buffer, self.default_keyword_set):
                    needs_rebuild = True
        finally:
            if session is not None:
                if needs_rebuild:
                    self._restart_session(document_id)
                elif self.styling_sink is not None:
                    session.decorate(self.styling_sink)
            self._clamp_cursor()

    def replace_lines(
        self, document_id: str, start_line: int, end_line_exclusive: int, text: str
    ) -> TextChange:
        """Replace whole lines [start_line, end_line_exclusive) with text."""
        buffer = self._buffers.get(document_id)
        if buffer is None:
            raise KeyError(f"Document not open: {document_id}")
        change = TextChange.from_line_range(buffer, start_line, end_line_exclusive, text)
        self.apply_changes(document_id, [change])
        return change

    # ------------------------------------------------------------------
    # Active document and cycling
    # ------------------------------------------------------------------

    def set_active_document(self, document_id: str | None, cursor_line: int = 0) -> None:
        if document_id is not None and document_id not in self._buffers:
            raise KeyError(f"Document not open: {document_id}")
        self._active_document = document_id
        self._cursor_line = cursor_line
        self._clamp_cursor()

    def _clamp_cursor(self) -> None:
        if self._active_document is None:
            self._cursor_line = 0
            return
        last = self._buffers[self._active_document].line_count() - 1
        self._cursor_line = max(0, min(self._cursor_line, last))

    def cycle_keyword(self, forward: bool = True) -> str:
        """Cycle the keyword on the cursor line of the active document.

        Returns the new line text.

        Raises:
            NoActiveDocument: no document is active.
            UntrackedDocument: the active document is not Markdown.
            NotCyclableLine: the cursor line is not a heading or list item.
        """
        document_id = self._active_document
        if document_id is None:
            raise NoActiveDocument()
        session = self._sessions.get(document_id)
        if session is None:
            raise UntrackedDocument()

        line_number = self._cursor_line
        line_text = self._buffers[document_id].line_text(line_number)
        new_text = cycle_keyword(line_text, session.keyword_set, forward)
        self.replace_lines(document_id, line_number, line_number + 1, new_text)
        return new_text

    # ------------------------------------------------------------------
    # Workspace configuration
    # ------------------------------------------------------------------

    def update_default_keywords(self, raw: object) -> bool:
        """Apply new workspace keyword settings.

        Sessions bound to the previous default are rebuilt; sessions using a
        front-matter override are left alone. Returns False when the new
        settings resolve to the same keyword set.
        """
        keyword_set = load_default_keyword_set(raw)
        if keyword_set.equals(self.default_keyword_set):
            keyword_set.dispose()
            return False

        old_default = self.default_keyword_set
        self.default_keyword_set = keyword_set
        rebuilt = 0
        for document_id, session in list(self._sessions.items()):
            if session.keyword_set is old_default:
                self._restart_session(document_id)
                rebuilt += 1
        old_default.dispose()

        logger.info(
            "Workspace keywords changed to %s, rebuilt %d session(s)",
            list(keyword_set.keywords),
            rebuilt,
        )
        return True
