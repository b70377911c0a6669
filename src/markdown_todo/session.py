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

"""Per-document state: active keyword set, front-matter boundary and keyword index."""

from __future__ import annotations

import enum
import logging

from markdown_todo.annotation_index import AnnotationIndex
from markdown_todo.keywords import KeywordSet
from markdown_todo.metadata import resolve_document_keywords
from markdown_todo.models import LineEdit, TextChange
from markdown_todo.styling import StylingSink
from markdown_todo.text_source import TextSource

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSED = "closed"


class DocumentSession:
    """Keeps the keyword index of one open Markdown document current."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        self.state = SessionState.UNINITIALIZED
        self.keyword_set: KeywordSet | None = None
        self.owns_keyword_set = False
        self.main_content_start_line = 0
        self._index: AnnotationIndex | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self, source: TextSource, default_keyword_set: KeywordSet) -> None:
        """Resolve the keyword set from the front matter and index the whole text."""
        if self.state is not SessionState.UNINITIALIZED:
            raise RuntimeError(f"Session for {self.document_id} is already {self.state.value}")

        info = resolve_document_keywords(source)
        if info.keyword_set is not None:
            self.keyword_set = info.keyword_set
            self.owns_keyword_set = True
        else:
            self.keyword_set = default_keyword_set
            self.owns_keyword_set = False
        self.main_content_start_line = info.main_content_start_line
        self._index = AnnotationIndex.build_full(source, self.keyword_set)
        self.state = SessionState.ACTIVE

        logger.info(
            "Opened %s: %d keyword(s) %s, %d annotated line(s)",
            self.document_id,
            len(self.keyword_set),
            "from front matter" if self.owns_keyword_set else "from workspace",
            len(self._index),
        )

    def close(self) -> None:
        """Drop the index and dispose a document-private keyword set."""
        if self.state is SessionState.CLOSED:
            return
        if self.owns_keyword_set and self.keyword_set is not None:
            self.keyword_set.dispose()
        self._index = None
        self.state = SessionState.CLOSED
        logger.info("Closed %s", self.document_id)

    def _require_active(self) -> AnnotationIndex:
        if self.state is not SessionState.ACTIVE or self._index is None:
            raise RuntimeError(f"Session for {self.document_id} is {self.state.value}")
        return self._index

    @property
    def index(self) -> AnnotationIndex:
        return self._require_active()

    # ------------------------------------------------------------------
    # Change handling
    # ------------------------------------------------------------------

    def has_metadata(self) -> bool:
        return self.main_content_start_line > 0

    def is_metadata_affected(self, change: TextChange) -> bool:
        return change.start_line < self.main_content_start_line

    def on_change(
        self,
        change: TextChange,
        edit: LineEdit,
        source: TextSource,
        default_keyword_set: KeywordSet,
    ) -> bool:
        """Process one change already applied to source.

        Returns False when the change altered the keyword set in effect; the
        caller must then close this session and open a new one.
        """
        index = self._require_active()

        if not self.has_metadata() or self.is_metadata_affected(change):
            info = resolve_document_keywords(source)
            resolved = info.keyword_set if info.keyword_set is not None else default_keyword_set
            changed = not self.keyword_set.equals(resolved)
            if info.keyword_set is not None and info.keyword_set is not self.keyword_set:
                info.keyword_set.dispose()
            if changed:
                logger.info("Keyword set of %s changed, rebuilding", self.document_id)
                return False
            self.main_content_start_line = info.main_content_start_line

        try:
            index.update(edit, source)
        except (IndexError, ValueError) as e:
            logger.warning(
                "Incremental update of %s failed (%s), rebuilding index", self.document_id, e
            )
            index.rebuild(source)
        return True

    # ------------------------------------------------------------------
    # Styling
    # ------------------------------------------------------------------

    def decorate(self, sink: StylingSink) -> None:
        """Submit the full current span set of every keyword."""
        index = self._require_active()
        for keyword, spans in index.spans_by_keyword().items():
            style = self.keyword_set.styles.get(keyword)
            if style is None:
                continue
            sink.set_decorations(self.document_id, style, spans)

    def undecorate(self, sink: StylingSink) -> None:
        self._require_active()
        for style in self.keyword_set.styles.values():
            sink.set_decorations(self.document_id, style, [])
