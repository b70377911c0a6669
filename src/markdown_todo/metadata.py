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

"""Front-matter detection and per-document keyword overrides.

A document may start with a YAML block delimited by lines beginning with
"---". Inside it, either of these shapes overrides the workspace keywords:

    markdown-todo.keywords:
      - keyword: WIP

    markdown-todo:
      keywords:
        - keyword: WIP
"""

from __future__ import annotations

import logging
from typing import Any

import yaml

from markdown_todo.constants import CONFIG_SECTION, CONFIG_SECTION_KEYWORDS, METADATA_MARKER
from markdown_todo.errors import MalformedMetadataBlock, NoUsableKeywordSet
from markdown_todo.keywords import KeywordSet
from markdown_todo.models import DocumentKeywordInfo
from markdown_todo.text_source import TextSource

logger = logging.getLogger(__name__)


def find_metadata_end(source: TextSource) -> int | None:
    """Line number of the closing marker of a leading front-matter block, or None."""
    if source.line_count() <= 0:
        return None
    if not source.line_text(0).startswith(METADATA_MARKER):
        return None
    for line_number in range(1, source.line_count()):
        if source.line_text(line_number).startswith(METADATA_MARKER):
            return line_number
    return None


def parse_metadata_block(text: str) -> dict[str, Any] | None:
    """Parse front-matter YAML; None when it is not a mapping.

    Raises:
        MalformedMetadataBlock: the text is not valid YAML.
    """
    try:
        metadata = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise MalformedMetadataBlock(f"malformed front matter: {e}") from e
    if not isinstance(metadata, dict):
        return None
    return metadata


def extract_keyword_items(metadata: dict[str, Any]) -> Any:
    """Raw keyword definitions from a settings mapping, flat key first."""
    items = metadata.get(CONFIG_SECTION_KEYWORDS)
    if items is None:
        section = metadata.get(CONFIG_SECTION)
        if isinstance(section, dict):
            items = section.get("keywords")
    return items


def resolve_document_keywords(source: TextSource) -> DocumentKeywordInfo:
    """Find the front-matter boundary and any keyword override it declares.

    main_content_start_line is one past the closing marker, or 0 when the
    document has no complete front-matter block. A malformed block or one
    without usable keywords still sets the boundary but yields no override.
    """
    end = find_metadata_end(source)
    if end is None:
        return DocumentKeywordInfo(keyword_set=None, main_content_start_line=0)

    boundary = end + 1
    yaml_text = "".join(source.line_text(n) + "\n" for n in range(1, end))
    try:
        metadata = parse_metadata_block(yaml_text)
    except MalformedMetadataBlock as e:
        logger.info("Ignoring front matter: %s", e)
        return DocumentKeywordInfo(keyword_set=None, main_content_start_line=boundary)
    if metadata is None:
        return DocumentKeywordInfo(keyword_set=None, main_content_start_line=boundary)

    items = extract_keyword_items(metadata)
    if items is None:
        return DocumentKeywordInfo(keyword_set=None, main_content_start_line=boundary)
    try:
        keyword_set = KeywordSet.from_raw(items)
    except NoUsableKeywordSet:
        logger.debug("Front matter declares no usable keywords, using workspace keywords")
        return DocumentKeywordInfo(keyword_set=None, main_content_start_line=boundary)
    return DocumentKeywordInfo(keyword_set=keyword_set, main_content_start_line=boundary)
