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

"""Names and fixed values shared across the package."""

import re

EXTENSION_NAME = "Markdown-TODO"

CONFIG_SECTION = "markdown-todo"
CONFIG_SECTION_KEYWORDS = f"{CONFIG_SECTION}.keywords"

# Opening and closing line prefix of a front-matter block
METADATA_MARKER = "---"

# Heading (1-6 '#') or unordered list item, then whitespace, then anything
CYCLABLE_LINE_REGEX = re.compile(r"^((#{1,6}|\s*[-+*])\s+)(.*)")

DEFAULT_KEYWORD_DEFINITIONS: list[dict] = [
    {"keyword": "TODO", "color": "#C05430", "backgroundColor": None, "bold": True},
    {"keyword": "DONE", "color": "#008020", "backgroundColor": None, "bold": True},
]

MARKDOWN_LANGUAGE_ID = "markdown"

_EXTENSION_MAP: dict[str, str] = {
    ".md": MARKDOWN_LANGUAGE_ID,
    ".markdown": MARKDOWN_LANGUAGE_ID,
    ".mdown": MARKDOWN_LANGUAGE_ID,
    ".mkd": MARKDOWN_LANGUAGE_ID,
    ".mkdn": MARKDOWN_LANGUAGE_ID,
}


def detect_language(document_id: str, language_id: str | None = None) -> str | None:
    """Return the language id of a document.

    An explicit language_id wins; otherwise the extension of document_id
    decides. Unknown extensions yield None.
    """
    if language_id is not None:
        return language_id
    dot_idx = document_id.rfind(".")
    if dot_idx < 0:
        return None
    return _EXTENSION_MAP.get(document_id[dot_idx:].lower())
