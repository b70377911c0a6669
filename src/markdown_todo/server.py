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

"""MCP server for Markdown keyword cycling.

Hosts a workspace of open Markdown documents, applies edits to them while
keeping their keyword index current, and exposes the two cycle commands
plus read-only queries as MCP tools.

Usage:
    WORKSPACE_ROOT=/path/to/notes python -m markdown_todo.server
"""

from __future__ import annotations

import json
import os
import sys
import time
import traceback

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent
import mcp.types as types

from markdown_todo.config import load_workspace_settings
from markdown_todo.constants import EXTENSION_NAME
from markdown_todo.errors import MarkdownTodoError
from markdown_todo.models import TextChange
from markdown_todo.query_api import create_workspace_query_functions
from markdown_todo.styling import DecorationStore
from markdown_todo.text_source import LineBuffer
from markdown_todo.workspace import Workspace

# ---------------------------------------------------------------------------
# Module-level state
# ---------------------------------------------------------------------------

server = Server("markdown-todo")

_workspace_root: str = ""
_workspace: Workspace | None = None
_decorations: DecorationStore = DecorationStore()
_query_fns: dict | None = None

# Session usage stats
_session_start: float = time.time()
_tool_call_counts: dict[str, int] = {}
_total_chars_returned: int = 0


def _format_result(value: object) -> str:
    """Format a query result as readable text."""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, indent=2, default=str)
    return str(value)


def _format_usage_stats() -> str:
    """Format session usage statistics."""
    elapsed = time.time() - _session_start
    total_calls = sum(_tool_call_counts.values())
    # Don't count get_usage_stats itself in the call total
    command_calls = total_calls - _tool_call_counts.get("get_usage_stats", 0)

    lines = [
        f"Session duration: {_format_duration(elapsed)}",
        f"Total calls: {command_calls}",
    ]

    if _tool_call_counts:
        lines.append("")
        lines.append("Calls by tool:")
        for tool_name, count in sorted(_tool_call_counts.items(), key=lambda x: -x[1]):
            if tool_name == "get_usage_stats":
                continue
            lines.append(f"  {tool_name}: {count}")

    lines.append("")
    lines.append(f"Total chars returned: {_total_chars_returned:,}")

    if _workspace is not None:
        tracked = [d for d in _workspace.documents if _workspace.is_tracked(d)]
        annotations = sum(len(_workspace.get_session(d).index) for d in tracked)
        lines.append(f"Open documents: {len(_workspace.documents)} ({len(tracked)} tracked)")
        lines.append(f"Annotated lines: {annotations:,}")

    return "\n".join(lines)


def _format_duration(seconds: float) -> str:
    """Format seconds into a human-readable duration."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours = minutes // 60
    mins = minutes % 60
    return f"{hours}h {mins}m"


def _build_workspace() -> None:
    """Create (or recreate) the workspace and query functions."""
    global _workspace_root, _workspace, _query_fns

    _workspace_root = os.environ.get("WORKSPACE_ROOT", os.getcwd())
    settings = load_workspace_settings(_workspace_root)
    if settings.exists():
        print(f"[markdown-todo] Using settings from {settings.config_path}", file=sys.stderr)

    if _workspace is not None:
        _workspace.close_all()
    _decorations.clear()
    _workspace = Workspace(default_keywords=settings.keywords, styling_sink=_decorations)
    _query_fns = create_workspace_query_functions(_workspace, _decorations)

    print(
        f"[markdown-todo] Workspace {_workspace_root}, keywords: "
        f"{', '.join(_workspace.default_keyword_set.keywords)}",
        file=sys.stderr,
    )


def _reload_configuration() -> str:
    settings = load_workspace_settings(_workspace_root)
    if _workspace.update_default_keywords(settings.keywords):
        return "Workspace keywords changed: " + ", ".join(_workspace.default_keyword_set.keywords)
    return "Workspace keywords unchanged."


def _document_id(file_path: str) -> str:
    """Normalize a path to the id used for it in the workspace."""
    if os.path.isabs(file_path):
        file_path = os.path.relpath(file_path, _workspace_root)
    return os.path.normpath(file_path).replace(os.sep, "/")


def _open_document(arguments: dict) -> str:
    document = _document_id(arguments["file_path"])
    text = arguments.get("text")
    if text is None:
        text = LineBuffer.from_file(os.path.join(_workspace_root, document)).get_text()
    session = _workspace.open_document(document, text, arguments.get("language_id"))
    if session is None:
        return f"Opened {document} (not a markdown document, keywords not tracked)."
    return f"Opened {document}: {len(session.index)} annotated line(s)."


def _parse_change(raw: dict) -> TextChange:
    """Tool-level change (1-indexed lines, 0-indexed columns) to a TextChange."""
    return TextChange(
        start_line=raw["start_line"] - 1,
        end_line=raw.get("end_line", raw["start_line"]) - 1,
        text=raw.get("text", ""),
        start_column=raw.get("start_column", 0),
        end_column=raw.get("end_column"),
    )


def _cycle(forward: bool) -> str:
    try:
        return _workspace.cycle_keyword(forward)
    except MarkdownTodoError as e:
        return f"{EXTENSION_NAME}: {e}"


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

_DOCUMENT_PROPERTY = {
    "type": "string",
    "description": "Document id as returned by open_document (path relative to the workspace root).",
}

TOOLS = [
    Tool(
        name="open_document",
        description="Open a document and index its keywords. Reads the file unless text is given. The document becomes active with the cursor on line 1.",
        inputSchema={
            "type": "object",
            "properties": {
                "file_path": {
                    "type": "string",
                    "description": "Path relative to the workspace root (or absolute). Used as the document id.",
                },
                "text": {
                    "type": "string",
                    "description": "Optional document text; the file is not read when given.",
                },
                "language_id": {
                    "type": "string",
                    "description": "Optional language id overriding extension detection (e.g. 'markdown').",
                },
            },
            "required": ["file_path"],
        },
    ),
    Tool(
        name="close_document",
        description="Close a document and drop its keyword index.",
        inputSchema={
            "type": "object",
            "properties": {"document": _DOCUMENT_PROPERTY},
            "required": ["document"],
        },
    ),
    Tool(
        name="edit_document",
        description="Apply ordered edits. Each edit replaces the range from (start_line, start_column) to (end_line, end_column) with text; positions refer to the text left by the previous edit. Lines are 1-indexed, columns 0-indexed; omitted columns cover whole lines.",
        inputSchema={
            "type": "object",
            "properties": {
                "document": _DOCUMENT_PROPERTY,
                "changes": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "start_line": {"type": "integer"},
                            "end_line": {"type": "integer"},
                            "start_column": {"type": "integer"},
                            "end_column": {"type": "integer"},
                            "text": {"type": "string"},
                        },
                        "required": ["start_line"],
                    },
                },
            },
            "required": ["document", "changes"],
        },
    ),
    Tool(
        name="replace_lines",
        description="Replace lines start_line..end_line (1-indexed, inclusive) with text. end_line = start_line - 1 inserts before start_line.",
        inputSchema={
            "type": "object",
            "properties": {
                "document": _DOCUMENT_PROPERTY,
                "start_line": {"type": "integer"},
                "end_line": {"type": "integer"},
                "text": {"type": "string"},
            },
            "required": ["document", "start_line", "end_line", "text"],
        },
    ),
    Tool(
        name="set_cursor",
        description="Make a document active and put the cursor on a line (1-indexed).",
        inputSchema={
            "type": "object",
            "properties": {
                "document": _DOCUMENT_PROPERTY,
                "line": {"type": "integer"},
            },
            "required": ["document", "line"],
        },
    ),
    Tool(
        name="cycle_keyword_forward",
        description="Cycle the keyword on the cursor line forward (none -> TODO -> DONE -> none with default keywords). Returns the new line.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="cycle_keyword_backward",
        description="Cycle the keyword on the cursor line backward. Returns the new line.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="get_annotations",
        description="Keyword occurrences of a document: line, keyword, column range and line text.",
        inputSchema={
            "type": "object",
            "properties": {
                "document": _DOCUMENT_PROPERTY,
                "keyword": {
                    "type": "string",
                    "description": "Optional keyword to filter on.",
                },
            },
            "required": ["document"],
        },
    ),
    Tool(
        name="get_decorations",
        description="Styles and ranges last submitted for rendering a document.",
        inputSchema={
            "type": "object",
            "properties": {"document": _DOCUMENT_PROPERTY},
            "required": ["document"],
        },
    ),
    Tool(
        name="get_document_keywords",
        description="Keyword set in effect for a document (front matter override or workspace settings).",
        inputSchema={
            "type": "object",
            "properties": {"document": _DOCUMENT_PROPERTY},
            "required": ["document"],
        },
    ),
    Tool(
        name="list_documents",
        description="List open documents with tracked state and line counts.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="get_lines",
        description="Get specific lines of a document (1-indexed, inclusive).",
        inputSchema={
            "type": "object",
            "properties": {
                "document": _DOCUMENT_PROPERTY,
                "start": {"type": "integer"},
                "end": {"type": "integer"},
            },
            "required": ["document", "start", "end"],
        },
    ),
    Tool(
        name="get_workspace_summary",
        description="Overview: open documents, keyword counts per document, active document and cursor.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="reload_configuration",
        description="Re-read workspace keyword settings. Documents using workspace keywords are re-indexed if they changed.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="get_usage_stats",
        description="Session stats: tool calls, characters returned, open documents and annotated lines.",
        inputSchema={"type": "object", "properties": {}},
    ),
]


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _dispatch(name: str, arguments: dict) -> object:
    """Run one tool call against the workspace and return its raw result."""
    if name == "get_usage_stats":
        return _format_usage_stats()

    if _workspace is None or _query_fns is None:
        return "Error: workspace not initialized."

    if name == "open_document":
        return _open_document(arguments)

    elif name == "close_document":
        _workspace.close_document(arguments["document"])
        return f"Closed {arguments['document']}."

    elif name == "edit_document":
        changes = [_parse_change(c) for c in arguments["changes"]]
        _workspace.apply_changes(arguments["document"], changes)
        return f"Applied {len(changes)} change(s)."

    elif name == "replace_lines":
        _workspace.replace_lines(
            arguments["document"],
            arguments["start_line"] - 1,
            arguments["end_line"],
            arguments["text"],
        )
        return "Lines replaced."

    elif name == "set_cursor":
        _workspace.set_active_document(arguments["document"], arguments["line"] - 1)
        return f"Cursor at {arguments['document']}:{_workspace.cursor_line + 1}."

    elif name == "cycle_keyword_forward":
        return _cycle(forward=True)

    elif name == "cycle_keyword_backward":
        return _cycle(forward=False)

    elif name == "get_annotations":
        return _query_fns["get_annotations"](arguments["document"], arguments.get("keyword"))

    elif name == "get_decorations":
        return _query_fns["get_decorations"](arguments["document"])

    elif name == "get_document_keywords":
        return _query_fns["get_document_keywords"](arguments["document"])

    elif name == "list_documents":
        return _query_fns["list_documents"]()

    elif name == "get_lines":
        return _query_fns["get_lines"](arguments["document"], arguments["start"], arguments["end"])

    elif name == "get_workspace_summary":
        return _query_fns["get_workspace_summary"]()

    elif name == "reload_configuration":
        return _reload_configuration()

    return f"Error: unknown tool '{name}'"


# ---------------------------------------------------------------------------
# MCP handlers
# ---------------------------------------------------------------------------


@server.list_tools()
async def list_tools() -> list[Tool]:
    return TOOLS


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
    global _total_chars_returned

    _tool_call_counts[name] = _tool_call_counts.get(name, 0) + 1

    try:
        formatted = _format_result(_dispatch(name, arguments or {}))
        _total_chars_returned += len(formatted)
        return [TextContent(type="text", text=formatted)]

    except Exception as e:
        tb = traceback.format_exc()
        print(f"[markdown-todo] Error in {name}: {tb}", file=sys.stderr)
        return [TextContent(type="text", text=f"Error: {e}")]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def main():
    _build_workspace()
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main_sync():
    """Synchronous entry point for console_scripts."""
    import asyncio

    asyncio.run(main())


if __name__ == "__main__":
    main_sync()
