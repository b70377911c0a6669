"""Exceptions raised by the keyword index and the cycle command."""


class MarkdownTodoError(Exception):
    """Base class for markdown-todo errors."""

    message = "unexpected error."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class NoActiveDocument(MarkdownTodoError):
    """A cycle was requested with no active document."""

    message = "no active text editor."


class UntrackedDocument(MarkdownTodoError):
    """The active document is not a Markdown document with a session."""

    message = "not a markdown document."


class NotCyclableLine(MarkdownTodoError):
    """The cursor line is neither a heading nor an unordered list item."""

    message = "not supported in current line."


class NoUsableKeywordSet(MarkdownTodoError):
    """Every configured keyword definition was rejected."""

    message = "no usable keyword definitions."


class MalformedMetadataBlock(MarkdownTodoError):
    """The front-matter block is not valid YAML."""

    message = "malformed front matter."
