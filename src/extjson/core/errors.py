"""
Error types for extended JSON parsing and serialization.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ExtJsonError(Exception):
    """Base exception for all extjson errors."""

    def __init__(self, message: str, location: SourceLocation | None = None):
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with location if available."""
        if self.location:
            return f"{self.location.format()}\n{self.message}"
        return self.message


class ExtJsonSyntaxError(ExtJsonError):
    """
    A malformed token stream reported by the grammar provider.

    Examples:
    - Unterminated string or regular expression
    - Unexpected character or token
    - Nesting deeper than the configured limit
    """

    pass


class StructuralError(ExtJsonError):
    """
    A syntax node the whitelist grammar does not allow.

    Examples:
    - Call to a constructor outside the whitelist
    - Property value that is not a literal, array, object or call
    - Top-level text that is not a single object literal
    """

    pass


class InvalidDateError(StructuralError):
    """Raised when a date constructor receives a value it cannot interpret."""

    pass


class SerializationError(ExtJsonError):
    """
    Raised when a value cannot be rendered as extended JSON.

    Examples:
    - Python objects outside the canonical value model
    - Nesting deeper than the configured limit
    """

    pass


class ErrorKind(StrEnum):
    """Which stage of parsing produced an aggregate failure."""

    SYNTAX = "syntax"
    STRUCTURAL = "structural"


class ParseError(ExtJsonError):
    """
    Aggregate failure carrying every error from a single parse.

    Syntax errors short-circuit structural validation, so ``errors`` holds
    either only syntax errors or only structural errors; ``kind`` says which.
    """

    def __init__(self, errors: list[ExtJsonError], kind: ErrorKind):
        self.errors = list(errors)
        self.kind = kind
        count = len(self.errors)
        super().__init__(f"{count} parse error{'' if count == 1 else 's'}")

    def format_errors(self) -> str:
        """One ``line:column: message`` entry per error."""
        lines = []
        for error in self.errors:
            if error.location:
                lines.append(f"{error.location.line}:{error.location.column}: {error.message}")
            else:
                lines.append(error.message)
        return "\n".join(lines)


@dataclass
class SourceLocation:
    """
    Location of an error in the caller's source text.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        offset: Character offset of the start of the offending range
        end: Character offset just past the offending range
        snippet: Optional source lines surrounding the error
        snippet_start: Line number of the first snippet line; None means the
            snippet starts on the error line
    """

    line: int
    column: int
    offset: int = 0
    end: int = 0
    snippet: str | None = None
    snippet_start: int | None = None

    @classmethod
    def from_range(
        cls,
        source: str,
        start: int,
        end: int | None = None,
        context_lines: int = 2,
    ) -> SourceLocation:
        """Build a location for ``source[start:end]``, clamping to the text."""
        start = min(max(start, 0), len(source))
        end = start if end is None else min(max(end, start), len(source))

        line = source.count("\n", 0, start) + 1
        line_start = source.rfind("\n", 0, start) + 1
        column = start - line_start + 1

        snippet = None
        first = None
        if context_lines >= 0 and source:
            all_lines = source.split("\n")
            first = max(1, line - context_lines)
            last = min(len(all_lines), line + context_lines)
            snippet = "\n".join(all_lines[first - 1 : last])

        return cls(
            line=line,
            column=column,
            offset=start,
            end=end,
            snippet=snippet,
            snippet_start=first,
        )

    def format(self) -> str:
        """
        Format location as a human-readable string.

        Returns:
            Formatted string like: "3:14", followed by the snippet if any
        """
        location = f"{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        formatted = []

        start_line = self.line if self.snippet_start is None else self.snippet_start

        for i, line in enumerate(lines):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^^^")

        return "\n".join(formatted)


def make_syntax_error(
    message: str,
    source: str,
    start: int,
    end: int | None = None,
) -> ExtJsonSyntaxError:
    """
    Helper to create an ExtJsonSyntaxError located in ``source``.

    Args:
        message: Error description
        source: The caller's text
        start: Offset of the offending range
        end: Optional end offset

    Returns:
        ExtJsonSyntaxError with location attached
    """
    return ExtJsonSyntaxError(message, SourceLocation.from_range(source, start, end))


def make_structural_error(
    message: str,
    source: str,
    start: int,
    end: int | None = None,
    error_cls: type[StructuralError] = StructuralError,
) -> StructuralError:
    """
    Helper to create a StructuralError (or subclass) located in ``source``.

    Args:
        message: Error description
        source: The caller's text
        start: Offset of the offending node
        end: Optional end offset of the node
        error_cls: StructuralError subclass to instantiate

    Returns:
        StructuralError with location attached
    """
    return error_cls(message, SourceLocation.from_range(source, start, end))
