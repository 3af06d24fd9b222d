"""
Serializer: canonical values back to extended JSON text.

Output re-parses to an equal value. Pretty output puts one member per line
and indents nested containers:

    {
        _id: ObjectId("4d8e5d1b6a9e4c2f3a1b0c9d"),
        "default": true,
        when: ISODate("2020-01-02T03:04:05.006Z"),
        tags: [
            "a",
            /ab+c/gi
        ]
    }

Compact output drops all whitespace: ``{_id:ObjectId("..."),"default":true}``.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

from extjson.core.config import ExtJsonSettings, load_settings
from extjson.core.dates import format_iso_date, year_of
from extjson.core.errors import SerializationError
from extjson.core.grammar.tokenizer import is_identifier_name, is_regex_body
from extjson.core.ir.values import BinData, IsoDate, NaNMarker, ObjectId, Regex

# Characters written as escapes inside quoted strings; lone surrogates
# included so output is always valid UTF-8.
_ESCAPABLE_RE = re.compile(
    r"[\\\"\x00-\x1f\x7f-\x9f\u00ad\u0600-\u0604\u070f\u17b4\u17b5\u200c-\u200f"
    r"\u2028-\u202f\u2060-\u206f\ufeff\ufff0-\uffff\ud800-\udfff]"
)

_META = {
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
    '"': '\\"',
    "\\": "\\\\",
}

# ES5 reserved words, plus eval and arguments
_RESERVED_WORDS = frozenset(
    """
    do if in for let new try var case else enum eval false null this true void
    with break catch class const super throw while yield delete export import
    public return static switch typeof default extends finally package private
    continue debugger function arguments interface protected implements
    instanceof
    """.split()
)

# Years ISODate("...") can spell; others are written as Date(<millis>)
_MIN_ISO_YEAR = 100
_MAX_ISO_YEAR = 9999


def _escape(match: re.Match[str]) -> str:
    char = match.group(0)
    return _META.get(char) or f"\\u{ord(char):04x}"


def quote(text: str) -> str:
    """Double-quote ``text``, escaping what must not appear literally."""
    return '"' + _ESCAPABLE_RE.sub(_escape, text) + '"'


def format_key(key: str) -> str:
    """An object key, unquoted when it is a plain identifier."""
    if key in _RESERVED_WORDS or not is_identifier_name(key):
        return quote(key)
    return key


def format_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    # Non-finite numbers have no JSON spelling
    if not math.isfinite(value):
        return "null"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def canonical_flags(flags: str) -> str:
    """The subset of g, m, i present in ``flags``, in that order."""
    return "".join(flag for flag in "gmi" if flag in flags)


def call(name: str, args: list[str]) -> str:
    return f"{name}({', '.join(args)})"


class _Serializer:
    def __init__(self, indent: str, max_depth: int) -> None:
        self.indent = indent
        self.max_depth = max_depth

    def render(self, value: Any, gap: str, depth: int) -> str:
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return format_number(value)
        if isinstance(value, str):
            return quote(value)

        if isinstance(value, ObjectId):
            return call("ObjectId", [] if value.hex is None else [quote(value.hex)])
        if isinstance(value, IsoDate):
            return self.render_date(value)
        if isinstance(value, Regex):
            return self.render_regex(value)
        if isinstance(value, BinData):
            return call(
                "BinData",
                [self.render(value.subtype, gap, depth), self.render(value.base64, gap, depth)],
            )
        if isinstance(value, NaNMarker):
            return "NaN"

        if isinstance(value, Mapping):
            return self.render_object(value, gap, depth + 1)
        if isinstance(value, (list, tuple)):
            return self.render_array(value, gap, depth + 1)

        raise SerializationError(f"Cannot serialize value of type {type(value).__name__}")

    def render_date(self, value: IsoDate) -> str:
        millis = value.epoch_millis_utc
        if millis is None:
            return "ISODate(null)"
        if _MIN_ISO_YEAR <= year_of(millis) <= _MAX_ISO_YEAR:
            return call("ISODate", [quote(format_iso_date(millis))])
        return call("Date", [str(millis)])

    def render_regex(self, value: Regex) -> str:
        pattern, flags = value.pattern, value.flags
        if pattern is None:
            return call("RegExp", [] if not flags else ["null", quote(flags)])
        if is_regex_body(pattern) and flags == canonical_flags(flags):
            return f"/{pattern}/{flags}"
        return call("RegExp", [quote(pattern), quote(flags)])

    def check_depth(self, depth: int) -> None:
        if depth > self.max_depth:
            raise SerializationError(f"Maximum nesting depth of {self.max_depth} exceeded")

    def render_array(self, value: list[Any] | tuple[Any, ...], mind: str, depth: int) -> str:
        self.check_depth(depth)
        if not value:
            return "[]"

        gap = mind + self.indent
        partial = [self.render(item, gap, depth) for item in value]
        if gap:
            return "[\n" + gap + (",\n" + gap).join(partial) + "\n" + mind + "]"
        return "[" + ",".join(partial) + "]"

    def render_object(self, value: Mapping[Any, Any], mind: str, depth: int) -> str:
        self.check_depth(depth)
        if not value:
            return "{}"

        gap = mind + self.indent
        separator = ": " if gap else ":"
        partial = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise SerializationError(f"Object keys must be strings, got {type(key).__name__}")
            partial.append(format_key(key) + separator + self.render(item, gap, depth))
        if gap:
            return "{\n" + gap + (",\n" + gap).join(partial) + "\n" + mind + "}"
        return "{" + ",".join(partial) + "}"


def serialize(value: Any, pretty: bool = True, *, settings: ExtJsonSettings | None = None) -> str:
    """Render a canonical value as extended JSON text.

    Args:
        value: None, bool, int, float, str, list, dict or an extended type.
        pretty: Indent nested containers, one member per line.
        settings: Indent and depth limit; read from the environment if omitted.

    Raises:
        SerializationError: If the value holds something outside the
            canonical model or nests deeper than ``settings.max_depth``.
    """
    settings = settings or load_settings()
    indent = settings.indent if pretty else ""
    return _Serializer(indent, settings.max_depth).render(value, "", 0)
