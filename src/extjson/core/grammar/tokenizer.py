"""
Tokenizer for the JavaScript expression subset accepted by extjson.

Converts source text into a sequence of typed tokens with character offsets.
In tolerant mode lexical errors are collected and scanning continues.
"""

from __future__ import annotations

import re
import unicodedata
from enum import StrEnum, auto
from typing import Any


class TokenKind(StrEnum):
    """Token types for the expression grammar."""

    # Literals
    NUMBER = auto()
    STRING = auto()
    REGEX = auto()

    # Identifiers and keywords
    IDENT = auto()
    VAR = auto()
    LET = auto()
    CONST = auto()
    NEW = auto()
    NULL = auto()
    TRUE = auto()
    FALSE = auto()
    THIS = auto()
    TYPEOF = auto()
    VOID = auto()
    DELETE = auto()
    FUNCTION = auto()

    # Punctuation
    LBRACE = auto()
    RBRACE = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COMMA = auto()
    COLON = auto()
    SEMICOLON = auto()
    DOT = auto()
    QUESTION = auto()
    ASSIGN = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    PERCENT = auto()
    BANG = auto()
    TILDE = auto()
    EQ = auto()
    NE = auto()
    STRICT_EQ = auto()
    STRICT_NE = auto()
    LT = auto()
    GT = auto()
    LE = auto()
    GE = auto()
    AND = auto()
    OR = auto()

    # End of input
    EOF = auto()


class Token:
    """A single token from the tokenizer."""

    __slots__ = ("kind", "value", "start", "end", "newline_before")

    def __init__(
        self,
        kind: TokenKind,
        value: Any,
        start: int,
        end: int,
        newline_before: bool = False,
    ) -> None:
        self.kind = kind
        self.value = value
        self.start = start
        self.end = end
        self.newline_before = newline_before

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, {self.start}:{self.end})"


_KEYWORDS: dict[str, TokenKind] = {
    "var": TokenKind.VAR,
    "let": TokenKind.LET,
    "const": TokenKind.CONST,
    "new": TokenKind.NEW,
    "null": TokenKind.NULL,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "this": TokenKind.THIS,
    "typeof": TokenKind.TYPEOF,
    "void": TokenKind.VOID,
    "delete": TokenKind.DELETE,
    "function": TokenKind.FUNCTION,
}

_PUNCTUATORS: dict[str, TokenKind] = {
    # Longest first
    "===": TokenKind.STRICT_EQ,
    "!==": TokenKind.STRICT_NE,
    "==": TokenKind.EQ,
    "!=": TokenKind.NE,
    "<=": TokenKind.LE,
    ">=": TokenKind.GE,
    "&&": TokenKind.AND,
    "||": TokenKind.OR,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ",": TokenKind.COMMA,
    ":": TokenKind.COLON,
    ";": TokenKind.SEMICOLON,
    ".": TokenKind.DOT,
    "?": TokenKind.QUESTION,
    "=": TokenKind.ASSIGN,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "%": TokenKind.PERCENT,
    "!": TokenKind.BANG,
    "~": TokenKind.TILDE,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
}

# After these a "/" divides; anywhere else it starts a regular expression.
_ENDS_OPERAND = frozenset(
    {
        TokenKind.NUMBER,
        TokenKind.STRING,
        TokenKind.REGEX,
        TokenKind.IDENT,
        TokenKind.NULL,
        TokenKind.TRUE,
        TokenKind.FALSE,
        TokenKind.THIS,
        TokenKind.RPAREN,
        TokenKind.RBRACKET,
        TokenKind.RBRACE,
    }
)

_LINE_TERMINATORS = "\n\r\u2028\u2029"
_WHITESPACE = " \t\v\f\u00a0\ufeff"

_DIGITS = frozenset("0123456789")

_NUMBER_RE = re.compile(
    r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+\-]?\d+)?",
    re.ASCII,
)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}

REGEX_FLAGS = frozenset("gimsuy")


class GrammarTokenError(Exception):
    """Error during tokenization."""

    def __init__(self, message: str, pos: int, end: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.pos = pos
        self.end = pos + 1 if end is None else end


def _is_whitespace(c: str) -> bool:
    return c in _WHITESPACE or (c > "\x7f" and unicodedata.category(c) == "Zs")


def _is_ident_start(c: str) -> bool:
    return c == "$" or c == "_" or c.isalpha()


def _is_ident_part(c: str) -> bool:
    return _is_ident_start(c) or c.isdigit() or c in "\u200c\u200d" or (
        c > "\x7f" and unicodedata.category(c) in ("Mn", "Mc", "Nd", "Pc")
    )


def tokenize(source: str, errors: list[GrammarTokenError] | None = None) -> list[Token]:
    """Tokenize source text into a list of tokens ending with EOF.

    Args:
        source: Text to scan.
        errors: When given, lexical errors are appended here and scanning
            continues (tolerant mode); otherwise the first one is raised.

    Raises:
        GrammarTokenError: On a lexical error outside tolerant mode.
    """
    scanner = _Scanner(source, errors)
    return scanner.run()


class _Scanner:
    def __init__(self, source: str, errors: list[GrammarTokenError] | None) -> None:
        self.source = source
        self.errors = errors
        self.tokens: list[Token] = []
        self.pos = 0
        self.newline_before = False

    def error(self, message: str, pos: int, end: int | None = None) -> None:
        err = GrammarTokenError(message, pos, end)
        if self.errors is None:
            raise err
        self.errors.append(err)

    def emit(self, kind: TokenKind, value: Any, start: int) -> None:
        self.tokens.append(Token(kind, value, start, self.pos, self.newline_before))
        self.newline_before = False

    def regex_allowed(self) -> bool:
        return not self.tokens or self.tokens[-1].kind not in _ENDS_OPERAND

    def run(self) -> list[Token]:
        source = self.source
        n = len(source)

        while self.pos < n:
            c = source[self.pos]

            if c in _LINE_TERMINATORS:
                self.newline_before = True
                self.pos += 1
                continue

            if _is_whitespace(c):
                self.pos += 1
                continue

            if source.startswith("//", self.pos):
                self.skip_line_comment()
                continue

            if source.startswith("/*", self.pos):
                self.skip_block_comment()
                continue

            if c in ('"', "'"):
                self.read_string()
                continue

            if c in _DIGITS or (c == "." and source[self.pos + 1 : self.pos + 2] in _DIGITS):
                self.read_number()
                continue

            if _is_ident_start(c):
                start = self.pos
                while self.pos < n and _is_ident_part(source[self.pos]):
                    self.pos += 1
                word = source[start : self.pos]
                self.emit(_KEYWORDS.get(word, TokenKind.IDENT), word, start)
                continue

            if c == "/" and self.regex_allowed():
                self.read_regex()
                continue

            for text, kind in _PUNCTUATORS.items():
                if source.startswith(text, self.pos):
                    start = self.pos
                    self.pos += len(text)
                    self.emit(kind, text, start)
                    break
            else:
                self.error(f"Unexpected character: {c!r}", self.pos)
                self.pos += 1

        self.tokens.append(Token(TokenKind.EOF, "", n, n, self.newline_before))
        return self.tokens

    def skip_line_comment(self) -> None:
        n = len(self.source)
        while self.pos < n and self.source[self.pos] not in _LINE_TERMINATORS:
            self.pos += 1

    def skip_block_comment(self) -> None:
        start = self.pos
        close = self.source.find("*/", self.pos + 2)
        if close == -1:
            self.error("Unterminated comment", start, len(self.source))
            self.pos = len(self.source)
            return
        body = self.source[start:close]
        if any(t in body for t in _LINE_TERMINATORS):
            self.newline_before = True
        self.pos = close + 2

    def read_number(self) -> None:
        start = self.pos
        m = _NUMBER_RE.match(self.source, start)
        assert m is not None
        text = m.group(0)
        self.pos = m.end()

        if self.pos < len(self.source) and _is_ident_start(self.source[self.pos]):
            self.error("Invalid or unexpected token", self.pos)

        if text[:2].lower() in ("0x", "0o", "0b"):
            value: int | float = int(text, 0)
        elif any(ch in text for ch in ".eE"):
            value = float(text)
        else:
            value = int(text)
        self.emit(TokenKind.NUMBER, value, start)

    def read_string(self) -> None:
        source = self.source
        quote = source[self.pos]
        start = self.pos
        self.pos += 1
        n = len(source)
        chars: list[str] = []

        while self.pos < n:
            c = source[self.pos]
            if c == quote:
                self.pos += 1
                self.emit(TokenKind.STRING, _join_surrogates(chars), start)
                return
            if c in "\n\r":
                break
            if c == "\\":
                chars.append(self.read_escape())
                continue
            chars.append(c)
            self.pos += 1

        self.error("Unterminated string literal", start, self.pos)
        self.emit(TokenKind.STRING, _join_surrogates(chars), start)

    def read_escape(self) -> str:
        """Decode the escape sequence at the current backslash."""
        source = self.source
        esc_start = self.pos
        self.pos += 1
        if self.pos >= len(source):
            self.error("Unterminated escape sequence", esc_start)
            return ""

        c = source[self.pos]
        self.pos += 1

        if c in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[c]

        if c == "\r":
            if source.startswith("\n", self.pos):
                self.pos += 1
            return ""
        if c in "\n\u2028\u2029":
            return ""

        if c == "x":
            digits = source[self.pos : self.pos + 2]
            if len(digits) == 2 and all(d in "0123456789abcdefABCDEF" for d in digits):
                self.pos += 2
                return chr(int(digits, 16))
            self.error("Invalid hexadecimal escape sequence", esc_start, self.pos)
            return ""

        if c == "u":
            return self.read_unicode_escape(esc_start)

        if c in "01234567":
            # Legacy octal escape, at most \377
            digits = c
            limit = 3 if c in "0123" else 2
            while len(digits) < limit and self.pos < len(source) and source[self.pos] in "01234567":
                digits += source[self.pos]
                self.pos += 1
            return chr(int(digits, 8))

        return c

    def read_unicode_escape(self, esc_start: int) -> str:
        source = self.source
        if source.startswith("{", self.pos):
            close = source.find("}", self.pos)
            digits = source[self.pos + 1 : close] if close != -1 else ""
            if digits and all(d in "0123456789abcdefABCDEF" for d in digits) and int(digits, 16) <= 0x10FFFF:
                self.pos = close + 1
                return chr(int(digits, 16))
        else:
            digits = source[self.pos : self.pos + 4]
            if len(digits) == 4 and all(d in "0123456789abcdefABCDEF" for d in digits):
                self.pos += 4
                return chr(int(digits, 16))
        self.error("Invalid Unicode escape sequence", esc_start, self.pos)
        return ""

    def read_regex(self) -> None:
        source = self.source
        start = self.pos
        try:
            close = scan_regex_body(source, start + 1)
        except GrammarTokenError as e:
            self.error(e.message, start, e.pos)
            self.pos = e.pos
            self.emit(TokenKind.REGEX, (source[start + 1 : e.pos], ""), start)
            return

        pattern = source[start + 1 : close]
        self.pos = close + 1
        flags_start = self.pos
        while self.pos < len(source) and _is_ident_part(source[self.pos]):
            self.pos += 1
        flags = source[flags_start : self.pos]
        if any(f not in REGEX_FLAGS for f in flags) or len(set(flags)) != len(flags):
            self.error("Invalid regular expression flags", flags_start, self.pos)
        self.emit(TokenKind.REGEX, (pattern, flags), start)


def scan_regex_body(source: str, start: int) -> int:
    """Return the offset of the "/" closing a regex body that begins at ``start``.

    Escapes and character classes are honoured, so "/" inside ``[...]`` or
    after a backslash does not close the body.

    Raises:
        GrammarTokenError: If a line terminator or the end of input comes first.
    """
    i = start
    n = len(source)
    in_class = False
    while i < n:
        c = source[i]
        if c in _LINE_TERMINATORS:
            break
        if c == "\\":
            i += 2
            if i > n or source[i - 1] in _LINE_TERMINATORS:
                break
            continue
        if in_class:
            if c == "]":
                in_class = False
        elif c == "[":
            in_class = True
        elif c == "/":
            return i
        i += 1
    raise GrammarTokenError("Invalid regular expression: missing /", min(i, n))


def is_regex_body(pattern: str) -> bool:
    """True if ``pattern`` can be written verbatim between slashes."""
    if not pattern or pattern[0] == "*":
        return False
    try:
        return scan_regex_body(pattern + "/", 0) == len(pattern)
    except GrammarTokenError:
        return False


def _join_surrogates(chars: list[str]) -> str:
    """Join decoded characters, merging UTF-16 surrogate pairs from \\u escapes."""
    out: list[str] = []
    for ch in "".join(chars):
        if out and "\udc00" <= ch <= "\udfff" and "\ud800" <= out[-1] <= "\udbff":
            high = ord(out.pop()) - 0xD800
            out.append(chr(0x10000 + (high << 10) + (ord(ch) - 0xDC00)))
        else:
            out.append(ch)
    return "".join(out)


def is_identifier_name(text: str) -> bool:
    """True if ``text`` scans as a single identifier (or keyword)."""
    return bool(text) and _is_ident_start(text[0]) and all(_is_ident_part(c) for c in text[1:])
