"""
Expression grammar: tokenizer and recursive descent parser for the subset of
JavaScript that extended JSON is written in.
"""

from extjson.core.grammar.parser import (
    GrammarParseError,
    GrammarResult,
    SyntaxIssue,
    parse_program,
)
from extjson.core.grammar.tokenizer import (
    GrammarTokenError,
    Token,
    TokenKind,
    is_identifier_name,
    is_regex_body,
    tokenize,
)

__all__ = [
    "GrammarParseError",
    "GrammarResult",
    "GrammarTokenError",
    "SyntaxIssue",
    "Token",
    "TokenKind",
    "is_identifier_name",
    "is_regex_body",
    "parse_program",
    "tokenize",
]
