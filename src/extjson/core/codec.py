"""
Parse and normalize extended JSON.

    >>> from extjson import parse, serialize
    >>> doc = parse('{_id: ObjectId("4d8e5d1b6a9e4c2f3a1b0c9d"), n: NaN}')
    >>> serialize(doc, pretty=False)
    '{_id:ObjectId("4d8e5d1b6a9e4c2f3a1b0c9d"),n:NaN}'

The text is parsed as the initializer of a variable declaration, so the
grammar sees ``var __extjson__ = <text>``. Error locations are reported
against the caller's text, not the wrapped one.
"""

from __future__ import annotations

import logging
from typing import Any

from extjson.core.config import ExtJsonSettings, load_settings
from extjson.core.errors import ErrorKind, ParseError, make_syntax_error
from extjson.core.grammar.parser import parse_program
from extjson.core.ir.values import CanonicalValue
from extjson.core.serializer import serialize
from extjson.core.validator import validate

logger = logging.getLogger(__name__)

WRAPPER_PREFIX = "var __extjson__ = "


def _coerce_text(text: Any) -> str:
    if isinstance(text, str):
        return text
    if isinstance(text, (bytes, bytearray)):
        return bytes(text).decode("utf-8")
    return str(text)


def parse(text: str | bytes, *, settings: ExtJsonSettings | None = None) -> CanonicalValue:
    """Parse extended JSON text into a canonical value.

    Args:
        text: Source text. Bytes are decoded as UTF-8; anything else is
            converted with ``str()``.
        settings: Depth limit; read from the environment if omitted.

    Returns:
        A dict for the top-level object, holding plain values and
        extended-type models.

    Raises:
        ParseError: ``kind=SYNTAX`` if the text does not scan or parse,
            ``kind=STRUCTURAL`` if it uses anything outside the whitelist.
            ``errors`` lists every problem found.
    """
    settings = settings or load_settings()
    text = _coerce_text(text)
    source = WRAPPER_PREFIX + text
    offset = len(WRAPPER_PREFIX)

    result = parse_program(source, tolerant=True, max_depth=settings.max_depth)
    if result.errors or result.program is None:
        errors = [
            make_syntax_error(issue.message, text, issue.start - offset, issue.end - offset)
            for issue in result.errors
        ]
        logger.debug("Rejected extended JSON: %d syntax error(s)", len(errors))
        raise ParseError(errors, ErrorKind.SYNTAX)

    try:
        value = validate(result.program, source, offset=offset)
    except ParseError as e:
        logger.debug("Rejected extended JSON: %s", e.message)
        raise

    logger.debug("Parsed extended JSON object with %d key(s)", len(value))
    return value


def normalize(
    text: str | bytes,
    pretty: bool = True,
    *,
    settings: ExtJsonSettings | None = None,
) -> str:
    """Parse ``text`` and serialize it again in canonical layout.

    Raises:
        ParseError: As for ``parse``.
    """
    settings = settings or load_settings()
    return serialize(parse(text, settings=settings), pretty, settings=settings)
