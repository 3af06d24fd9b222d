"""
Settings for extended JSON parsing and serialization.

Settings are plain frozen values passed into ``parse`` / ``serialize``. When a
caller passes none, ``load_settings()`` builds them from the environment:

    EXTJSON_MAX_DEPTH   Maximum nesting depth of objects and arrays, 1-100
                        (default 100, the BSON nesting limit)
    EXTJSON_INDENT      Indent used by pretty serialization: a number of
                        spaces (1-8) or "tab" (default 4 spaces)

Usage:
    from extjson.core.config import ExtJsonSettings, load_settings

    settings = load_settings()
    compact = ExtJsonSettings(indent="  ")
"""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

MAX_DEPTH_VAR = "EXTJSON_MAX_DEPTH"
INDENT_VAR = "EXTJSON_INDENT"

DEFAULT_MAX_DEPTH = 100
DEFAULT_INDENT = "    "


class ExtJsonSettings(BaseModel):
    """Tunables shared by the parser and the serializer."""

    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        ge=1,
        le=DEFAULT_MAX_DEPTH,
        description="Maximum nesting depth accepted or produced",
    )
    indent: str = Field(
        default=DEFAULT_INDENT,
        description="Indent unit for pretty serialization",
    )

    model_config = ConfigDict(frozen=True)


def _max_depth_from_env() -> int:
    raw = os.environ.get(MAX_DEPTH_VAR, "").strip()
    if not raw:
        return DEFAULT_MAX_DEPTH
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if not 1 <= value <= DEFAULT_MAX_DEPTH:
        logger.warning(
            "Invalid %s value '%s'. Expected an integer between 1 and %d. Defaulting to %d.",
            MAX_DEPTH_VAR,
            raw,
            DEFAULT_MAX_DEPTH,
            DEFAULT_MAX_DEPTH,
        )
        return DEFAULT_MAX_DEPTH
    return value


def _indent_from_env() -> str:
    raw = os.environ.get(INDENT_VAR, "").strip().lower()
    if not raw:
        return DEFAULT_INDENT
    if raw in ("tab", "\\t"):
        return "\t"
    if raw.isdigit() and 1 <= int(raw) <= 8:
        return " " * int(raw)
    logger.warning(
        "Invalid %s value '%s'. Valid values: 1-8 or tab. Defaulting to 4 spaces.",
        INDENT_VAR,
        raw,
    )
    return DEFAULT_INDENT


def load_settings() -> ExtJsonSettings:
    """Build settings from EXTJSON_* environment variables.

    Unknown or out-of-range values fall back to the defaults with a warning.

    Examples:
        >>> import os
        >>> os.environ["EXTJSON_INDENT"] = "2"
        >>> load_settings().indent
        '  '
    """
    return ExtJsonSettings(max_depth=_max_depth_from_env(), indent=_indent_from_env())
