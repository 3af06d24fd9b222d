"""
extjson - MongoDB Extended JSON, the shell notation.

Parses text such as ``{_id: ObjectId("..."), at: ISODate("..."), re: /a+/i}``
into plain Python values without executing anything, and writes such values
back out, pretty or compact.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.codec import normalize, parse
from .core.config import ExtJsonSettings
from .core.errors import (
    ExtJsonError,
    ExtJsonSyntaxError,
    InvalidDateError,
    ParseError,
    SerializationError,
    StructuralError,
)
from .core.ir.values import BinData, IsoDate, NaNMarker, ObjectId, Regex, is_dbref
from .core.serializer import serialize
from .core.visitor import DBRefRole, LeafKind, ValueVisitor, walk

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "parse",
    "serialize",
    "normalize",
    "walk",
    "is_dbref",
    "ValueVisitor",
    "LeafKind",
    "DBRefRole",
    "ExtJsonSettings",
    "BinData",
    "IsoDate",
    "NaNMarker",
    "ObjectId",
    "Regex",
    "ExtJsonError",
    "ExtJsonSyntaxError",
    "InvalidDateError",
    "ParseError",
    "SerializationError",
    "StructuralError",
]
