"""Core extjson functionality: grammar, validator, literal constructors, serializer."""

from . import ir
from .codec import WRAPPER_PREFIX, normalize, parse
from .config import ExtJsonSettings, load_settings
from .errors import (
    ErrorKind,
    ExtJsonError,
    ExtJsonSyntaxError,
    InvalidDateError,
    ParseError,
    SerializationError,
    SourceLocation,
    StructuralError,
)
from .literals import Constructor
from .serializer import serialize
from .visitor import DBRefRole, LeafKind, ValueVisitor, leaf_kind, walk

__all__ = [
    "ir",
    "WRAPPER_PREFIX",
    "normalize",
    "parse",
    "serialize",
    "ExtJsonSettings",
    "load_settings",
    "Constructor",
    "ErrorKind",
    "ExtJsonError",
    "ExtJsonSyntaxError",
    "InvalidDateError",
    "ParseError",
    "SerializationError",
    "SourceLocation",
    "StructuralError",
    "DBRefRole",
    "LeafKind",
    "ValueVisitor",
    "leaf_kind",
    "walk",
]
