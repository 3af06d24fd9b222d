"""
Traversal of canonical values.

``walk`` drives a ``ValueVisitor`` through a value depth first, in document
order. Presentation layers subclass ``ValueVisitor`` and override the hooks
they need; every hook defaults to doing nothing.

DBRef objects are reported to ``enter_object`` with ``dbref=True`` and their
``$ref`` / ``$id`` / ``$db`` keys carry a ``DBRefRole``, so renderers can
style or link them without re-detecting the shape.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from extjson.core.ir.values import (
    DBREF_DB,
    DBREF_ID,
    DBREF_REF,
    BinData,
    IsoDate,
    NaNMarker,
    ObjectId,
    Regex,
    is_dbref,
)


class LeafKind(StrEnum):
    """Kinds of scalar values."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    OBJECT_ID = "object_id"
    ISO_DATE = "iso_date"
    REGEX = "regex"
    BIN_DATA = "bin_data"
    NAN = "nan"


class DBRefRole(StrEnum):
    """Role of a key inside a DBRef object."""

    REF = "ref"
    ID = "id"
    DB = "db"


_ROLES = {
    DBREF_REF: DBRefRole.REF,
    DBREF_ID: DBRefRole.ID,
    DBREF_DB: DBRefRole.DB,
}

_EXTENDED_KINDS: list[tuple[type, LeafKind]] = [
    (ObjectId, LeafKind.OBJECT_ID),
    (IsoDate, LeafKind.ISO_DATE),
    (Regex, LeafKind.REGEX),
    (BinData, LeafKind.BIN_DATA),
    (NaNMarker, LeafKind.NAN),
]


def leaf_kind(value: Any) -> LeafKind | None:
    """The ``LeafKind`` of a scalar, or None for containers."""
    if value is None:
        return LeafKind.NULL
    if isinstance(value, bool):
        return LeafKind.BOOL
    if isinstance(value, (int, float)):
        return LeafKind.NUMBER
    if isinstance(value, str):
        return LeafKind.STRING
    for cls, kind in _EXTENDED_KINDS:
        if isinstance(value, cls):
            return kind
    if isinstance(value, (Mapping, list, tuple)):
        return None
    raise TypeError(f"Not a canonical value: {type(value).__name__}")


class ValueVisitor:
    """No-op base visitor; override the hooks you need."""

    def enter_object(self, value: Mapping[str, Any], dbref: bool) -> None:
        pass

    def visit_key(self, key: str, role: DBRefRole | None) -> None:
        pass

    def exit_object(self, value: Mapping[str, Any]) -> None:
        pass

    def enter_array(self, value: list[Any]) -> None:
        pass

    def visit_index(self, index: int) -> None:
        pass

    def exit_array(self, value: list[Any]) -> None:
        pass

    def visit_leaf(self, kind: LeafKind, value: Any) -> None:
        pass


def walk(value: Any, visitor: ValueVisitor) -> None:
    """Visit ``value`` and everything inside it.

    For an object: ``enter_object``, then ``visit_key`` followed by the walk
    of each member, then ``exit_object``. Arrays likewise with
    ``visit_index``. Scalars get a single ``visit_leaf``.

    Raises:
        TypeError: If ``value`` holds something outside the canonical model.
    """
    kind = leaf_kind(value)
    if kind is not None:
        visitor.visit_leaf(kind, value)
        return

    if isinstance(value, Mapping):
        dbref = is_dbref(value)
        visitor.enter_object(value, dbref)
        for key, item in value.items():
            visitor.visit_key(key, _ROLES.get(key) if dbref else None)
            walk(item, visitor)
        visitor.exit_object(value)
        return

    visitor.enter_array(value)
    for index, item in enumerate(value):
        visitor.visit_index(index)
        walk(item, visitor)
    visitor.exit_array(value)
