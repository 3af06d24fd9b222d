"""
Canonical value model.

A parsed extended JSON document is made of plain Python values plus a closed
set of frozen extended-type models:

- Null → None, Bool → bool, Number → int | float, String → str
- Array → list, Object → dict (insertion ordered, unique keys)
- ObjectId, IsoDate, Regex, BinData, NaNMarker

DBRef has no model of its own: it is a dict whose keys include ``$ref`` and
``$id`` (optionally ``$db``), recognised structurally by ``is_dbref``.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from extjson.core.dates import format_iso_date

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

DBREF_REF = "$ref"
DBREF_ID = "$id"
DBREF_DB = "$db"


class ObjectId(BaseModel):
    """ObjectId("..."); the hex string is kept as given, unvalidated."""

    hex: str | None = Field(default=None, description="Identifier text")

    model_config = ConfigDict(frozen=True)

    @field_validator("hex")
    @classmethod
    def empty_hex_is_absent(cls, v: str | None) -> str | None:
        """ObjectId("") reads back as ObjectId()."""
        return v or None


class IsoDate(BaseModel):
    """
    A point in time, ISODate("...") / Date(...).

    ``epoch_millis_utc`` is always UTC milliseconds since the epoch, or None
    for the absent date written ``ISODate(null)``.
    """

    epoch_millis_utc: int | None = Field(default=None, description="UTC epoch milliseconds")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_datetime(cls, value: datetime) -> IsoDate:
        """Build from an aware datetime."""
        if value.tzinfo is None:
            raise ValueError("IsoDate requires a timezone-aware datetime")
        return cls(epoch_millis_utc=(value - _EPOCH) // timedelta(milliseconds=1))

    def to_datetime(self) -> datetime | None:
        """Aware UTC datetime, or None for the absent date.

        Raises OverflowError outside datetime's supported years.
        """
        if self.epoch_millis_utc is None:
            return None
        return _EPOCH + timedelta(milliseconds=self.epoch_millis_utc)

    def isoformat(self) -> str | None:
        if self.epoch_millis_utc is None:
            return None
        return format_iso_date(self.epoch_millis_utc)


class Regex(BaseModel):
    """
    A regular expression, /pattern/flags or RegExp(pattern, flags).

    Flags from a native literal are a subset of "gmi" in that order; flags
    given to RegExp() are kept verbatim.
    """

    pattern: str | None = Field(default=None, description="Pattern source, unvalidated")
    flags: str = Field(default="", description="Flag characters")

    model_config = ConfigDict(frozen=True)

    @field_validator("pattern")
    @classmethod
    def empty_pattern_is_absent(cls, v: str | None) -> str | None:
        """RegExp("", flags) reads back as RegExp(null, flags)."""
        return v or None


class BinData(BaseModel):
    """BinData(subtype, base64); neither field is validated."""

    subtype: Any = Field(default=None, description="Binary subtype")
    base64: Any = Field(default=None, description="Base64 payload")

    model_config = ConfigDict(frozen=True)


class NaNMarker(BaseModel):
    """A bare NaN."""

    model_config = ConfigDict(frozen=True)


ExtendedValue = ObjectId | IsoDate | Regex | BinData | NaNMarker

EXTENDED_TYPES = (ObjectId, IsoDate, Regex, BinData, NaNMarker)

# Recursive alias for documentation; containers hold any canonical value.
CanonicalValue = Any


def is_extended(value: Any) -> bool:
    """True for the tagged extended types."""
    return isinstance(value, EXTENDED_TYPES)


def is_dbref(value: Any) -> bool:
    """
    Structural DBRef test: a mapping with truthy ``$ref`` and ``$id``.

    ``$db`` is optional and does not affect detection.
    """
    return isinstance(value, Mapping) and bool(value.get(DBREF_REF)) and bool(value.get(DBREF_ID))
