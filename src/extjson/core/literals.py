"""
Typed literal constructors.

The six callables accepted inside extended JSON, evaluated directly from
already-evaluated argument values:

    ObjectId(id?)           → ObjectId
    Date(ms | iso?)         → IsoDate
    ISODate(iso?)           → IsoDate
    DBRef(ref, id, db?)     → {"$ref": ref, "$id": id[, "$db": db]}
    RegExp(pattern?, flags?) → Regex
    BinData(subtype, b64)   → BinData

Errors are raised without a source location; the validator attaches the
location of the offending call.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Any

from extjson.core.dates import MAX_EPOCH_MILLIS, now_millis, parse_iso_date
from extjson.core.errors import InvalidDateError, StructuralError
from extjson.core.ir.values import (
    DBREF_DB,
    DBREF_ID,
    DBREF_REF,
    BinData,
    CanonicalValue,
    IsoDate,
    NaNMarker,
    ObjectId,
    Regex,
)


class Constructor(StrEnum):
    """Callables allowed in call and ``new`` expressions."""

    OBJECT_ID = "ObjectId"
    DATE = "Date"
    ISO_DATE = "ISODate"
    DBREF = "DBRef"
    REGEXP = "RegExp"
    BIN_DATA = "BinData"

    @classmethod
    def lookup(cls, name: str) -> Constructor | None:
        try:
            return cls(name)
        except ValueError:
            return None


# (min, max) argument counts
_ARITY: dict[Constructor, tuple[int, int]] = {
    Constructor.OBJECT_ID: (0, 1),
    Constructor.DATE: (0, 1),
    Constructor.ISO_DATE: (0, 1),
    Constructor.DBREF: (2, 3),
    Constructor.REGEXP: (0, 2),
    Constructor.BIN_DATA: (2, 2),
}


def construct(constructor: Constructor, args: list[CanonicalValue]) -> CanonicalValue:
    """Evaluate ``constructor(*args)``.

    Raises:
        StructuralError: Wrong number or type of arguments.
        InvalidDateError: A date argument that does not denote a time.
    """
    _check_arity(constructor, args)

    match constructor:
        case Constructor.OBJECT_ID:
            return _object_id(*args)
        case Constructor.DATE:
            return _date(*args)
        case Constructor.ISO_DATE:
            return _iso_date(*args)
        case Constructor.DBREF:
            return _dbref(*args)
        case Constructor.REGEXP:
            return _regexp(*args)
        case Constructor.BIN_DATA:
            subtype, payload = args
            return BinData(subtype=subtype, base64=payload)


def _check_arity(constructor: Constructor, args: list[CanonicalValue]) -> None:
    low, high = _ARITY[constructor]
    count = len(args)
    if low <= count <= high:
        return
    if low == high:
        bound, expected = low, f"exactly {low}"
    elif count < low:
        bound, expected = low, f"at least {low}"
    else:
        bound, expected = high, f"at most {high}"
    plural = "" if bound == 1 else "s"
    raise StructuralError(f"{constructor}() takes {expected} argument{plural} ({count} given)")


_MISSING: Any = object()


def _is_falsy(value: CanonicalValue) -> bool:
    """JavaScript truthiness for evaluated values."""
    if value is None or value is False or isinstance(value, NaNMarker):
        return True
    if isinstance(value, (int, float, str)):
        return not value
    return False


def _to_text(constructor: Constructor, value: CanonicalValue) -> str:
    """String conversion of a primitive the way the shell prints it."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    raise StructuralError(f"{constructor}() expects a string or number argument")


def _object_id(value: CanonicalValue = _MISSING) -> ObjectId:
    if value is _MISSING or _is_falsy(value):
        return ObjectId(hex=None)
    return ObjectId(hex=_to_text(Constructor.OBJECT_ID, value))


def _date(value: CanonicalValue = _MISSING) -> IsoDate:
    if value is _MISSING or value == "":
        return IsoDate(epoch_millis_utc=now_millis())
    if value is None:
        return IsoDate(epoch_millis_utc=None)
    if isinstance(value, IsoDate):
        return IsoDate(epoch_millis_utc=value.epoch_millis_utc)
    if isinstance(value, str):
        return IsoDate(epoch_millis_utc=parse_iso_date(value))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if math.isfinite(value) and abs(value) <= MAX_EPOCH_MILLIS:
            return IsoDate(epoch_millis_utc=math.trunc(value))
        raise InvalidDateError(f"Invalid date: {value!r}")
    if isinstance(value, NaNMarker):
        raise InvalidDateError("Invalid date: NaN")
    raise StructuralError("Date() expects a number or string argument")


def _iso_date(value: CanonicalValue = _MISSING) -> IsoDate:
    if value is _MISSING or value == "":
        return IsoDate(epoch_millis_utc=now_millis())
    if value is None:
        return IsoDate(epoch_millis_utc=None)
    if not isinstance(value, str):
        raise InvalidDateError(f"Invalid ISO date: {value!r}")
    return IsoDate(epoch_millis_utc=parse_iso_date(value))


def _dbref(
    ref: CanonicalValue, id_: CanonicalValue, db: CanonicalValue = _MISSING
) -> dict[str, CanonicalValue]:
    result = {DBREF_REF: ref, DBREF_ID: id_}
    if db is not _MISSING:
        result[DBREF_DB] = db
    return result


def _regexp(pattern: CanonicalValue = _MISSING, flags: CanonicalValue = _MISSING) -> Regex:
    text = None
    if pattern is not _MISSING and not _is_falsy(pattern):
        text = _to_text(Constructor.REGEXP, pattern)
    flag_text = ""
    if flags is not _MISSING and not _is_falsy(flags):
        flag_text = _to_text(Constructor.REGEXP, flags)
    return Regex(pattern=text, flags=flag_text)
