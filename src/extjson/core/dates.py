"""
ISO-8601 date handling for ``ISODate`` / ``Date`` values.

Dates are carried as integer milliseconds since the Unix epoch, UTC. The
civil-date arithmetic here works on proleptic Gregorian day numbers, so it is
not limited to ``datetime``'s year range and lets out-of-range fields roll over
(month 13 is January of the next year, day 0 is the last day of the previous
month).
"""

from __future__ import annotations

import re
import time
from decimal import ROUND_HALF_UP, Decimal

from extjson.core.errors import InvalidDateError

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR

# Largest timestamp magnitude a date may hold: 100,000,000 days either side
# of the epoch.
MAX_EPOCH_MILLIS = 8_640_000_000_000_000

# YYYY[-]MM[-]DD([T ]HH[:?MM[:?SS[.frac]]][Z|(+|-)HH[:?MM]])?
_ISO_DATE_RE = re.compile(
    r"(\d{4})-?(\d{2})-?(\d{2})"
    r"([T ](\d{2})(:?(\d{2})(:?(\d{2})(\.\d+)?)?)?(Z|([+\-])(\d{2}):?(\d{2})?)?)?",
    re.ASCII,
)


def days_from_civil(year: int, month: int, day: int) -> int:
    """Days since 1970-01-01 for a proleptic Gregorian date (month 1-12)."""
    year -= month <= 2
    era = year // 400
    yoe = year - era * 400
    mp = (month + 9) % 12
    doy = (153 * mp + 2) // 5 + day - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * 146097 + doe - 719468


def civil_from_days(days: int) -> tuple[int, int, int]:
    """Inverse of ``days_from_civil``: (year, month, day) for a day number."""
    days += 719468
    era = days // 146097
    doe = days - era * 146097
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp = (5 * doy + 2) // 153
    day = doy - (153 * mp + 2) // 5 + 1
    month = mp + 3 if mp < 10 else mp - 9
    year = yoe + era * 400 + (month <= 2)
    return year, month, day


def utc_millis(
    year: int,
    month: int = 1,
    day: int = 1,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    millis: int = 0,
) -> int:
    """Epoch milliseconds for UTC clock fields, rolling over out-of-range fields.

    Years 0-99 are read as 1900-1999, matching the shell's ``Date.UTC``.
    """
    if 0 <= year <= 99:
        year += 1900
    month0 = month - 1
    year += month0 // 12
    month0 %= 12
    days = days_from_civil(year, month0 + 1, 1) + day - 1
    minutes = (days * 24 + hour) * 60 + minute
    return minutes * MS_PER_MINUTE + second * MS_PER_SECOND + millis


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def parse_iso_date(text: str) -> int:
    """Parse an ISO-8601 date string into UTC epoch milliseconds.

    The pattern is searched for anywhere in ``text``. Missing fields default to
    year 1970, month 1, day 0 and midnight; fractional seconds round to the
    nearest millisecond; an explicit ``+HH:MM`` / ``-HH:MM`` offset is removed
    to obtain UTC.

    Raises:
        InvalidDateError: If the text does not contain a date.
    """
    match = _ISO_DATE_RE.search(text)
    if not match:
        raise InvalidDateError(f"Invalid ISO date: {text!r}")

    year = int(match.group(1)) or 1970
    month = int(match.group(2)) or 1
    day = int(match.group(3))
    hour = int(match.group(5) or 0)
    minute = int(match.group(7) or 0)
    second = int(match.group(9) or 0)

    millis = 0
    if match.group(10):
        fraction = Decimal("0" + match.group(10)) * MS_PER_SECOND
        millis = int(fraction.to_integral_value(rounding=ROUND_HALF_UP))

    timestamp = utc_millis(year, month, day, hour, minute, second, millis)

    zone = match.group(11)
    if zone and zone != "Z":
        offset = int(match.group(13) or 0) * MS_PER_HOUR
        offset += int(match.group(14) or 0) * MS_PER_MINUTE
        # Ahead of UTC: subtract
        if match.group(12) == "+":
            offset = -offset
        timestamp += offset

    return timestamp


def format_iso_date(epoch_millis: int) -> str:
    """Render epoch milliseconds as ``YYYY-MM-DDTHH:MM:SS[.mmm]Z``.

    Milliseconds are only written when non-zero.
    """
    days, rem = divmod(epoch_millis, MS_PER_DAY)
    year, month, day = civil_from_days(days)
    hour, rem = divmod(rem, MS_PER_HOUR)
    minute, rem = divmod(rem, MS_PER_MINUTE)
    second, millis = divmod(rem, MS_PER_SECOND)

    text = f"{year:04d}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:02d}"
    if millis:
        text += f".{millis:03d}"
    return text + "Z"


def year_of(epoch_millis: int) -> int:
    """UTC calendar year containing ``epoch_millis``."""
    return civil_from_days(epoch_millis // MS_PER_DAY)[0]
