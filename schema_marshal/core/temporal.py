"""Date, time and date-time parsing.

Two levels are offered: strict ISO-8601 parsers, used by heuristic
normalization, and lenient ``to_*`` converters accepting temporal objects,
epoch milliseconds and the common regional formats, used wherever a column
type is known. All of them raise ValueError on unrecognised input.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from schema_marshal.core.coercion import is_number, to_decimal, unquote

_ISO_DATETIME_PATTERN = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2})"
    r"(?::(\d{2})(?:[.,](\d{1,9}))?)?"
    r"\s*([Zz]|[+-]\d{2}(?::?\d{2})?)?$"
)
_ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_ISO_TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2})(?:[.,](\d{1,9}))?)?$")

_DATE_FORMATS = (
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%Y%m%d",
    "%Y/%m/%d",
    "%Y-%m-%d",
    "%d %b %Y",
    "%d/%m/%Y",
)
_DATETIME_FORMATS = (
    "%Y/%m/%d %H:%M:%S.%f",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%d.%m.%Y %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
)
_TIME_FORMATS = ("%H:%M:%S.%f", "%H:%M:%S", "%H:%M", "%I:%M:%S %p", "%I:%M %p")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _microseconds(fraction: str | None) -> int:
    return int((fraction or "0").ljust(6, "0")[:6])


def _tzinfo(offset: str | None) -> timezone | None:
    if offset is None:
        return None
    if offset in ("Z", "z"):
        return timezone.utc
    sign = -1 if offset[0] == "-" else 1
    digits = offset[1:].replace(":", "")
    hours, minutes = int(digits[:2]), int(digits[2:4] or 0)
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_iso_datetime(text: str) -> datetime:
    """Parse ``YYYY-MM-DD[T ]HH:MM[:SS[.fff]][Z|+HH:MM]``."""
    match = _ISO_DATETIME_PATTERN.match(text.strip())
    if match is None:
        raise ValueError(f"'{text}' is not an ISO-8601 date-time")
    year, month, day, hour, minute, second, fraction, offset = match.groups()
    return datetime(
        int(year),
        int(month),
        int(day),
        int(hour),
        int(minute),
        int(second or 0),
        _microseconds(fraction),
        tzinfo=_tzinfo(offset),
    )


def parse_iso_date(text: str) -> date:
    """Parse ``YYYY-MM-DD``."""
    match = _ISO_DATE_PATTERN.match(text.strip())
    if match is None:
        raise ValueError(f"'{text}' is not an ISO-8601 date")
    year, month, day = match.groups()
    return date(int(year), int(month), int(day))


def parse_iso_time(text: str) -> time:
    """Parse ``HH:MM[:SS[.fff]]``."""
    match = _ISO_TIME_PATTERN.match(text.strip())
    if match is None:
        raise ValueError(f"'{text}' is not an ISO-8601 time")
    hour, minute, second, fraction = match.groups()
    return time(int(hour), int(minute), int(second or 0), _microseconds(fraction))


def _strptime_first(text: str, formats: tuple[str, ...]) -> datetime | None:
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_date(text: str) -> date:
    """Parse a date in ISO or one of the regional formats."""
    literal = unquote(text)
    try:
        return parse_iso_datetime(literal).date()
    except ValueError:
        pass
    parsed = _strptime_first(literal, _DATE_FORMATS)
    if parsed is None:
        raise ValueError(f"'{text}' is not a recognised date")
    return parsed.date()


def parse_datetime(text: str) -> datetime:
    """Parse a date-time; a bare date means midnight."""
    literal = unquote(text)
    try:
        return parse_iso_datetime(literal)
    except ValueError:
        pass
    parsed = _strptime_first(literal, _DATETIME_FORMATS)
    if parsed is not None:
        return parsed
    try:
        return datetime.combine(parse_date(literal), time())
    except ValueError:
        raise ValueError(f"'{text}' is not a recognised date-time") from None


def parse_time(text: str) -> time:
    """Parse a time of day, or take the time part of a date-time."""
    literal = unquote(text)
    try:
        return parse_iso_time(literal)
    except ValueError:
        pass
    try:
        return parse_iso_datetime(literal).timetz()
    except ValueError:
        pass
    parsed = _strptime_first(literal, _TIME_FORMATS)
    if parsed is None:
        raise ValueError(f"'{text}' is not a recognised time")
    return parsed.time()


def from_epoch_millis(millis: Any) -> datetime:
    """UTC date-time for a count of milliseconds since the epoch."""
    try:
        return _EPOCH + timedelta(milliseconds=int(to_decimal(millis)))
    except OverflowError as e:
        raise ValueError(f"{millis} milliseconds is out of the date-time range") from e


def to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if is_number(value):
        return from_epoch_millis(value)
    if isinstance(value, str):
        return parse_datetime(value)
    raise ValueError(f"{type(value).__name__} is not a date-time")


def to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if is_number(value):
        return from_epoch_millis(value).date()
    if isinstance(value, str):
        return parse_date(value)
    raise ValueError(f"{type(value).__name__} is not a date")


def to_time(value: Any) -> time:
    if isinstance(value, datetime):
        return value.timetz()
    if isinstance(value, time):
        return value
    if is_number(value):
        return from_epoch_millis(value).time()
    if isinstance(value, str):
        return parse_time(value)
    raise ValueError(f"{type(value).__name__} is not a time")
