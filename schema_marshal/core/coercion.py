"""Value coercion helpers shared by the normalizer and the parameter setters.

All helpers raise ``ValueError`` on bad input; callers wrap it in their own
error type together with the field or parameter context.
"""

from __future__ import annotations

import base64
import binascii
import re
from decimal import Decimal, InvalidOperation
from typing import Any

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

_QUOTES = "'\""
_WHITESPACE_PATTERN = re.compile(r"\s+")


def unquote(text: str) -> str:
    """Trim whitespace and strip one pair of matching enclosing quotes."""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in _QUOTES:
        return text[1:-1]
    return text


def is_number(value: Any) -> bool:
    """True for int, float and Decimal values; bool does not count."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def fits_int64(number: int) -> bool:
    return INT64_MIN <= number <= INT64_MAX


def to_decimal(value: Any) -> Decimal:
    """Parse a number or numeric literal into a finite Decimal."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError("booleans are not numbers")
    elif isinstance(value, int):
        return Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        literal = unquote(value)
        try:
            result = Decimal(literal)
        except InvalidOperation:
            raise ValueError(f"'{literal}' is not a numeric literal") from None
    else:
        raise ValueError(f"unsupported value type {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"'{value}' is not a finite number")
    return result


def to_exact_int(value: Any, bits: int = 64) -> int:
    """Convert to an integer without losing information.

    ``"30.000"`` -> 30, ``30.0`` -> 30; ``"30.5"`` and values outside the
    signed ``bits``-wide range raise ValueError.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    else:
        exact = to_decimal(value)
        if exact != exact.to_integral_value():
            raise ValueError(f"'{value}' has a fractional part")
        number = int(exact)

    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    if not low <= number <= high:
        raise ValueError(f"{number} is out of range for a {bits}-bit integer")
    return number


def decode_base64(text: str) -> bytes:
    """Strictly decode base64, ignoring embedded whitespace."""
    compact = _WHITESPACE_PATTERN.sub("", text)
    try:
        return base64.b64decode(compact, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 content: {e}") from e


def bytes_from_list(values: list[Any] | tuple[Any, ...]) -> bytes:
    """Build bytes from a list of byte values, signed or unsigned."""
    result = bytearray()
    for item in values:
        if isinstance(item, bool) or not isinstance(item, int) or not -128 <= item <= 255:
            raise ValueError(f"{item!r} is not a byte value")
        result.append(item & 0xFF)
    return bytes(result)
