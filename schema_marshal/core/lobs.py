"""Large-object wrappers.

Normalized records carry Blob/Clob values so binders can stream them;
``TypeNormalizer.to_primitives`` turns them back into bytes and str.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Any

from schema_marshal.core.coercion import bytes_from_list, decode_base64


@dataclass(frozen=True)
class Blob:
    """Binary large object."""

    data: bytes

    def __len__(self) -> int:
        return len(self.data)

    def open(self) -> io.BytesIO:
        return io.BytesIO(self.data)


@dataclass(frozen=True)
class Clob:
    """Character large object."""

    text: str

    def __len__(self) -> int:
        return len(self.text)

    def open(self) -> io.StringIO:
        return io.StringIO(self.text)


def to_bytes(value: Any) -> bytes:
    """Binary content from a Blob, bytes, a base64 string or a list of byte values."""
    if isinstance(value, Blob):
        return value.data
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return decode_base64(value)
    if isinstance(value, (list, tuple)):
        return bytes_from_list(value)
    raise ValueError(f"{type(value).__name__} is not binary content")
