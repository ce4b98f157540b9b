"""Parameter setters - one per family of database types.

Each setter claims a set of canonical type names, converts a loosely typed
value into what the driver expects for that family and binds it. The
SetterRegistry turns the setters into a type name -> setter table and
refuses to start unless every bindable type is claimed exactly once.
"""

from __future__ import annotations

import io
import logging
import math
import struct
import uuid
from collections.abc import Iterable
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from schema_marshal.core.coercion import is_number, to_decimal, to_exact_int, unquote
from schema_marshal.core.enums import SqlType
from schema_marshal.core.exceptions import (
    InvalidParameterValueError,
    SetterNotFoundError,
    SetterRegistryError,
)
from schema_marshal.core.lobs import Blob, Clob, to_bytes
from schema_marshal.core.temporal import to_date, to_datetime, to_time
from schema_marshal.core.types import BINDABLE_TYPE_NAMES, canonical_type_name

logger = logging.getLogger(__name__)


class ParamSetter:
    """Binds values of one family of database types.

    Subclasses implement ``convert``, returning the driver value or None
    for SQL NULL and raising ValueError for unusable input. The value is
    bound with ``set_object`` unless ``bind`` is overridden.
    """

    def __init__(self, sql_type: SqlType, type_names: Iterable[str]) -> None:
        self.sql_type = sql_type
        self.type_names = frozenset(type_names)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.sql_type.name})"

    def convert(self, value: Any) -> Any:
        raise NotImplementedError

    def bind(self, converted: Any, target: int | str, statement: Any) -> None:
        statement.set_object(target, converted, self.sql_type)

    def set_param(self, value: Any, target: int | str, statement: Any) -> None:
        """Convert ``value`` and bind it to the parameter ``target``.

        Raises:
            InvalidParameterValueError: If the value cannot be converted.
        """
        try:
            converted = self.convert(value)
        except ValueError as e:
            raise InvalidParameterValueError(value, self.sql_type.name, str(e)) from e
        if converted is None:
            statement.set_null(target, self.sql_type)
        else:
            self.bind(converted, target, statement)


class IntegerParamSetter(ParamSetter):
    """Exact integers of a fixed width; ``"30.000"`` binds 30, ``"30.5"`` fails."""

    def __init__(self, sql_type: SqlType, type_names: Iterable[str], bits: int) -> None:
        super().__init__(sql_type, type_names)
        self.bits = bits

    def convert(self, value: Any) -> int:
        return to_exact_int(value, self.bits)


class BooleanParamSetter(ParamSetter):
    def convert(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if is_number(value):
            return value != 0
        if isinstance(value, str):
            return unquote(value).lower() == "true"
        raise ValueError(f"{type(value).__name__} is not a boolean")


class RealParamSetter(ParamSetter):
    """Single precision floating point."""

    def convert(self, value: Any) -> float:
        number = float(to_decimal(value))
        try:
            return struct.unpack("f", struct.pack("f", number))[0]
        except OverflowError as e:
            raise ValueError(f"'{value}' is out of range for REAL") from e


class DoubleParamSetter(ParamSetter):
    def convert(self, value: Any) -> float:
        number = float(to_decimal(value))
        if not math.isfinite(number):
            raise ValueError(f"'{value}' is out of range for DOUBLE")
        return number


class DecimalParamSetter(ParamSetter):
    def convert(self, value: Any) -> Decimal:
        return to_decimal(value)


class TextParamSetter(ParamSetter):
    """Strings, trimmed and stripped of one pair of enclosing quotes."""

    def convert(self, value: Any) -> str:
        if isinstance(value, Clob):
            return value.text
        if isinstance(value, str):
            return unquote(value)
        if isinstance(value, uuid.UUID):
            return str(value)
        raise ValueError(f"{type(value).__name__} is not a string")


class TemporalParamSetter(ParamSetter):
    """Dates, times and timestamps; an empty string binds NULL."""

    _CONVERTERS = {
        SqlType.DATE: to_date,
        SqlType.TIME: to_time,
        SqlType.TIMESTAMP: to_datetime,
    }

    def convert(self, value: Any) -> date | time | datetime | None:
        if isinstance(value, str) and not unquote(value):
            return None
        return self._CONVERTERS[self.sql_type](value)


class BlobParamSetter(ParamSetter):
    """Binary content, bound as a stream of the decoded length."""

    def convert(self, value: Any) -> bytes:
        return to_bytes(value)

    def bind(self, converted: bytes, target: int | str, statement: Any) -> None:
        statement.set_binary_stream(target, io.BytesIO(converted), len(converted))


class ClobParamSetter(ParamSetter):
    """Clob values bind as character streams; strings are base64-decoded bytes."""

    def convert(self, value: Any) -> Clob | bytes:
        if isinstance(value, Clob):
            return value
        return to_bytes(value)

    def bind(self, converted: Clob | bytes, target: int | str, statement: Any) -> None:
        if isinstance(converted, Clob):
            statement.set_character_stream(target, converted.open(), len(converted))
        else:
            statement.set_binary_stream(target, io.BytesIO(converted), len(converted))


class ArrayParamSetter(ParamSetter):
    """Lists bound as VARCHAR arrays."""

    element_type = "VARCHAR"

    def convert(self, value: Any) -> list[str | None]:
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"{type(value).__name__} is not an array")
        return [None if item is None else str(item) for item in value]

    def bind(self, converted: list[str | None], target: int | str, statement: Any) -> None:
        statement.set_array(target, converted, self.element_type)


def default_setters() -> list[ParamSetter]:
    """The built-in setters, covering every bindable type name."""
    return [
        IntegerParamSetter(SqlType.TINYINT, {"TINYINT"}, bits=8),
        IntegerParamSetter(SqlType.SMALLINT, {"SMALLINT"}, bits=16),
        IntegerParamSetter(SqlType.INTEGER, {"INTEGER", "INT"}, bits=32),
        IntegerParamSetter(SqlType.BIGINT, {"BIGINT"}, bits=64),
        BooleanParamSetter(SqlType.BOOLEAN, {"BOOLEAN", "BOOL", "BIT"}),
        RealParamSetter(SqlType.REAL, {"REAL"}),
        DoubleParamSetter(SqlType.DOUBLE, {"DOUBLE", "DOUBLE PRECISION", "FLOAT"}),
        DecimalParamSetter(SqlType.DECIMAL, {"DECIMAL", "NUMERIC"}),
        TextParamSetter(
            SqlType.VARCHAR,
            {
                "VARCHAR",
                "CHARACTER VARYING",
                "CHAR",
                "CHARACTER",
                "NCHAR",
                "NVARCHAR",
                "TEXT",
                "LONGVARCHAR",
            },
        ),
        TemporalParamSetter(SqlType.DATE, {"DATE"}),
        TemporalParamSetter(SqlType.TIME, {"TIME"}),
        TemporalParamSetter(SqlType.TIMESTAMP, {"TIMESTAMP", "DATETIME"}),
        BlobParamSetter(SqlType.BLOB, {"BLOB", "BINARY", "VARBINARY", "LONGVARBINARY"}),
        ClobParamSetter(SqlType.CLOB, {"CLOB", "NCLOB"}),
        ArrayParamSetter(SqlType.ARRAY, {"ARRAY"}),
    ]


class SetterRegistry:
    """Type name -> setter table.

    Args:
        setters: Setters to register; the built-in set when omitted.
        required: Type names that must be claimed. Every one of them must
            be claimed by exactly one setter.

    Raises:
        SetterRegistryError: If a type name is claimed twice or not at all.
    """

    def __init__(
        self,
        setters: Iterable[ParamSetter] | None = None,
        required: Iterable[str] = BINDABLE_TYPE_NAMES,
    ) -> None:
        self._by_name: dict[str, ParamSetter] = {}
        for setter in setters if setters is not None else default_setters():
            for name in setter.type_names:
                claimed = self._by_name.get(name)
                if claimed is not None:
                    raise SetterRegistryError(
                        f"Type {name} is claimed by both {claimed!r} and {setter!r}"
                    )
                self._by_name[name] = setter

        missing = sorted(set(required) - self._by_name.keys())
        if missing:
            raise SetterRegistryError(f"No parameter setter for types {missing}")

    def find(self, type_name: str) -> ParamSetter:
        """The setter claiming ``type_name``.

        Raises:
            SetterNotFoundError: If no setter claims the type.
        """
        setter = self._by_name.get(canonical_type_name(type_name))
        if setter is None:
            raise SetterNotFoundError(type_name)
        logger.debug("Using %r for type %s", setter, type_name)
        return setter

    def __len__(self) -> int:
        return len(self._by_name)


def infer_type_name(value: Any) -> str | None:
    """Type name for a value whose parameter type the driver cannot report."""
    if isinstance(value, bool):
        return "BOOLEAN"
    if isinstance(value, int):
        return "BIGINT"
    if isinstance(value, float):
        return "DOUBLE"
    if isinstance(value, Decimal):
        return "DECIMAL"
    if isinstance(value, (str, uuid.UUID)):
        return "VARCHAR"
    if isinstance(value, (bytes, bytearray, memoryview, Blob)):
        return "BLOB"
    if isinstance(value, Clob):
        return "CLOB"
    if isinstance(value, datetime):
        return "TIMESTAMP"
    if isinstance(value, date):
        return "DATE"
    if isinstance(value, time):
        return "TIME"
    if isinstance(value, (list, tuple)):
        return "ARRAY"
    return None
