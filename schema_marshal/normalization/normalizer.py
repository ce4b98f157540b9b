"""Type normalizer - turns loosely typed records into precisely typed values.

Records are nested dicts and lists as produced by a JSON decoder. Two modes:

Heuristic (``normalize``), applied per leaf in this order:
    1. bool and None are left alone.
    2. A float with no fractional part that fits in 64 bits becomes int;
       any other float is kept.
    3. A Decimal with no fractional part that fits in 64 bits becomes int;
       any other Decimal is kept.
    4. A string in ISO-8601 date-time, date or time form becomes datetime,
       date or time.
    5. A base64 string under a key naming binary content (``photoBytes``,
       ``avatarBlob``, ``rawData``, ``fileBase64``, ``binaryPayload``)
       becomes bytes, provided it decodes to something.
    6. A string under a key naming a clob becomes a Clob.
    7. Anything else, including malformed dates and base64, is unchanged.

Metadata-aware (``normalize_for_entity``): fields with a column type hint
are coerced to that type and failures raise NormalizationError; fields
without a usable hint fall back to the heuristics. Character hints
(``varchar``, ``text`` and the like) keep strings verbatim rather than
running them through the heuristics, so a varchar "12:30" stays a string.
"""

from __future__ import annotations

import logging
import math
import re
import uuid
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from schema_marshal.core.coercion import (
    decode_base64,
    fits_int64,
    to_decimal,
    to_exact_int,
    unquote,
)
from schema_marshal.core.config import MarshalSettings
from schema_marshal.core.exceptions import NormalizationError
from schema_marshal.core.lobs import Blob, Clob, to_bytes
from schema_marshal.core.registry import EntityRegistry
from schema_marshal.core.temporal import (
    parse_iso_date,
    parse_iso_datetime,
    parse_iso_time,
    to_date,
    to_datetime,
    to_time,
)
from schema_marshal.core.types import canonical_type_name
from schema_marshal.parsing.model import EntityFieldMetadata

logger = logging.getLogger(__name__)

_BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/\s]+={0,2}$")
_ISO_PARSERS = (parse_iso_datetime, parse_iso_date, parse_iso_time)


def _to_blob(value: Any) -> Blob:
    return value if isinstance(value, Blob) else Blob(to_bytes(value))


def _to_clob(value: Any) -> Clob:
    if isinstance(value, Clob):
        return value
    if isinstance(value, str):
        return Clob(value)
    raise ValueError(f"{type(value).__name__} is not character content")


def _to_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, str):
        return uuid.UUID(unquote(value))
    raise ValueError(f"{type(value).__name__} is not a UUID")


def _to_float(value: Any) -> float:
    return float(to_decimal(value))


def _keep_text(value: Any) -> Any:
    return value


# Checked in order against the words of the hint; the first group naming one
# of them wins. Words are whole type names, so "interval" is not an int.
_HINT_COERCIONS: tuple[tuple[frozenset[str], Callable[[Any], Any]], ...] = (
    (
        frozenset(
            {"timestamp", "timestamptz", "datetime", "datetime2", "smalldatetime",
             "datetimeoffset"}
        ),
        to_datetime,
    ),
    (frozenset({"date"}), to_date),
    (frozenset({"time", "timetz"}), to_time),
    (frozenset({"uuid", "uniqueidentifier"}), _to_uuid),
    (frozenset({"decimal", "numeric", "money", "smallmoney"}), to_decimal),
    (frozenset({"double", "float", "float4", "float8", "real"}), _to_float),
    (frozenset({"blob", "tinyblob", "mediumblob", "longblob"}), _to_blob),
    (frozenset({"bytea", "binary", "varbinary"}), to_bytes),
    (frozenset({"clob", "nclob"}), _to_clob),
    (
        frozenset(
            {"char", "nchar", "character", "varchar", "varchar2", "nvarchar", "nvarchar2",
             "text", "ntext", "tinytext", "mediumtext", "longtext", "string"}
        ),
        _keep_text,
    ),
    (frozenset({"bigint", "bigserial", "int8", "long"}), lambda v: to_exact_int(v, 64)),
    (frozenset({"smallint", "smallserial", "int2", "short"}), lambda v: to_exact_int(v, 16)),
    (frozenset({"tinyint"}), lambda v: to_exact_int(v, 8)),
    (
        frozenset({"int", "int4", "integer", "mediumint", "serial", "serial4"}),
        lambda v: to_exact_int(v, 32),
    ),
)

_HINT_WORD_PATTERN = re.compile(r"[a-z][a-z0-9]*")


def coercion_for_hint(hint: str) -> Callable[[Any], Any] | None:
    """The coercion applied to fields with this column type hint, if any."""
    words = set(_HINT_WORD_PATTERN.findall(canonical_type_name(hint).lower()))
    for names, coerce in _HINT_COERCIONS:
        if not words.isdisjoint(names):
            return coerce
    return None


class TypeNormalizer:
    """Normalizes records in place, heuristically or against entity metadata.

    Args:
        registry: Registry consulted by ``normalize_for_entity``.
        settings: Runtime settings; controls key hints and strictness.
    """

    def __init__(
        self,
        registry: EntityRegistry | None = None,
        settings: MarshalSettings | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings or MarshalSettings()

    # --- Heuristic ---

    def normalize(self, data: Any) -> Any:
        """Normalize a record (or list of records) in place and return it."""
        return self._normalize_value(None, data)

    def _normalize_value(self, key: str | None, value: Any) -> Any:
        if isinstance(value, dict):
            for child_key, child in value.items():
                value[child_key] = self._normalize_value(child_key, child)
            return value
        if isinstance(value, list):
            for index, item in enumerate(value):
                value[index] = self._normalize_value(key, item)
            return value
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, float):
            if math.isfinite(value) and value.is_integer() and fits_int64(int(value)):
                return int(value)
            return value
        if isinstance(value, Decimal):
            if value.is_finite() and value == value.to_integral_value():
                number = int(value)
                if fits_int64(number):
                    return number
            return value
        if isinstance(value, str):
            return self._parse_string(key, value)
        return value

    def _parse_string(self, key: str | None, text: str) -> Any:
        for parse in _ISO_PARSERS:
            try:
                return parse(text)
            except ValueError:
                continue

        if key and self._settings.is_binary_key(key) and _BASE64_PATTERN.match(text):
            try:
                decoded = decode_base64(text)
            except ValueError:
                decoded = b""
            if decoded:
                return decoded

        if key and self._settings.is_clob_key(key):
            return Clob(text)
        return text

    # --- Metadata-aware ---

    def normalize_for_entity(self, data: Any, entity_name: str) -> Any:
        """Normalize a record of ``entity_name`` in place and return it.

        Unregistered entities get heuristic normalization only.

        Raises:
            NormalizationError: If a value cannot be coerced to the column
                type declared for its field (strict mode only).
        """
        metadata = self._registry.find(entity_name) if self._registry else None
        if metadata is None:
            logger.debug("No metadata for %s, using heuristics", entity_name)
            return self.normalize(data)

        if isinstance(data, list):
            for index, item in enumerate(data):
                data[index] = self.normalize_for_entity(item, entity_name)
            return data
        if not isinstance(data, dict):
            return self._normalize_value(None, data)

        for key, value in data.items():
            entity_field = metadata.field(key)
            if entity_field is None or value is None:
                data[key] = self._normalize_value(key, value)
            elif entity_field.collection is not None and isinstance(value, list):
                data[key] = self.normalize_for_entity(value, entity_field.collection.entity_name)
            elif entity_field.association is not None and isinstance(value, dict):
                data[key] = self.normalize_for_entity(value, entity_field.association.entity_name)
            else:
                data[key] = self._coerce_field(metadata.entity_name, entity_field, value)
        return data

    def _coerce_field(
        self, entity_name: str, entity_field: EntityFieldMetadata, value: Any
    ) -> Any:
        key = entity_field.property_name
        hint = _hint_for(entity_field)
        coerce = coercion_for_hint(hint) if hint else None
        if coerce is None:
            return self._normalize_value(key, value)

        try:
            return coerce(value)
        except ValueError as e:
            if self._settings.strict_entity_hints:
                raise NormalizationError(entity_name, key, hint, value) from e
            logger.debug("Leaving %s.%s unchanged: %s", entity_name, key, e)
            return value

    # --- Delivery ---

    def to_primitives(self, data: Any) -> Any:
        """Replace Blob and Clob values with bytes and str, recursively."""
        if isinstance(data, Blob):
            return data.data
        if isinstance(data, Clob):
            return data.text
        if isinstance(data, dict):
            for key, value in data.items():
                data[key] = self.to_primitives(value)
        elif isinstance(data, list):
            for index, item in enumerate(data):
                data[index] = self.to_primitives(item)
        return data


def _hint_for(entity_field: EntityFieldMetadata) -> str | None:
    column = entity_field.column
    if column is not None and column.database_type and column.database_type.strip():
        return column.database_type.strip().lower()
    parts = [p.strip() for p in entity_field.source_type.lower().split("|")]
    if [p for p in parts if p not in ("null", "undefined")] == ["date"]:
        return "timestamp"
    return None
