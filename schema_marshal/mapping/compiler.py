"""Mapping compiler - EntityMetadata to MappingDescriptor.

Types resolve in two tiers: an explicit database type hint wins, otherwise
the declared source type decides.
"""

from __future__ import annotations

import logging
import threading
from functools import lru_cache

from schema_marshal.core.config import MarshalSettings
from schema_marshal.core.enums import FieldKind
from schema_marshal.core.exceptions import InvalidIdentifierError, MissingIdentifierError
from schema_marshal.core.registry import EntityRegistry
from schema_marshal.core.types import canonical_type_name
from schema_marshal.mapping.descriptor import (
    AssociationDescriptor,
    CollectionDescriptor,
    IdDescriptor,
    MappingDescriptor,
    PropertyDescriptor,
)
from schema_marshal.parsing.model import EntityFieldMetadata, EntityMetadata

logger = logging.getLogger(__name__)

# Database type hint -> persisted type
_HINT_TYPES: dict[str, str] = {
    "varchar": "string",
    "nvarchar": "string",
    "char": "string",
    "text": "string",
    "ntext": "string",
    "tinyint": "short",
    "smallint": "short",
    "int": "integer",
    "integer": "integer",
    "bigint": "long",
    "long": "long",
    "float": "float",
    "real": "float",
    "double": "double",
    "double precision": "double",
    "numeric": "big_decimal",
    "decimal": "big_decimal",
    "money": "big_decimal",
    "currency": "big_decimal",
    "boolean": "boolean",
    "bit": "bit",
    "date": "date",
    "time": "time",
    "datetime": "timestamp",
    "timestamp": "timestamp",
    "datetime2": "timestamp",
    "binary": "binary",
    "varbinary": "binary",
    "blob": "blob",
    "clob": "clob",
    "uuid": "uuid-char",
}

# Declared source type -> persisted type, used when no hint is given
_SOURCE_TYPES: dict[str, str] = {
    "number": "long",
    "string": "string",
    "boolean": "boolean",
    "date": "timestamp",
}

_NULLISH = frozenset({"null", "undefined"})


def _strip_nullish(source_type: str) -> str:
    """``"number | null"`` -> ``"number"``."""
    parts = [part.strip() for part in source_type.lower().split("|")]
    remaining = [part for part in parts if part and part not in _NULLISH]
    return remaining[0] if len(remaining) == 1 else " | ".join(remaining)


@lru_cache(maxsize=512)
def resolve_type(source_type: str | None, database_type: str | None = None) -> str:
    """Persisted type name for a field.

    Args:
        source_type: Declared type annotation, e.g. ``"number"`` or ``"Date"``.
        database_type: Optional column type hint, e.g. ``"VARCHAR(80)"``.

    Returns:
        The hint's mapped type, the hint itself when unknown, or the mapping
        of the source type (``string`` for anything unrecognised).
    """
    if database_type and database_type.strip():
        hint = canonical_type_name(database_type).lower()
        return _HINT_TYPES.get(hint) or database_type.strip().lower()
    return _SOURCE_TYPES.get(_strip_nullish(source_type or ""), "string")


def compile_mapping(
    metadata: EntityMetadata, settings: MarshalSettings | None = None
) -> MappingDescriptor:
    """Compile entity metadata into a mapping descriptor.

    Raises:
        MissingIdentifierError: If no field is marked as identifier.
        InvalidIdentifierError: If several fields are, or the identifier is an
            association or collection.
    """
    default_generator = settings.default_generator if settings else "assigned"
    identifiers = [f for f in metadata.fields if f.is_identifier]
    if not identifiers:
        raise MissingIdentifierError(metadata.entity_name)
    if len(identifiers) > 1:
        names = ", ".join(f.property_name for f in identifiers)
        raise InvalidIdentifierError(metadata.entity_name, f"multiple @Id fields ({names})")
    identifier = identifiers[0]
    if identifier.kind is not FieldKind.COLUMN:
        raise InvalidIdentifierError(
            metadata.entity_name,
            f"'{identifier.property_name}' is a {identifier.kind.value}, not a column",
        )

    associations: list[AssociationDescriptor] = []
    properties: list[PropertyDescriptor] = []
    collections: list[CollectionDescriptor] = []
    for entity_field in metadata.fields:
        if entity_field.is_identifier:
            continue
        if entity_field.collection is not None:
            collections.append(_collection(entity_field))
        elif entity_field.association is not None:
            associations.append(_association(entity_field))
        else:
            properties.append(_property(entity_field))

    return MappingDescriptor(
        entity_name=metadata.entity_name,
        table_name=metadata.table_name or metadata.entity_name.upper(),
        id=IdDescriptor(
            name=identifier.property_name,
            column=_column_name(identifier),
            type=resolve_type(identifier.source_type, identifier.column.database_type),
            generator=(identifier.generation_strategy or default_generator).lower(),
        ),
        associations=tuple(associations),
        properties=tuple(properties),
        collections=tuple(collections),
    )


def _column_name(entity_field: EntityFieldMetadata) -> str:
    column = entity_field.column
    if column is not None and column.column_name:
        return column.column_name
    return entity_field.property_name.upper()


def _property(entity_field: EntityFieldMetadata) -> PropertyDescriptor:
    column = entity_field.column
    return PropertyDescriptor(
        name=entity_field.property_name,
        column=_column_name(entity_field),
        type=resolve_type(entity_field.source_type, column.database_type if column else None),
        length=column.length if column else None,
        precision=column.precision if column else None,
        scale=column.scale if column else None,
    )


def _association(entity_field: EntityFieldMetadata) -> AssociationDescriptor:
    details = entity_field.association
    return AssociationDescriptor(
        name=entity_field.property_name,
        entity_name=details.entity_name,
        column=details.join_column,
        cascade=details.cascade,
        not_null=details.not_null,
        lazy=details.lazy,
    )


def _collection(entity_field: EntityFieldMetadata) -> CollectionDescriptor:
    details = entity_field.collection
    return CollectionDescriptor(
        name=entity_field.property_name,
        entity_name=details.entity_name,
        join_column=details.join_column,
        inverse=details.inverse,
        lazy=details.lazy,
        cascade=details.cascade,
        join_column_not_null=details.join_column_not_null,
        table=details.table_name,
        fetch=details.fetch,
    )


class MappingCompiler:
    """Compiles registered entities, caching one descriptor per metadata instance.

    A re-registered entity is recompiled on its next lookup.
    """

    def __init__(
        self, registry: EntityRegistry, settings: MarshalSettings | None = None
    ) -> None:
        self._registry = registry
        self._settings = settings
        self._lock = threading.Lock()
        self._cache: dict[str, tuple[EntityMetadata, MappingDescriptor]] = {}

    def compile(self, entity_name: str) -> MappingDescriptor:
        """Descriptor for a registered entity.

        Raises:
            EntityNotFoundError: If the entity is not registered.
            MissingIdentifierError: If it has no identifier field.
        """
        metadata = self._registry.get(entity_name)
        with self._lock:
            cached = self._cache.get(entity_name)
            if cached is not None and cached[0] is metadata:
                return cached[1]

        descriptor = compile_mapping(metadata, self._settings)
        logger.debug("Compiled mapping for %s", entity_name)
        with self._lock:
            self._cache[entity_name] = (metadata, descriptor)
        return descriptor

    def to_xml(self, entity_name: str) -> str:
        """Shortcut for ``compile(entity_name).to_xml()``."""
        return self.compile(entity_name).to_xml()
