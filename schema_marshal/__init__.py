"""SchemaMarshal - entity metadata, mapping compilation, type normalization and
parameter binding for a dynamic schema-to-storage layer."""

from __future__ import annotations

from schema_marshal.binding import (
    NamedParam,
    ParameterBinder,
    SetterRegistry,
    bind_indexed,
    bind_many_indexed,
    bind_named,
)
from schema_marshal.core.config import MarshalSettings
from schema_marshal.core.enums import FieldKind, SqlType
from schema_marshal.core.exceptions import (
    AdapterError,
    BindingError,
    EntityNotFoundError,
    InvalidIdentifierError,
    InvalidParameterValueError,
    MappingError,
    MissingIdentifierError,
    NormalizationError,
    ParameterCountError,
    ParseError,
    RegistryError,
    SchemaMarshalError,
    SetterNotFoundError,
    SetterRegistryError,
    StatementExecutionError,
)
from schema_marshal.core.lobs import Blob, Clob
from schema_marshal.core.registry import EntityRegistry
from schema_marshal.mapping import (
    MappingCompiler,
    MappingDescriptor,
    compile_mapping,
    resolve_type,
)
from schema_marshal.normalization import TypeNormalizer
from schema_marshal.parsing import EntityMetadata, EntityParser

__all__ = [
    # Config
    "MarshalSettings",
    # Registry
    "EntityRegistry",
    # Parsing
    "EntityParser",
    "EntityMetadata",
    # Mapping
    "MappingCompiler",
    "MappingDescriptor",
    "compile_mapping",
    "resolve_type",
    # Normalization
    "TypeNormalizer",
    "Blob",
    "Clob",
    # Binding
    "ParameterBinder",
    "SetterRegistry",
    "NamedParam",
    "bind_indexed",
    "bind_named",
    "bind_many_indexed",
    # Enums
    "SqlType",
    "FieldKind",
    # Exceptions
    "SchemaMarshalError",
    "ParseError",
    "RegistryError",
    "EntityNotFoundError",
    "MappingError",
    "MissingIdentifierError",
    "InvalidIdentifierError",
    "NormalizationError",
    "BindingError",
    "ParameterCountError",
    "SetterNotFoundError",
    "InvalidParameterValueError",
    "SetterRegistryError",
    "AdapterError",
    "StatementExecutionError",
]
