"""Mapping layer - entity metadata into hibernate-mapping descriptors."""

from __future__ import annotations

from schema_marshal.mapping.compiler import MappingCompiler, compile_mapping, resolve_type
from schema_marshal.mapping.descriptor import (
    AssociationDescriptor,
    CollectionDescriptor,
    IdDescriptor,
    MappingDescriptor,
    PropertyDescriptor,
)

__all__ = [
    "MappingCompiler",
    "compile_mapping",
    "resolve_type",
    "MappingDescriptor",
    "IdDescriptor",
    "PropertyDescriptor",
    "AssociationDescriptor",
    "CollectionDescriptor",
]
