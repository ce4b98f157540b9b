"""Parsing layer - entity sources into immutable metadata."""

from __future__ import annotations

from schema_marshal.parsing.lexer import EntityLexer
from schema_marshal.parsing.model import (
    AssociationDetails,
    CollectionDetails,
    ColumnDetails,
    EntityFieldMetadata,
    EntityMetadata,
)
from schema_marshal.parsing.parser import EntityParser

__all__ = [
    "EntityParser",
    "EntityLexer",
    "EntityMetadata",
    "EntityFieldMetadata",
    "ColumnDetails",
    "AssociationDetails",
    "CollectionDetails",
]
