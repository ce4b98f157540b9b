"""Entity metadata data classes.

Frozen dataclasses produced by EntityParser and consumed by the mapping
compiler and the normalizer. Instances are never mutated after parsing.
"""

from __future__ import annotations

from dataclasses import dataclass

from schema_marshal.core.enums import FieldKind


@dataclass(frozen=True)
class ColumnDetails:
    """Storage details of a scalar field."""

    column_name: str | None = None
    database_type: str | None = None
    length: int | None = None
    nullable: bool = True
    default_value: str | None = None
    precision: int | None = None
    scale: int | None = None


@dataclass(frozen=True)
class AssociationDetails:
    """Many-to-one reference to another entity."""

    entity_name: str
    join_column: str
    cascade: str | None = None
    not_null: bool = False
    lazy: str | None = None


@dataclass(frozen=True)
class CollectionDetails:
    """One-to-many bag of another entity, joined through a column on its table."""

    entity_name: str
    join_column: str
    table_name: str | None = None
    inverse: bool = False
    lazy: bool = False
    fetch: str | None = None
    cascade: str = "none"
    join_column_not_null: bool = True


@dataclass(frozen=True)
class EntityFieldMetadata:
    """A single declared property of an entity."""

    property_name: str
    source_type: str = "unknown"
    is_identifier: bool = False
    generation_strategy: str | None = None
    documentation: str | None = None
    column: ColumnDetails | None = None
    association: AssociationDetails | None = None
    collection: CollectionDetails | None = None

    def __post_init__(self) -> None:
        details = (self.column, self.association, self.collection)
        present = [d for d in details if d is not None]
        if len(present) != 1:
            raise ValueError(
                f"Field '{self.property_name}' needs exactly one of column, "
                f"association or collection details"
            )

    @property
    def kind(self) -> FieldKind:
        if self.collection is not None:
            return FieldKind.COLLECTION
        if self.association is not None:
            return FieldKind.ASSOCIATION
        return FieldKind.COLUMN


@dataclass(frozen=True)
class EntityMetadata:
    """Parsed description of one persistent entity."""

    entity_name: str
    table_name: str
    documentation: str | None = None
    fields: tuple[EntityFieldMetadata, ...] = ()

    @property
    def identifier(self) -> EntityFieldMetadata | None:
        """The field marked as identifier, if any."""
        return next((f for f in self.fields if f.is_identifier), None)

    def field(self, property_name: str) -> EntityFieldMetadata | None:
        """Look up a field by property name."""
        return next((f for f in self.fields if f.property_name == property_name), None)
