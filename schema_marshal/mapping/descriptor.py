"""Mapping descriptor data classes and their hibernate-mapping XML form.

Frozen dataclasses produced by the mapping compiler. ``to_xml`` renders a
deterministic document: id first, then many-to-one associations, scalar
properties and bag collections, each group in declaration order.
"""

from __future__ import annotations

from dataclasses import dataclass
from xml.sax.saxutils import quoteattr

_HEADER = (
    '<?xml version="1.0"?>\n'
    "<!DOCTYPE hibernate-mapping PUBLIC\n"
    '        "-//Hibernate/Hibernate Mapping DTD 3.0//EN"\n'
    '        "http://www.hibernate.org/dtd/hibernate-mapping-3.0.dtd">\n'
    "\n"
)
_INDENT = "    "


def _attrs(*pairs: tuple[str, object]) -> str:
    rendered = []
    for name, value in pairs:
        if isinstance(value, bool):
            value = "true" if value else "false"
        rendered.append(f"{name}={quoteattr(str(value))}")
    return " ".join(rendered)


@dataclass(frozen=True)
class IdDescriptor:
    name: str
    column: str
    type: str
    generator: str

    def to_xml(self, depth: int) -> list[str]:
        pad = _INDENT * depth
        attrs = _attrs(("name", self.name), ("column", self.column), ("type", self.type))
        return [
            f"{pad}<id {attrs}>",
            f"{pad}{_INDENT}<generator {_attrs(('class', self.generator))}/>",
            f"{pad}</id>",
        ]


@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    column: str
    type: str
    length: int | None = None
    precision: int | None = None
    scale: int | None = None

    def to_xml(self, depth: int) -> list[str]:
        pairs: list[tuple[str, object]] = [
            ("name", self.name),
            ("column", self.column),
            ("type", self.type),
        ]
        for name in ("length", "precision", "scale"):
            value = getattr(self, name)
            if value is not None:
                pairs.append((name, value))
        return [f"{_INDENT * depth}<property {_attrs(*pairs)}/>"]


@dataclass(frozen=True)
class AssociationDescriptor:
    """A many-to-one element; inactive cascade, laziness and not-null are omitted."""

    name: str
    entity_name: str
    column: str
    cascade: str | None = None
    not_null: bool = False
    lazy: str | None = None

    def to_xml(self, depth: int) -> list[str]:
        pairs: list[tuple[str, object]] = [
            ("name", self.name),
            ("entity-name", self.entity_name),
            ("column", self.column),
        ]
        if self.cascade and self.cascade.lower() != "none":
            pairs.append(("cascade", self.cascade))
        if self.not_null:
            pairs.append(("not-null", True))
        if self.lazy and self.lazy.lower() != "false":
            pairs.append(("lazy", self.lazy))
        return [f"{_INDENT * depth}<many-to-one {_attrs(*pairs)}/>"]


@dataclass(frozen=True)
class CollectionDescriptor:
    """A one-to-many bag keyed by a join column on the child table."""

    name: str
    entity_name: str
    join_column: str
    inverse: bool = False
    lazy: bool = False
    cascade: str = "none"
    join_column_not_null: bool = True
    table: str | None = None
    fetch: str | None = None

    def to_xml(self, depth: int) -> list[str]:
        pad = _INDENT * depth
        pairs: list[tuple[str, object]] = [("name", self.name)]
        if self.table:
            pairs.append(("table", f"`{self.table}`"))
        pairs += [("inverse", self.inverse), ("lazy", self.lazy)]
        if self.fetch:
            pairs.append(("fetch", self.fetch))
        pairs.append(("cascade", self.cascade))
        key_column = _attrs(("name", self.join_column), ("not-null", self.join_column_not_null))
        return [
            f"{pad}<bag {_attrs(*pairs)}>",
            f"{pad}{_INDENT}<key>",
            f"{pad}{_INDENT * 2}<column {key_column} />",
            f"{pad}{_INDENT}</key>",
            f"{pad}{_INDENT}<one-to-many {_attrs(('entity-name', self.entity_name))} />",
            f"{pad}</bag>",
        ]


@dataclass(frozen=True)
class MappingDescriptor:
    """Compiled object/relational mapping of one entity."""

    entity_name: str
    table_name: str
    id: IdDescriptor
    associations: tuple[AssociationDescriptor, ...] = ()
    properties: tuple[PropertyDescriptor, ...] = ()
    collections: tuple[CollectionDescriptor, ...] = ()

    def to_xml(self) -> str:
        """Render the hibernate-mapping document."""
        table = f"`{self.table_name}`"
        lines = [
            "<hibernate-mapping>",
            f"{_INDENT}<class {_attrs(('entity-name', self.entity_name), ('table', table))}>",
        ]
        lines += self.id.to_xml(2)
        for association in self.associations:
            lines += association.to_xml(2)
        for prop in self.properties:
            lines += prop.to_xml(2)
        for collection in self.collections:
            lines += collection.to_xml(2)
        lines += [f"{_INDENT}</class>", "</hibernate-mapping>"]
        return _HEADER + "\n".join(lines) + "\n"
