"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import IO, Any

import pytest

from schema_marshal.core.config import MarshalSettings
from schema_marshal.core.registry import EntityRegistry
from schema_marshal.parsing.parser import EntityParser

ORDER_SOURCE = """\
import { Entity, Table, Id, Generated, Column, OneToMany, ManyToOne } from "@dirigible/sdk/db";
import { Customer } from "./Customer";
import { OrderItem } from "./OrderItem";

@Entity("Order")
@Table("ORDERS")
@Documentation("Customer orders")
export class Order {

    @Id()
    @Generated("SEQUENCE")
    @Column({ name: "ORDER_ID", type: "bigint" })
    public id: number;

    @Column({ name: "ORDER_NUMBER", type: "varchar", length: 20, nullable: false })
    public number: string;

    @Column({ name: "ORDER_DATE", type: "timestamp" })
    public orderDate: Date;

    @Column({ name: "ORDER_TOTAL", type: "decimal", precision: 10, scale: 2 })
    public total: number;

    @ManyToOne(() => Customer, { joinColumn: "CUSTOMER_ID", notNull: true })
    public customer: Customer;

    @OneToMany(() => OrderItem, { joinColumn: "ORDER_ID", cascade: "all", lazy: true })
    public items: OrderItem[];

    public get label(): string {
        return `Order ${this.number}`;
    }
}
"""

ORDER_ITEM_SOURCE = """\
@Entity("OrderItem")
@Table({ name: "ORDER_ITEMS" })
export class OrderItem {
    @Id()
    @Generated("identity")
    id: number

    @Column({ name: "ITEM_QUANTITY", type: "integer" })
    quantity: number

    @Column({ name: "ITEM_PRICE", type: "numeric" })
    price: number

    @Column({ name: "ITEM_PHOTO", type: "blob" })
    photo?: string | null
}
"""

CUSTOMER_SOURCE = """\
export class Customer {
    @Id()
    id: number;

    @Column({ type: "varchar" })
    name: string;

    @Column({ name: "CUSTOMER_SINCE", type: "date" })
    since: Date;

    @Column({ type: "uuid" })
    externalId: string;

    // Not persisted
    constructor(name: string) {
        this.name = name;
    }
}
"""


class RecordingIndexedStatement:
    """IndexedStatement double that records every call."""

    def __init__(self, types: Sequence[int]) -> None:
        self.types = list(types)
        self.calls: list[tuple[Any, ...]] = []
        self.batches = 0

    def __repr__(self) -> str:
        return "RecordingIndexedStatement"

    def parameter_count(self) -> int:
        return len(self.types)

    def parameter_type(self, index: int) -> int:
        return self.types[index - 1]

    def set_null(self, index: int, sql_type: int) -> None:
        self.calls.append(("null", index, sql_type))

    def set_object(self, index: int, value: Any, sql_type: int) -> None:
        self.calls.append(("object", index, value, sql_type))

    def set_binary_stream(self, index: int, stream: IO[bytes], length: int) -> None:
        self.calls.append(("binary", index, stream.read(length), length))

    def set_character_stream(self, index: int, stream: IO[str], length: int) -> None:
        self.calls.append(("chars", index, stream.read(length), length))

    def set_array(self, index: int, values: Sequence[Any], element_type: str) -> None:
        self.calls.append(("array", index, list(values), element_type))

    def add_batch(self) -> None:
        self.batches += 1


class RecordingNamedStatement:
    """NamedStatement double that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.batches = 0

    def set_null(self, name: str, sql_type: int) -> None:
        self.calls.append(("null", name, sql_type))

    def set_object(self, name: str, value: Any, sql_type: int) -> None:
        self.calls.append(("object", name, value, sql_type))

    def set_binary_stream(self, name: str, stream: IO[bytes], length: int) -> None:
        self.calls.append(("binary", name, stream.read(length), length))

    def set_character_stream(self, name: str, stream: IO[str], length: int) -> None:
        self.calls.append(("chars", name, stream.read(length), length))

    def set_array(self, name: str, values: Sequence[Any], element_type: str) -> None:
        self.calls.append(("array", name, list(values), element_type))

    def add_batch(self) -> None:
        self.batches += 1


@pytest.fixture
def settings() -> MarshalSettings:
    """Settings with library defaults, independent of the environment."""
    return MarshalSettings.model_construct()


@pytest.fixture
def registry() -> EntityRegistry:
    return EntityRegistry()


@pytest.fixture
def parser(registry: EntityRegistry, settings: MarshalSettings) -> EntityParser:
    return EntityParser(registry, settings)


@pytest.fixture
def order_registry(registry: EntityRegistry, parser: EntityParser) -> EntityRegistry:
    """Registry holding Order, OrderItem and Customer."""
    parser.parse("Order.ts", ORDER_SOURCE)
    parser.parse("OrderItem.ts", ORDER_ITEM_SOURCE)
    parser.parse("Customer.ts", CUSTOMER_SOURCE)
    return registry


@pytest.fixture
def tmp_entity_dir(tmp_path: Path) -> Path:
    """Temporary directory for entity sources."""
    return tmp_path / "entities"


@pytest.fixture
def write_entity(tmp_entity_dir: Path):
    """Helper to write entity sources into the temp directory.

    Usage:
        write_entity("Order.ts", ORDER_SOURCE)
    """

    def _write(relative_path: str, content: str) -> Path:
        file_path = tmp_entity_dir / relative_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        return file_path

    return _write


@pytest.fixture
def indexed_statement():
    """Factory for recording positional statements: ``indexed_statement([SqlType.VARCHAR])``."""
    return RecordingIndexedStatement


@pytest.fixture
def named_statement() -> RecordingNamedStatement:
    return RecordingNamedStatement()


@pytest.fixture
def order_source() -> str:
    return ORDER_SOURCE


@pytest.fixture
def order_item_source() -> str:
    return ORDER_ITEM_SOURCE


@pytest.fixture
def customer_source() -> str:
    return CUSTOMER_SOURCE
