"""
Example 01: Parse and Compile

This example parses decorated entity sources and prints the hibernate-mapping
XML compiled for each entity.
"""

from schema_marshal import EntityParser, EntityRegistry, MappingCompiler
import tempfile
from pathlib import Path

ORDER = """
@Entity("Order")
@Table("ORDERS")
export class Order {
    @Id()
    @Generated("sequence")
    @Column({ name: "ORDER_ID", type: "bigint" })
    id: number;

    @Column({ name: "ORDER_DATE", type: "timestamp" })
    orderDate: Date;

    @ManyToOne(() => Customer, { joinColumn: "CUSTOMER_ID", notNull: true })
    customer: Customer;

    @OneToMany(() => OrderItem, { joinColumn: "ORDER_ID", cascade: "all", lazy: true })
    items: OrderItem[];
}
"""

ORDER_ITEM = """
@Table({ name: "ORDER_ITEMS" })
export class OrderItem {
    @Id()
    id: number

    @Column({ name: "QUANTITY", type: "integer" })
    quantity: number
}
"""


def main():
    # Write the entity sources to a temporary directory
    source_dir = Path(tempfile.mkdtemp())
    (source_dir / "Order.ts").write_text(ORDER)
    (source_dir / "OrderItem.ts").write_text(ORDER_ITEM)

    registry = EntityRegistry()
    parser = EntityParser(registry)

    print("=== Parsing ===\n")
    for path in sorted(source_dir.glob("*.ts")):
        metadata = parser.parse_file(path)
        print(f"{metadata.entity_name} -> table {metadata.table_name}")
        for field in metadata.fields:
            print(f"  - {field.property_name}: {field.source_type} ({field.kind.value})")
    print()

    # Parsing an unchanged source again reuses the registered metadata
    again = parser.parse_file(source_dir / "Order.ts")
    print(f"Unchanged source reused: {again is registry.get('Order')}\n")

    print("=== Compiled mappings ===\n")
    compiler = MappingCompiler(registry)
    for name in registry.entity_names:
        print(compiler.to_xml(name))

    # Clean up
    for file in source_dir.glob("*.ts"):
        file.unlink()
    source_dir.rmdir()


if __name__ == "__main__":
    main()
