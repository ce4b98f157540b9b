"""
Example 03: Parameter Binding

This example binds loosely typed values onto SQLite statements, positionally,
by name and in batches.
"""

from schema_marshal import BindingError, ParameterBinder
from schema_marshal.adapters.sqlite import SqliteIndexedStatement, SqliteNamedStatement
import sqlite3


def main():
    conn = sqlite3.connect(":memory:")
    conn.execute("""
        CREATE TABLE products (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            price TEXT,
            added TEXT
        )
    """)
    binder = ParameterBinder()

    print("=== Batch insert ===\n")
    insert = SqliteIndexedStatement(
        conn,
        "INSERT INTO products VALUES (?, ?, ?, ?)",
        ["INTEGER", "VARCHAR", "DECIMAL(10,2)", "DATE"],
    )
    rows = [
        ["1.000", "'Mug'", "9.90", "2024-03-01"],
        [2, "Mouse", 24.5, "03/15/2024"],
        [3, "Mat", {"value": "12", "type": "DECIMAL"}, None],
    ]
    binder.bind_many_indexed(rows, insert)
    print(f"Inserted {insert.execute_batch()} rows")
    for row in conn.execute("SELECT * FROM products ORDER BY id"):
        print(f"  {row}")
    print()

    print("=== Positional query ===\n")
    query = SqliteIndexedStatement(conn, "SELECT name FROM products WHERE name LIKE ?", ["VARCHAR"])
    binder.bind_indexed(["'M%'"], query)
    print(f"Names like 'M%': {[name for (name,) in query.execute()]}\n")

    print("=== Named update ===\n")
    update = SqliteNamedStatement(conn, "UPDATE products SET added = :added WHERE id = :id")
    binder.bind_named(
        [
            {"name": "added", "type": "DATE", "value": None},
            {"name": "id", "type": "INTEGER", "value": "2"},
        ],
        update,
    )
    print(f"Updated {update.execute().rowcount} row\n")

    print("=== Errors ===\n")
    try:
        binder.bind_indexed(["a", "b"], query)
    except BindingError as e:
        print(f"BindingError: {e}")
    try:
        binder.bind_indexed([{"value": "30.5", "type": "INTEGER"}], query)
    except BindingError as e:
        print(f"BindingError: {e}")

    conn.close()


if __name__ == "__main__":
    main()
