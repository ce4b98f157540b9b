"""
Example 02: Type Normalization

This example normalizes a decoded JSON record, first heuristically and then
against the column types declared by a parsed entity.
"""

from schema_marshal import EntityParser, EntityRegistry, NormalizationError, TypeNormalizer
import json

PERSON = """
export class Person {
    @Id()
    id: number;

    @Column({ type: "date" })
    birthday: Date;

    @Column({ type: "decimal", precision: 8, scale: 2 })
    salary: number;

    @Column({ type: "blob" })
    avatar: string;
}
"""

PAYLOAD = """
{
    "id": 12.0,
    "birthday": "17.05.1990",
    "salary": 4200.5,
    "avatar": "aGVsbG8=",
    "lastSeen": "2024-03-01T10:15:30Z",
    "photoBytes": "aGVsbG8=",
    "notesClob": "free text"
}
"""


def main():
    print("=== Heuristic normalization ===\n")
    normalizer = TypeNormalizer()
    record = normalizer.normalize(json.loads(PAYLOAD))
    for key, value in record.items():
        print(f"  {key}: {value!r}")
    print()

    print("=== Entity-aware normalization ===\n")
    registry = EntityRegistry()
    EntityParser(registry).parse("Person.ts", PERSON)
    normalizer = TypeNormalizer(registry)
    record = normalizer.normalize_for_entity(json.loads(PAYLOAD), "Person")
    for key, value in record.items():
        print(f"  {key}: {value!r}")
    print()

    # Blob and Clob wrappers back to plain bytes and str
    print(f"Primitives: {normalizer.to_primitives(record)['avatar']!r}\n")

    print("=== Declared type violations ===\n")
    try:
        normalizer.normalize_for_entity({"salary": "a lot"}, "Person")
    except NormalizationError as e:
        print(f"NormalizationError: {e}")


if __name__ == "__main__":
    main()
