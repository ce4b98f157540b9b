"""Unit tests for TypeNormalizer."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timezone
from decimal import Decimal

import pytest

from schema_marshal.core.config import MarshalSettings
from schema_marshal.core.exceptions import NormalizationError
from schema_marshal.core.lobs import Blob, Clob
from schema_marshal.core.registry import EntityRegistry
from schema_marshal.normalization.normalizer import TypeNormalizer, coercion_for_hint


@pytest.fixture
def normalizer(settings: MarshalSettings) -> TypeNormalizer:
    return TypeNormalizer(settings=settings)


@pytest.fixture
def entity_normalizer(order_registry: EntityRegistry, settings: MarshalSettings) -> TypeNormalizer:
    return TypeNormalizer(order_registry, settings)


class TestHeuristicNumbers:
    def test_whole_and_fractional_floats(self, normalizer: TypeNormalizer) -> None:
        record = {"age": 30.0, "price": 19.99}
        assert normalizer.normalize(record) == {"age": 30, "price": 19.99}
        assert type(record["age"]) is int
        assert type(record["price"]) is float

    def test_normalizes_in_place(self, normalizer: TypeNormalizer) -> None:
        record = {"age": 30.0}
        assert normalizer.normalize(record) is record

    def test_float_outside_int64_is_kept(self, normalizer: TypeNormalizer) -> None:
        assert normalizer.normalize({"big": 1e19}) == {"big": 1e19}
        assert type(normalizer.normalize({"big": 1e19})["big"]) is float

    def test_decimals(self, normalizer: TypeNormalizer) -> None:
        record = normalizer.normalize({"a": Decimal("30.000"), "b": Decimal("30.5")})
        assert record == {"a": 30, "b": Decimal("30.5")}
        assert type(record["a"]) is int

    def test_bool_and_none_untouched(self, normalizer: TypeNormalizer) -> None:
        record = normalizer.normalize({"flag": True, "missing": None, "count": 3})
        assert record == {"flag": True, "missing": None, "count": 3}
        assert record["flag"] is True

    def test_nested_structures(self, normalizer: TypeNormalizer) -> None:
        record = {"order": {"total": 10.0, "items": [{"qty": 2.0}, 3.0]}}
        assert normalizer.normalize(record) == {"order": {"total": 10, "items": [{"qty": 2}, 3]}}

    def test_top_level_list(self, normalizer: TypeNormalizer) -> None:
        assert normalizer.normalize([1.0, {"a": 2.0}]) == [1, {"a": 2}]


class TestHeuristicStrings:
    def test_iso_datetime(self, normalizer: TypeNormalizer) -> None:
        record = normalizer.normalize({"at": "2024-03-01T10:15:30Z"})
        assert record["at"] == datetime(2024, 3, 1, 10, 15, 30, tzinfo=timezone.utc)

    def test_iso_date_and_time(self, normalizer: TypeNormalizer) -> None:
        record = normalizer.normalize({"day": "2024-03-01", "at": "10:15"})
        assert record == {"day": date(2024, 3, 1), "at": time(10, 15)}

    def test_malformed_date_is_kept(self, normalizer: TypeNormalizer) -> None:
        assert normalizer.normalize({"day": "2024-13-45"}) == {"day": "2024-13-45"}

    @pytest.mark.parametrize(
        "key", ["photoBytes", "avatarBlob", "rawData", "fileBase64", "binaryPayload"]
    )
    def test_base64_under_binary_key(self, normalizer: TypeNormalizer, key: str) -> None:
        assert normalizer.normalize({key: "aGVsbG8="}) == {key: b"hello"}

    def test_base64_under_plain_key_is_kept(self, normalizer: TypeNormalizer) -> None:
        assert normalizer.normalize({"name": "aGVsbG8="}) == {"name": "aGVsbG8="}

    @pytest.mark.parametrize("text", ["not base64!", "abc", "===="])
    def test_invalid_base64_is_kept(self, normalizer: TypeNormalizer, text: str) -> None:
        assert normalizer.normalize({"payloadData": text}) == {"payloadData": text}

    def test_clob_key(self, normalizer: TypeNormalizer) -> None:
        record = normalizer.normalize({"descriptionClob": "long text"})
        assert record == {"descriptionClob": Clob("long text")}

    def test_plain_string_is_kept(self, normalizer: TypeNormalizer) -> None:
        assert normalizer.normalize({"name": "Alice"}) == {"name": "Alice"}

    def test_list_items_inherit_key(self, normalizer: TypeNormalizer) -> None:
        record = normalizer.normalize({"photoBytes": ["aGVsbG8=", "aGk="]})
        assert record == {"photoBytes": [b"hello", b"hi"]}


class TestEntityNormalization:
    def test_order_graph(self, entity_normalizer: TypeNormalizer) -> None:
        record = {
            "id": "42",
            "number": "2024-01-01",
            "orderDate": "2024-03-01",
            "total": 30.0,
            "customer": {
                "id": 7.0,
                "since": "2020-05-17",
                "externalId": "12345678-1234-5678-1234-567812345678",
            },
            "items": [{"id": 1.0, "quantity": "3", "price": 9.5, "photo": "aGVsbG8="}],
            "extra": 5.0,
        }
        result = entity_normalizer.normalize_for_entity(record, "Order")

        assert result["id"] == 42
        assert result["number"] == "2024-01-01"
        assert result["orderDate"] == datetime(2024, 3, 1)
        assert result["total"] == Decimal("30")
        assert isinstance(result["total"], Decimal)
        assert result["extra"] == 5

        customer = result["customer"]
        assert customer["id"] == 7
        assert customer["since"] == date(2020, 5, 17)
        assert customer["externalId"] == uuid.UUID("12345678-1234-5678-1234-567812345678")

        item = result["items"][0]
        assert item == {"id": 1, "quantity": 3, "price": Decimal("9.5"), "photo": Blob(b"hello")}

    def test_list_of_records(self, entity_normalizer: TypeNormalizer) -> None:
        records = [{"quantity": "1"}, {"quantity": 2.0}]
        assert entity_normalizer.normalize_for_entity(records, "OrderItem") == [
            {"quantity": 1},
            {"quantity": 2},
        ]

    def test_null_values_are_kept(self, entity_normalizer: TypeNormalizer) -> None:
        record = {"orderDate": None, "customer": None}
        assert entity_normalizer.normalize_for_entity(record, "Order") == record

    def test_date_annotation_without_hint(
        self, registry: EntityRegistry, settings: MarshalSettings, parser
    ) -> None:
        parser.parse("Event.ts", "class Event {\n @Id() id: number;\n at: Date | null;\n}\n")
        normalizer = TypeNormalizer(registry, settings)
        record = normalizer.normalize_for_entity({"at": "01.03.2024"}, "Event")
        assert record == {"at": datetime(2024, 3, 1)}

    def test_hint_failure_raises(self, entity_normalizer: TypeNormalizer) -> None:
        with pytest.raises(NormalizationError) as exc_info:
            entity_normalizer.normalize_for_entity({"orderDate": "not a date"}, "Order")
        error = exc_info.value
        assert (error.entity_name, error.field_name, error.hint) == (
            "Order",
            "orderDate",
            "timestamp",
        )
        assert error.value == "not a date"
        assert isinstance(error.__cause__, ValueError)

    def test_fractional_integer_raises(self, entity_normalizer: TypeNormalizer) -> None:
        with pytest.raises(NormalizationError, match="OrderItem.quantity"):
            entity_normalizer.normalize_for_entity({"quantity": "3.5"}, "OrderItem")

    def test_lenient_mode_keeps_value(self, order_registry: EntityRegistry) -> None:
        settings = MarshalSettings.model_construct(strict_entity_hints=False)
        normalizer = TypeNormalizer(order_registry, settings)
        record = normalizer.normalize_for_entity({"orderDate": "not a date"}, "Order")
        assert record == {"orderDate": "not a date"}

    def test_unknown_hints_use_heuristics(
        self, registry: EntityRegistry, settings: MarshalSettings, parser
    ) -> None:
        parser.parse(
            "Slot.ts",
            "class Slot {\n"
            " @Id() id: number;\n"
            ' @Column({ type: "interval" }) duration: string;\n'
            ' @Column({ type: "point" }) location: string;\n'
            "}\n",
        )
        normalizer = TypeNormalizer(registry, settings)
        record = normalizer.normalize_for_entity(
            {"duration": "1 day", "location": "(1,2)", "id": 4.0}, "Slot"
        )
        assert record == {"duration": "1 day", "location": "(1,2)", "id": 4}

    def test_unknown_entity_uses_heuristics(self, entity_normalizer: TypeNormalizer) -> None:
        assert entity_normalizer.normalize_for_entity({"age": 30.0}, "Nope") == {"age": 30}

    def test_without_registry_uses_heuristics(self, normalizer: TypeNormalizer) -> None:
        assert normalizer.normalize_for_entity({"age": 30.0}, "Order") == {"age": 30}


class TestCoercionForHint:
    @pytest.mark.parametrize(
        ("hint", "value", "expected"),
        [
            ("BIGINT", "9223372036854775807", 9223372036854775807),
            ("smallint", 12.0, 12),
            ("tinyint", "-5", -5),
            ("integer", "30.000", 30),
            ("decimal(10,2)", "12.50", Decimal("12.50")),
            ("double precision", "1.5", 1.5),
            ("varchar(20)", "  keep  ", "  keep  "),
            ("longtext", "30", "30"),
            ("date", "2024-03-01", date(2024, 3, 1)),
            ("time", "10:15", time(10, 15)),
            ("bytea", [104, 105], b"hi"),
            ("clob", "text", Clob("text")),
        ],
    )
    def test_coercions(self, hint: str, value: object, expected: object) -> None:
        assert coercion_for_hint(hint)(value) == expected

    @pytest.mark.parametrize("hint", ["jsonb", "json", "interval", "point", "geometry"])
    def test_unknown_hint(self, hint: str) -> None:
        assert coercion_for_hint(hint) is None

    @pytest.mark.parametrize(
        ("hint", "same_as"),
        [
            ("timestamp with time zone", "timestamp"),
            ("datetime2(7)", "timestamp"),
            ("time with time zone", "time"),
            ("nvarchar2(50)", "varchar"),
            ("character varying(30)", "varchar"),
            ("int8", "bigint"),
            ("mediumint", "integer"),
            ("int unsigned", "integer"),
        ],
    )
    def test_spelling_variants(self, hint: str, same_as: str) -> None:
        assert coercion_for_hint(hint) is coercion_for_hint(same_as)

    def test_width_checked(self) -> None:
        with pytest.raises(ValueError):
            coercion_for_hint("smallint")(40000)


class TestToPrimitives:
    def test_lobs_become_primitives(self, normalizer: TypeNormalizer) -> None:
        record = {"a": Blob(b"x"), "b": [Clob("t"), {"c": Blob(b"y")}], "d": 1}
        assert normalizer.to_primitives(record) == {"a": b"x", "b": ["t", {"c": b"y"}], "d": 1}

    def test_scalar(self, normalizer: TypeNormalizer) -> None:
        assert normalizer.to_primitives(Clob("t")) == "t"
