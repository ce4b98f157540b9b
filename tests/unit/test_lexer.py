"""Unit tests for EntityLexer."""

from __future__ import annotations

import pytest

from schema_marshal.core.exceptions import ParseError
from schema_marshal.parsing.lexer import EntityLexer


def _types(source: str) -> list[str]:
    return [token.type for token in EntityLexer().tokenize(source)]


class TestEntityLexer:
    def test_decorated_property(self) -> None:
        assert _types('@Column({ name: "A" }) x: number;') == [
            "AT",
            "IDENTIFIER",
            "LPAREN",
            "LBRACE",
            "IDENTIFIER",
            "COLON",
            "STRING",
            "RBRACE",
            "RPAREN",
            "IDENTIFIER",
            "COLON",
            "IDENTIFIER",
            "SEMI",
        ]

    def test_reserved_words(self) -> None:
        assert _types("class true false null undefined classy") == [
            "CLASS",
            "TRUE",
            "FALSE",
            "NULL",
            "UNDEFINED",
            "IDENTIFIER",
        ]

    def test_arrow_is_not_equals(self) -> None:
        assert _types("() => Foo = 1") == [
            "LPAREN",
            "RPAREN",
            "ARROW",
            "IDENTIFIER",
            "EQUALS",
            "NUMBER",
        ]

    def test_optional_marker_is_other(self) -> None:
        tokens = EntityLexer().tokenize("photo?: string | null")
        assert [(t.type, t.value) for t in tokens] == [
            ("IDENTIFIER", "photo"),
            ("OTHER", "?"),
            ("COLON", ":"),
            ("IDENTIFIER", "string"),
            ("OTHER", "|"),
            ("NULL", "null"),
        ]

    def test_comments_are_skipped(self) -> None:
        source = "// line comment\n/* block\n comment */ id"
        tokens = EntityLexer().tokenize(source)
        assert [t.value for t in tokens] == ["id"]
        assert tokens[0].lineno == 3

    def test_string_values_keep_quotes(self) -> None:
        tokens = EntityLexer().tokenize("'a' \"b\" `c`")
        assert [t.value for t in tokens] == ["'a'", '"b"', "`c`"]

    def test_escaped_quote_in_string(self) -> None:
        tokens = EntityLexer().tokenize(r'"say \"hi\""')
        assert len(tokens) == 1
        assert tokens[0].type == "STRING"

    def test_numbers(self) -> None:
        tokens = EntityLexer().tokenize("10 2.5 1e3")
        assert [t.value for t in tokens] == ["10", "2.5", "1e3"]
        assert {t.type for t in tokens} == {"NUMBER"}

    def test_line_numbers(self) -> None:
        tokens = EntityLexer().tokenize("a\n\nb\nc")
        assert [t.lineno for t in tokens] == [1, 3, 4]

    def test_lexer_is_reusable(self) -> None:
        lexer = EntityLexer()
        lexer.tokenize("a\nb\nc")
        tokens = lexer.tokenize("x")
        assert tokens[0].lineno == 1

    def test_illegal_character(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            EntityLexer().tokenize("id: number;\n§")
        assert exc_info.value.line == 2
        assert "§" in exc_info.value.detail

    def test_unterminated_string(self) -> None:
        with pytest.raises(ParseError):
            EntityLexer().tokenize("name = 'abc\n")
