"""Entity parser - turns a decorated TypeScript class into EntityMetadata.

Supported shape::

    @Entity("Order")
    @Table({ name: "ORDERS" })
    export class Order {
        @Id()
        @Generated("sequence")
        id: number;

        @Column({ name: "ORDER_DATE", type: "timestamp" })
        orderDate: Date;

        @ManyToOne(() => Customer, { joinColumn: "CUSTOMER_ID", notNull: true })
        customer: Customer;

        @OneToMany(() => OrderItem, { joinColumn: "ORDER_ID", cascade: "all" })
        items: OrderItem[];
    }

Decorators may be namespaced (``@orm.Column``); the last segment counts.
Methods, accessors and constructors are skipped, unknown decorators ignored.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import ply.lex as lex

from schema_marshal.core.config import MarshalSettings
from schema_marshal.core.exceptions import ParseError
from schema_marshal.core.registry import EntityRegistry
from schema_marshal.parsing.lexer import EntityLexer
from schema_marshal.parsing.model import (
    AssociationDetails,
    CollectionDetails,
    ColumnDetails,
    EntityFieldMetadata,
    EntityMetadata,
)

logger = logging.getLogger(__name__)

_CLASS_PREFIXES = frozenset({"export", "default", "abstract", "declare"})
_MEMBER_MODIFIERS = frozenset(
    {
        "public",
        "private",
        "protected",
        "readonly",
        "static",
        "declare",
        "abstract",
        "override",
        "accessor",
    }
)
_ACCESSOR_PREFIXES = frozenset({"get", "set", "async"})
_MEMBER_NAME_TYPES = frozenset(
    {"IDENTIFIER", "STRING", "NUMBER", "TRUE", "FALSE", "NULL", "UNDEFINED", "CLASS"}
)
_OPENERS = {"LPAREN": "RPAREN", "LBRACKET": "RBRACKET", "LBRACE": "RBRACE"}
# Tokens after which a line break does not end a type or an initializer
_CONTINUATIONS = frozenset({"OTHER", "DOT", "EQUALS", "ARROW", "COMMA", "COLON"})


@dataclass(frozen=True)
class EntityReference:
    """A bare or arrow-wrapped class name in decorator arguments."""

    name: str


@dataclass(frozen=True)
class Decorator:
    name: str
    arguments: tuple[Any, ...] = ()


class EntityParser:
    """Parses entity sources and registers the results.

    Args:
        registry: Registry receiving parsed entities. Also used to skip
            re-parsing a source whose content digest is unchanged.
        settings: Runtime settings; defaults are read from the environment.
    """

    def __init__(
        self,
        registry: EntityRegistry | None = None,
        settings: MarshalSettings | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings or MarshalSettings()
        self._lexer = EntityLexer()

    def parse(self, location: str, source: str) -> EntityMetadata:
        """Parse one entity source.

        Args:
            location: File path or any label identifying the source.
            source: The source text.

        Returns:
            The immutable entity metadata.

        Raises:
            ParseError: On syntax errors, malformed decorator arguments or
                a missing or duplicated identifier field.
        """
        source_key = Path(location).stem
        digest = hashlib.md5(source.encode("utf-8"), usedforsecurity=False).hexdigest()

        if self._registry is not None:
            cached = self._registry.cached(source_key, digest)
            if cached is not None:
                logger.debug("Source %s unchanged, reusing %s", location, cached.entity_name)
                # Another source may have registered the same entity since
                if (
                    self._settings.register_on_parse
                    and self._registry.find(cached.entity_name) is not cached
                ):
                    self._registry.register(cached, source_key=source_key, digest=digest)
                return cached

        try:
            tokens = self._lexer.tokenize(source)
        except ParseError as e:
            raise ParseError(location, e.detail, e.line) from e

        metadata = _EntityReader(location, source, tokens).read()
        logger.debug(
            "Parsed entity %s (%d fields) from %s",
            metadata.entity_name,
            len(metadata.fields),
            location,
        )

        if self._registry is not None and self._settings.register_on_parse:
            self._registry.register(metadata, source_key=source_key, digest=digest)
        return metadata

    def parse_file(self, path: Path | str) -> EntityMetadata:
        """Read a UTF-8 source file and parse it."""
        path = Path(path)
        return self.parse(str(path), path.read_text(encoding="utf-8"))


class _EntityReader:
    """Recursive-descent reader over the token list of one source."""

    def __init__(self, location: str, source: str, tokens: list[lex.LexToken]) -> None:
        self._location = location
        self._source = source
        self._tokens = tokens
        self._pos = 0

    # --- Token stream ---

    def _peek(self, offset: int = 0) -> lex.LexToken | None:
        index = self._pos + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def _advance(self) -> lex.LexToken:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of source")
        self._pos += 1
        return token

    def _expect(self, token_type: str, what: str) -> lex.LexToken:
        token = self._peek()
        if token is None or token.type != token_type:
            raise self._error(f"expected {what}", token)
        return self._advance()

    def _is(self, token_type: str, value: str | None = None, offset: int = 0) -> bool:
        token = self._peek(offset)
        if token is None or token.type != token_type:
            return False
        return value is None or token.value == value

    def _error(self, detail: str, token: lex.LexToken | None = None) -> ParseError:
        if token is None and self._tokens:
            token = self._tokens[min(self._pos, len(self._tokens) - 1)]
        if token is not None and self._pos < len(self._tokens):
            detail = f"{detail}, found '{token.value}'"
        return ParseError(self._location, detail, token.lineno if token else None)

    def _skip_balanced(self) -> None:
        """Skip from an opening bracket to its matching closer."""
        opener = self._advance()
        closers = [_OPENERS[opener.type]]
        while closers:
            token = self._advance()
            if token.type in _OPENERS:
                closers.append(_OPENERS[token.type])
            elif token.type == closers[-1]:
                closers.pop()

    # --- Program and class ---

    def read(self) -> EntityMetadata:
        pending: list[Decorator] = []
        while self._peek() is not None:
            token = self._peek()
            if token.type == "AT":
                pending.append(self._decorator())
            elif token.type == "CLASS":
                self._advance()
                return self._class(pending)
            elif token.type == "IDENTIFIER" and token.value in _CLASS_PREFIXES:
                self._advance()
            else:
                pending = []
                self._advance()
        raise ParseError(self._location, "no class declaration found")

    def _class(self, decorators: list[Decorator]) -> EntityMetadata:
        class_token = self._expect("IDENTIFIER", "class name")
        while not self._is("LBRACE"):
            self._advance()
        self._advance()
        fields = self._class_body()

        entity_name = class_token.value
        table_name: str | None = None
        documentation: str | None = None
        for decorator in decorators:
            if decorator.name == "Entity" and decorator.arguments:
                entity_name = self._text_argument(decorator)
            elif decorator.name == "Table" and decorator.arguments:
                first = decorator.arguments[0]
                if isinstance(first, dict):
                    table_name = self._string_option(first, "name", decorator)
                else:
                    table_name = self._text_argument(decorator)
            elif decorator.name == "Documentation" and decorator.arguments:
                documentation = self._text_argument(decorator)

        identifiers = [f.property_name for f in fields if f.is_identifier]
        if not identifiers:
            raise ParseError(
                self._location,
                f"entity '{entity_name}' has no @Id field",
                class_token.lineno,
            )
        if len(identifiers) > 1:
            raise ParseError(
                self._location,
                f"entity '{entity_name}' has more than one @Id field: {identifiers}",
                class_token.lineno,
            )

        return EntityMetadata(
            entity_name=entity_name,
            table_name=table_name or entity_name.upper(),
            documentation=documentation,
            fields=tuple(fields),
        )

    def _class_body(self) -> list[EntityFieldMetadata]:
        fields: list[EntityFieldMetadata] = []
        decorators: list[Decorator] = []
        while True:
            token = self._peek()
            if token is None:
                raise ParseError(self._location, "unterminated class body")
            if token.type == "RBRACE":
                self._advance()
                return fields
            if token.type == "AT":
                decorators.append(self._decorator())
            elif token.type == "SEMI":
                self._advance()
            elif self._is_modifier(token):
                self._advance()
            elif token.type == "OTHER" and token.value in ("*", "#"):
                self._advance()
            elif token.type == "LBRACKET":
                # Computed member name or index signature
                self._skip_balanced()
                self._member(token)
                decorators = []
            elif token.type == "LBRACE":
                # Static initialization block
                self._skip_balanced()
            elif token.type in _MEMBER_NAME_TYPES:
                self._advance()
                type_text = self._member(token)
                if type_text is not None:
                    fields.append(self._field(token, type_text, decorators))
                decorators = []
            else:
                raise self._error("unexpected token in class body", token)

    def _is_modifier(self, token: lex.LexToken) -> bool:
        if token.type != "IDENTIFIER":
            return False
        if token.value not in _MEMBER_MODIFIERS and token.value not in _ACCESSOR_PREFIXES:
            return False
        following = self._peek(1)
        return following is not None and (
            following.type in _MEMBER_NAME_TYPES
            or following.type == "LBRACKET"
            or (following.type == "OTHER" and following.value in ("*", "#"))
        )

    def _member(self, name_token: lex.LexToken) -> str | None:
        """Consume the rest of a member; return its type text for properties."""
        while self._is("OTHER", "?") or self._is("OTHER", "!"):
            self._advance()

        if self._is("LPAREN") or self._is("OTHER", "<"):
            self._skip_method()
            return None

        type_text = "unknown"
        if self._is("COLON"):
            self._advance()
            type_text = self._type_annotation(name_token)
        if self._is("EQUALS"):
            self._advance()
            self._skip_expression()
        return type_text

    def _skip_method(self) -> None:
        while not self._is("LPAREN"):
            self._advance()
        self._skip_balanced()
        if self._is("COLON"):
            self._advance()
            while not (self._is("LBRACE") or self._is("SEMI") or self._is("RBRACE")):
                if self._peek() is not None and self._peek().type in _OPENERS:
                    self._skip_balanced()
                else:
                    self._advance()
        if self._is("LBRACE"):
            self._skip_balanced()

    def _type_annotation(self, name_token: lex.LexToken) -> str:
        """Capture a type annotation verbatim, whitespace-normalized."""
        first = self._peek()
        last: lex.LexToken | None = None
        angle_depth = 0
        while True:
            token = self._peek()
            if token is None:
                break
            if last is not None and angle_depth == 0 and self._ends_statement(last, token):
                break
            if token.type in ("SEMI", "EQUALS", "RBRACE", "AT", "COMMA") and angle_depth == 0:
                break
            if token.type in _OPENERS:
                self._skip_balanced()
                last = self._tokens[self._pos - 1]
                continue
            if token.type == "OTHER" and token.value == "<":
                angle_depth += 1
            elif token.type == "OTHER" and token.value == ">":
                angle_depth -= 1
            last = self._advance()

        if first is None or last is None:
            raise ParseError(
                self._location,
                f"missing type annotation for '{name_token.value}'",
                name_token.lineno,
            )
        text = self._source[first.lexpos : last.lexpos + len(last.value)]
        return " ".join(text.split())

    @staticmethod
    def _ends_statement(last: lex.LexToken, token: lex.LexToken) -> bool:
        """Automatic semicolon insertion: a line break ends a member."""
        return (
            token.lineno > last.lineno
            and last.type not in _CONTINUATIONS
            and token.type not in ("DOT", "OTHER", "ARROW")
        )

    def _skip_expression(self) -> None:
        last: lex.LexToken | None = None
        while True:
            token = self._peek()
            if token is None or token.type in ("SEMI", "RBRACE"):
                return
            if last is not None and self._ends_statement(last, token):
                return
            if token.type in _OPENERS:
                self._skip_balanced()
                last = self._tokens[self._pos - 1]
            else:
                last = self._advance()

    # --- Decorators ---

    def _decorator(self) -> Decorator:
        self._expect("AT", "'@'")
        name = self._expect("IDENTIFIER", "decorator name").value
        while self._is("DOT"):
            self._advance()
            name = self._expect("IDENTIFIER", "decorator name").value

        arguments: list[Any] = []
        if self._is("LPAREN"):
            self._advance()
            while not self._is("RPAREN"):
                arguments.append(self._value())
                if self._is("COMMA"):
                    self._advance()
                elif not self._is("RPAREN"):
                    raise self._error(f"malformed arguments of @{name}")
            self._advance()
        return Decorator(name, tuple(arguments))

    def _value(self) -> Any:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of decorator arguments")
        if token.type == "STRING":
            self._advance()
            return _unescape(token.value[1:-1])
        if token.type == "NUMBER":
            self._advance()
            return _number(token.value)
        if token.type == "OTHER" and token.value == "-" and self._is("NUMBER", offset=1):
            self._advance()
            return -_number(self._advance().value)
        if token.type in ("TRUE", "FALSE"):
            self._advance()
            return token.type == "TRUE"
        if token.type in ("NULL", "UNDEFINED"):
            self._advance()
            return None
        if token.type == "LBRACE":
            return self._object()
        if token.type == "LBRACKET":
            return self._array()
        if token.type == "LPAREN":
            return self._arrow_function()
        if token.type == "IDENTIFIER":
            if self._is("ARROW", offset=1):
                self._advance()
                self._advance()
                return self._reference()
            return self._reference()
        raise self._error("malformed decorator argument", token)

    def _reference(self) -> EntityReference:
        name = self._expect("IDENTIFIER", "identifier").value
        while self._is("DOT"):
            self._advance()
            name = f"{name}.{self._expect('IDENTIFIER', 'identifier').value}"
        return EntityReference(name)

    def _arrow_function(self) -> EntityReference:
        self._expect("LPAREN", "'('")
        while not self._is("RPAREN"):
            if not (self._is("IDENTIFIER") or self._is("COMMA")):
                raise self._error("malformed arrow function parameters")
            self._advance()
        self._advance()
        self._expect("ARROW", "'=>'")
        return self._reference()

    def _object(self) -> dict[str, Any]:
        self._expect("LBRACE", "'{'")
        result: dict[str, Any] = {}
        while not self._is("RBRACE"):
            key_token = self._peek()
            if key_token is None or key_token.type not in _MEMBER_NAME_TYPES:
                raise self._error("malformed object key", key_token)
            self._advance()
            key = key_token.value
            if key_token.type == "STRING":
                key = _unescape(key[1:-1])
            self._expect("COLON", f"':' after '{key}'")
            result[key] = self._value()
            if self._is("COMMA"):
                self._advance()
            elif not self._is("RBRACE"):
                raise self._error("expected ',' or '}' in object literal")
        self._advance()
        return result

    def _array(self) -> list[Any]:
        self._expect("LBRACKET", "'['")
        result: list[Any] = []
        while not self._is("RBRACKET"):
            result.append(self._value())
            if self._is("COMMA"):
                self._advance()
            elif not self._is("RBRACKET"):
                raise self._error("expected ',' or ']' in array literal")
        self._advance()
        return result

    # --- Fields ---

    def _field(
        self, name_token: lex.LexToken, type_text: str, decorators: list[Decorator]
    ) -> EntityFieldMetadata:
        property_name = (
            _unescape(name_token.value[1:-1]) if name_token.type == "STRING" else name_token.value
        )
        is_identifier = False
        generation: str | None = None
        documentation: str | None = None
        column: ColumnDetails | None = None
        association: AssociationDetails | None = None
        collection: CollectionDetails | None = None

        for decorator in decorators:
            if decorator.name == "Id":
                is_identifier = True
            elif decorator.name == "Generated":
                generation = self._text_argument(decorator) if decorator.arguments else None
            elif decorator.name == "Documentation" and decorator.arguments:
                documentation = self._text_argument(decorator)
            elif decorator.name == "Column":
                column = self._column(decorator)
            elif decorator.name == "ManyToOne":
                association = self._association(property_name, decorator)
            elif decorator.name == "OneToMany":
                collection = self._collection(decorator)

        if association is not None and collection is not None:
            raise ParseError(
                self._location,
                f"field '{property_name}' cannot be both @ManyToOne and @OneToMany",
                name_token.lineno,
            )
        if is_identifier and (association is not None or collection is not None):
            raise ParseError(
                self._location,
                f"identifier field '{property_name}' cannot be a relation",
                name_token.lineno,
            )
        if association is None and collection is None and column is None:
            column = ColumnDetails()

        return EntityFieldMetadata(
            property_name=property_name,
            source_type=type_text,
            is_identifier=is_identifier,
            generation_strategy=generation,
            documentation=documentation,
            column=column if association is None and collection is None else None,
            association=association,
            collection=collection,
        )

    def _column(self, decorator: Decorator) -> ColumnDetails:
        options = self._options(decorator, 0)
        return ColumnDetails(
            column_name=self._string_option(options, "name", decorator),
            database_type=self._string_option(options, "type", decorator),
            length=self._int_option(options, "length", decorator),
            nullable=self._bool_option(options, "nullable", decorator, default=True),
            default_value=self._string_option(options, "defaultValue", decorator),
            precision=self._int_option(options, "precision", decorator),
            scale=self._int_option(options, "scale", decorator),
        )

    def _association(self, property_name: str, decorator: Decorator) -> AssociationDetails:
        target, options = self._relation(decorator)
        if "notNull" in options:
            not_null = self._bool_option(options, "notNull", decorator, default=False)
        else:
            not_null = not self._bool_option(options, "nullable", decorator, default=True)

        lazy = options.get("lazy")
        if isinstance(lazy, bool):
            lazy = "proxy" if lazy else None
        elif lazy is not None:
            lazy = self._string_option(options, "lazy", decorator)

        return AssociationDetails(
            entity_name=target,
            join_column=self._string_option(options, "joinColumn", decorator)
            or property_name.upper(),
            cascade=self._string_option(options, "cascade", decorator),
            not_null=not_null,
            lazy=lazy,
        )

    def _collection(self, decorator: Decorator) -> CollectionDetails:
        target, options = self._relation(decorator)
        join_column = self._string_option(options, "joinColumn", decorator)
        if not join_column:
            raise self._decorator_error(decorator, "'joinColumn' is required")
        return CollectionDetails(
            entity_name=target,
            join_column=join_column,
            table_name=self._string_option(options, "table", decorator),
            inverse=self._bool_option(options, "inverse", decorator, default=False),
            lazy=self._bool_option(options, "lazy", decorator, default=False),
            fetch=self._string_option(options, "fetch", decorator),
            cascade=self._string_option(options, "cascade", decorator) or "none",
            join_column_not_null=self._bool_option(
                options, "joinColumnNotNull", decorator, default=True
            ),
        )

    def _relation(self, decorator: Decorator) -> tuple[str, dict[str, Any]]:
        """Split relation decorator arguments into target entity and options."""
        reference = decorator.arguments[0] if decorator.arguments else None
        if not isinstance(reference, (EntityReference, str)):
            reference = None
        options = self._options(decorator, 1 if reference is not None else 0)
        target = self._string_option(options, "entityName", decorator)
        if target is None and isinstance(reference, str):
            target = reference
        elif target is None and reference is not None:
            target = reference.name.rsplit(".", 1)[-1]
        if not target:
            raise self._decorator_error(decorator, "target entity is missing")
        return target, options

    # --- Decorator argument checks ---

    def _decorator_error(self, decorator: Decorator, detail: str) -> ParseError:
        token = self._tokens[self._pos - 1] if self._pos else None
        return ParseError(
            self._location,
            f"malformed arguments of @{decorator.name}: {detail}",
            token.lineno if token else None,
        )

    def _options(self, decorator: Decorator, index: int) -> dict[str, Any]:
        if len(decorator.arguments) <= index or decorator.arguments[index] is None:
            return {}
        options = decorator.arguments[index]
        if not isinstance(options, dict):
            raise self._decorator_error(decorator, "expected an options object")
        return options

    def _text_argument(self, decorator: Decorator) -> str:
        value = decorator.arguments[0]
        if not isinstance(value, str):
            raise self._decorator_error(decorator, "expected a string argument")
        return value

    def _string_option(
        self, options: dict[str, Any], key: str, decorator: Decorator
    ) -> str | None:
        value = options.get(key)
        if value is None:
            return None
        if isinstance(value, EntityReference):
            return value.name.rsplit(".", 1)[-1]
        if isinstance(value, bool):
            return "true" if value else "false"
        if not isinstance(value, (str, int, float)):
            raise self._decorator_error(decorator, f"'{key}' must be a string")
        return str(value)

    def _int_option(
        self, options: dict[str, Any], key: str, decorator: Decorator
    ) -> int | None:
        value = options.get(key)
        if value is None:
            return None
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise self._decorator_error(decorator, f"'{key}' must be an integer")
        return value

    def _bool_option(
        self, options: dict[str, Any], key: str, decorator: Decorator, *, default: bool
    ) -> bool:
        value = options.get(key)
        if value is None:
            return default
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        if not isinstance(value, bool):
            raise self._decorator_error(decorator, f"'{key}' must be a boolean")
        return value


def _number(text: str) -> int | float:
    if any(c in text for c in ".eE"):
        return float(text)
    return int(text)


def _unescape(text: str) -> str:
    result: list[str] = []
    chars = iter(text)
    for char in chars:
        if char == "\\":
            escaped = next(chars, "")
            result.append({"n": "\n", "t": "\t", "r": "\r"}.get(escaped, escaped))
        else:
            result.append(char)
    return "".join(result)
