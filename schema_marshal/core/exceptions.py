"""SchemaMarshal exception hierarchy.

All exceptions are SchemaMarshal-specific. Parser, driver and conversion
errors are wrapped and chained with ``raise ... from``.
"""

from __future__ import annotations

from typing import Any


class SchemaMarshalError(Exception):
    """Base exception for all SchemaMarshal errors."""


# --- Parsing ---


class ParseError(SchemaMarshalError):
    """Raised when an entity source cannot be turned into metadata."""

    def __init__(self, location: str, detail: str, line: int | None = None) -> None:
        self.location = location
        self.detail = detail
        self.line = line
        where = f"{location}:{line}" if line is not None else location
        super().__init__(f"Failed to parse entity source '{where}': {detail}")


# --- Registry ---


class RegistryError(SchemaMarshalError):
    """Base for entity registry errors."""


class EntityNotFoundError(RegistryError):
    """Raised when an entity name is not registered."""

    def __init__(self, entity_name: str) -> None:
        self.entity_name = entity_name
        super().__init__(f"Entity not found: '{entity_name}'")


# --- Mapping ---


class MappingError(SchemaMarshalError):
    """Base for mapping compilation errors."""


class MissingIdentifierError(MappingError):
    """Raised when an entity has no field marked as identifier."""

    def __init__(self, entity_name: str) -> None:
        self.entity_name = entity_name
        super().__init__(f"Entity must have an @Id field: '{entity_name}'")


class InvalidIdentifierError(MappingError):
    """Raised when an entity's identifier cannot be mapped to an id column."""

    def __init__(self, entity_name: str, detail: str) -> None:
        self.entity_name = entity_name
        self.detail = detail
        super().__init__(f"Invalid identifier for entity '{entity_name}': {detail}")


# --- Normalization ---


class NormalizationError(SchemaMarshalError):
    """Raised when a value contradicts the column type declared for its field."""

    def __init__(self, entity_name: str, field_name: str, hint: str, value: Any) -> None:
        self.entity_name = entity_name
        self.field_name = field_name
        self.hint = hint
        self.value = value
        super().__init__(
            f"Cannot normalize {entity_name}.{field_name} as '{hint}': {value!r}"
        )


# --- Binding ---


class BindingError(SchemaMarshalError):
    """Base for parameter binding errors.

    ``target`` is the 1-based index or the parameter name the failure
    relates to, ``statement`` the statement being bound.
    """

    def __init__(
        self,
        detail: str,
        *,
        value: Any = None,
        type_name: str | None = None,
        target: int | str | None = None,
        statement: Any = None,
    ) -> None:
        self.detail = detail
        self.value = value
        self.type_name = type_name
        self.target = target
        self.statement = statement
        super().__init__(detail)


class ParameterCountError(BindingError):
    """Raised when the number of values differs from the statement's placeholders."""

    def __init__(self, provided: int, expected: int, statement: Any = None) -> None:
        self.provided = provided
        self.expected = expected
        super().__init__(
            f"Provided invalid parameters count of [{provided}]. "
            f"Expected parameters count [{expected}]",
            statement=statement,
        )


class SetterNotFoundError(BindingError):
    """Raised when no parameter setter claims a database type."""

    def __init__(self, type_name: str) -> None:
        super().__init__(
            f"Missing parameter setter for type [{type_name}]", type_name=type_name
        )


class InvalidParameterValueError(BindingError):
    """Raised when a setter cannot convert a value to its database type."""

    def __init__(self, value: Any, type_name: str, reason: str) -> None:
        super().__init__(
            f"Cannot bind {value!r} as {type_name}: {reason}",
            value=value,
            type_name=type_name,
        )


class SetterRegistryError(SchemaMarshalError):
    """Raised when the parameter setters do not claim each type exactly once."""


# --- Adapter ---


class AdapterError(SchemaMarshalError):
    """Base for statement adapter errors."""


class StatementExecutionError(AdapterError):
    """Raised when the driver rejects a bound statement."""

    def __init__(self, sql: str, detail: str) -> None:
        self.sql = sql
        super().__init__(f"Statement failed: {detail}. Statement: {sql}")
