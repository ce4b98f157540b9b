"""Parameter binder - binds loosely typed values onto prepared statements.

Indexed mode takes a list with one element per ``?`` placeholder. An
element is either a primitive or an object ``{"value": ..., "type": ...}``
whose optional ``type`` overrides the type reported by the statement.

Named mode takes a list of ``{"name": ..., "type": ..., "value": ...}``
objects.

A ``None`` value always binds SQL NULL of the resolved type. Every failure
is raised as BindingError with the value, type and parameter attached and
the underlying error chained.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from schema_marshal.adapters.protocol import IndexedStatement, NamedStatement
from schema_marshal.binding.setters import SetterRegistry, infer_type_name
from schema_marshal.core.enums import SqlType
from schema_marshal.core.exceptions import BindingError, ParameterCountError
from schema_marshal.core.types import sql_type_for_name, type_name_for_sql_type

logger = logging.getLogger(__name__)


class NamedParam(BaseModel):
    """One element of a named-parameter list."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    value: Any = None


class ParameterBinder:
    """Binds values through a SetterRegistry.

    Args:
        setters: Setter table; the built-in setters when omitted.
    """

    def __init__(self, setters: SetterRegistry | None = None) -> None:
        self._setters = setters or SetterRegistry()

    def bind_indexed(self, values: Sequence[Any], statement: IndexedStatement) -> None:
        """Bind one value per positional placeholder.

        Raises:
            ParameterCountError: If the number of values differs from the
                statement's placeholder count.
            BindingError: If a value cannot be bound.
        """
        if not isinstance(values, (list, tuple)):
            raise BindingError(
                f"Parameters must be provided as an array, got {type(values).__name__}",
                value=values,
                statement=statement,
            )
        expected = statement.parameter_count()
        if len(values) != expected:
            raise ParameterCountError(len(values), expected, statement)

        for index, element in enumerate(values, start=1):
            self._bind_position(index, element, statement)

    def bind_named(
        self, values: Sequence[Mapping[str, Any] | NamedParam], statement: NamedStatement
    ) -> None:
        """Bind ``{name, type, value}`` elements by parameter name.

        Raises:
            BindingError: If an element is malformed or its value cannot be bound.
        """
        if not isinstance(values, (list, tuple)):
            raise BindingError(
                f"Named parameters must be provided as an array, got {type(values).__name__}",
                value=values,
                statement=statement,
            )

        for element in values:
            param = self._named_param(element, statement)
            if param.value is None:
                statement.set_null(param.name, sql_type_for_name(param.type))
                continue
            self._set(param.value, param.type, param.name, statement)

    def bind_many_indexed(
        self, rows: Sequence[Sequence[Any]], statement: IndexedStatement
    ) -> int:
        """Bind each row and queue it with ``add_batch``; return the row count.

        Executing the batch is left to the caller.
        """
        if not isinstance(rows, (list, tuple)):
            raise BindingError(
                f"Batch rows must be provided as an array, got {type(rows).__name__}",
                value=rows,
                statement=statement,
            )
        for row in rows:
            self.bind_indexed(row, statement)
            statement.add_batch()
        return len(rows)

    def _bind_position(self, index: int, element: Any, statement: IndexedStatement) -> None:
        value = element
        sql_type: int | None = None
        if isinstance(element, Mapping):
            value = element.get("value")
            if element.get("type") is not None:
                sql_type = sql_type_for_name(str(element["type"]))

        if sql_type is None:
            sql_type = statement.parameter_type(index)
        if sql_type == SqlType.OTHER and value is not None:
            inferred = infer_type_name(value)
            if inferred is not None:
                logger.debug("Inferred %s for parameter %d", inferred, index)
                sql_type = sql_type_for_name(inferred)

        if sql_type == SqlType.NULL or value is None:
            statement.set_null(index, sql_type)
            return
        self._set(value, type_name_for_sql_type(sql_type), index, statement)

    def _set(self, value: Any, type_name: str, target: int | str, statement: Any) -> None:
        where = f"index [{target}]" if isinstance(target, int) else f"name [{target}]"
        try:
            self._setters.find(type_name).set_param(value, target, statement)
        except Exception as e:
            raise BindingError(
                f"Failed to set parameter with {where} and sql type [{type_name}] "
                f"for element [{value!r}]: {e}. Statement: {statement!r}",
                value=value,
                type_name=type_name,
                target=target,
                statement=statement,
            ) from e

    @staticmethod
    def _named_param(element: Any, statement: NamedStatement) -> NamedParam:
        if isinstance(element, NamedParam):
            return element
        try:
            return NamedParam.model_validate(element)
        except ValidationError as e:
            missing = [".".join(map(str, err["loc"])) for err in e.errors()]
            raise BindingError(
                f"Invalid named parameter {element!r}: check {missing}",
                value=element,
                statement=statement,
            ) from e


_default_binder: ParameterBinder | None = None


def _binder() -> ParameterBinder:
    global _default_binder
    if _default_binder is None:
        _default_binder = ParameterBinder()
    return _default_binder


def bind_indexed(values: Sequence[Any], statement: IndexedStatement) -> None:
    """``ParameterBinder().bind_indexed`` with the built-in setters."""
    _binder().bind_indexed(values, statement)


def bind_named(values: Sequence[Any], statement: NamedStatement) -> None:
    """``ParameterBinder().bind_named`` with the built-in setters."""
    _binder().bind_named(values, statement)


def bind_many_indexed(rows: Sequence[Sequence[Any]], statement: IndexedStatement) -> int:
    """``ParameterBinder().bind_many_indexed`` with the built-in setters."""
    return _binder().bind_many_indexed(rows, statement)
