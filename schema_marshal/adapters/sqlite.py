"""SQLite statements over the stdlib sqlite3 driver.

sqlite3 has no prepared-statement handle or parameter metadata, so these
classes record bindings in Python and hand them to ``execute`` or
``executemany``. Parameter types can be declared up front; undeclared
positions report ``SqlType.OTHER`` and the binder infers them from values.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal
from typing import IO, Any

from schema_marshal.core.enums import SqlType
from schema_marshal.core.exceptions import BindingError, StatementExecutionError
from schema_marshal.core.params import count_positional_params, named_params
from schema_marshal.core.types import sql_type_for_name

_UNSET = object()


def _to_sql_type(declared: int | str) -> SqlType:
    if isinstance(declared, str):
        return sql_type_for_name(declared)
    return SqlType(declared)


def _to_sqlite(value: Any) -> Any:
    """Adapt a bound value to a type sqlite3 stores natively."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


class _SqliteStatement:
    """Binding storage shared by the indexed and named statements."""

    def __init__(self, connection: sqlite3.Connection, sql: str) -> None:
        self._connection = connection
        self.sql = sql
        self._batch: list[Any] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.sql!r})"

    def _store(self, target: Any, value: Any) -> None:
        raise NotImplementedError

    def set_null(self, target: Any, sql_type: int) -> None:
        self._store(target, None)

    def set_object(self, target: Any, value: Any, sql_type: int) -> None:
        self._store(target, _to_sqlite(value))

    def set_binary_stream(self, target: Any, stream: IO[bytes], length: int) -> None:
        self._store(target, stream.read(length))

    def set_character_stream(self, target: Any, stream: IO[str], length: int) -> None:
        self._store(target, stream.read(length))

    def set_array(self, target: Any, values: Sequence[Any], element_type: str) -> None:
        self._store(target, json.dumps(list(values)))

    def bound_values(self) -> Any:
        raise NotImplementedError

    def execute(self) -> sqlite3.Cursor:
        """Execute with the current bindings."""
        params = self.bound_values()
        try:
            return self._connection.execute(self.sql, params)
        except sqlite3.Error as e:
            raise StatementExecutionError(self.sql, str(e)) from e

    def execute_batch(self) -> int:
        """Execute every queued row; return the number of rows executed."""
        rows, self._batch = self._batch, []
        try:
            self._connection.executemany(self.sql, rows)
        except sqlite3.Error as e:
            raise StatementExecutionError(self.sql, str(e)) from e
        return len(rows)

    @property
    def batch_size(self) -> int:
        """Number of rows queued by ``add_batch``."""
        return len(self._batch)


class SqliteIndexedStatement(_SqliteStatement):
    """A ``?``-placeholder statement.

    Args:
        connection: Open sqlite3 connection.
        sql: SQL with positional placeholders.
        parameter_types: Optional type per placeholder, as SqlType codes or
            type names (``"VARCHAR"``, ``"DECIMAL(10,2)"``).
    """

    def __init__(
        self,
        connection: sqlite3.Connection,
        sql: str,
        parameter_types: Sequence[int | str] | None = None,
    ) -> None:
        super().__init__(connection, sql)
        self._count = count_positional_params(sql)
        declared = [_to_sql_type(t) for t in parameter_types or ()]
        if len(declared) > self._count:
            raise BindingError(
                f"Declared {len(declared)} parameter types for {self._count} placeholders",
                statement=self,
            )
        self._types = declared + [SqlType.OTHER] * (self._count - len(declared))
        self._values: list[Any] = [_UNSET] * self._count

    def parameter_count(self) -> int:
        return self._count

    def parameter_type(self, index: int) -> int:
        self._check_index(index)
        return self._types[index - 1]

    def _check_index(self, index: int) -> None:
        if not 1 <= index <= self._count:
            raise BindingError(
                f"Parameter index {index} out of range 1..{self._count}",
                target=index,
                statement=self,
            )

    def _store(self, target: int, value: Any) -> None:
        self._check_index(target)
        self._values[target - 1] = value

    def bound_values(self) -> tuple[Any, ...]:
        """The current bindings, in placeholder order.

        Raises:
            BindingError: If a placeholder has not been bound.
        """
        unbound = [i for i, v in enumerate(self._values, start=1) if v is _UNSET]
        if unbound:
            raise BindingError(f"Parameters {unbound} are not bound", statement=self)
        return tuple(self._values)

    def add_batch(self) -> None:
        self._batch.append(self.bound_values())
        self._values = [_UNSET] * self._count


class SqliteNamedStatement(_SqliteStatement):
    """A ``:name``-placeholder statement."""

    def __init__(self, connection: sqlite3.Connection, sql: str) -> None:
        super().__init__(connection, sql)
        self.parameter_names = named_params(sql)
        self._values: dict[str, Any] = {}

    def _store(self, target: str, value: Any) -> None:
        if target not in self.parameter_names:
            raise BindingError(
                f"Statement has no parameter named '{target}'",
                target=target,
                statement=self,
            )
        self._values[target] = value

    def bound_values(self) -> Mapping[str, Any]:
        """The current bindings by name.

        Raises:
            BindingError: If a parameter has not been bound.
        """
        unbound = [name for name in self.parameter_names if name not in self._values]
        if unbound:
            raise BindingError(f"Parameters {unbound} are not bound", statement=self)
        return dict(self._values)

    def add_batch(self) -> None:
        self._batch.append(self.bound_values())
        self._values = {}
