"""Prepared-statement protocols.

The parameter binder talks to statements only through these interfaces.
Positional statements address parameters by 1-based index, named
statements by parameter name.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import IO, Any, Protocol, runtime_checkable


@runtime_checkable
class IndexedStatement(Protocol):
    """A statement with positional ``?`` placeholders."""

    def parameter_count(self) -> int:
        """Number of placeholders declared by the statement."""
        ...

    def parameter_type(self, index: int) -> int:
        """SQL type code of the parameter, ``SqlType.OTHER`` when unknown."""
        ...

    def set_null(self, index: int, sql_type: int) -> None:
        """Bind SQL NULL."""
        ...

    def set_object(self, index: int, value: Any, sql_type: int) -> None:
        """Bind a converted value."""
        ...

    def set_binary_stream(self, index: int, stream: IO[bytes], length: int) -> None:
        """Bind ``length`` bytes read from ``stream``."""
        ...

    def set_character_stream(self, index: int, stream: IO[str], length: int) -> None:
        """Bind ``length`` characters read from ``stream``."""
        ...

    def set_array(self, index: int, values: Sequence[Any], element_type: str) -> None:
        """Bind an array of ``element_type`` elements."""
        ...

    def add_batch(self) -> None:
        """Queue the current bindings as one batch row."""
        ...


@runtime_checkable
class NamedStatement(Protocol):
    """A statement with ``:name`` placeholders."""

    def set_null(self, name: str, sql_type: int) -> None:
        """Bind SQL NULL."""
        ...

    def set_object(self, name: str, value: Any, sql_type: int) -> None:
        """Bind a converted value."""
        ...

    def set_binary_stream(self, name: str, stream: IO[bytes], length: int) -> None:
        """Bind ``length`` bytes read from ``stream``."""
        ...

    def set_character_stream(self, name: str, stream: IO[str], length: int) -> None:
        """Bind ``length`` characters read from ``stream``."""
        ...

    def set_array(self, name: str, values: Sequence[Any], element_type: str) -> None:
        """Bind an array of ``element_type`` elements."""
        ...

    def add_batch(self) -> None:
        """Queue the current bindings as one batch row."""
        ...

