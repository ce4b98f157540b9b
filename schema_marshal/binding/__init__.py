"""Binding layer - values onto prepared statement parameters."""

from __future__ import annotations

from schema_marshal.binding.binder import (
    NamedParam,
    ParameterBinder,
    bind_indexed,
    bind_many_indexed,
    bind_named,
)
from schema_marshal.binding.setters import ParamSetter, SetterRegistry, default_setters

__all__ = [
    "ParameterBinder",
    "NamedParam",
    "bind_indexed",
    "bind_named",
    "bind_many_indexed",
    "ParamSetter",
    "SetterRegistry",
    "default_setters",
]
