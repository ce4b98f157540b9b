"""SQL type codes and field kinds."""

from __future__ import annotations

from enum import Enum, IntEnum


class SqlType(IntEnum):
    """Portable SQL type codes, numerically compatible with java.sql.Types."""

    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    NCHAR = -15
    NVARCHAR = -9
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    BINARY = -2
    VARBINARY = -3
    LONGVARBINARY = -4
    NULL = 0
    OTHER = 1111
    ARRAY = 2003
    BLOB = 2004
    CLOB = 2005
    NCLOB = 2011
    BOOLEAN = 16


class FieldKind(Enum):
    """What an entity field maps to."""

    COLUMN = "column"
    ASSOCIATION = "association"
    COLLECTION = "collection"
