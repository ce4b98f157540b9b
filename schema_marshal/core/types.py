"""Database type names and their SQL type codes.

Type names arrive in many spellings (``varchar(255)``, ``Character Varying``,
``INT``). Everything is folded to a canonical upper-case name before lookup.
"""

from __future__ import annotations

import re
from functools import lru_cache

from schema_marshal.core.enums import SqlType

# Size/precision suffix such as (255) or (10, 2)
_SIZE_SUFFIX_PATTERN = re.compile(r"\s*\([^)]*\)\s*$")

TYPE_NAMES: dict[str, SqlType] = {
    "BIT": SqlType.BIT,
    "BOOLEAN": SqlType.BOOLEAN,
    "BOOL": SqlType.BOOLEAN,
    "TINYINT": SqlType.TINYINT,
    "SMALLINT": SqlType.SMALLINT,
    "INTEGER": SqlType.INTEGER,
    "INT": SqlType.INTEGER,
    "BIGINT": SqlType.BIGINT,
    "REAL": SqlType.REAL,
    "FLOAT": SqlType.FLOAT,
    "DOUBLE": SqlType.DOUBLE,
    "DOUBLE PRECISION": SqlType.DOUBLE,
    "NUMERIC": SqlType.NUMERIC,
    "DECIMAL": SqlType.DECIMAL,
    "CHAR": SqlType.CHAR,
    "CHARACTER": SqlType.CHAR,
    "NCHAR": SqlType.NCHAR,
    "VARCHAR": SqlType.VARCHAR,
    "CHARACTER VARYING": SqlType.VARCHAR,
    "NVARCHAR": SqlType.NVARCHAR,
    "TEXT": SqlType.LONGVARCHAR,
    "LONGVARCHAR": SqlType.LONGVARCHAR,
    "DATE": SqlType.DATE,
    "TIME": SqlType.TIME,
    "TIMESTAMP": SqlType.TIMESTAMP,
    "DATETIME": SqlType.TIMESTAMP,
    "BINARY": SqlType.BINARY,
    "VARBINARY": SqlType.VARBINARY,
    "LONGVARBINARY": SqlType.LONGVARBINARY,
    "BLOB": SqlType.BLOB,
    "CLOB": SqlType.CLOB,
    "NCLOB": SqlType.NCLOB,
    "ARRAY": SqlType.ARRAY,
}

# Names a value can actually be bound as; NULL and OTHER are markers only.
BINDABLE_TYPE_NAMES: frozenset[str] = frozenset(TYPE_NAMES)


@lru_cache(maxsize=256)
def canonical_type_name(type_name: str) -> str:
    """Fold a type name to its canonical spelling.

    ``" varchar(255) "`` -> ``"VARCHAR"``, ``"double  precision"`` ->
    ``"DOUBLE PRECISION"``.
    """
    name = _SIZE_SUFFIX_PATTERN.sub("", type_name.strip())
    return " ".join(name.upper().split())


def sql_type_for_name(type_name: str | None) -> SqlType:
    """Return the SQL type code for a type name, ``OTHER`` when unknown."""
    if not type_name:
        return SqlType.OTHER
    canonical = canonical_type_name(type_name)
    if canonical == "NULL":
        return SqlType.NULL
    return TYPE_NAMES.get(canonical, SqlType.OTHER)


def type_name_for_sql_type(sql_type: int) -> str:
    """Return the canonical type name for a SQL type code."""
    try:
        return SqlType(sql_type).name
    except ValueError:
        return SqlType.OTHER.name
