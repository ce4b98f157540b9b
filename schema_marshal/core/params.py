"""SQL placeholder scanning.

Counts positional ``?`` placeholders and collects ``:name`` parameters,
ignoring anything inside string literals and PostgreSQL ``::typecast``
syntax.
"""

from __future__ import annotations

import re
from functools import lru_cache

# Matches :name but not ::typecast and not inside words
# Negative lookbehind for : (handles ::), \w (handles mid-word colons)
_PARAM_PATTERN = re.compile(r"(?<![:\w]):([a-zA-Z_]\w*)")

# Matches single-quoted string literals (with escaped quotes handled)
_STRING_LITERAL_PATTERN = re.compile(r"'(?:[^'\\]|\\.)*'")


def _code_segments(sql: str) -> list[str]:
    """Split SQL into the segments that lie outside string literals."""
    segments: list[str] = []
    last_end = 0

    for match in _STRING_LITERAL_PATTERN.finditer(sql):
        start, end = match.span()
        if start > last_end:
            segments.append(sql[last_end:start])
        last_end = end

    if last_end < len(sql):
        segments.append(sql[last_end:])

    return segments


@lru_cache(maxsize=256)
def count_positional_params(sql: str) -> int:
    """Number of ``?`` placeholders outside string literals."""
    return sum(segment.count("?") for segment in _code_segments(sql))


@lru_cache(maxsize=256)
def named_params(sql: str) -> tuple[str, ...]:
    """Distinct ``:name`` parameters in order of first appearance."""
    names: dict[str, None] = {}
    for segment in _code_segments(sql):
        for match in _PARAM_PATTERN.finditer(segment):
            names.setdefault(match.group(1), None)
    return tuple(names)
