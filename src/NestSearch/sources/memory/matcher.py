"""In-process evaluation of filter clauses over row mappings."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any, Mapping

from NestSearch.core.query import OP_EQ, OP_ILIKE, AllOf, AnyOf, Clause, Condition


def matches(clause: Clause | None, row: Mapping[str, Any]) -> bool:
    """Return True when ``row`` satisfies ``clause`` (None matches everything)."""
    if clause is None:
        return True
    if isinstance(clause, AnyOf):
        return any(matches(child, row) for child in clause.clauses)
    if isinstance(clause, AllOf):
        return all(matches(child, row) for child in clause.clauses)
    if isinstance(clause, Condition):
        return _match_condition(clause, row)
    raise TypeError(f"Unsupported clause: {clause!r}")


@lru_cache(maxsize=256)
def like_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a LIKE pattern (``%``, ``_``, ``\\`` escapes) into a case-insensitive regex."""
    parts: list[str] = []
    idx = 0
    while idx < len(pattern):
        char = pattern[idx]
        if char == "\\" and idx + 1 < len(pattern):
            parts.append(re.escape(pattern[idx + 1]))
            idx += 2
            continue
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
        idx += 1
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def _match_condition(condition: Condition, row: Mapping[str, Any]) -> bool:
    value = row.get(condition.field)
    if condition.op == OP_EQ:
        return _normalize_eq(value) == _normalize_eq(condition.value)
    if condition.op == OP_ILIKE:
        if value is None:
            return False
        return like_to_regex(str(condition.value)).fullmatch(str(value)) is not None
    raise ValueError(f"Unsupported operator: {condition.op}")


def _normalize_eq(value: Any) -> Any:
    # Rows loaded from JSON or SQLite may carry booleans as 0/1.
    if isinstance(value, bool):
        return int(value)
    return value
