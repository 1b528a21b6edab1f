"""PostgREST query compiler.

Translates ``QueryDescriptor`` trees into PostgREST URL parameters, e.g.::

    select=id,title&or=(title.ilike.%os%,subject.ilike.%os%)&order=uploaded_at.desc.nullslast&limit=12
"""

from __future__ import annotations

import re
from typing import Any

from NestSearch.core.query import AllOf, AnyOf, Clause, Condition, QueryDescriptor

# Characters with meaning inside PostgREST logical trees.
_RESERVED_RE = re.compile(r'[,.:()"\\\s]')


def compile_postgrest_params(descriptor: QueryDescriptor) -> list[tuple[str, str]]:
    """Compile a descriptor into ordered PostgREST query parameters.

    Args:
        descriptor: Query to compile.

    Returns:
        ``(key, value)`` pairs suitable for ``requests`` ``params``.
    """
    params: list[tuple[str, str]] = [("select", ",".join(descriptor.columns) or "*")]
    if descriptor.where is not None:
        params.append(_compile_top_level(descriptor.where))
    if descriptor.order_by:
        direction = "desc" if descriptor.descending else "asc"
        params.append(("order", f"{descriptor.order_by}.{direction}.nullslast"))
    params.append(("limit", str(int(descriptor.limit))))
    return params


def _compile_top_level(clause: Clause) -> tuple[str, str]:
    if isinstance(clause, Condition):
        return clause.field, _operator_value(clause, quoted=False)
    if isinstance(clause, AnyOf):
        return "or", "(" + ",".join(_compile_nested(child) for child in clause.clauses) + ")"
    if isinstance(clause, AllOf):
        return "and", "(" + ",".join(_compile_nested(child) for child in clause.clauses) + ")"
    raise TypeError(f"Unsupported clause: {clause!r}")


def _compile_nested(clause: Clause) -> str:
    if isinstance(clause, Condition):
        return f"{clause.field}.{_operator_value(clause, quoted=True)}"
    if isinstance(clause, AnyOf):
        return "or(" + ",".join(_compile_nested(child) for child in clause.clauses) + ")"
    if isinstance(clause, AllOf):
        return "and(" + ",".join(_compile_nested(child) for child in clause.clauses) + ")"
    raise TypeError(f"Unsupported clause: {clause!r}")


def _operator_value(condition: Condition, *, quoted: bool) -> str:
    if condition.op == "eq" and condition.value is None:
        return "is.null"
    value = _format_value(condition.value)
    if quoted:
        value = quote_value(value)
    return f"{condition.op}.{value}"


def quote_value(value: str) -> str:
    """Double-quote a value used inside ``or=(...)``/``and=(...)`` when needed."""
    if not _RESERVED_RE.search(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
