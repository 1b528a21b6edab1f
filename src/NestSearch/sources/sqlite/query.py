"""SQLite query compiler."""

from __future__ import annotations

import re
from typing import Any

from NestSearch.core.query import OP_EQ, OP_ILIKE, AllOf, AnyOf, Clause, Condition, QueryDescriptor

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def compile_sql(descriptor: QueryDescriptor) -> tuple[str, list[Any]]:
    """Compile a descriptor into a parameterised SELECT statement.

    Substring conditions compile to ``casefold(col) LIKE casefold(?) ESCAPE '\\'``
    so matching is case-insensitive beyond ASCII. ``casefold`` is registered
    on every connection opened by ``ensure_db``.

    Args:
        descriptor: Query to compile.

    Returns:
        SQL text and positional parameters.

    Raises:
        ValueError: If a table or column name is not a plain identifier.
    """
    columns = ", ".join(quote_identifier(column) for column in descriptor.columns) or "*"
    sql = f"SELECT {columns} FROM {quote_identifier(descriptor.table)}"
    params: list[Any] = []
    if descriptor.where is not None:
        sql += " WHERE " + _compile_clause(descriptor.where, params)
    if descriptor.order_by:
        direction = "DESC" if descriptor.descending else "ASC"
        sql += f" ORDER BY {quote_identifier(descriptor.order_by)} {direction}"
    sql += " LIMIT ?"
    params.append(int(descriptor.limit))
    return sql, params


def quote_identifier(name: str) -> str:
    if not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return f'"{name}"'


def _compile_clause(clause: Clause, params: list[Any]) -> str:
    if isinstance(clause, AnyOf):
        return "(" + " OR ".join(_compile_clause(child, params) for child in clause.clauses) + ")"
    if isinstance(clause, AllOf):
        return "(" + " AND ".join(_compile_clause(child, params) for child in clause.clauses) + ")"
    if isinstance(clause, Condition):
        column = quote_identifier(clause.field)
        if clause.op == OP_EQ:
            if clause.value is None:
                return f"{column} IS NULL"
            params.append(int(clause.value) if isinstance(clause.value, bool) else clause.value)
            return f"{column} = ?"
        if clause.op == OP_ILIKE:
            params.append(str(clause.value))
            return f"casefold({column}) LIKE casefold(?) ESCAPE '\\'"
    raise TypeError(f"Unsupported clause: {clause!r}")
