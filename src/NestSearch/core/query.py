from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

OP_EQ = "eq"
OP_ILIKE = "ilike"
_OPERATORS = frozenset({OP_EQ, OP_ILIKE})


@dataclass(frozen=True, slots=True)
class Condition:
    """Single filter clause on one column.

    Attributes:
        field: Column name.
        op: ``eq`` for equality, ``ilike`` for case-insensitive LIKE.
        value: Compared value. For ``ilike`` this is a LIKE pattern using
            ``%`` wildcards and ``\\`` as the escape character.
    """

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {self.op}")
        if not self.field:
            raise ValueError("Condition field must not be empty")


@dataclass(frozen=True, slots=True)
class AnyOf:
    """Logical OR of clauses."""

    clauses: tuple[Clause, ...]


@dataclass(frozen=True, slots=True)
class AllOf:
    """Logical AND of clauses."""

    clauses: tuple[Clause, ...]


Clause = Union[Condition, AnyOf, AllOf]


def equals(field: str, value: Any) -> Condition:
    return Condition(field=field, op=OP_EQ, value=value)


def contains(field: str, pattern: str) -> Condition:
    return Condition(field=field, op=OP_ILIKE, value=pattern)


def any_of(*clauses: Clause) -> Clause:
    """Combine clauses with OR; a single clause is returned unchanged."""
    if not clauses:
        raise ValueError("any_of needs at least one clause")
    if len(clauses) == 1:
        return clauses[0]
    return AnyOf(clauses=tuple(clauses))


def all_of(*clauses: Clause) -> Clause:
    """Combine clauses with AND; a single clause is returned unchanged."""
    if not clauses:
        raise ValueError("all_of needs at least one clause")
    if len(clauses) == 1:
        return clauses[0]
    return AllOf(clauses=tuple(clauses))


@dataclass(frozen=True, slots=True)
class QueryDescriptor:
    """Read-only query against one table, independent of transport syntax.

    Attributes:
        table: Table (or view) name.
        columns: Columns to return. Empty means all columns.
        where: Filter tree, or None for no filter.
        order_by: Column used for ordering, or None.
        descending: Sort direction for ``order_by``.
        limit: Maximum number of rows.
    """

    table: str
    columns: tuple[str, ...]
    where: Clause | None
    order_by: str | None
    limit: int
    descending: bool = True


@dataclass(frozen=True, slots=True)
class SearchPlan:
    """Remote queries needed for one request."""

    exact: QueryDescriptor | None = None
    similar: QueryDescriptor | None = None

    @property
    def is_empty(self) -> bool:
        return self.exact is None and self.similar is None
