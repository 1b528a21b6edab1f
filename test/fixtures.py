"""Shared rows and stub sources for tests."""

from __future__ import annotations

import threading
from typing import Any, Mapping, Sequence

from NestSearch.core.profile import SearchProfile
from NestSearch.core.query import AllOf, AnyOf, Clause, Condition, QueryDescriptor
from NestSearch.sources.memory.source import MemorySource

RESOURCE_ROWS: list[dict[str, Any]] = [
    {"id": "r1", "title": "Operating Systems notes", "subject": "OS", "uploaded_at": "2024-03-01T10:00:00Z"},
    {"id": "r2", "title": "Data Structures", "subject": "DSA", "uploaded_at": "2024-05-01T10:00:00Z"},
    {"id": "r3", "title": "Algorithms handbook", "subject": "DSA", "uploaded_at": "2024-04-01T10:00:00Z"},
    {"id": "r4", "title": "Database systems", "subject": "DBMS", "uploaded_at": "2024-06-01T10:00:00Z"},
    {"id": "r5", "title": "Structures of data", "subject": "DSA", "uploaded_at": "2024-02-01T10:00:00Z"},
    {"id": "r6", "title": "100% pass guide", "subject": "Maths", "uploaded_at": "2024-01-01T10:00:00Z"},
    {"id": "r7", "title": "1000 pass questions", "subject": "Maths", "uploaded_at": "2024-01-02T10:00:00Z"},
    {"id": "r8", "title": "React hooks guide", "subject": "Web", "uploaded_at": "2024-07-01T10:00:00Z"},
    {"id": "r9", "title": "Node streams", "subject": "Web", "uploaded_at": "2024-07-02T10:00:00Z"},
]

RESOURCES = SearchProfile(
    name="resources",
    table="resources",
    fields=("title", "subject"),
    recency_field="uploaded_at",
    limit=12,
    min_length=1,
)


def memory_source() -> MemorySource:
    return MemorySource(tables={"resources": [dict(row) for row in RESOURCE_ROWS]})


def patterns(clause: Clause | None) -> list[str]:
    """Collect every LIKE pattern in a clause tree."""
    if clause is None:
        return []
    if isinstance(clause, Condition):
        return [str(clause.value)] if clause.op == "ilike" else []
    if isinstance(clause, (AnyOf, AllOf)):
        out: list[str] = []
        for child in clause.clauses:
            out.extend(patterns(child))
        return out
    return []


class RecordingSource:
    """Delegate to a memory source, recording every descriptor."""

    def __init__(self, inner: MemorySource | None = None) -> None:
        self.name = "recording"
        self.inner = inner or memory_source()
        self.descriptors: list[QueryDescriptor] = []
        self.fail = False
        self.fail_limit: int | None = None
        self.closed = False
        self._lock = threading.Lock()

    def fetch(self, descriptor: QueryDescriptor) -> Sequence[Mapping[str, Any]]:
        with self._lock:
            self.descriptors.append(descriptor)
        if self.fail:
            raise ConnectionError("network unreachable")
        if self.fail_limit is not None and descriptor.limit == self.fail_limit:
            raise ConnectionError("query rejected")
        return self.inner.fetch(descriptor)

    def close(self) -> None:
        self.closed = True


class GatedSource(RecordingSource):
    """Block queries mentioning ``gated_term`` until ``release`` is set."""

    def __init__(self, gated_term: str, *, fail_gated: bool = False) -> None:
        super().__init__()
        self.gated_term = gated_term
        self.fail_gated = fail_gated
        self.release = threading.Event()

    def fetch(self, descriptor: QueryDescriptor) -> Sequence[Mapping[str, Any]]:
        if any(self.gated_term in pattern for pattern in patterns(descriptor.where)):
            if not self.release.wait(timeout=5):
                raise TimeoutError("gate never released")
            if self.fail_gated:
                raise ConnectionError(f"{self.gated_term} query failed")
        return super().fetch(descriptor)
