from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Iterator, Mapping


@dataclass(frozen=True, slots=True)
class SearchRecord:
    """A row returned by a data source.

    The engine only reads records. Everything besides the identifier and the
    recency timestamp stays in ``data`` exactly as the source returned it.

    Attributes:
        id: Unique identifier within the searched table.
        data: Read-only copy of the full row.
        recency: Timestamp used for descending-recency ordering, if known.
    """

    id: str
    data: Mapping[str, Any] = field(default_factory=dict)
    recency: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def text(self, field_name: str) -> str:
        """Return a searched field as text, or an empty string when missing."""
        value = self.data.get(field_name)
        if value is None:
            return ""
        return str(value)


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """Settled user input plus the limits it is searched with.

    Attributes:
        raw: Raw input string as typed.
        limit: Maximum number of merged results.
        min_length: Trimmed inputs shorter than this never reach the source.
    """

    raw: str
    limit: int = 12
    min_length: int = 1

    def __post_init__(self) -> None:
        if self.limit <= 0:
            raise ValueError("limit must be positive")
        if self.min_length < 0:
            raise ValueError("min_length must not be negative")

    @property
    def text(self) -> str:
        return (self.raw or "").strip()

    @property
    def is_searchable(self) -> bool:
        return len(self.text) >= max(self.min_length, 1)


@dataclass(frozen=True, slots=True)
class MatchSet:
    """Exact and similar matches for one request.

    ``similar`` never contains a record whose id is also in ``exact``.
    Use ``NestSearch.services.search.dedupe_matches`` to build one from raw
    source results.
    """

    exact: tuple[SearchRecord, ...] = ()
    similar: tuple[SearchRecord, ...] = ()

    def __post_init__(self) -> None:
        exact_ids = {record.id for record in self.exact}
        overlap = [record.id for record in self.similar if record.id in exact_ids]
        if overlap:
            raise ValueError(f"similar matches overlap exact matches: {overlap}")


@dataclass(frozen=True, slots=True)
class MergedResult:
    """Exact matches followed by similar matches, truncated to ``limit``."""

    records: tuple[SearchRecord, ...] = ()
    limit: int = 12
    exact_count: int = 0

    @classmethod
    def empty(cls, limit: int = 12) -> MergedResult:
        return cls(records=(), limit=limit, exact_count=0)

    def ids(self) -> list[str]:
        return [record.id for record in self.records]

    @property
    def exact(self) -> tuple[SearchRecord, ...]:
        return self.records[: self.exact_count]

    @property
    def similar(self) -> tuple[SearchRecord, ...]:
        return self.records[self.exact_count :]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[SearchRecord]:
        return iter(self.records)
