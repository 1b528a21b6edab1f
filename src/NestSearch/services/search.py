"""Exact/similar text search with deduplication and merge."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence

from NestSearch.core.errors import RemoteFailure
from NestSearch.core.models import MatchSet, MergedResult, SearchRecord, SearchRequest
from NestSearch.core.profile import SearchProfile
from NestSearch.core.query import QueryDescriptor
from NestSearch.services.builder import build_plan
from NestSearch.sources.parser import parse_rows
from NestSearch.utils.log import log


class RecordSource(Protocol):
    """Protocol for a tabular data source answering filter queries."""

    name: str

    def fetch(self, descriptor: QueryDescriptor) -> Sequence[Mapping[str, Any]]:
        """Run one read-only query and return raw rows in source order."""
        raise NotImplementedError

    def close(self) -> None:
        """Close resources held by source."""
        raise NotImplementedError


@dataclass(slots=True)
class TextSearchService:
    """Runs the exact pass and the token pass against one source and merges them."""

    source: RecordSource

    def search(self, request: SearchRequest, profile: SearchProfile) -> MergedResult:
        """Search ``profile`` synchronously and return the merged list.

        Args:
            request: Settled request.
            profile: Table and fields to search.

        Returns:
            Merged result; empty for sub-threshold input.

        Raises:
            RemoteFailure: If either query fails.
        """
        return merge_matches(self.find_matches(request, profile), request.limit)

    def find_matches(self, request: SearchRequest, profile: SearchProfile) -> MatchSet:
        """Run exact then similar queries one after the other."""
        plan = build_plan(request, profile)
        if plan.is_empty:
            return MatchSet()

        exact_rows = self._fetch(plan.exact) if plan.exact else []
        similar_rows = self._fetch(plan.similar) if plan.similar else []
        return self._to_matches(exact_rows, similar_rows, request, profile)

    async def afind_matches(self, request: SearchRequest, profile: SearchProfile) -> MatchSet:
        """Run exact and similar queries concurrently in worker threads.

        A failure in either query fails the whole request; the exact rows of
        a request whose token query failed are never returned on their own.
        """
        plan = build_plan(request, profile)
        if plan.is_empty:
            return MatchSet()

        tasks = [asyncio.to_thread(self._fetch, descriptor) for descriptor in (plan.exact, plan.similar) if descriptor]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                if isinstance(result, (RemoteFailure, asyncio.CancelledError)):
                    raise result
                raise RemoteFailure(str(result), source=self._source_name, cause=result) from result

        exact_rows = results[0] if plan.exact else []
        similar_rows = results[-1] if plan.similar else []
        return self._to_matches(exact_rows, similar_rows, request, profile)

    def close(self) -> None:
        """Close the source, isolating close failures."""
        close_func = getattr(self.source, "close", None)
        if not callable(close_func):
            return
        try:
            close_func()
        except Exception as error:  # noqa: BLE001 - close failure must be isolated
            log.warning("Search source close failed: source=%s error=%s", self._source_name, error)

    @property
    def _source_name(self) -> str:
        return getattr(self.source, "name", "unknown")

    def _fetch(self, descriptor: QueryDescriptor) -> Sequence[Mapping[str, Any]]:
        try:
            rows = self.source.fetch(descriptor)
        except RemoteFailure:
            raise
        except Exception as error:  # noqa: BLE001 - every source error surfaces as RemoteFailure
            raise RemoteFailure(str(error), source=self._source_name, cause=error) from error
        log.debug(
            "Source query completed: source=%s table=%s limit=%d count=%d",
            self._source_name,
            descriptor.table,
            descriptor.limit,
            len(rows),
        )
        return rows

    def _to_matches(
        self,
        exact_rows: Sequence[Mapping[str, Any]],
        similar_rows: Sequence[Mapping[str, Any]],
        request: SearchRequest,
        profile: SearchProfile,
    ) -> MatchSet:
        exact = parse_rows(exact_rows, id_field=profile.id_field, recency_field=profile.recency_field)
        similar = parse_rows(similar_rows, id_field=profile.id_field, recency_field=profile.recency_field)
        matches = dedupe_matches(exact, similar)
        log.debug(
            "Matches for profile=%s text=%r: exact=%d similar=%d (dropped %d duplicates)",
            profile.name,
            request.text,
            len(matches.exact),
            len(matches.similar),
            len(similar) - len(matches.similar),
        )
        return matches


def dedupe_matches(exact: Sequence[SearchRecord], similar: Sequence[SearchRecord]) -> MatchSet:
    """Drop similar records already present among the exact records.

    Repeated ids inside either group keep their first occurrence.
    """
    unique_exact = _unique_by_id(exact, seen=set())
    exact_ids = {record.id for record in unique_exact}
    unique_similar = _unique_by_id(similar, seen=set(exact_ids))
    return MatchSet(exact=tuple(unique_exact), similar=tuple(unique_similar))


def merge_matches(matches: MatchSet, limit: int) -> MergedResult:
    """Concatenate exact then similar matches and truncate to ``limit``."""
    if limit <= 0:
        raise ValueError("limit must be positive")
    records = (matches.exact + matches.similar)[:limit]
    return MergedResult(records=records, limit=limit, exact_count=min(len(matches.exact), limit))


def _unique_by_id(records: Sequence[SearchRecord], *, seen: set[str]) -> list[SearchRecord]:
    unique: list[SearchRecord] = []
    for record in records:
        if record.id in seen:
            continue
        seen.add(record.id)
        unique.append(record)
    return unique
