"""Command implementations for NestSearch CLI.

Encapsulates business logic for commands, separated from CLI parameter
handling and output formatting.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from NestSearch.config import AppConfig
from NestSearch.core.models import MergedResult, SearchRecord, SearchRequest
from NestSearch.core.profile import SearchProfile
from NestSearch.renderers import OutputWriter
from NestSearch.services.paging import paginate
from NestSearch.services.search import TextSearchService
from NestSearch.services.session import SearchSession, SessionState
from NestSearch.storage.rows import RowStore
from NestSearch.utils.log import log


@dataclass(slots=True)
class SearchCommand:
    """One-shot search of a profile, optionally paginated."""

    config: AppConfig
    search_service: TextSearchService
    output_writer: OutputWriter
    profile: SearchProfile
    text: str
    limit: int | None = None
    page: int = 1
    page_size: int | None = None

    def execute(self) -> MergedResult:
        request = SearchRequest(
            raw=self.text,
            limit=self.limit or self.profile.limit,
            min_length=self.profile.min_length,
        )
        log.debug("Running search profile=%s text=%r limit=%d", self.profile.name, request.text, request.limit)
        if not request.is_searchable:
            log.info("Input shorter than %d characters; nothing to search", request.min_length)

        result = self.search_service.search(request, self.profile)
        log.info("Found %d results (%d exact)", len(result), result.exact_count)

        if self.page_size:
            result = _page_of(result, page=self.page, page_size=self.page_size)

        self.output_writer.write_result(result, request, self.profile)
        return result


@dataclass(slots=True)
class ReplayCommand:
    """Feed successive inputs through a debounced session, as if typed."""

    config: AppConfig
    search_service: TextSearchService
    output_writer: OutputWriter
    profile: SearchProfile
    inputs: Sequence[str]
    interval_ms: int = 100
    limit: int | None = None

    def execute(self) -> MergedResult:
        """Replay inputs and write the final settled result.

        Raises:
            RuntimeError: If the final settled query failed.
        """
        return asyncio.run(self._replay())

    async def _replay(self) -> MergedResult:
        settled: list[int] = []

        def on_results(records: Sequence[SearchRecord]) -> None:
            settled.append(len(records))
            log.info("Settled: %d results", len(records))

        session = SearchSession(
            self.search_service,
            self.profile,
            on_results=on_results,
            debounce_ms=self.config.search.debounce_ms,
            limit=self.limit,
        )
        try:
            for value in self.inputs:
                log.debug("Input: %r", value)
                session.update(value)
                await asyncio.sleep(self.interval_ms / 1000)
            await session.wait()
        finally:
            await session.close()

        log.info("Inputs: %d, settled searches: %d, state=%s", len(self.inputs), len(settled), session.state.value)
        if session.state is SessionState.FAILED:
            raise RuntimeError(f"Search failed: {session.error}")

        last = self.inputs[-1] if self.inputs else ""
        request = SearchRequest(raw=last, limit=session.limit, min_length=session.min_length)
        self.output_writer.write_result(session.results, request, self.profile)
        return session.results


@dataclass(slots=True)
class LoadCommand:
    """Seed a local table from a JSON file."""

    row_store: RowStore
    table: str
    path: Path

    def execute(self) -> int:
        rows = _read_rows(self.path, self.table)
        written = self.row_store.insert_rows(self.table, rows)
        log.info("Loaded %d/%d rows into %s", written, len(rows), self.table)
        return written


def _page_of(result: MergedResult, *, page: int, page_size: int) -> MergedResult:
    shown = paginate(result.records, page, page_size)
    start = (shown.page - 1) * page_size
    exact_on_page = max(0, min(result.exact_count - start, len(shown.items)))
    log.info("Page %d/%d (%d of %d results)", shown.page, shown.total_pages, len(shown.items), shown.total)
    return MergedResult(records=shown.items, limit=result.limit, exact_count=exact_on_page)


def _read_rows(path: Path, table: str) -> list[dict[str, Any]]:
    """Read a list of rows, or ``{"<table>": [rows]}``, from JSON."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get(table)
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a list of rows for table {table}")
    return [row for row in payload if isinstance(row, dict)]
