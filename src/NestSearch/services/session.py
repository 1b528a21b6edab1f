"""Debounced search session bound to one input field."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable, Sequence

from NestSearch.core.errors import RemoteFailure
from NestSearch.core.models import MatchSet, MergedResult, SearchRecord, SearchRequest
from NestSearch.core.profile import SearchProfile
from NestSearch.services.debounce import Debouncer
from NestSearch.services.search import TextSearchService, merge_matches
from NestSearch.utils.log import log

ResultsCallback = Callable[[Sequence[SearchRecord]], None]

DEFAULT_DEBOUNCE_MS = 300


class SessionState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class SearchSession:
    """Drive one search box: debounce input, query, merge, publish.

    Each settled searchable input gets a new sequence number. Only the
    response carrying the current sequence number may touch the visible
    state; an input change clears the current number, so anything still in
    flight at that point is dropped when it returns.

    Attributes:
        state: Current ``SessionState``.
        matches: Exact/similar split of the latest applied response.
        results: Merged list of the latest applied response.
        error: Message of the latest failure, cleared on the next success.
        sequence: Number of the most recently dispatched query.
    """

    def __init__(
        self,
        service: TextSearchService,
        profile: SearchProfile,
        *,
        on_results: ResultsCallback | None = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        limit: int | None = None,
        min_length: int | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.service = service
        self.profile = profile
        self.on_results = on_results
        self.limit = limit if limit is not None else profile.limit
        self.min_length = min_length if min_length is not None else profile.min_length
        self._loop = loop
        self._debouncer: Debouncer[str] = Debouncer(debounce_ms, self._on_settle, loop=loop)
        self._settle_future: asyncio.Future[str] | None = None
        self._current: int | None = None
        self._tasks: set[asyncio.Task[None]] = set()

        self.state = SessionState.IDLE
        self.matches = MatchSet()
        self.results = MergedResult.empty(self.limit)
        self.error: str | None = None
        self.sequence = 0

    def update(self, raw: str) -> None:
        """Accept the raw input after a keystroke and restart the debounce timer."""
        self._current = None
        self.state = SessionState.PENDING
        self._settle_future = self._debouncer.observe(raw)

    def clear(self) -> None:
        """Reset to an empty idle box, dropping pending and in-flight work."""
        self._debouncer.cancel()
        self._settle_future = None
        self._current = None
        self._publish_empty(SessionState.IDLE, error=None)

    async def wait(self) -> None:
        """Wait until no debounce timer is pending and no query is in flight."""
        while True:
            future = self._settle_future
            if future is not None and not future.done():
                await asyncio.wait({future})
                continue
            if self._tasks:
                await asyncio.wait(set(self._tasks))
                continue
            return

    async def close(self) -> None:
        """Cancel pending timers and in-flight queries."""
        self._debouncer.cancel()
        self._settle_future = None
        self._current = None
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _on_settle(self, raw: str) -> None:
        request = SearchRequest(raw=raw, limit=self.limit, min_length=self.min_length)
        if not request.is_searchable:
            self._current = None
            self._publish_empty(SessionState.IDLE, error=None)
            return

        self.sequence += 1
        sequence = self.sequence
        self._current = sequence
        self.state = SessionState.LOADING
        log.debug("Dispatching search: profile=%s seq=%d text=%r", self.profile.name, sequence, request.text)

        loop = self._loop or asyncio.get_running_loop()
        task = loop.create_task(self._dispatch(request, sequence))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _dispatch(self, request: SearchRequest, sequence: int) -> None:
        try:
            matches = await self.service.afind_matches(request, self.profile)
        except Exception as error:  # noqa: BLE001 - every settled query ends READY or FAILED
            if sequence != self._current:
                log.debug("Dropping stale failure: profile=%s seq=%d error=%s", self.profile.name, sequence, error)
                return
            log.warning(
                "Search failed: profile=%s seq=%d error=%s",
                self.profile.name,
                sequence,
                error,
                exc_info=not isinstance(error, RemoteFailure),
            )
            self._publish_empty(SessionState.FAILED, error=str(error) or type(error).__name__)
            return

        if sequence != self._current:
            log.debug("Dropping stale response: profile=%s seq=%d current=%s", self.profile.name, sequence, self._current)
            return

        self.matches = matches
        self.results = merge_matches(matches, request.limit)
        self.error = None
        self.state = SessionState.READY
        log.debug(
            "Search ready: profile=%s seq=%d exact=%d similar=%d merged=%d",
            self.profile.name,
            sequence,
            len(matches.exact),
            len(matches.similar),
            len(self.results),
        )
        self._emit(list(self.results.records))

    def _publish_empty(self, state: SessionState, *, error: str | None) -> None:
        self.matches = MatchSet()
        self.results = MergedResult.empty(self.limit)
        self.error = error
        self.state = state
        self._emit([])

    def _emit(self, records: list[SearchRecord]) -> None:
        if self.on_results is None:
            return
        try:
            self.on_results(records)
        except Exception:  # noqa: BLE001 - a broken sink must not break the session
            log.exception("Search results callback failed: profile=%s", self.profile.name)
