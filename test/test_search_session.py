"""Tests for the debounced search session and its staleness guard."""

from __future__ import annotations

import asyncio
import sys
import unittest
from pathlib import Path
from typing import Callable

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from fixtures import RESOURCES, GatedSource, RecordingSource

from NestSearch.core.query import QueryDescriptor
from NestSearch.services.search import TextSearchService
from NestSearch.services.session import SearchSession, SessionState
from NestSearch.sources.memory.source import MemorySource


async def _until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


class _MalformedRowSource(RecordingSource):
    """Answer every query with a row that is not a mapping."""

    def fetch(self, descriptor: QueryDescriptor):
        super().fetch(descriptor)
        return [["r1", "data"]]


class TestSearchSession(unittest.IsolatedAsyncioTestCase):
    def _session(self, source: RecordingSource, **kwargs) -> tuple[SearchSession, list[list[str]]]:
        emitted: list[list[str]] = []
        session = SearchSession(
            TextSearchService(source=source),
            RESOURCES,
            on_results=lambda records: emitted.append([r.id for r in records]),
            **kwargs,
        )
        return session, emitted

    async def test_update_enters_pending_immediately(self) -> None:
        session, emitted = self._session(RecordingSource(), debounce_ms=50)

        session.update("data")

        self.assertEqual(session.state, SessionState.PENDING)
        self.assertEqual(emitted, [])
        await session.close()

    async def test_settled_input_publishes_merged_results(self) -> None:
        session, emitted = self._session(RecordingSource(), debounce_ms=0)

        session.update("data structures")
        await session.wait()

        self.assertEqual(session.state, SessionState.READY)
        self.assertEqual(emitted, [["r2", "r4", "r5"]])
        self.assertEqual([r.id for r in session.matches.exact], ["r2"])
        self.assertEqual(session.results.ids(), ["r2", "r4", "r5"])
        self.assertIsNone(session.error)

    async def test_sub_threshold_input_goes_idle_without_querying(self) -> None:
        source = RecordingSource()
        session, emitted = self._session(source, debounce_ms=0, min_length=3)

        session.update("OS")
        await session.wait()

        self.assertEqual(session.state, SessionState.IDLE)
        self.assertEqual(emitted, [[]])
        self.assertEqual(source.descriptors, [])
        self.assertEqual(session.sequence, 0)

    async def test_rapid_updates_issue_one_search(self) -> None:
        source = RecordingSource()
        session, emitted = self._session(source, debounce_ms=20)

        for text in ("d", "da", "dat", "data"):
            session.update(text)
        await session.wait()

        self.assertEqual(len(source.descriptors), 2)
        self.assertEqual(session.sequence, 1)
        self.assertEqual(emitted, [["r4", "r2", "r5"]])

    async def test_stale_response_never_overwrites_newer_one(self) -> None:
        source = GatedSource("react")
        session, emitted = self._session(source, debounce_ms=0)

        session.update("react")
        await _until(lambda: session.state is SessionState.LOADING)
        session.update("node")
        await _until(lambda: session.state is SessionState.READY)
        self.assertEqual(emitted, [["r9"]])

        source.release.set()
        await session.wait()

        self.assertEqual(session.state, SessionState.READY)
        self.assertEqual(emitted, [["r9"]])
        self.assertEqual(session.results.ids(), ["r9"])
        self.assertEqual(session.sequence, 2)

    async def test_stale_failure_is_dropped(self) -> None:
        source = GatedSource("react", fail_gated=True)
        session, emitted = self._session(source, debounce_ms=0)

        session.update("react")
        await _until(lambda: session.state is SessionState.LOADING)
        session.update("node")
        await _until(lambda: session.state is SessionState.READY)

        source.release.set()
        await session.wait()

        self.assertEqual(session.state, SessionState.READY)
        self.assertIsNone(session.error)
        self.assertEqual(emitted, [["r9"]])

    async def test_response_superseded_by_pending_input_is_dropped(self) -> None:
        source = GatedSource("react")
        session, emitted = self._session(source, debounce_ms=200)

        session.update("react")
        await _until(lambda: session.state is SessionState.LOADING)
        session.update("node")
        source.release.set()
        await _until(lambda: not session._tasks)

        self.assertEqual(session.state, SessionState.PENDING)
        self.assertEqual(emitted, [])
        await session.close()

    async def test_failure_publishes_empty_list_then_recovers(self) -> None:
        source = RecordingSource()
        source.fail = True
        session, emitted = self._session(source, debounce_ms=0)

        with self.assertLogs("NestSearch", level="WARNING"):
            session.update("data")
            await session.wait()

        self.assertEqual(session.state, SessionState.FAILED)
        self.assertIn("network unreachable", session.error or "")
        self.assertEqual(session.results.ids(), [])
        self.assertEqual(emitted, [[]])

        source.fail = False
        session.update("data")
        await session.wait()

        self.assertEqual(session.state, SessionState.READY)
        self.assertIsNone(session.error)
        self.assertEqual(emitted[-1], ["r4", "r2", "r5"])

    async def test_token_query_failure_fails_the_search(self) -> None:
        source = RecordingSource()
        source.fail_limit = 24
        session, emitted = self._session(source, debounce_ms=0)

        with self.assertLogs("NestSearch", level="WARNING"):
            session.update("data structures")
            await session.wait()

        self.assertEqual(session.state, SessionState.FAILED)
        self.assertEqual(emitted, [[]])

    async def test_malformed_row_fails_the_search_with_one_callback(self) -> None:
        session, emitted = self._session(_MalformedRowSource(), debounce_ms=0)

        with self.assertLogs("NestSearch", level="WARNING"):
            session.update("data")
            await session.wait()

        self.assertEqual(session.state, SessionState.FAILED)
        self.assertTrue(session.error)
        self.assertEqual(session.results.ids(), [])
        self.assertEqual(emitted, [[]])

    async def test_millisecond_timestamps_still_reach_ready(self) -> None:
        rows = [
            {"id": "m1", "title": "data notes", "subject": "DSA", "uploaded_at": 1717236000000},
            {"id": "m2", "title": "data sheet", "subject": "DSA", "uploaded_at": 1704103200000},
        ]
        source = RecordingSource(MemorySource(tables={"resources": rows}))
        session, emitted = self._session(source, debounce_ms=0)

        session.update("data")
        await session.wait()

        self.assertEqual(session.state, SessionState.READY)
        self.assertEqual(emitted, [["m1", "m2"]])
        self.assertEqual(session.results.records[0].recency.year, 2024)

    async def test_clear_drops_pending_input(self) -> None:
        source = RecordingSource()
        session, emitted = self._session(source, debounce_ms=20)

        session.update("data")
        session.clear()
        await asyncio.sleep(0.05)

        self.assertEqual(session.state, SessionState.IDLE)
        self.assertEqual(emitted, [[]])
        self.assertEqual(source.descriptors, [])

    async def test_broken_callback_does_not_break_session(self) -> None:
        def broken(records) -> None:
            raise RuntimeError("sink down")

        session = SearchSession(TextSearchService(source=RecordingSource()), RESOURCES, on_results=broken, debounce_ms=0)

        with self.assertLogs("NestSearch", level="ERROR"):
            session.update("data")
            await session.wait()

        self.assertEqual(session.state, SessionState.READY)


if __name__ == "__main__":
    unittest.main()
