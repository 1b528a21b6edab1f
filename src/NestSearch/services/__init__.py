"""Search service layer for NestSearch.

Query building, exact/similar merging, debouncing and search sessions, plus
the factory that wires a configured source into a service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from NestSearch.services.debounce import Debouncer
from NestSearch.services.paging import Page, paginate
from NestSearch.services.search import RecordSource, TextSearchService, dedupe_matches, merge_matches
from NestSearch.services.session import SearchSession, SessionState
from NestSearch.sources.registry import build_source
from NestSearch.utils.log import log

if TYPE_CHECKING:
    from NestSearch.config import AppConfig


def create_search_service(config: AppConfig) -> TextSearchService:
    """Create a search service backed by the configured source.

    Args:
        config: Application configuration containing source settings.

    Returns:
        Configured TextSearchService instance.
    """
    source = build_source(config.source)
    log.debug("Search source ready: kind=%s", config.source.kind)
    return TextSearchService(source=source)


__all__ = [
    "Debouncer",
    "Page",
    "RecordSource",
    "SearchSession",
    "SessionState",
    "TextSearchService",
    "create_search_service",
    "dedupe_matches",
    "merge_matches",
    "paginate",
]
