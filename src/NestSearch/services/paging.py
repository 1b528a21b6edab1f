"""Client-side pagination of a merged result list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    """One page of items.

    Attributes:
        items: Items on this page.
        page: 1-based page number actually shown.
        total_pages: Number of pages; at least 1 even for no items.
        total: Number of items across all pages.
    """

    items: tuple[T, ...]
    page: int
    total_pages: int
    total: int


def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    """Slice ``items`` into the requested page.

    A page past the end (or below 1) falls back to page 1, the way the list
    resets when a narrower filter shrinks it.

    Raises:
        ValueError: If ``page_size`` is not positive.
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    total = len(items)
    total_pages = max(1, -(-total // page_size))
    if page < 1 or page > total_pages:
        page = 1
    start = (page - 1) * page_size
    return Page(items=tuple(items[start : start + page_size]), page=page, total_pages=total_pages, total=total)
