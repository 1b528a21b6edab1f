"""Turn settled input into exact and token query descriptors."""

from __future__ import annotations

from typing import Sequence

from NestSearch.core.profile import SearchProfile
from NestSearch.core.query import (
    Clause,
    QueryDescriptor,
    SearchPlan,
    all_of,
    any_of,
    contains,
    equals,
)
from NestSearch.core.models import SearchRequest
from NestSearch.utils.log import log

MAX_TOKENS = 5
SIMILAR_LIMIT_FACTOR = 2
LIKE_ESCAPE = "\\"


def tokenize(text: str) -> tuple[str, ...]:
    """Split input on whitespace, keeping at most ``MAX_TOKENS`` tokens."""
    return tuple(token for token in (text or "").split() if token)[:MAX_TOKENS]


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` only ever matches literally."""
    escaped = term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
    escaped = escaped.replace("%", LIKE_ESCAPE + "%")
    return escaped.replace("_", LIKE_ESCAPE + "_")


def substring_pattern(term: str) -> str:
    return f"%{escape_like(term)}%"


def build_exact_descriptor(request: SearchRequest, profile: SearchProfile) -> QueryDescriptor:
    """Build the query matching the full trimmed input in any searched field.

    Args:
        request: Settled request; must be searchable.
        profile: Target table and searched fields.

    Returns:
        Descriptor ordered by recency descending and capped at ``request.limit``.
    """
    pattern = substring_pattern(request.text)
    where = any_of(*(contains(field, pattern) for field in profile.fields))
    return _descriptor(profile, _with_filters(where, profile), limit=request.limit)


def build_token_descriptor(request: SearchRequest, profile: SearchProfile) -> QueryDescriptor | None:
    """Build the query matching any input token in any searched field.

    The cap is widened to ``SIMILAR_LIMIT_FACTOR * limit`` so rows dropped by
    deduplication against the exact pass do not starve the merged list.

    Returns:
        Descriptor, or None when the input has no tokens.
    """
    tokens = tokenize(request.text)
    if not tokens:
        return None
    per_token = [
        any_of(*(contains(field, substring_pattern(token)) for field in profile.fields))
        for token in tokens
    ]
    where = any_of(*per_token)
    return _descriptor(profile, _with_filters(where, profile), limit=request.limit * SIMILAR_LIMIT_FACTOR)


def build_plan(request: SearchRequest, profile: SearchProfile) -> SearchPlan:
    """Build every descriptor needed for ``request``.

    Sub-threshold input yields an empty plan; the caller is expected to clear
    its results without contacting the source.
    """
    if not request.is_searchable:
        log.debug(
            "Input below threshold: profile=%s length=%d min_length=%d",
            profile.name,
            len(request.text),
            request.min_length,
        )
        return SearchPlan()

    exact = build_exact_descriptor(request, profile)
    similar = build_token_descriptor(request, profile) if profile.similar else None
    return SearchPlan(exact=exact, similar=similar)


def _with_filters(where: Clause, profile: SearchProfile) -> Clause:
    if not profile.filters:
        return where
    filters: Sequence[Clause] = [equals(field, value) for field, value in profile.filters.items()]
    return all_of(*filters, where)


def _descriptor(profile: SearchProfile, where: Clause, *, limit: int) -> QueryDescriptor:
    return QueryDescriptor(
        table=profile.table,
        columns=profile.selected_columns(),
        where=where,
        order_by=profile.recency_field or None,
        descending=True,
        limit=limit,
    )
