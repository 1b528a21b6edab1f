"""Row payload parser shared by all sources."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from dateutil import parser as dt_parser

from NestSearch.core.models import SearchRecord
from NestSearch.utils.log import log

# Older rows only carry one of these; the resource table used uploaded_at.
_FALLBACK_RECENCY_KEYS = ("created_at", "uploaded_at", "updated_at")

# Epoch numbers above this are milliseconds (JavaScript Date.now()).
_EPOCH_MILLIS_THRESHOLD = 1e11


def parse_rows(
    rows: Sequence[Mapping[str, Any]],
    *,
    id_field: str = "id",
    recency_field: str = "created_at",
) -> list[SearchRecord]:
    """Parse raw source rows into records, preserving order.

    Args:
        rows: Row mappings as returned by a source.
        id_field: Column holding the unique identifier.
        recency_field: Preferred timestamp column.

    Returns:
        Records for every row that has an identifier.
    """
    records: list[SearchRecord] = []
    for row in rows:
        raw_id = row.get(id_field)
        if raw_id is None or str(raw_id).strip() == "":
            log.debug("Skipping row without id: id_field=%s keys=%s", id_field, sorted(row.keys()))
            continue
        records.append(
            SearchRecord(
                id=str(raw_id),
                data=row,
                recency=_extract_recency(row, recency_field),
            )
        )
    return records


def _extract_recency(row: Mapping[str, Any], recency_field: str) -> datetime | None:
    keys = (recency_field, *(key for key in _FALLBACK_RECENCY_KEYS if key != recency_field))
    for key in keys:
        parsed = parse_timestamp(row.get(key))
        if parsed is not None:
            return parsed
    return None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse ISO text, epoch seconds or milliseconds, or a datetime into an aware UTC datetime.

    Unparseable or out-of-range values give None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return _from_epoch(value)
    else:
        try:
            parsed = dt_parser.isoparse(str(value))
        except (ValueError, OverflowError):
            try:
                parsed = dt_parser.parse(str(value))
            except (ValueError, OverflowError):
                return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        return None


def _from_epoch(value: int | float) -> datetime | None:
    seconds = value / 1000 if abs(value) > _EPOCH_MILLIS_THRESHOLD else value
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        log.debug("Ignoring out-of-range timestamp: %r", value)
        return None
