"""Console text output renderers.

Renders a merged result into human-friendly text, grouped into exact matches
and similar suggestions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from NestSearch.core.models import MergedResult, SearchRecord, SearchRequest
from NestSearch.core.profile import SearchProfile
from NestSearch.renderers.base import OutputWriter
from NestSearch.utils.log import log


def _fmt_dt(dt: datetime | None) -> str:
    if not dt:
        return "-"
    return dt.strftime("%Y-%m-%d %H:%M")


def render_text(result: MergedResult, fields: Sequence[str]) -> str:
    """Render a merged result into a text block.

    Args:
        result: Merged records.
        fields: Searched fields; the first is the headline, the rest are details.

    Returns:
        A formatted string ready to be printed, or "No results".
    """
    if not result.records:
        return "No results\n"

    lines: list[str] = []
    groups = (("Exact matches", result.exact), ("Similar suggestions", result.similar))
    number = 1
    for title, records in groups:
        if not records:
            continue
        lines.append(f"{title}:")
        for record in records:
            lines.extend(_render_record(number, record, fields))
            number += 1
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def _render_record(number: int, record: SearchRecord, fields: Sequence[str]) -> list[str]:
    headline = record.text(fields[0]) if fields else record.id
    lines = [f"{number}. {headline or '(no text)'}"]
    for field_name in fields[1:]:
        value = record.text(field_name)
        if value:
            lines.append(f"   {field_name.capitalize()}: {value}")
    lines.append(f"   Id: {record.id}  Date: {_fmt_dt(record.recency)}")
    return lines


class ConsoleOutputWriter(OutputWriter):
    """Write results to console via logging."""

    def write_result(
        self,
        result: MergedResult,
        request: SearchRequest,
        profile: SearchProfile,
    ) -> None:
        log.info("profile=%s text=%r results=%d", profile.name, request.text, len(result))
        for line in render_text(result, profile.fields).splitlines():
            log.info(line)
