"""JSON output renderers.

Renders merged results into JSON-serializable objects and provides
JsonFileWriter, which writes every result of a CLI action into one file.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from NestSearch.core.models import MergedResult, SearchRequest
from NestSearch.core.profile import SearchProfile
from NestSearch.renderers.base import OutputWriter
from NestSearch.utils.log import log


def render_json(result: MergedResult) -> list[dict[str, Any]]:
    """Render merged records into JSON-serializable dicts.

    Each item carries the full row plus ``match`` (``exact`` or ``similar``).
    """
    out: list[dict[str, Any]] = []
    for index, record in enumerate(result.records):
        out.append(
            {
                "id": record.id,
                "match": "exact" if index < result.exact_count else "similar",
                "recency": record.recency.isoformat() if record.recency else None,
                "data": {key: _json_value(value) for key, value in record.data.items()},
            }
        )
    return out


def _json_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class JsonFileWriter(OutputWriter):
    """Accumulate results and write to JSON file on finalize."""

    def __init__(self, base_dir: str) -> None:
        self.output_dir = Path(base_dir) / "json"
        self.all_results: list[dict[str, Any]] = []

    def write_result(
        self,
        result: MergedResult,
        request: SearchRequest,
        profile: SearchProfile,
    ) -> None:
        self.all_results.append(
            {
                "profile": profile.name,
                "text": request.text,
                "limit": request.limit,
                "results": render_json(result),
            }
        )

    def finalize(self, action: str) -> list[Path]:
        """Write accumulated results to ``<base_dir>/json/<action>_<timestamp>.json``."""
        if not self.all_results:
            return []
        self.output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = self.output_dir / f"{action}_{timestamp}.json"
        output_path.write_text(
            json.dumps(self.all_results, ensure_ascii=False, indent=2, default=str),
            encoding="utf-8",
        )
        log.debug("JSON results: action=%s entries=%d", action, len(self.all_results))
        return [output_path]
