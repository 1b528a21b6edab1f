"""In-memory source adapter over preloaded rows."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

from NestSearch.core.errors import RemoteFailure
from NestSearch.core.query import QueryDescriptor
from NestSearch.sources.memory.matcher import matches
from NestSearch.sources.parser import parse_timestamp
from NestSearch.utils.log import log

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(slots=True)
class MemorySource:
    """Evaluate queries over rows already held in memory.

    Backs JSON fixture files and lists that were loaded once and are then
    filtered locally as the user types.
    """

    tables: Mapping[str, Sequence[Mapping[str, Any]]] = field(default_factory=dict)
    name: str = "memory"

    @classmethod
    def from_json_file(cls, path: Path) -> MemorySource:
        """Load ``{"table": [rows...]}`` from a JSON file.

        Raises:
            ValueError: If the file does not hold a mapping of row lists.
        """
        payload = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"{path} must contain an object mapping table names to rows")
        tables: dict[str, list[dict[str, Any]]] = {}
        for table, rows in payload.items():
            if not isinstance(rows, list):
                raise ValueError(f"{path}: table {table} must be a list of rows")
            tables[str(table)] = [dict(row) for row in rows if isinstance(row, dict)]
        log.debug("Loaded memory source: path=%s tables=%s", path, sorted(tables))
        return cls(tables=tables)

    def fetch(self, descriptor: QueryDescriptor) -> list[dict[str, Any]]:
        """Filter, order and limit rows of ``descriptor.table``.

        Raises:
            RemoteFailure: If the table is unknown.
        """
        rows = self.tables.get(descriptor.table)
        if rows is None:
            raise RemoteFailure(f"unknown table: {descriptor.table}", source=self.name)

        selected = [row for row in rows if matches(descriptor.where, row)]
        if descriptor.order_by:
            order_by = descriptor.order_by
            # Stable sort keeps insertion order among equal timestamps.
            selected.sort(
                key=lambda row: parse_timestamp(row.get(order_by)) or _OLDEST,
                reverse=descriptor.descending,
            )
        return [_project(row, descriptor.columns) for row in selected[: descriptor.limit]]

    def close(self) -> None:
        return


def _project(row: Mapping[str, Any], columns: Sequence[str]) -> dict[str, Any]:
    if not columns:
        return dict(row)
    return {column: row.get(column) for column in columns}
