from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class SearchProfile:
    """Where and how one kind of record is searched.

    A profile corresponds to one search box: the resource browser, the
    "similar questions" hint under the ask form, the personal query list.

    Attributes:
        name: Profile name used on the command line.
        table: Table (or view) name in the data source.
        fields: Free-text columns matched against the input.
        columns: Columns to fetch. Empty means all columns.
        id_field: Column holding the unique identifier.
        recency_field: Timestamp column used for descending ordering.
        limit: Default result cap.
        min_length: Default minimum trimmed input length.
        similar: Whether the token pass runs in addition to the exact pass.
        filters: Equality filters AND-ed onto every query.
    """

    name: str
    table: str
    fields: tuple[str, ...]
    columns: tuple[str, ...] = ()
    id_field: str = "id"
    recency_field: str = "created_at"
    limit: int = 12
    min_length: int = 1
    similar: bool = True
    filters: Mapping[str, Any] = field(default_factory=dict)

    def selected_columns(self) -> tuple[str, ...]:
        """Return fetched columns, always including id, searched and recency columns."""
        if not self.columns:
            return ()
        required = (self.id_field, *self.fields, self.recency_field)
        out = list(self.columns)
        for column in required:
            if column not in out:
                out.append(column)
        return tuple(out)
