"""Row seeding for the local SQLite store."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from NestSearch.sources.sqlite.query import quote_identifier
from NestSearch.utils.log import log

if TYPE_CHECKING:
    from NestSearch.storage.db import DatabaseManager


class RowStore:
    """Write rows into local tables so they can be searched offline."""

    def __init__(self, db_manager: DatabaseManager):
        log.debug("Initializing RowStore")
        self.conn = db_manager.get_connection()

    def insert_rows(self, table: str, rows: Sequence[Mapping[str, Any]], *, id_field: str = "id") -> int:
        """Upsert rows by ``id_field``.

        Columns missing from the table are dropped with a warning; list and
        mapping values are stored as JSON text.

        Args:
            table: Target table.
            rows: Row mappings.
            id_field: Conflict column.

        Returns:
            Number of rows written.

        Raises:
            ValueError: If the table does not exist.
        """
        if not rows:
            return 0

        table_columns = self._table_columns(table)
        if not table_columns:
            raise ValueError(f"Unknown table: {table}")

        written = 0
        skipped_columns: set[str] = set()
        for row in rows:
            if row.get(id_field) is None:
                log.warning("Skipping row without %s in %s", id_field, table)
                continue
            columns = [column for column in row if column in table_columns]
            skipped_columns.update(column for column in row if column not in table_columns)
            placeholders = ", ".join("?" for _ in columns)
            updates = ", ".join(
                f"{quote_identifier(column)} = excluded.{quote_identifier(column)}"
                for column in columns
                if column != id_field
            )
            sql = (
                f"INSERT INTO {quote_identifier(table)} ({', '.join(quote_identifier(c) for c in columns)}) "
                f"VALUES ({placeholders}) "
                f"ON CONFLICT({quote_identifier(id_field)}) DO "
                + (f"UPDATE SET {updates}" if updates else "NOTHING")
            )
            self.conn.execute(sql, [_to_sql_value(row[column]) for column in columns])
            written += 1

        self.conn.commit()
        if skipped_columns:
            log.warning("Ignored unknown columns for %s: %s", table, ", ".join(sorted(skipped_columns)))
        log.debug("Wrote %d rows into %s", written, table)
        return written

    def _table_columns(self, table: str) -> set[str]:
        cursor = self.conn.execute(f"PRAGMA table_info({quote_identifier(table)})")
        return {row[1] for row in cursor}


def _to_sql_value(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return value
