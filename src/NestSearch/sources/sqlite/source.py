"""SQLite source adapter."""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass, field
from typing import Any

from NestSearch.core.errors import RemoteFailure
from NestSearch.core.query import QueryDescriptor
from NestSearch.sources.sqlite.query import compile_sql
from NestSearch.storage.db import DatabaseManager
from NestSearch.utils.log import log


@dataclass(slots=True)
class SqliteSource:
    """Source adapter answering queries from a local SQLite database."""

    db_manager: DatabaseManager
    name: str = "sqlite"
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def fetch(self, descriptor: QueryDescriptor) -> list[dict[str, Any]]:
        """Run ``descriptor`` and return rows as plain dicts.

        Raises:
            RemoteFailure: If the statement cannot be compiled or executed.
        """
        try:
            sql, params = compile_sql(descriptor)
        except ValueError as error:
            raise RemoteFailure(f"malformed query: {error}", source=self.name, cause=error) from error

        log.debug("SQLite query: %s params=%s", sql, params)
        try:
            # One connection is shared by the exact and token passes.
            with self._lock:
                cursor = self.db_manager.get_connection().execute(sql, params)
                return [dict(row) for row in cursor.fetchall()]
        except (sqlite3.Error, RuntimeError) as error:
            raise RemoteFailure(str(error), source=self.name, cause=error) from error

    def close(self) -> None:
        """Close the underlying database connection."""
        self.db_manager.close()
