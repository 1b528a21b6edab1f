"""SQLite database utilities."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from NestSearch.utils.log import log


class DatabaseManager:
    """Owns the SQLite connection of a local portal database.

    Supports context manager protocol for automatic connection cleanup.
    """

    def __init__(self, db_path: Path, *, create_schema: bool = True) -> None:
        """Open (and optionally initialize) the database.

        Args:
            db_path: Absolute path or project-relative path to database file.
            create_schema: Whether to create the default portal tables.
        """
        self.db_path = db_path
        self.conn: sqlite3.Connection | None = ensure_db(db_path)
        if create_schema:
            init_schema(self.conn)

    def get_connection(self) -> sqlite3.Connection:
        """Get the open database connection.

        Raises:
            RuntimeError: If the manager was already closed.
        """
        if self.conn is None:
            raise RuntimeError(f"Database already closed: {self.db_path}")
        return self.conn

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            log.debug("Closed database: %s", self.db_path)

    def __enter__(self) -> DatabaseManager:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def ensure_db(db_path: Path) -> sqlite3.Connection:
    """Ensure database file exists and return connection.

    Rows come back as ``sqlite3.Row`` so sources can map them by column name.
    ``check_same_thread`` is off because queries run in worker threads. A
    ``casefold`` SQL function is registered for Unicode case-insensitive LIKE.

    Raises:
        OSError: If directory creation fails.
        sqlite3.Error: If database connection fails.
    """
    if str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    return conn


def _casefold(value: object) -> str | None:
    return None if value is None else str(value).casefold()


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the portal tables searched by the default profiles.

    Args:
        conn: SQLite connection.
    """
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS resources (
          id TEXT PRIMARY KEY,
          title TEXT NOT NULL,
          subject TEXT NOT NULL,
          branch TEXT,
          semester INTEGER,
          type TEXT,
          file_url TEXT,
          tags TEXT,
          verified INTEGER DEFAULT 0,
          uploaded_by TEXT,
          uploaded_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
        );

        CREATE INDEX IF NOT EXISTS idx_resources_uploaded
          ON resources(uploaded_at DESC);

        CREATE TABLE IF NOT EXISTS queries (
          id TEXT PRIMARY KEY,
          text TEXT NOT NULL,
          category TEXT,
          status TEXT DEFAULT 'OPEN',
          author_id TEXT,
          anonymous INTEGER DEFAULT 0,
          hidden INTEGER DEFAULT 0,
          votes INTEGER DEFAULT 0,
          flags INTEGER DEFAULT 0,
          tags TEXT,
          created_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
          updated_at TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_queries_created
          ON queries(created_at DESC);

        CREATE INDEX IF NOT EXISTS idx_queries_author
          ON queries(author_id);
    """)
    conn.commit()
