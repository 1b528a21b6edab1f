"""Storage layer for NestSearch.

Provides the local SQLite database used by the ``sqlite`` source and the
row store used to seed it.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from NestSearch.storage.db import DatabaseManager
from NestSearch.storage.rows import RowStore
from NestSearch.utils.log import log

if TYPE_CHECKING:
    from NestSearch.config import AppConfig


def create_row_store(config: AppConfig) -> tuple[DatabaseManager, RowStore]:
    """Open the configured SQLite database for seeding.

    Raises:
        ValueError: If the configured source is not SQLite.
    """
    if config.source.kind != "sqlite" or not config.source.db_path:
        raise ValueError("Loading rows requires source.kind=sqlite")
    db_path = Path(config.source.db_path)
    db_manager = DatabaseManager(db_path)
    log.info("Local database: %s", db_path)
    return db_manager, RowStore(db_manager)


__all__ = [
    "DatabaseManager",
    "RowStore",
    "create_row_store",
]
