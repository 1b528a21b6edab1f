"""Source registry and builders for record sources."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from NestSearch.utils.log import log

if TYPE_CHECKING:
    from NestSearch.config.source import SourceConfig
    from NestSearch.services.search import RecordSource

SourceBuilder = Callable[["SourceConfig"], "RecordSource"]


def build_source(config: SourceConfig) -> RecordSource:
    """Build a record source for the configured ``source.kind``.

    Args:
        config: Parsed source configuration.

    Returns:
        RecordSource: Initialized source implementation.

    Raises:
        ValueError: If ``config.kind`` is not registered.
    """
    builder = _source_builders().get(config.kind)
    if builder is None:
        raise ValueError(f"Unsupported source.kind: {config.kind}")
    return builder(config)


def supported_source_kinds() -> tuple[str, ...]:
    return tuple(_source_builders().keys())


def _source_builders() -> dict[str, SourceBuilder]:
    return {
        "postgrest": _build_postgrest_source,
        "sqlite": _build_sqlite_source,
        "memory": _build_memory_source,
    }


def _build_postgrest_source(config: SourceConfig) -> RecordSource:
    from NestSearch.sources.postgrest.client import PostgrestClient
    from NestSearch.sources.postgrest.source import PostgrestSource

    api_key = config.api_key
    if config.api_key_env and not api_key:
        log.warning("API key variable %s is not set; querying anonymously", config.api_key_env)
    assert config.url is not None
    return PostgrestSource(client=PostgrestClient(config.url, api_key, timeout=config.timeout))


def _build_sqlite_source(config: SourceConfig) -> RecordSource:
    from pathlib import Path

    from NestSearch.sources.sqlite.source import SqliteSource
    from NestSearch.storage.db import DatabaseManager

    assert config.db_path is not None
    return SqliteSource(db_manager=DatabaseManager(Path(config.db_path)))


def _build_memory_source(config: SourceConfig) -> RecordSource:
    from pathlib import Path

    from NestSearch.sources.memory.source import MemorySource

    assert config.data_path is not None
    return MemorySource.from_json_file(Path(config.data_path))
