"""Data source configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from NestSearch.config.common import (
    expect_float,
    expect_optional_str,
    expect_str,
    get_required_value,
    get_section,
    reject_unknown_keys,
)
from NestSearch.sources.registry import supported_source_kinds

_ALLOWED_KINDS = frozenset(supported_source_kinds())
_SOURCE_KEYS = ("kind", "url", "api_key_env", "timeout", "db_path", "data_path")


@dataclass(frozen=True, slots=True)
class SourceConfig:
    """Where records are read from.

    Attributes:
        kind: ``postgrest`` (hosted REST tables), ``sqlite`` or ``memory``.
        url: PostgREST root URL.
        api_key_env: Name of the environment variable holding the API key.
        timeout: HTTP timeout in seconds.
        db_path: SQLite database path.
        data_path: JSON fixture path for the memory source.
    """

    kind: str
    url: str | None = None
    api_key_env: str | None = None
    timeout: float = 15.0
    db_path: str | None = None
    data_path: str | None = None

    @property
    def api_key(self) -> str | None:
        """Read the API key from the environment at use time."""
        if not self.api_key_env:
            return None
        return os.getenv(self.api_key_env) or None


def load_source(raw: Mapping[str, Any]) -> SourceConfig:
    """Load the ``source`` section.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing.
    """
    section = get_section(raw, "source", required=True)
    reject_unknown_keys(section, _SOURCE_KEYS, "source")
    return SourceConfig(
        kind=expect_str(get_required_value(section, "kind", "source.kind"), "source.kind").strip().lower(),
        url=expect_optional_str(section.get("url"), "source.url"),
        api_key_env=expect_optional_str(section.get("api_key_env"), "source.api_key_env"),
        timeout=expect_float(section.get("timeout", 15.0), "source.timeout"),
        db_path=expect_optional_str(section.get("db_path"), "source.db_path"),
        data_path=expect_optional_str(section.get("data_path"), "source.data_path"),
    )


def check_source(config: SourceConfig) -> None:
    if config.kind not in _ALLOWED_KINDS:
        raise ValueError(f"source.kind must be one of {sorted(_ALLOWED_KINDS)}")
    if config.timeout <= 0:
        raise ValueError("source.timeout must be positive")
    if config.kind == "postgrest" and not config.url:
        raise ValueError("source.url is required when source.kind=postgrest")
    if config.kind == "sqlite" and not config.db_path:
        raise ValueError("source.db_path is required when source.kind=sqlite")
    if config.kind == "memory" and not config.data_path:
        raise ValueError("source.data_path is required when source.kind=memory")
