"""Logging configuration read from the ``log`` section."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from NestSearch.config.common import expect_bool, expect_str, get_section

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """Where and how verbosely search activity is logged.

    Attributes:
        level: Console level; DEBUG shows every query, drop and merge.
        to_file: Mirror records to ``<dir>/<action>/`` per CLI action.
        dir: Base directory for log files.
        file_level: Level of the mirrored file, usually more verbose than the console.
    """

    level: str = "INFO"
    to_file: bool = False
    dir: str = "log"
    file_level: str = "DEBUG"


def load_runtime(raw: Mapping[str, Any]) -> RuntimeConfig:
    """Load the ``log`` section; every key is optional.

    Raises:
        TypeError: If config types are invalid.
    """
    section = get_section(raw, "log", required=False)
    defaults = RuntimeConfig()
    return RuntimeConfig(
        level=expect_str(section.get("level", defaults.level), "log.level").strip().upper(),
        to_file=expect_bool(section.get("to_file", defaults.to_file), "log.to_file"),
        dir=expect_str(section.get("dir", defaults.dir), "log.dir").strip(),
        file_level=expect_str(section.get("file_level", defaults.file_level), "log.file_level").strip().upper(),
    )


def check_runtime(config: RuntimeConfig) -> None:
    for key, value in (("log.level", config.level), ("log.file_level", config.file_level)):
        if value not in _LOG_LEVELS:
            raise ValueError(f"{key} must be one of {list(_LOG_LEVELS)}, got {value!r}")
    if config.to_file and not config.dir:
        raise ValueError("log.dir must not be empty when log.to_file is true")
