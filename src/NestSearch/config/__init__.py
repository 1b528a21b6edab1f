"""Configuration for NestSearch.

One frozen dataclass per YAML section (``log``, ``source``, ``search``,
``output``), combined into ``AppConfig``.
"""

from __future__ import annotations

from NestSearch.config.app import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    check_cross_domain,
    load_config,
    load_config_with_defaults,
    merge_config_dicts,
    parse_config_dict,
)
from NestSearch.config.output import OutputConfig
from NestSearch.config.runtime import RuntimeConfig
from NestSearch.config.search import SearchConfig
from NestSearch.config.source import SourceConfig

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AppConfig",
    "OutputConfig",
    "RuntimeConfig",
    "SearchConfig",
    "SourceConfig",
    "check_cross_domain",
    "load_config",
    "load_config_with_defaults",
    "merge_config_dicts",
    "parse_config_dict",
]
