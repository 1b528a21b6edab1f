from __future__ import annotations

"""Application config orchestration and YAML loading entrypoints."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from NestSearch.config.output import OutputConfig, check_output, load_output
from NestSearch.config.runtime import RuntimeConfig, check_runtime, load_runtime
from NestSearch.config.search import SearchConfig, check_search, load_search
from NestSearch.config.source import SourceConfig, check_source, load_source
from NestSearch.utils.log import log

DEFAULT_CONFIG_PATH = Path("config/default.yml")
_SQL_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application root configuration."""

    runtime: RuntimeConfig
    source: SourceConfig
    search: SearchConfig
    output: OutputConfig


def parse_config_dict(raw: Mapping[str, Any]) -> AppConfig:
    """Parse normalized mapping into AppConfig."""
    runtime = load_runtime(raw)
    source = load_source(raw)
    search = load_search(raw)
    output = load_output(raw)

    check_runtime(runtime)
    check_source(source)
    check_search(search)
    check_output(output)

    config = AppConfig(runtime=runtime, source=source, search=search, output=output)
    check_cross_domain(config)
    return config


def load_config(path: Path) -> AppConfig:
    """Load a single YAML file, without layering it over the defaults."""
    return parse_config_dict(parse_yaml(path.read_text(encoding="utf-8")))


def load_config_with_defaults(config_path: Path, default_path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Layer ``config_path`` over ``default_path``.

    A missing defaults file is not an error: the override is then parsed on
    its own, which lets a deployment ship one self-contained file.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
    """
    if not default_path.exists() or config_path.resolve() == default_path.resolve():
        return load_config(config_path)
    base = parse_yaml(default_path.read_text(encoding="utf-8"))
    override = parse_yaml(config_path.read_text(encoding="utf-8"))
    log.debug("Config layered: defaults=%s override=%s", default_path, config_path)
    return parse_config_dict(merge_config_dicts(base, override))


def check_cross_domain(config: AppConfig) -> None:
    """Validate cross-domain constraints."""
    if config.source.kind != "sqlite":
        return
    for idx, profile in enumerate(config.search.profiles):
        names = (profile.table, profile.id_field, profile.recency_field, *profile.fields, *profile.columns, *profile.filters)
        for name in names:
            if not _SQL_IDENTIFIER_RE.match(str(name)):
                raise ValueError(
                    f"search.profiles[{idx}] uses {name!r}, which is not a plain SQL identifier "
                    "(required with source.kind=sqlite)"
                )


def parse_yaml(text: str) -> dict[str, Any]:
    """Parse raw YAML text into a mapping."""
    data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Config root must be a mapping/object")
    return dict(data)


def merge_config_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two config mappings; lists are replaced, not merged."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged
