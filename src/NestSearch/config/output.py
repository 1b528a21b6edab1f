"""Output domain configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from NestSearch.config.common import expect_str, expect_str_tuple, get_section, reject_unknown_keys

_FORMATS = ("console", "json")


@dataclass(frozen=True, slots=True)
class OutputConfig:
    """Where merged results go.

    Attributes:
        base_dir: Root for file outputs; JSON lands in ``<base_dir>/json/``.
        formats: Output formats in the order writers receive results.
    """

    base_dir: str = "output"
    formats: tuple[str, ...] = ("console",)


def load_output(raw: Mapping[str, Any]) -> OutputConfig:
    """Load the optional ``output`` section; repeated formats are kept once.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If unknown keys are present.
    """
    section = get_section(raw, "output", required=False)
    reject_unknown_keys(section, ("base_dir", "formats"), "output")
    defaults = OutputConfig()

    formats: list[str] = []
    for item in expect_str_tuple(section.get("formats", list(defaults.formats)), "output.formats"):
        if item.lower() not in formats:
            formats.append(item.lower())
    return OutputConfig(
        base_dir=expect_str(section.get("base_dir", defaults.base_dir), "output.base_dir").strip(),
        formats=tuple(formats),
    )


def check_output(config: OutputConfig) -> None:
    if not config.formats:
        raise ValueError("output.formats must include at least one format")
    unknown = [item for item in config.formats if item not in _FORMATS]
    if unknown:
        raise ValueError(f"output.formats has unknown formats: {unknown}")
    if "json" in config.formats and not config.base_dir:
        raise ValueError("output.base_dir must not be empty when json output is enabled")
