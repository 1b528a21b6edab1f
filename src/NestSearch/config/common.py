from __future__ import annotations

"""Shared helpers for configuration loading and validation."""

from typing import Any, Collection, Mapping


def get_section(raw: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """Return a mapping section from a config mapping.

    Args:
        raw: Parent configuration mapping.
        key: Section name.
        required: Whether the section must exist.

    Returns:
        Section mapping, or empty mapping for optional missing sections.

    Raises:
        ValueError: If section is required but missing.
        TypeError: If section is not a mapping.
    """
    section = raw.get(key)
    if section is None:
        if required:
            raise ValueError(f"Missing required config: {key}")
        return {}
    if not isinstance(section, Mapping):
        raise TypeError(f"{key} must be an object")
    return section


def get_required_value(section: Mapping[str, Any], field: str, config_key: str) -> Any:
    """Return a required field value, raising ValueError naming ``config_key`` when absent."""
    if field not in section:
        raise ValueError(f"Missing required config: {config_key}")
    return section[field]


def expect_str(value: Any, config_key: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{config_key} must be a string")
    return value


def expect_optional_str(value: Any, config_key: str) -> str | None:
    if value is None:
        return None
    return expect_str(value, config_key).strip() or None


def expect_bool(value: Any, config_key: str) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"{config_key} must be a boolean")
    return value


def expect_int(value: Any, config_key: str) -> int:
    """Validate and return integer value (excluding bool)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{config_key} must be an integer")
    return value


def expect_float(value: Any, config_key: str) -> float:
    """Validate and return float value from numeric input."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{config_key} must be a number")
    return float(value)


def expect_str_tuple(value: Any, config_key: str) -> tuple[str, ...]:
    """Validate a string or list of strings into a tuple of stripped, non-empty items."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise TypeError(f"{config_key} must be a list")
    out: list[str] = []
    for idx, item in enumerate(value):
        if not isinstance(item, str):
            raise TypeError(f"{config_key}[{idx}] must be a string")
        if item.strip():
            out.append(item.strip())
    return tuple(out)


def expect_scalar_mapping(value: Any, config_key: str) -> dict[str, Any]:
    """Validate a mapping of column names to scalar values (None allowed as empty)."""
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TypeError(f"{config_key} must be an object")
    out: dict[str, Any] = {}
    for key, item in value.items():
        if isinstance(item, (Mapping, list, tuple, set)):
            raise TypeError(f"{config_key}.{key} must be a scalar")
        out[str(key)] = item
    return out


def reject_unknown_keys(section: Mapping[str, Any], allowed: Collection[str], config_key: str) -> None:
    """Raise ValueError naming every key of ``section`` outside ``allowed``."""
    unknown = sorted(str(key) for key in section if str(key) not in allowed)
    if unknown:
        raise ValueError(f"{config_key} has unknown keys: {unknown}")
