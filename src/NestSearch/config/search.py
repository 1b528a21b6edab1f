"""Search domain configuration and profile parsing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from NestSearch.config.common import (
    expect_bool,
    expect_int,
    expect_scalar_mapping,
    expect_str,
    expect_str_tuple,
    get_required_value,
    get_section,
    reject_unknown_keys,
)
from NestSearch.core.profile import SearchProfile

_PROFILE_KEYS = {
    "name",
    "table",
    "fields",
    "columns",
    "id_field",
    "recency_field",
    "limit",
    "min_length",
    "similar",
    "filters",
}


@dataclass(frozen=True, slots=True)
class SearchConfig:
    """Store validated search behavior and profiles."""

    debounce_ms: int
    limit: int
    min_length: int
    profiles: tuple[SearchProfile, ...]

    def profile(self, name: str | None = None) -> SearchProfile:
        """Return a profile by name, or the first profile when ``name`` is None.

        Raises:
            KeyError: If no profile has that name.
        """
        if name is None:
            return self.profiles[0]
        for profile in self.profiles:
            if profile.name == name:
                return profile
        raise KeyError(f"Unknown search profile: {name}")


def load_search(raw: Mapping[str, Any]) -> SearchConfig:
    """Load search domain config from raw mapping.

    Args:
        raw: Root configuration mapping.

    Returns:
        Parsed search configuration.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing.
    """
    section = get_section(raw, "search", required=True)
    limit = expect_int(get_required_value(section, "limit", "search.limit"), "search.limit")
    min_length = expect_int(get_required_value(section, "min_length", "search.min_length"), "search.min_length")

    profiles_obj = get_required_value(section, "profiles", "search.profiles")
    if not isinstance(profiles_obj, list):
        raise TypeError("search.profiles must be a list")
    profiles = tuple(
        parse_profile(item, f"search.profiles[{idx}]", default_limit=limit, default_min_length=min_length)
        for idx, item in enumerate(profiles_obj)
    )

    return SearchConfig(
        debounce_ms=expect_int(get_required_value(section, "debounce_ms", "search.debounce_ms"), "search.debounce_ms"),
        limit=limit,
        min_length=min_length,
        profiles=profiles,
    )


def check_search(config: SearchConfig) -> None:
    """Validate search domain constraints.

    Raises:
        ValueError: If values violate search constraints.
    """
    if config.debounce_ms < 0:
        raise ValueError("search.debounce_ms must not be negative")
    if config.limit <= 0:
        raise ValueError("search.limit must be positive")
    if config.min_length < 0:
        raise ValueError("search.min_length must not be negative")
    if not config.profiles:
        raise ValueError("search.profiles must include at least one profile")

    seen: set[str] = set()
    for idx, profile in enumerate(config.profiles):
        key = f"search.profiles[{idx}]"
        if profile.name in seen:
            raise ValueError(f"{key}.name is duplicated: {profile.name}")
        seen.add(profile.name)
        if not profile.fields:
            raise ValueError(f"{key}.fields must include at least one field")
        if profile.limit <= 0:
            raise ValueError(f"{key}.limit must be positive")
        if profile.min_length < 0:
            raise ValueError(f"{key}.min_length must not be negative")


def parse_profile(
    value: Any,
    config_key: str,
    *,
    default_limit: int,
    default_min_length: int,
) -> SearchProfile:
    """Parse one profile mapping into ``SearchProfile``.

    Raises:
        TypeError: If the profile shape/types are invalid.
        ValueError: If required keys are missing or unknown keys are present.
    """
    if not isinstance(value, Mapping):
        raise TypeError(f"{config_key} must be an object")

    reject_unknown_keys(value, _PROFILE_KEYS, config_key)
    filters = expect_scalar_mapping(value.get("filters"), f"{config_key}.filters")

    return SearchProfile(
        name=expect_str(get_required_value(value, "name", f"{config_key}.name"), f"{config_key}.name").strip(),
        table=expect_str(get_required_value(value, "table", f"{config_key}.table"), f"{config_key}.table").strip(),
        fields=expect_str_tuple(get_required_value(value, "fields", f"{config_key}.fields"), f"{config_key}.fields"),
        columns=expect_str_tuple(value.get("columns", []), f"{config_key}.columns"),
        id_field=expect_str(value.get("id_field", "id"), f"{config_key}.id_field"),
        recency_field=expect_str(value.get("recency_field", "created_at"), f"{config_key}.recency_field"),
        limit=expect_int(value.get("limit", default_limit), f"{config_key}.limit"),
        min_length=expect_int(value.get("min_length", default_min_length), f"{config_key}.min_length"),
        similar=expect_bool(value.get("similar", True), f"{config_key}.similar"),
        filters=filters,
    )
