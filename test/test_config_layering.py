"""Tests for layered config parsing and validation."""

import os
import sys
import tempfile
import unittest
from copy import deepcopy
from pathlib import Path
from unittest.mock import patch

import yaml

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from NestSearch.config import load_config_with_defaults, parse_config_dict
from NestSearch.config.app import merge_config_dicts, parse_yaml


def _base_raw_config() -> dict:
    return {
        "log": {"level": "INFO", "to_file": False, "dir": "log"},
        "source": {"kind": "sqlite", "db_path": "database/portal.db", "timeout": 15},
        "search": {
            "debounce_ms": 300,
            "limit": 12,
            "min_length": 1,
            "profiles": [
                {
                    "name": "resources",
                    "table": "resources",
                    "fields": ["title", "subject"],
                    "recency_field": "uploaded_at",
                },
                {
                    "name": "questions",
                    "table": "queries",
                    "fields": "text",
                    "limit": 6,
                    "min_length": 3,
                    "similar": False,
                    "filters": {"hidden": False},
                },
            ],
        },
        "output": {"base_dir": "output", "formats": ["console"]},
    }


class TestConfigParsing(unittest.TestCase):
    def test_parses_profiles_with_defaults(self) -> None:
        cfg = parse_config_dict(_base_raw_config())

        resources = cfg.search.profile("resources")
        questions = cfg.search.profile("questions")
        self.assertEqual(resources.fields, ("title", "subject"))
        self.assertEqual(resources.limit, 12)
        self.assertTrue(resources.similar)
        self.assertEqual(questions.fields, ("text",))
        self.assertEqual(questions.min_length, 3)
        self.assertFalse(questions.similar)
        self.assertEqual(dict(questions.filters), {"hidden": False})
        self.assertEqual(cfg.search.profile().name, "resources")
        self.assertEqual(cfg.source.timeout, 15.0)

    def test_unknown_profile_name_raises_key_error(self) -> None:
        cfg = parse_config_dict(_base_raw_config())
        with self.assertRaises(KeyError):
            cfg.search.profile("missing")

    def test_duplicate_profile_names_rejected(self) -> None:
        raw = _base_raw_config()
        raw["search"]["profiles"][1]["name"] = "resources"
        with self.assertRaisesRegex(ValueError, "duplicated"):
            parse_config_dict(raw)

    def test_unknown_profile_key_rejected(self) -> None:
        raw = _base_raw_config()
        raw["search"]["profiles"][0]["fuzzy"] = True
        with self.assertRaisesRegex(ValueError, "unknown keys"):
            parse_config_dict(raw)

    def test_empty_fields_rejected(self) -> None:
        raw = _base_raw_config()
        raw["search"]["profiles"][0]["fields"] = []
        with self.assertRaisesRegex(ValueError, "fields"):
            parse_config_dict(raw)

    def test_non_scalar_filter_rejected(self) -> None:
        raw = _base_raw_config()
        raw["search"]["profiles"][1]["filters"] = {"status": ["OPEN"]}
        with self.assertRaises(TypeError):
            parse_config_dict(raw)

    def test_missing_search_limit_rejected(self) -> None:
        raw = _base_raw_config()
        del raw["search"]["limit"]
        with self.assertRaisesRegex(ValueError, "search.limit"):
            parse_config_dict(raw)

    def test_boolean_is_not_an_integer(self) -> None:
        raw = _base_raw_config()
        raw["search"]["debounce_ms"] = True
        with self.assertRaises(TypeError):
            parse_config_dict(raw)

    def test_negative_debounce_rejected(self) -> None:
        raw = _base_raw_config()
        raw["search"]["debounce_ms"] = -1
        with self.assertRaises(ValueError):
            parse_config_dict(raw)

    def test_unknown_source_kind_rejected(self) -> None:
        raw = _base_raw_config()
        raw["source"] = {"kind": "mongo"}
        with self.assertRaisesRegex(ValueError, "source.kind"):
            parse_config_dict(raw)

    def test_unknown_source_key_rejected(self) -> None:
        raw = _base_raw_config()
        raw["source"]["dsn"] = "postgres://"
        with self.assertRaisesRegex(ValueError, "unknown keys"):
            parse_config_dict(raw)

    def test_postgrest_requires_url(self) -> None:
        raw = _base_raw_config()
        raw["source"] = {"kind": "postgrest"}
        with self.assertRaisesRegex(ValueError, "source.url"):
            parse_config_dict(raw)

    def test_sqlite_requires_plain_identifiers(self) -> None:
        raw = _base_raw_config()
        raw["search"]["profiles"][0]["fields"] = ["title", "subject name"]
        with self.assertRaisesRegex(ValueError, "SQL identifier"):
            parse_config_dict(raw)

    def test_postgrest_allows_any_column_name(self) -> None:
        raw = _base_raw_config()
        raw["source"] = {"kind": "postgrest", "url": "https://example.test/rest/v1"}
        raw["search"]["profiles"][0]["fields"] = ["title", "subject name"]
        cfg = parse_config_dict(raw)
        self.assertEqual(cfg.search.profiles[0].fields, ("title", "subject name"))

    def test_unknown_output_format_rejected(self) -> None:
        raw = _base_raw_config()
        raw["output"]["formats"] = ["console", "html"]
        with self.assertRaisesRegex(ValueError, "unknown formats"):
            parse_config_dict(raw)

    def test_log_section_is_optional(self) -> None:
        raw = _base_raw_config()
        del raw["log"]
        cfg = parse_config_dict(raw)
        self.assertEqual((cfg.runtime.level, cfg.runtime.to_file, cfg.runtime.file_level), ("INFO", False, "DEBUG"))

    def test_unknown_log_level_rejected(self) -> None:
        raw = _base_raw_config()
        raw["log"]["file_level"] = "verbose"
        with self.assertRaisesRegex(ValueError, "log.file_level"):
            parse_config_dict(raw)

    def test_api_key_is_read_from_environment(self) -> None:
        raw = _base_raw_config()
        raw["source"] = {
            "kind": "postgrest",
            "url": "https://example.test/rest/v1",
            "api_key_env": "NEST_SEARCH_TEST_KEY",
        }
        cfg = parse_config_dict(raw)

        with patch.dict(os.environ, {"NEST_SEARCH_TEST_KEY": "anon"}, clear=False):
            self.assertEqual(cfg.source.api_key, "anon")
        with patch.dict(os.environ, {}, clear=True):
            self.assertIsNone(cfg.source.api_key)


class TestConfigLayering(unittest.TestCase):
    def test_merge_is_deep_and_replaces_lists(self) -> None:
        base = _base_raw_config()
        override = {
            "search": {"limit": 5, "profiles": [{"name": "notes", "table": "notes", "fields": ["body"]}]},
            "log": {"level": "DEBUG"},
        }

        merged = merge_config_dicts(base, override)

        self.assertEqual(merged["search"]["limit"], 5)
        self.assertEqual(merged["search"]["debounce_ms"], 300)
        self.assertEqual([p["name"] for p in merged["search"]["profiles"]], ["notes"])
        self.assertEqual(merged["log"], {"level": "DEBUG", "to_file": False, "dir": "log"})
        self.assertEqual(base["search"]["limit"], 12)

    def test_merge_does_not_mutate_inputs(self) -> None:
        base = _base_raw_config()
        snapshot = deepcopy(base)
        merge_config_dicts(base, {"source": {"timeout": 3}})
        self.assertEqual(base, snapshot)

    def test_override_file_layers_over_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            override = Path(tmp) / "local.yml"
            override.write_text("search:\n  debounce_ms: 50\nsource:\n  db_path: other.db\n", encoding="utf-8")

            cfg = load_config_with_defaults(override, default_path=REPO_ROOT / "config" / "default.yml")

        self.assertEqual(cfg.search.debounce_ms, 50)
        self.assertEqual(cfg.source.db_path, "other.db")
        self.assertEqual([p.name for p in cfg.search.profiles], ["resources", "questions", "my-queries"])

    def test_default_file_parses(self) -> None:
        cfg = load_config_with_defaults(REPO_ROOT / "config" / "default.yml", default_path=REPO_ROOT / "config" / "default.yml")
        self.assertEqual(cfg.source.kind, "sqlite")
        self.assertEqual(cfg.search.profile("questions").filters, {"hidden": False})

    def test_missing_defaults_file_uses_override_alone(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            override = Path(tmp) / "local.yml"
            override.write_text(yaml.safe_dump(_base_raw_config()), encoding="utf-8")

            cfg = load_config_with_defaults(override, default_path=Path(tmp) / "missing.yml")

        self.assertEqual([p.name for p in cfg.search.profiles], ["resources", "questions"])

    def test_yaml_root_must_be_mapping(self) -> None:
        with self.assertRaises(ValueError):
            parse_yaml("- a\n- b\n")


if __name__ == "__main__":
    unittest.main()
