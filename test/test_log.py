"""Tests for logger configuration."""

from __future__ import annotations

import logging
import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from NestSearch.utils.log import configure_logging, log


class TestConfigureLogging(unittest.TestCase):
    def tearDown(self) -> None:
        for handler in log.handlers:
            handler.close()
        log.handlers.clear()

    def test_console_only(self) -> None:
        self.assertIsNone(configure_logging(level="warning", action="search", log_to_file=False))
        self.assertEqual(len(log.handlers), 1)
        self.assertEqual(log.handlers[0].level, logging.WARNING)
        self.assertFalse(log.propagate)

    def test_file_mirror_uses_its_own_level(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = configure_logging(level="INFO", action="replay", log_to_file=True, log_dir=tmp, file_level="DEBUG")
            log.debug("dropped stale response seq=%d", 3)
            for handler in log.handlers:
                handler.flush()

            self.assertIsNotNone(path)
            self.assertEqual(path.parent, Path(tmp) / "replay")
            self.assertIn("[DEBG] dropped stale response seq=3", path.read_text(encoding="utf-8"))
            self.tearDown()

    def test_reconfiguring_replaces_handlers(self) -> None:
        configure_logging(level="INFO")
        configure_logging(level="DEBUG")
        self.assertEqual(len(log.handlers), 1)
        self.assertEqual(log.level, logging.DEBUG)

    def test_unknown_level_falls_back_to_info(self) -> None:
        configure_logging(level="loud")
        self.assertEqual(log.handlers[0].level, logging.INFO)


if __name__ == "__main__":
    unittest.main()
