"""Package logger for NestSearch.

Every module logs through ``log``; CLI actions call ``configure_logging`` once
to attach console and optional file handlers.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Final


_LEVEL_TAGS: Final[dict[int, str]] = {
    logging.DEBUG: "DEBG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERRO",
    logging.CRITICAL: "ERRO",
}

_LOG_FORMAT: Final[str] = "%(asctime)s [%(levelabbr)s] %(message)s"
_DATE_FORMAT: Final[str] = "%m-%d %H:%M:%S"


class _AbbrevLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - record is stdlib name
        """Attach the four-letter level tag before formatting."""
        record.levelabbr = _LEVEL_TAGS.get(record.levelno, record.levelname[:4])
        return super().format(record)


log = logging.getLogger("NestSearch")


def _resolve_level(name: str | None, default: int) -> int:
    value = logging.getLevelName((name or "").upper())
    return value if isinstance(value, int) else default


def configure_logging(
    *,
    level: str = "INFO",
    action: str | None = None,
    log_to_file: bool = False,
    log_dir: str = "log",
    file_level: str = "DEBUG",
) -> Path | None:
    """Route the package logger to the console and, optionally, a per-action file.

    Console lines look like ``05-01 10:00:00 [INFO] message``. Calling this
    again replaces the handlers installed by the previous call.

    Returns:
        Path of the log file, or None when logging only to the console.
    """
    console_level = _resolve_level(level, logging.INFO)
    formatter = _AbbrevLevelFormatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(formatter)
    handlers: list[logging.Handler] = [console]
    logger_level = console_level

    log_path: Path | None = None
    if log_to_file and action:
        action_dir = Path(log_dir or "log") / action
        action_dir.mkdir(parents=True, exist_ok=True)
        log_path = action_dir / f"{action}_{datetime.now():%m%d%H%M%S}.log"
        mirror_level = _resolve_level(file_level, logging.DEBUG)
        mirror = logging.FileHandler(log_path, encoding="utf-8")
        mirror.setLevel(mirror_level)
        mirror.setFormatter(formatter)
        handlers.append(mirror)
        logger_level = min(logger_level, mirror_level)

    for handler in log.handlers:
        handler.close()
    log.handlers[:] = handlers
    log.setLevel(logger_level)
    log.propagate = False
    if log_path is not None:
        log.debug("Mirroring log to %s", log_path)
    return log_path
