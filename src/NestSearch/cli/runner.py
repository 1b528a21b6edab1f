"""Command runner for coordinating CLI execution.

Manages component lifecycle, resource cleanup, logging configuration,
and error handling for command execution.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import click

from NestSearch.cli.commands import LoadCommand, ReplayCommand, SearchCommand
from NestSearch.config import AppConfig
from NestSearch.renderers import create_output_writer
from NestSearch.services import create_search_service
from NestSearch.storage import create_row_store
from NestSearch.utils.log import configure_logging, log


class CommandRunner:
    """Orchestrates command execution with proper resource management.

    Handles logging configuration, component creation, source cleanup and
    error handling for CLI commands.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def run_search(
        self,
        action: str,
        *,
        text: str,
        profile_name: str | None = None,
        limit: int | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> None:
        """Execute a one-shot search.

        Raises:
            click.Abort: When the search fails.
        """
        self._configure_logging(action)
        search_service = None
        try:
            profile = self.config.search.profile(profile_name)
            search_service = create_search_service(self.config)
            output_writer = create_output_writer(self.config)
            command = SearchCommand(
                config=self.config,
                search_service=search_service,
                output_writer=output_writer,
                profile=profile,
                text=text,
                limit=limit,
                page=page,
                page_size=page_size,
            )
            command.execute()
            for path in output_writer.finalize(action):
                log.info("Saved %s", path)
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("Search failed: %s", e)
            raise click.Abort from e
        finally:
            if search_service is not None:
                search_service.close()

    def run_replay(
        self,
        action: str,
        *,
        inputs: Sequence[str],
        profile_name: str | None = None,
        interval_ms: int = 100,
        limit: int | None = None,
    ) -> None:
        """Replay typed inputs through a debounced search session.

        Raises:
            click.Abort: When the final search fails.
        """
        self._configure_logging(action)
        search_service = None
        try:
            profile = self.config.search.profile(profile_name)
            search_service = create_search_service(self.config)
            output_writer = create_output_writer(self.config)
            command = ReplayCommand(
                config=self.config,
                search_service=search_service,
                output_writer=output_writer,
                profile=profile,
                inputs=tuple(inputs),
                interval_ms=interval_ms,
                limit=limit,
            )
            command.execute()
            for path in output_writer.finalize(action):
                log.info("Saved %s", path)
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("Replay failed: %s", e)
            raise click.Abort from e
        finally:
            if search_service is not None:
                search_service.close()

    def run_load(self, action: str, *, table: str, path: Path) -> None:
        """Seed a local SQLite table from a JSON file.

        Raises:
            click.Abort: When loading fails.
        """
        self._configure_logging(action)
        try:
            db_manager, row_store = create_row_store(self.config)
            with db_manager:
                LoadCommand(row_store=row_store, table=table, path=path).execute()
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("Load failed: %s", e)
            raise click.Abort from e

    def list_profiles(self) -> None:
        self._configure_logging(None)
        for profile in self.config.search.profiles:
            log.info(
                "%s: table=%s fields=%s limit=%d min_length=%d similar=%s",
                profile.name,
                profile.table,
                ",".join(profile.fields),
                profile.limit,
                profile.min_length,
                profile.similar,
            )

    def _configure_logging(self, action: str | None) -> None:
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
            file_level=self.config.runtime.file_level,
        )
