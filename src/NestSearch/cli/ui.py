"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to their respective runners.
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from NestSearch.cli.runner import CommandRunner
from NestSearch.config import DEFAULT_CONFIG_PATH, load_config_with_defaults


@click.group(help="NestSearch: exact + similar text search over portal tables.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to YAML config file, merged over the defaults.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Loads environment variables from .env file before processing config.
    """
    load_dotenv()

    ctx.obj = load_config_with_defaults(config_path)


@cli.command("search")
@click.argument("text")
@click.option("--profile", "profile_name", default=None, help="Search profile name (default: first profile).")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Result cap (default: profile limit).")
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True, help="Page to show.")
@click.option("--page-size", type=click.IntRange(min=1), default=None, help="Paginate results.")
@click.pass_context
def search_cmd(
    ctx: click.Context,
    text: str,
    profile_name: str | None,
    limit: int | None,
    page: int,
    page_size: int | None,
) -> None:
    """Search TEXT once, without debouncing."""
    runner = CommandRunner(ctx.obj)
    runner.run_search(
        action=ctx.command.name,
        text=text,
        profile_name=profile_name,
        limit=limit,
        page=page,
        page_size=page_size,
    )


@cli.command("replay")
@click.argument("inputs", nargs=-1, required=True)
@click.option("--profile", "profile_name", default=None, help="Search profile name (default: first profile).")
@click.option(
    "--interval-ms",
    type=click.IntRange(min=0),
    default=100,
    show_default=True,
    help="Delay between successive inputs.",
)
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Result cap (default: profile limit).")
@click.pass_context
def replay_cmd(
    ctx: click.Context,
    inputs: tuple[str, ...],
    profile_name: str | None,
    interval_ms: int,
    limit: int | None,
) -> None:
    """Type INPUTS one after another into a debounced search box.

    Inputs closer together than the debounce delay never reach the source;
    only the settled ones do, and only the latest settled result is shown.
    """
    runner = CommandRunner(ctx.obj)
    runner.run_replay(
        action=ctx.command.name,
        inputs=inputs,
        profile_name=profile_name,
        interval_ms=interval_ms,
        limit=limit,
    )


@cli.command("profiles")
@click.pass_context
def profiles_cmd(ctx: click.Context) -> None:
    """List configured search profiles."""
    CommandRunner(ctx.obj).list_profiles()


@cli.command("load")
@click.argument("table")
@click.argument("json_file", type=click.Path(path_type=Path, dir_okay=False, exists=True))
@click.pass_context
def load_cmd(ctx: click.Context, table: str, json_file: Path) -> None:
    """Load rows for TABLE from JSON_FILE into the local SQLite database."""
    CommandRunner(ctx.obj).run_load(action=ctx.command.name, table=table, path=json_file)
