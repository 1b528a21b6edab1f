"""Command line interface: ``nest-search search|replay|profiles|load``."""

from __future__ import annotations

from NestSearch.cli.runner import CommandRunner
from NestSearch.cli.ui import cli

__all__ = ["CommandRunner", "cli", "main"]


def main() -> None:
    """Console script entry point."""
    cli(prog_name="nest-search")
