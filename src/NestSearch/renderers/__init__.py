"""Output renderers for merged search results.

``create_output_writer`` builds one writer per configured format; the CLI
runner feeds every result of an action to it and finalizes it once.
"""

from __future__ import annotations

from typing import Callable

from NestSearch.config import AppConfig
from NestSearch.config.output import OutputConfig
from NestSearch.renderers.base import MultiOutputWriter, OutputWriter
from NestSearch.renderers.console import ConsoleOutputWriter, render_text
from NestSearch.renderers.json import JsonFileWriter, render_json

_WRITER_FACTORIES: dict[str, Callable[[OutputConfig], OutputWriter]] = {
    "console": lambda output: ConsoleOutputWriter(),
    "json": lambda output: JsonFileWriter(output.base_dir),
}


def create_output_writer(config: AppConfig) -> OutputWriter:
    """Create the writer for ``output.formats``.

    Raises:
        ValueError: If no format is configured or a format has no writer.
    """
    writers: list[OutputWriter] = []
    for output_format in config.output.formats:
        factory = _WRITER_FACTORIES.get(output_format)
        if factory is None:
            raise ValueError(f"No writer for output format: {output_format}")
        writers.append(factory(config.output))

    if not writers:
        raise ValueError("No output writers configured")
    if len(writers) == 1:
        return writers[0]
    return MultiOutputWriter(writers)


__all__ = [
    "OutputWriter",
    "ConsoleOutputWriter",
    "JsonFileWriter",
    "MultiOutputWriter",
    "render_json",
    "render_text",
    "create_output_writer",
]
