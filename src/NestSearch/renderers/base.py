"""Writer interface shared by console and file outputs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from NestSearch.core.models import MergedResult, SearchRequest
from NestSearch.core.profile import SearchProfile


class OutputWriter(ABC):
    """Receives every merged result of one CLI action, then a single ``finalize``."""

    @abstractmethod
    def write_result(
        self,
        result: MergedResult,
        request: SearchRequest,
        profile: SearchProfile,
    ) -> None:
        """Render or buffer one merged result.

        Args:
            result: Merged exact/similar records.
            request: The request that produced them.
            profile: Profile that was searched.
        """

    def finalize(self, action: str) -> list[Path]:
        """Flush buffered output for ``action``.

        Returns:
            Files written, empty for writers that render immediately.
        """
        return []


@dataclass(slots=True)
class MultiOutputWriter(OutputWriter):
    """Fan results out to several writers in configuration order."""

    writers: Sequence[OutputWriter]

    def write_result(
        self,
        result: MergedResult,
        request: SearchRequest,
        profile: SearchProfile,
    ) -> None:
        for writer in self.writers:
            writer.write_result(result, request, profile)

    def finalize(self, action: str) -> list[Path]:
        written: list[Path] = []
        for writer in self.writers:
            written.extend(writer.finalize(action))
        return written
