"""PostgREST source adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from NestSearch.core.errors import RemoteFailure
from NestSearch.core.query import QueryDescriptor
from NestSearch.sources.postgrest.client import PostgrestClient
from NestSearch.sources.postgrest.query import compile_postgrest_params


@dataclass(slots=True)
class PostgrestSource:
    """Source adapter for tables served over PostgREST."""

    client: PostgrestClient
    name: str = "postgrest"

    def fetch(self, descriptor: QueryDescriptor) -> list[dict[str, Any]]:
        """Compile ``descriptor`` into URL parameters and read the rows.

        Raises:
            RemoteFailure: On network errors, rejected filters or server errors.
        """
        params = compile_postgrest_params(descriptor)
        try:
            return self.client.select(descriptor.table, params)
        except (requests.RequestException, ValueError) as error:
            raise RemoteFailure(_describe(error), source=self.name, cause=error) from error

    def close(self) -> None:
        self.client.close()


def _describe(error: Exception) -> str:
    # PostgREST error bodies carry a human readable "message".
    response = getattr(error, "response", None)
    if response is not None:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return f"HTTP {response.status_code}: {body['message']}"
    return str(error) or error.__class__.__name__
