"""PostgREST HTTP client for hosted database-as-a-service tables."""

from __future__ import annotations

import random
import time
from typing import Any, Sequence

import requests

from NestSearch.utils.log import log

DEFAULT_TIMEOUT = 15.0
MAX_ATTEMPTS = 3
BASE_PAUSE = 0.5
MAX_SLEEP = 4.0
RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class PostgrestClient:
    """Low-level HTTP client for a PostgREST ``/rest/v1`` endpoint."""

    def __init__(self, base_url: str, api_key: str | None = None, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize the client with a reusable HTTP session.

        Args:
            base_url: REST root, e.g. ``https://<project>.supabase.co/rest/v1``.
            api_key: Anonymous (or service) key sent as ``apikey`` and bearer token.
            timeout: Request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "User-Agent": "nest-search/0.1",
        })
        if api_key:
            self._session.headers.update({
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            })

    def close(self) -> None:
        self._session.close()

    def select(self, table: str, params: Sequence[tuple[str, str]]) -> list[dict[str, Any]]:
        """Read rows from ``table``.

        Args:
            table: Table or view name.
            params: Compiled PostgREST query parameters.

        Returns:
            Row mappings in server order.

        Raises:
            requests.RequestException: On transport failures or error status codes.
            ValueError: If the response body is not a JSON list.
        """
        url = f"{self.base_url}/{table}"
        response = self._get_with_retry(url, params=list(params))
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, list):
            raise ValueError(f"Unexpected PostgREST payload for {table}: {type(payload).__name__}")
        return [row for row in payload if isinstance(row, dict)]

    def _get_with_retry(self, url: str, *, params: list[tuple[str, str]]) -> requests.Response:
        """Issue GET with retries for transient failures."""
        last_error: Exception | None = None
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                response = self._session.get(url, params=params, timeout=self.timeout)
                if response.status_code in RETRYABLE_STATUS:
                    raise requests.HTTPError(f"HTTP {response.status_code}", response=response)
                return response
            except (requests.Timeout, requests.ConnectionError, requests.HTTPError) as error:
                last_error = error
                if isinstance(error, requests.HTTPError):
                    status_code = getattr(error.response, "status_code", None)
                    if status_code not in RETRYABLE_STATUS:
                        raise
                if attempt < MAX_ATTEMPTS:
                    delay = min(BASE_PAUSE * (2 ** (attempt - 1)) + random.uniform(0, 0.2), MAX_SLEEP)
                    log.debug("PostgREST retry attempt=%d/%d delay=%.2fs error=%s", attempt, MAX_ATTEMPTS, delay, error)
                    time.sleep(delay)

        assert last_error is not None
        raise last_error
