"""Timer-reset debouncing on an asyncio event loop."""

from __future__ import annotations

import asyncio
from typing import Callable, Generic, TypeVar

from NestSearch.utils.log import log

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Settle a rapidly changing value after ``delay_ms`` of quiet.

    Every observation cancels the outstanding timer before scheduling a new
    one, so at most one timer is pending at any time. The future returned by
    a superseded observation is cancelled.
    """

    def __init__(
        self,
        delay_ms: int,
        on_settle: Callable[[T], None] | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize the debouncer.

        Args:
            delay_ms: Quiet period in milliseconds; 0 settles on the next loop turn.
            on_settle: Optional callback invoked with each settled value.
            loop: Event loop for timers; defaults to the running loop at first use.
        """
        if delay_ms < 0:
            raise ValueError("delay_ms must not be negative")
        self.delay_ms = delay_ms
        self.on_settle = on_settle
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._future: asyncio.Future[T] | None = None
        self._has_value = False
        self._value: T | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def value(self) -> T | None:
        """Last settled value, or None before the first settle."""
        return self._value

    @property
    def has_value(self) -> bool:
        return self._has_value

    def observe(self, value: T) -> asyncio.Future[T]:
        """Record a new input value and restart the quiet period.

        Returns:
            Future resolved with ``value`` once it settles, or cancelled if a
            newer observation supersedes it.
        """
        loop = self._get_loop()
        self.cancel()
        future: asyncio.Future[T] = loop.create_future()
        self._future = future
        self._handle = loop.call_later(self.delay_ms / 1000, self._fire, value, future)
        return future

    def cancel(self) -> None:
        """Drop the pending timer, if any, and cancel its future."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._future is not None and not self._future.done():
            self._future.cancel()
        self._future = None

    def _fire(self, value: T, future: asyncio.Future[T]) -> None:
        self._handle = None
        self._future = None
        self._value = value
        self._has_value = True
        if not future.done():
            future.set_result(value)
        if self.on_settle is not None:
            try:
                self.on_settle(value)
            except Exception:  # noqa: BLE001 - timer callbacks have no caller to propagate to
                log.exception("Debounce settle callback failed")

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop
