from __future__ import annotations


class RemoteFailure(RuntimeError):
    """A data source rejected or could not serve a query.

    Covers network errors, malformed filters and server-side errors alike;
    callers are not expected to distinguish between them.

    Attributes:
        source: Name of the source that failed.
        cause: Underlying exception, if any.
    """

    def __init__(self, message: str, *, source: str = "unknown", cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.source = source
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.source}: {self.args[0]}"
