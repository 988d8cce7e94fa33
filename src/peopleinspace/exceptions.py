"""Custom exception hierarchy for peopleinspace."""

from __future__ import annotations


class PeopleInSpaceError(Exception):
    """Base exception for all peopleinspace errors."""


class ConfigError(PeopleInSpaceError):
    """Invalid or missing configuration."""


class NetworkError(PeopleInSpaceError):
    """Transient HTTP-level failure (connectivity, timeout, non-2xx status)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class DecodeError(PeopleInSpaceError):
    """Response body is not valid JSON or does not match the expected shape.

    Not worth retrying: the same payload will fail the same way until the
    model is updated.
    """

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class StorageError(PeopleInSpaceError):
    """Local database unavailable, corrupted, or a transaction failed."""


class SyncError(PeopleInSpaceError):
    """A sync attempt failed before anything was written to the store.

    ``cause`` is the underlying :class:`NetworkError` or
    :class:`DecodeError`; it is also chained as ``__cause__``.
    """

    def __init__(self, message: str, *, cause: NetworkError | DecodeError) -> None:
        self.cause = cause
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """Whether retrying later can reasonably succeed."""
        return isinstance(self.cause, NetworkError)
