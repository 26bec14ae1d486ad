"""Custom exceptions for the CouchDB client."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NormalizedError:
    """Uniform shape of every failed gateway call.

    Attributes:
        error: The underlying exception (HTTP status error, connection error, ...)
        status: HTTP status code, 500 when the failure carried none
        message: Human-readable description of the status
        duration: Elapsed time in milliseconds
    """

    error: BaseException
    status: int
    message: str
    duration: float


class CouchError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class CouchConfigError(CouchError):
    """No database name was supplied and no default is configured."""
    pass


class CouchValidationError(CouchError):
    """A locally checkable argument is invalid."""
    pass


class CouchRequestError(CouchError):
    """The request failed in transport or the server returned an error status."""

    def __init__(self, normalized: NormalizedError):
        super().__init__(normalized.message)
        self.normalized = normalized

    @property
    def error(self) -> BaseException:
        return self.normalized.error

    @property
    def status(self) -> int:
        return self.normalized.status

    @property
    def duration(self) -> float:
        return self.normalized.duration

    def __str__(self) -> str:
        return f"HTTP {self.status}: {self.message}"
