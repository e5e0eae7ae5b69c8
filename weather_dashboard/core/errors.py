"""
Error taxonomy shared by every source fetcher.

Fetchers raise SourceError subclasses; the aggregation engine converts them
into Failure outcomes without looking at the kind. Outer layers (CLI, any
HTTP boundary) use the kind to pick an exit code or status code.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Category of an upstream failure."""

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    UPSTREAM_MALFORMED = "upstream_malformed"
    UNKNOWN = "unknown"


class SourceError(Exception):
    """Base error for a failed upstream call.

    Attributes:
        message: Human-readable description, surfaced in the error list
        kind: ErrorKind used by outer layers to map status codes
    """

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class NotFoundError(SourceError):
    kind = ErrorKind.NOT_FOUND


class UnauthorizedError(SourceError):
    kind = ErrorKind.UNAUTHORIZED


class RateLimitedError(SourceError):
    kind = ErrorKind.RATE_LIMITED


class SourceTimeoutError(SourceError):
    kind = ErrorKind.TIMEOUT


class UpstreamMalformedError(SourceError):
    kind = ErrorKind.UPSTREAM_MALFORMED


class ConfigError(RuntimeError):
    """Raised when required configuration (e.g. an API key) is missing."""


_ERROR_TYPES: dict[ErrorKind, type[SourceError]] = {
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.UNAUTHORIZED: UnauthorizedError,
    ErrorKind.RATE_LIMITED: RateLimitedError,
    ErrorKind.TIMEOUT: SourceTimeoutError,
    ErrorKind.UPSTREAM_MALFORMED: UpstreamMalformedError,
    ErrorKind.UNKNOWN: SourceError,
}

_HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.UPSTREAM_MALFORMED: 502,
    ErrorKind.UNKNOWN: 500,
}

_EXIT_CODES: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 2,
    ErrorKind.UNAUTHORIZED: 3,
    ErrorKind.RATE_LIMITED: 4,
    ErrorKind.TIMEOUT: 5,
    ErrorKind.UPSTREAM_MALFORMED: 6,
    ErrorKind.UNKNOWN: 1,
}


def kind_for_status(status_code: int) -> ErrorKind:
    """Map an upstream HTTP status code to an ErrorKind."""
    if status_code in (401, 403):
        return ErrorKind.UNAUTHORIZED
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    return ErrorKind.UNKNOWN


def error_for_status(status_code: int, message: str) -> SourceError:
    """Build the SourceError subclass matching an HTTP status code."""
    kind = kind_for_status(status_code)
    return _ERROR_TYPES[kind](message)


def http_status_for(kind: ErrorKind) -> int:
    return _HTTP_STATUS[kind]


def exit_code_for(kind: ErrorKind) -> int:
    return _EXIT_CODES[kind]


__all__ = [
    "ErrorKind",
    "SourceError",
    "NotFoundError",
    "UnauthorizedError",
    "RateLimitedError",
    "SourceTimeoutError",
    "UpstreamMalformedError",
    "ConfigError",
    "kind_for_status",
    "error_for_status",
    "http_status_for",
    "exit_code_for",
]
