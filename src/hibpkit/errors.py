"""
Error taxonomy and result type for HIBP requests.

Every expected failure is reported as a ServiceError wrapped in a
Result; nothing raises across the library boundary for those.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Classified reasons a request can fail."""

    NOT_FOUND = "not_found"
    INVALID_URL = "invalid_url"
    INVALID_RESPONSE = "invalid_response"
    PARSE_ERROR = "parse_error"
    RATE_LIMITED = "rate_limited"
    OFFLINE = "offline"
    ERROR = "error"


class DecodeError(ValueError):
    """Raised by decoders when a payload does not match the expected shape."""


class ServiceError(Exception):
    """A classified failure from the HIBP service or the transport."""

    def __init__(
        self,
        kind: ErrorKind,
        detail: str = "",
        retry_after: int | None = None,
    ):
        super().__init__(kind, detail, retry_after)
        self.kind = kind
        self.detail = detail
        self.retry_after = retry_after

    @classmethod
    def not_found(cls) -> "ServiceError":
        return cls(ErrorKind.NOT_FOUND)

    @classmethod
    def invalid_url(cls) -> "ServiceError":
        return cls(ErrorKind.INVALID_URL)

    @classmethod
    def invalid_response(cls, detail: str) -> "ServiceError":
        return cls(ErrorKind.INVALID_RESPONSE, detail)

    @classmethod
    def parse_error(cls, detail: str) -> "ServiceError":
        return cls(ErrorKind.PARSE_ERROR, detail)

    @classmethod
    def rate_limited(cls, retry_after: int | None, detail: str) -> "ServiceError":
        return cls(ErrorKind.RATE_LIMITED, detail, retry_after)

    @classmethod
    def offline(cls, detail: str) -> "ServiceError":
        return cls(ErrorKind.OFFLINE, detail)

    @classmethod
    def error(cls, detail: str) -> "ServiceError":
        return cls(ErrorKind.ERROR, detail)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ServiceError):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.detail == other.detail
            and self.retry_after == other.retry_after
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.detail, self.retry_after))

    def __repr__(self) -> str:
        if self.kind == ErrorKind.RATE_LIMITED:
            return f"ServiceError.rate_limited({self.retry_after!r}, {self.detail!r})"
        if self.detail:
            return f"ServiceError.{self.kind.value}({self.detail!r})"
        return f"ServiceError.{self.kind.value}()"

    def __str__(self) -> str:
        if self.kind == ErrorKind.NOT_FOUND:
            return "Not found"
        if self.kind == ErrorKind.INVALID_URL:
            return "Invalid request URL"
        if self.kind == ErrorKind.RATE_LIMITED:
            hint = f" Retry after {self.retry_after}s." if self.retry_after is not None else ""
            return f"Rate limited.{hint} {self.detail}".rstrip()
        return self.detail or self.kind.value


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a success value or a ServiceError, never both."""

    value: T | None = None
    error: ServiceError | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ServiceError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        """True when the result holds a value."""
        return self.error is None

    def get(self) -> T:
        """Return the success value or raise the ServiceError."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
