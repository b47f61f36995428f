"""
Error kinds produced by the correlation protocol.

Protocol operations return a :class:`RelayError` value instead of raising, so
the HTTP layer decides how each kind is rendered. Infrastructure problems are
the exception: they surface as :class:`KeyValueStoreError` (or the HTTP
client's own errors) and are handled by the request boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Optional


class ErrorKind(str, Enum):
    """Categories of protocol failure."""

    MISSING_PARAMETER = "missing_parameter"
    UNKNOWN_OR_EXPIRED_STATE = "unknown_or_expired_state"
    UPSTREAM_EXCHANGE_FAILURE = "upstream_exchange_failure"
    NOT_FOUND = "not_found"


_DEFAULT_STATUS = {
    ErrorKind.MISSING_PARAMETER: HTTPStatus.BAD_REQUEST,
    ErrorKind.UNKNOWN_OR_EXPIRED_STATE: HTTPStatus.BAD_REQUEST,
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
}


@dataclass(frozen=True)
class RelayError:
    """A non-successful protocol outcome.

    ``upstream_status`` is only set for upstream exchange failures, where the
    provider's status code is passed through unchanged.
    """

    kind: ErrorKind
    message: str = ""
    upstream_status: Optional[int] = None

    @property
    def status_code(self) -> int:
        if self.upstream_status is not None:
            return self.upstream_status
        return int(_DEFAULT_STATUS.get(self.kind, HTTPStatus.INTERNAL_SERVER_ERROR))

    @classmethod
    def missing_parameter(cls, message: str) -> "RelayError":
        return cls(ErrorKind.MISSING_PARAMETER, message)

    @classmethod
    def unknown_state(cls) -> "RelayError":
        return cls(ErrorKind.UNKNOWN_OR_EXPIRED_STATE, "No read key found in storage")

    @classmethod
    def not_found(cls) -> "RelayError":
        return cls(ErrorKind.NOT_FOUND)

    @classmethod
    def upstream(cls, status_code: int, reason: str) -> "RelayError":
        return cls(ErrorKind.UPSTREAM_EXCHANGE_FAILURE, reason, status_code)


class KeyValueStoreError(Exception):
    """Raised when the ephemeral store cannot be reached or fails an operation."""


__all__ = ["ErrorKind", "KeyValueStoreError", "RelayError"]
