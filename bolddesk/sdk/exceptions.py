"""Exception hierarchy for the BoldDesk SDK.

Every exception carries an :class:`ErrorKind` tag in ``kind`` so callers can
either ``except`` a specific class or match on the tag::

    try:
        ...
    except BoldDeskError as exc:
        match exc.kind:
            case ErrorKind.RATE_LIMIT_EXCEEDED:
                ...
"""

from __future__ import annotations

import enum
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bolddesk.sdk.models import ErrorBody, ErrorDetail, RateLimitInfo


class ErrorKind(str, enum.Enum):
    NETWORK_FAILURE = "NetworkFailure"
    REQUEST_TIMED_OUT = "RequestTimedOut"
    RESPONSE_PARSE_FAILED = "ResponseParseFailed"
    AUTHENTICATION_FAILED = "AuthenticationFailed"
    ACCESS_DENIED = "AccessDenied"
    VALIDATION_FAILED = "ValidationFailed"
    RATE_LIMIT_EXCEEDED = "RateLimitExceeded"
    NOT_FOUND = "NotFound"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaType"
    SERVER_ERROR = "ServerError"
    GENERIC_API_FAILURE = "GenericApiFailure"
    MALFORMED_FIELD = "MalformedField"


class BoldDeskError(Exception):
    """Base exception for all BoldDesk SDK errors."""

    kind: ErrorKind = ErrorKind.GENERIC_API_FAILURE

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_body: ErrorBody | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_body = error_body
        super().__init__(message)

    @property
    def errors(self) -> list[ErrorDetail]:
        return list(self.error_body.errors) if self.error_body else []

    def has_field_error(self, field: str) -> bool:
        return self.get_field_error(field) is not None

    def get_field_error(self, field: str) -> ErrorDetail | None:
        wanted = field.lower()
        for error in self.errors:
            if error.field.lower() == wanted:
                return error
        return None

    def has_error_type(self, error_type: str) -> bool:
        wanted = error_type.lower()
        return any(e.error_type.lower() == wanted for e in self.errors)

    def __str__(self) -> str:
        base = self.message
        if self.status_code:
            base = f"{self.status_code}: {base}"
        details = [
            f"  - field={e.field!r} type={e.error_type} message={e.error_message}"
            for e in self.errors
            if e.field or e.error_message != self.message
        ]
        if details:
            base += "\n" + "\n".join(details)
        return base

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"status_code={self.status_code}, "
            f"kind={self.kind.value!r})"
        )


# ---------------------------------------------------------------------------
# Transport and decoding
# ---------------------------------------------------------------------------


class NetworkError(BoldDeskError):
    """Connection refused, DNS failure, TLS failure and similar."""

    kind = ErrorKind.NETWORK_FAILURE


class RequestTimeoutError(BoldDeskError):
    """The request did not complete within the configured timeout."""

    kind = ErrorKind.REQUEST_TIMED_OUT


class ResponseParseError(BoldDeskError):
    """A 2xx response body could not be decoded into the expected shape."""

    kind = ErrorKind.RESPONSE_PARSE_FAILED


class MalformedFieldError(BoldDeskError, ValueError):
    """A single JSON field arrived in a shape its decoder does not accept.

    Subclasses :class:`ValueError` so pydantic reports it as a validation
    failure of the enclosing record.
    """

    kind = ErrorKind.MALFORMED_FIELD

    def __init__(self, message: str, value: object = None) -> None:
        super().__init__(message)
        self.value = value


# ---------------------------------------------------------------------------
# HTTP status mapped errors
# ---------------------------------------------------------------------------


class AuthenticationError(BoldDeskError):
    """Raised on 401 responses."""

    kind = ErrorKind.AUTHENTICATION_FAILED


class AccessDeniedError(BoldDeskError):
    """Raised on 403 responses."""

    kind = ErrorKind.ACCESS_DENIED


class ValidationError(BoldDeskError):
    """Raised on 400 responses; exposes per-field error messages."""

    kind = ErrorKind.VALIDATION_FAILED

    @property
    def field_errors(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for error in self.errors:
            if error.field:
                grouped.setdefault(error.field, []).append(error.error_message)
        return grouped


class RateLimitError(BoldDeskError):
    """Raised on 429 responses."""

    kind = ErrorKind.RATE_LIMIT_EXCEEDED

    def __init__(
        self,
        message: str,
        status_code: int | None = 429,
        error_body: ErrorBody | None = None,
        rate_limit_info: RateLimitInfo | None = None,
    ) -> None:
        super().__init__(message, status_code, error_body)
        self.rate_limit_info = rate_limit_info

    def wait_time(self, now: datetime | None = None) -> timedelta | None:
        """Time left until the quota window resets, if known and in the future."""
        if self.rate_limit_info is None:
            return None
        now = now or datetime.now(timezone.utc)
        remaining = self.rate_limit_info.reset - now
        return remaining if remaining > timedelta(0) else None

    def __str__(self) -> str:
        base = super().__str__()
        info = self.rate_limit_info
        if info is None:
            return base
        return (
            f"{base}\nRate limit: {info.limit} calls, remaining {info.remaining}, "
            f"reset {info.reset:%Y-%m-%d %H:%M:%S} UTC"
        )


class NotFoundError(BoldDeskError):
    """Raised on 404 responses."""

    kind = ErrorKind.NOT_FOUND


class MethodNotAllowedError(BoldDeskError):
    """Raised on 405 responses."""

    kind = ErrorKind.METHOD_NOT_ALLOWED


class UnsupportedMediaTypeError(BoldDeskError):
    """Raised on 415 responses."""

    kind = ErrorKind.UNSUPPORTED_MEDIA_TYPE


class ServerError(BoldDeskError):
    """Raised on 500, 502, 503 and 504 responses."""

    kind = ErrorKind.SERVER_ERROR


class ApiError(BoldDeskError):
    """Raised for any other non-2xx status."""

    kind = ErrorKind.GENERIC_API_FAILURE
