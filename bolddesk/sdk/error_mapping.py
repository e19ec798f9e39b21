"""Translate non-2xx responses into SDK exceptions."""

from __future__ import annotations

import json
from typing import NoReturn

import pydantic

from bolddesk.sdk.exceptions import (
    AccessDeniedError,
    ApiError,
    AuthenticationError,
    BoldDeskError,
    MethodNotAllowedError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from bolddesk.sdk.models import ErrorBody, ErrorDetail, ErrorType, RateLimitInfo

_SERVER_ERROR_MESSAGE = "Unable to process your request. Please try again later"

# status -> (exception class, default message, synthetic field, synthetic message, error type)
_STATUS_MAP: dict[int, tuple[type[BoldDeskError], str, str, str | None, str]] = {
    401: (
        AuthenticationError,
        "Authentication failed. Please verify your API key.",
        "User",
        "Unauthorized",
        ErrorType.UNAUTHORIZED,
    ),
    403: (
        AccessDeniedError,
        "Access denied. Your API key may not have permission to access this resource.",
        "UserID",
        "Access Denied",
        ErrorType.ACCESS_DENIED,
    ),
    # None: the raw body text becomes the error message
    400: (ValidationError, "Validation failed", "", None, ErrorType.INVALID_VALUE),
    429: (
        RateLimitError,
        "Rate limit exceeded",
        "",
        "API calls quota exceeded",
        ErrorType.API_CALL_QUOTA_EXCEEDED,
    ),
    404: (NotFoundError, "Resource not found", "", "Not found", ErrorType.NOT_FOUND),
    405: (
        MethodNotAllowedError,
        "Method not allowed",
        "",
        "Method not allowed",
        ErrorType.METHOD_NOT_ALLOWED,
    ),
    415: (
        UnsupportedMediaTypeError,
        "Unsupported media type",
        "",
        "Unsupported Media Type",
        ErrorType.UNSUPPORTED_MEDIA_TYPE,
    ),
}
for _status in (500, 502, 503, 504):
    _STATUS_MAP[_status] = (
        ServerError,
        _SERVER_ERROR_MESSAGE,
        "",
        _SERVER_ERROR_MESSAGE,
        ErrorType.UNKNOWN_ERROR,
    )


def parse_error_body(status_code: int, raw_body: str) -> ErrorBody | None:
    """Decode an error response body.

    Returns ``None`` for an empty body. A non-empty body that is not a JSON
    object of the expected shape is wrapped verbatim in a synthetic
    ``UnknownError`` body.
    """
    if not raw_body or not raw_body.strip():
        return None
    try:
        data = json.loads(raw_body)
        if data is None:
            return None
        if isinstance(data, dict):
            return ErrorBody.model_validate(data)
    except (ValueError, pydantic.ValidationError):
        pass
    return ErrorBody(
        message=raw_body,
        status_code=status_code,
        errors=[
            ErrorDetail(
                field="",
                error_message=raw_body,
                error_type=ErrorType.UNKNOWN_ERROR,
            )
        ],
    )


def _default_body(
    status_code: int, message: str, field: str, error_message: str, error_type: str
) -> ErrorBody:
    return ErrorBody(
        message=message,
        status_code=status_code,
        errors=[
            ErrorDetail(field=field, error_message=error_message, error_type=error_type)
        ],
    )


def classify_error(
    status_code: int,
    raw_body: str,
    rate_limit_info: RateLimitInfo | None = None,
) -> NoReturn:
    """Raise the exception matching *status_code*.

    Known statuses fall back to a fixed message and a synthetic error body
    when the server sent nothing usable; any other status raises
    :class:`ApiError` with the server's message when one is present.
    """
    body = parse_error_body(status_code, raw_body)

    entry = _STATUS_MAP.get(status_code)
    if entry is None:
        message = (
            body.message
            if body is not None and body.message
            else f"API request failed with status {status_code}"
        )
        raise ApiError(message, status_code, body)

    exc_cls, default_message, field, error_message, error_type = entry
    if body is None:
        body = _default_body(
            status_code,
            default_message,
            field,
            raw_body if error_message is None else error_message,
            error_type,
        )
    message = body.message or default_message

    if exc_cls is RateLimitError:
        raise RateLimitError(message, status_code, body, rate_limit_info)
    raise exc_cls(message, status_code, body)
