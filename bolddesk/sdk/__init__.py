"""BoldDesk Python SDK: a typed async client for the BoldDesk helpdesk API."""

from __future__ import annotations

from bolddesk.sdk.client import AsyncBoldDeskClient
from bolddesk.sdk.exceptions import (
    AccessDeniedError,
    ApiError,
    AuthenticationError,
    BoldDeskError,
    ErrorKind,
    MalformedFieldError,
    MethodNotAllowedError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    ResponseParseError,
    ServerError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from bolddesk.sdk.models import DecodeOptions, ErrorType, Page, RateLimitInfo
from bolddesk.sdk.pagination import EnumerationProgress, EnumeratorState, PageEnumerator
from bolddesk.sdk.queries import (
    AgentQuery,
    ContactGroupQuery,
    ContactQuery,
    FieldOptionQuery,
    GroupContactsQuery,
    TicketQuery,
    UserBrandQuery,
    WorklogQuery,
)

__all__ = [
    "AsyncBoldDeskClient",
    "BoldDeskError",
    "ErrorKind",
    "NetworkError",
    "RequestTimeoutError",
    "ResponseParseError",
    "MalformedFieldError",
    "AuthenticationError",
    "AccessDeniedError",
    "ValidationError",
    "RateLimitError",
    "NotFoundError",
    "MethodNotAllowedError",
    "UnsupportedMediaTypeError",
    "ServerError",
    "ApiError",
    "DecodeOptions",
    "ErrorType",
    "Page",
    "RateLimitInfo",
    "EnumerationProgress",
    "EnumeratorState",
    "PageEnumerator",
    "AgentQuery",
    "ContactGroupQuery",
    "ContactQuery",
    "FieldOptionQuery",
    "GroupContactsQuery",
    "TicketQuery",
    "UserBrandQuery",
    "WorklogQuery",
]
