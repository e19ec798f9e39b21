"""Models used by the SDK: rate-limit metadata, pages, errors and entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, ClassVar, Generic, Mapping, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from bolddesk.sdk.decoders import FlexibleStr, NullableInt
from bolddesk.sdk.identity import resolve_identity

T = TypeVar("T")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Decode configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DecodeOptions:
    """How wire payloads are matched against model fields.

    Built once by the client and handed to each fetcher, which passes it to
    pydantic as validation context.
    """

    case_insensitive: bool = True

    def as_context(self) -> dict[str, Any]:
        return {"decode_options": self}


def _decode_options(info: ValidationInfo) -> DecodeOptions:
    context = info.context or {}
    options = context.get("decode_options")
    return options if isinstance(options, DecodeOptions) else DecodeOptions()


# ---------------------------------------------------------------------------
# Rate limits and pages
# ---------------------------------------------------------------------------


def _parse_int(raw: str | None) -> int:
    if raw is None:
        return 0
    try:
        return int(raw.strip())
    except ValueError:
        return 0


def _parse_timestamp(raw: str | None) -> datetime:
    """Parse an ISO-8601 or RFC 1123 date; naive values are taken as UTC."""
    if not raw:
        return EPOCH
    text = raw.strip()
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError):
            return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class RateLimitInfo:
    """Rate-limit metadata parsed from response headers."""

    limit: int = 0
    remaining: int = 0
    reset: datetime = EPOCH

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> RateLimitInfo:
        """Parse ``x-rate-limit-*`` headers; missing or bad values default to zero."""
        return cls(
            limit=_parse_int(headers.get("x-rate-limit-limit")),
            remaining=_parse_int(headers.get("x-rate-limit-remaining")),
            reset=_parse_timestamp(headers.get("x-rate-limit-reset")),
        )


@dataclass
class Page(Generic[T]):
    """One page of a list endpoint."""

    items: list[T] = field(default_factory=list)
    total_count: int = 0

    def __len__(self) -> int:
        return len(self.items)


# ---------------------------------------------------------------------------
# Base entity model
# ---------------------------------------------------------------------------


class ApiModel(BaseModel):
    """Base for wire models: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _match_keys(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, dict) or not _decode_options(info).case_insensitive:
            return data
        aliases = {}
        for name, model_field in cls.model_fields.items():
            alias = model_field.alias or name
            aliases[alias.lower()] = alias
        normalized: dict[str, Any] = {}
        for key, value in data.items():
            target = aliases.get(key.lower(), key) if isinstance(key, str) else key
            normalized[target] = value
        return normalized


class DualIdModel(ApiModel):
    """Model whose identifier may arrive under either of two wire keys."""

    identity_fields: ClassVar[tuple[str, str]]

    @model_validator(mode="before")
    @classmethod
    def _resolve_identity(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, dict):
            return data
        primary, fallback = cls.identity_fields
        return resolve_identity(
            data,
            primary,
            fallback,
            case_insensitive=_decode_options(info).case_insensitive,
        )


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ErrorType:
    """Well-known ``errorType`` tags. The server may send others."""

    NOT_EXIST = "NotExist"
    ALREADY_EXISTS = "AlreadyExists"
    FIELD_REQUIRED = "FieldRequired"
    INVALID_VALUE = "InvalidValue"
    LENGTH_EXCEEDS = "LengthExceeds"
    NOT_ALLOWED = "NotAllowed"
    UNAUTHORIZED = "Unauthorized"
    ACCESS_DENIED = "AccessDenied"
    NOT_FOUND = "NotFound"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaType"
    API_CALL_QUOTA_EXCEEDED = "APICallQuotaExceeded"
    UNKNOWN_ERROR = "UnknownError"


class ErrorDetail(ApiModel):
    field: FlexibleStr = ""
    error_message: FlexibleStr = ""
    error_type: FlexibleStr = ""

    @model_validator(mode="after")
    def _blank_nulls(self) -> ErrorDetail:
        self.field = self.field or ""
        self.error_message = self.error_message or ""
        self.error_type = self.error_type or ""
        return self


class ErrorBody(ApiModel):
    message: FlexibleStr = ""
    status_code: NullableInt = 0
    errors: list[ErrorDetail] = Field(default_factory=list)

    @field_validator("errors", mode="before")
    @classmethod
    def _null_errors(cls, value: Any) -> Any:
        return [] if value is None else value


# ---------------------------------------------------------------------------
# Shared nested shapes
# ---------------------------------------------------------------------------


class IdName(ApiModel):
    id: NullableInt = None
    name: FlexibleStr = None


class TicketStatus(ApiModel):
    id: NullableInt = None
    description: FlexibleStr = None
    text_color: FlexibleStr = None
    background_color: FlexibleStr = None


class TicketUser(ApiModel):
    user_id: NullableInt = None
    name: FlexibleStr = None
    display_name: FlexibleStr = None
    email_id: FlexibleStr = None
    short_code: FlexibleStr = None
    color_code: FlexibleStr = None
    status: FlexibleStr = None
    is_verified: bool = False
    profile_image_url: FlexibleStr = None
    is_agent: bool = False


# ---------------------------------------------------------------------------
# Tickets and worklogs
# ---------------------------------------------------------------------------


class Ticket(ApiModel):
    ticket_id: int = 0
    title: FlexibleStr = ""
    ticket_status_category_id: NullableInt = None
    agent: IdName | None = None
    group: IdName | None = None
    category: IdName | None = None
    status: TicketStatus | None = None
    priority: TicketStatus | None = None
    resolution_due: datetime | None = None
    response_due: datetime | None = None
    created_on: datetime | None = None
    last_updated_on: datetime | None = None
    last_replied_on: datetime | None = None
    last_status_changed_on: datetime | None = None
    closed_on: datetime | None = None
    brand: FlexibleStr = None
    brand_id: NullableInt = None
    brand_option_id: NullableInt = None
    mode: FlexibleStr = None
    source: FlexibleStr = None
    source_id: NullableInt = None
    is_visible_to_customer: bool = False
    updates_count: NullableInt = None
    attachments_count: NullableInt = Field(None, alias="attachmentCount")
    requested_by: TicketUser | None = None
    last_replied_by: FlexibleStr = None
    last_replied_by_agent: FlexibleStr = None
    is_spam_or_deleted: bool | None = None
    is_sla_timer_running: bool | None = None
    sla_breached_count: NullableInt = None
    sla_achieved_count: NullableInt = None
    is_resolution_overdue: bool | None = None
    is_response_overdue: bool | None = None
    custom_fields: dict[str, Any] | None = None


class Worklog(ApiModel):
    worklog_id: int = 0
    ticket_id: int = 0
    time_spent: NullableInt = None
    is_billable: bool = False
    is_deleted: bool = False
    worklog_date: datetime | None = None
    description: FlexibleStr = ""
    created_by: TicketUser | None = None
    created_on: datetime | None = None
    last_modified_on: datetime | None = None


# ---------------------------------------------------------------------------
# Brands
# ---------------------------------------------------------------------------


class Brand(ApiModel):
    brand_id: int = 0
    brand_name: FlexibleStr = ""
    is_published: bool = False
    is_disabled: bool = False


class UserBrand(ApiModel):
    key: FlexibleStr = ""
    value: FlexibleStr = ""
    text: FlexibleStr = ""
    logo_link: FlexibleStr = None
    is_default: bool = False
    field_option_id: NullableInt = None
    is_deactivated: bool = False
    is_customer_portal_active: bool = False
    default_ticket_form_id: NullableInt = None
    is_kb_enabled: bool = False


# ---------------------------------------------------------------------------
# Agents
# ---------------------------------------------------------------------------


class AgentRole(ApiModel):
    role_id: NullableInt = None
    role_name: FlexibleStr = None


class AgentGroup(ApiModel):
    group_id: NullableInt = None
    group_name: FlexibleStr = None


class AgentBrand(ApiModel):
    brand_id: NullableInt = None
    brand_name: FlexibleStr = None
    is_default: bool = False
    has_access: bool = False


class Agent(ApiModel):
    user_id: int = 0
    name: FlexibleStr = ""
    display_name: FlexibleStr = ""
    email_id: FlexibleStr = ""
    is_available: bool = False
    roles: list[AgentRole] = Field(default_factory=list)
    groups: list[AgentGroup] | None = None
    brands: list[AgentBrand] | None = None
    status: FlexibleStr = None
    is_blocked: bool = False
    is_verified: bool = False
    last_activity_on: datetime | None = None
    created_on: datetime | None = None
    last_modified_on: datetime | None = None
    short_code: FlexibleStr = None
    color_code: FlexibleStr = None
    has_all_brand_access: bool = False
    ticket_access_scope: FlexibleStr = None
    ticket_access_scope_id: NullableInt = None
    availability_status: IdName | None = None
    timezone: IdName | None = None
    language: IdName | None = None
    ticket_limit: NullableInt = None
    user_country_id: NullableInt = None
    phone_no: FlexibleStr = None
    mobile_no: FlexibleStr = None
    job_title: FlexibleStr = None
    custom_fields: dict[str, Any] | None = None


class AgentCount(ApiModel):
    """Number of agents in one status, as returned by ``/agents/count``."""

    count: NullableInt = 0
    status: FlexibleStr = ""


# ---------------------------------------------------------------------------
# Contacts and contact groups
# ---------------------------------------------------------------------------


class ContactGroupInfo(ApiModel):
    id: NullableInt = None
    name: FlexibleStr = None
    access_scope_id: NullableInt = None
    is_primary: bool = False


class Contact(DualIdModel):
    """A contact; list payloads key it by ``userId``, some others by ``contactId``."""

    identity_fields: ClassVar[tuple[str, str]] = ("userId", "contactId")

    user_id: int = 0
    contact_display_name: FlexibleStr = ""
    contact_name: FlexibleStr = None
    email_id: FlexibleStr = ""
    secondary_email_id: FlexibleStr = None
    status: FlexibleStr = None
    last_activity_on: datetime | None = None
    is_verified: bool = False
    is_blocked: bool = False
    is_deleted: bool = False
    contact_phone_no: FlexibleStr = None
    contact_mobile_no: FlexibleStr = None
    contact_address: FlexibleStr = None
    time_zone_id: IdName | None = None
    language_id: IdName | None = None
    contact_tag: list[IdName] | None = None
    contact_group: list[ContactGroupInfo] | None = None
    primary_contact_group: ContactGroupInfo | None = None
    contact_external_reference_id: FlexibleStr = None
    contact_job_title: FlexibleStr = None
    contact_notes: FlexibleStr = None
    user_creation_source: FlexibleStr = None
    profile_image_url: FlexibleStr = None
    user_country_id: NullableInt = None
    created_on: datetime | None = None
    last_modified_on: datetime | None = None
    custom_fields: dict[str, Any] | None = None


class ContactGroup(DualIdModel):
    """A contact group; detail payloads sometimes key it by plain ``id``."""

    identity_fields: ClassVar[tuple[str, str]] = ("contactGroupId", "id")

    contact_group_id: int = 0
    contact_group_name: FlexibleStr = ""
    short_code: FlexibleStr = None
    color_code: FlexibleStr = None
    description: FlexibleStr = None
    notes: FlexibleStr = None
    address: FlexibleStr = None
    external_reference_id: FlexibleStr = None
    contact_group_tag: list[IdName] | None = None
    contact_group_domain: list[IdName] | None = None
    created_on: datetime | None = None
    last_modified_on: datetime | None = None
    contact_group_custom_fields: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


class FieldOption(ApiModel):
    id: int = 0
    name: FlexibleStr = ""
    is_read_only: bool = False
    is_default: bool = False
    sort_order: NullableInt = None
    parent_option_id: list[int] | None = None
    is_private: bool = False
    can_delete: bool = False
    is_system_default: bool = False
