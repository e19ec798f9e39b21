"""Query parameter objects for the list endpoints.

Each dataclass renders itself into the query mapping the endpoint expects via
``to_params()``. Keys keep the casing each endpoint documents, which is not
consistent across the API (``perPage`` on tickets, ``PerPage`` on contacts).
Values are returned as a list of pairs so repeated keys such as ``Q`` survive.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

MAX_PER_PAGE = 100

Params = list[tuple[str, str]]


def _flag(value: bool) -> str:
    return "true" if value else "false"


def clamp_per_page(per_page: int) -> int:
    """Page size actually sent: at least 1, at most ``MAX_PER_PAGE``."""
    return max(1, min(per_page, MAX_PER_PAGE))


def _has_text(value: str | None) -> bool:
    return value is not None and value.strip() != ""


def format_query_datetime(value: datetime) -> str:
    """Render *value* as ``yyyy-MM-ddTHH:mm:ss.fff`` plus its zone designator.

    UTC values end in ``Z``, other aware values in ``+hh:mm``; naive values
    carry no designator.
    """
    text = value.strftime("%Y-%m-%dT%H:%M:%S") + f".{value.microsecond // 1000:03d}"
    offset = value.utcoffset()
    if offset is None:
        return text
    if offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass
class TicketQuery:
    page: int = 1
    per_page: int = 100
    requires_counts: bool = True
    q: str | None = None
    filter_id: str | None = None
    fields: Sequence[str] = field(default_factory=list)
    brand_ids: Sequence[int | str] = field(default_factory=list)
    order_by: str | None = None

    def to_params(self) -> Params:
        params: Params = [
            ("page", str(self.page)),
            ("perPage", str(clamp_per_page(self.per_page))),
            ("requiresCounts", _flag(self.requires_counts)),
        ]
        if _has_text(self.q):
            params.append(("q", self.q))
        if _has_text(self.filter_id):
            params.append(("filterId", self.filter_id))
        if self.fields:
            params.append(("fields", ",".join(self.fields)))
        if self.brand_ids:
            params.append(("brandIds", ",".join(str(b) for b in self.brand_ids)))
        if _has_text(self.order_by):
            params.append(("orderBy", self.order_by))
        return params


@dataclass
class WorklogQuery:
    page: int = 1
    per_page: int = 100
    requires_counts: bool = True
    order_by: str | None = None
    last_created_date_from: datetime | None = None
    last_created_date_to: datetime | None = None
    last_updated_date_from: datetime | None = None
    last_updated_date_to: datetime | None = None
    include_deleted_worklogs: bool = False

    def to_params(self) -> Params:
        params: Params = [
            ("page", str(self.page)),
            ("perPage", str(clamp_per_page(self.per_page))),
            ("requiresCounts", _flag(self.requires_counts)),
        ]
        if _has_text(self.order_by):
            params.append(("orderBy", self.order_by))
        for key, value in (
            ("lastCreatedDateFrom", self.last_created_date_from),
            ("lastCreatedDateTo", self.last_created_date_to),
            ("lastUpdatedDateFrom", self.last_updated_date_from),
            ("lastUpdatedDateTo", self.last_updated_date_to),
        ):
            if value is not None:
                params.append((key, format_query_datetime(value)))
        if self.include_deleted_worklogs:
            params.append(("includeDeletedWorklogs", "true"))
        return params


@dataclass
class UserBrandQuery:
    filter: str | None = None
    include_deactivated_brands: bool = False

    def to_params(self) -> Params:
        params: Params = []
        if _has_text(self.filter):
            params.append(("filter", self.filter))
        if self.include_deactivated_brands:
            params.append(("needToIncludeDeactivatedBrands", "true"))
        return params


@dataclass
class AgentQuery:
    page: int = 1
    per_page: int = 10
    requires_counts: bool = True
    user_status: int | None = None
    is_available: bool | None = None
    role_id: str | None = None
    is_verified_agents: bool | None = None
    agent_tag: str | None = None
    q: str | None = None
    filter: str | None = None
    order_by: str | None = None
    brand_ids: str | None = None
    ticket_access_scope_id: int | None = None

    def to_params(self) -> Params:
        params: Params = [
            ("page", str(self.page)),
            ("perPage", str(clamp_per_page(self.per_page))),
            ("requiresCounts", _flag(self.requires_counts)),
        ]
        if self.user_status is not None:
            params.append(("UserStatus", str(self.user_status)))
        if self.is_available is not None:
            params.append(("IsAvailable", _flag(self.is_available)))
        if _has_text(self.role_id):
            params.append(("RoleId", self.role_id))
        if self.is_verified_agents is not None:
            params.append(("IsVerifiedAgents", _flag(self.is_verified_agents)))
        if _has_text(self.agent_tag):
            params.append(("AgentTag", self.agent_tag))
        if _has_text(self.q):
            params.append(("Q", self.q))
        if _has_text(self.filter):
            params.append(("Filter", self.filter))
        if _has_text(self.order_by):
            params.append(("OrderBy", self.order_by))
        if _has_text(self.brand_ids):
            params.append(("BrandIds", self.brand_ids))
        if self.ticket_access_scope_id is not None:
            params.append(("TicketAccessScopeId", str(self.ticket_access_scope_id)))
        return params


@dataclass
class ContactQuery:
    page: int = 1
    per_page: int = 50
    requires_counts: bool = True
    q: Sequence[str] = field(default_factory=list)
    filter: str | None = None
    order_by: str | None = None
    view: str | None = None
    contact_group_id: int | None = None

    def to_params(self) -> Params:
        params: Params = [("Q", q) for q in self.q]
        if _has_text(self.filter):
            params.append(("Filter", self.filter))
        params += [
            ("Page", str(self.page)),
            ("PerPage", str(clamp_per_page(self.per_page))),
            ("RequiresCounts", _flag(self.requires_counts)),
        ]
        if _has_text(self.order_by):
            params.append(("OrderBy", self.order_by))
        if _has_text(self.view):
            params.append(("view", self.view))
        if self.contact_group_id is not None:
            params.append(("contactGroupId", str(self.contact_group_id)))
        return params


@dataclass
class ContactGroupQuery:
    page: int = 1
    per_page: int = 50
    requires_counts: bool = True
    q: Sequence[str] = field(default_factory=list)
    filter: str | None = None
    order_by: str | None = None

    def to_params(self) -> Params:
        params: Params = [
            ("page", str(self.page)),
            ("perPage", str(clamp_per_page(self.per_page))),
            ("requiresCounts", _flag(self.requires_counts)),
        ]
        if _has_text(self.filter):
            params.append(("filter", self.filter))
        if _has_text(self.order_by):
            params.append(("orderBy", self.order_by))
        params += [("Q", q) for q in self.q]
        return params


@dataclass
class GroupContactsQuery:
    """Contacts belonging to one contact group."""

    page: int = 1
    per_page: int = 100
    requires_counts: bool = True
    filter: str | None = None
    order_by: str | None = None

    def to_params(self) -> Params:
        params: Params = [
            ("page", str(self.page)),
            ("perPage", str(clamp_per_page(self.per_page))),
            ("requiresCounts", _flag(self.requires_counts)),
        ]
        if _has_text(self.filter):
            params.append(("filter", self.filter))
        if _has_text(self.order_by):
            params.append(("orderBy", self.order_by))
        return params


@dataclass
class FieldOptionQuery:
    page: int = 1
    per_page: int = 10
    requires_counts: bool = False
    filter: str | None = None
    parent_option_id: int | None = None
    order_by: str | None = None
    exclusion_ids: str | None = None
    include_read_only_also: bool = False

    def to_params(self) -> Params:
        params: Params = []
        if _has_text(self.filter):
            params.append(("Filter", self.filter))
        if self.parent_option_id is not None:
            params.append(("parentOptionId", str(self.parent_option_id)))
        params += [("Page", str(self.page)), ("PerPage", str(clamp_per_page(self.per_page)))]
        if self.requires_counts:
            params.append(("RequiresCounts", "true"))
        if _has_text(self.order_by):
            params.append(("OrderBy", self.order_by))
        if _has_text(self.exclusion_ids):
            params.append(("exclusionIds", self.exclusion_ids))
        if self.include_read_only_also:
            params.append(("includeReadOnlyAlso", "true"))
        return params
