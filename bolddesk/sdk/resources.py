"""Resource services: one per BoldDesk collection."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime
from typing import TypeVar
from urllib.parse import quote

import httpx

from bolddesk.sdk.exceptions import ValidationError
from bolddesk.sdk.fetcher import PageFetcher
from bolddesk.sdk.models import (
    Agent,
    AgentCount,
    Brand,
    Contact,
    ContactGroup,
    DecodeOptions,
    FieldOption,
    Page,
    RateLimitInfo,
    Ticket,
    UserBrand,
    Worklog,
)
from bolddesk.sdk.pagination import PageEnumerator, ProgressCallback
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
from bolddesk.sdk.rate_limit import RateLimitTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")
Q = TypeVar("Q")

_CONTACT_MISSING_PHRASES = ("contact doesn't exist", "contact does not exist")


def _segment(value: str) -> str:
    """Percent-escape *value* for use as a single path segment."""
    return quote(value, safe="")


class _Resource:
    """Shared plumbing: a fetcher with its own rate-limit tracker."""

    label = "items"

    def __init__(
        self,
        client: httpx.AsyncClient,
        decode_options: DecodeOptions,
        *,
        page_delay: float | None = None,
    ) -> None:
        self._fetcher = PageFetcher(client, decode_options, RateLimitTracker())
        self._page_delay = page_delay

    @property
    def last_rate_limit(self) -> RateLimitInfo | None:
        return self._fetcher.tracker.last

    def _enumerate(
        self,
        fetch: Callable[[Q], Awaitable[Page[T]]],
        query: Q,
        cancel_event: asyncio.Event | None,
        on_progress: ProgressCallback | None,
        label: str | None = None,
    ) -> PageEnumerator[T]:
        return PageEnumerator(
            fetch,
            query,
            tracker=self._fetcher.tracker,
            cancel_event=cancel_event,
            on_progress=on_progress,
            page_delay=self._page_delay,
            label=label or self.label,
        )


# ---------------------------------------------------------------------------
# Tickets
# ---------------------------------------------------------------------------


def is_contact_missing_error(exc: ValidationError) -> bool:
    """True when a 400 on ticket search means the filtered contact is unknown."""
    if exc.has_field_error("emailId"):
        return True
    texts = [exc.message] + [e.error_message for e in exc.errors]
    return any(
        phrase in text.lower() for text in texts for phrase in _CONTACT_MISSING_PHRASES
    )


class TicketService(_Resource):
    label = "tickets"

    async def list(self, query: TicketQuery | None = None) -> Page[Ticket]:
        """One page of tickets.

        Searching by a contact the helpdesk does not know answers 400; that
        case is reported as an empty page.
        """
        query = query or TicketQuery()
        try:
            return await self._fetcher.fetch_page("/tickets", query.to_params(), Ticket)
        except ValidationError as exc:
            if not is_contact_missing_error(exc):
                raise
            logger.warning("Contact does not exist, returning no tickets: %s", exc.message)
            return Page()

    async def get(self, ticket_id: int) -> Ticket:
        return await self._fetcher.fetch_one(f"/tickets/{ticket_id}", Ticket)

    async def count(self, query: TicketQuery | None = None) -> int:
        """Number of tickets matching *query*, fetched with a one-item page."""
        query = dataclasses.replace(
            query or TicketQuery(), page=1, per_page=1, requires_counts=True
        )
        return (await self.list(query)).total_count

    async def date_range(self) -> tuple[datetime | None, datetime | None]:
        """Creation dates of the oldest and newest tickets.

        Either side is ``None`` when the helpdesk has no tickets.
        """
        oldest, newest = await asyncio.gather(
            self.list(
                TicketQuery(per_page=1, requires_counts=False, order_by="createdon asc")
            ),
            self.list(
                TicketQuery(per_page=1, requires_counts=False, order_by="createdon desc")
            ),
        )
        return (
            oldest.items[0].created_on if oldest.items else None,
            newest.items[0].created_on if newest.items else None,
        )

    def iter_all(
        self,
        query: TicketQuery | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PageEnumerator[Ticket]:
        return self._enumerate(self.list, query or TicketQuery(), cancel_event, on_progress)


# ---------------------------------------------------------------------------
# Worklogs
# ---------------------------------------------------------------------------


class WorklogService(_Resource):
    label = "worklogs"

    async def list(self, query: WorklogQuery | None = None) -> Page[Worklog]:
        query = query or WorklogQuery()
        return await self._fetcher.fetch_page(
            "/tickets/worklogs", query.to_params(), Worklog
        )

    async def count(self, query: WorklogQuery | None = None) -> int:
        query = dataclasses.replace(
            query or WorklogQuery(), page=1, per_page=1, requires_counts=True
        )
        return (await self.list(query)).total_count

    def iter_all(
        self,
        query: WorklogQuery | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PageEnumerator[Worklog]:
        return self._enumerate(self.list, query or WorklogQuery(), cancel_event, on_progress)


# ---------------------------------------------------------------------------
# Brands
# ---------------------------------------------------------------------------


class BrandService(_Resource):
    label = "brands"

    async def list(self) -> Page[Brand]:
        return await self._fetcher.fetch_page("/brands", None, Brand)

    async def list_user_brands(self, query: UserBrandQuery | None = None) -> Page[UserBrand]:
        query = query or UserBrandQuery()
        return await self._fetcher.fetch_page("/user_brands", query.to_params(), UserBrand)

    async def iter_all(
        self, *, cancel_event: asyncio.Event | None = None
    ) -> AsyncIterator[Brand]:
        """Yield every brand. ``/brands`` is not paginated: one request."""
        if cancel_event is not None and cancel_event.is_set():
            return
        page = await self.list()
        for brand in page.items:
            if cancel_event is not None and cancel_event.is_set():
                return
            yield brand


# ---------------------------------------------------------------------------
# Agents
# ---------------------------------------------------------------------------


class AgentService(_Resource):
    label = "agents"

    async def list(self, query: AgentQuery | None = None) -> Page[Agent]:
        query = query or AgentQuery()
        return await self._fetcher.fetch_page("/agents", query.to_params(), Agent)

    async def get(self, user_id: int) -> Agent:
        return await self._fetcher.fetch_one(f"/agents/{user_id}", Agent)

    async def get_by_email(self, email: str) -> Agent:
        return await self._fetcher.fetch_one(f"/agents/{_segment(email)}", Agent)

    async def count(self) -> list[AgentCount]:
        """Agent counts per status."""
        page = await self._fetcher.fetch_page("/agents/count", None, AgentCount)
        return page.items

    def iter_all(
        self,
        query: AgentQuery | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PageEnumerator[Agent]:
        return self._enumerate(self.list, query or AgentQuery(), cancel_event, on_progress)


# ---------------------------------------------------------------------------
# Contacts and contact groups
# ---------------------------------------------------------------------------


class ContactService(_Resource):
    label = "contacts"

    async def list(self, query: ContactQuery | None = None) -> Page[Contact]:
        query = query or ContactQuery()
        return await self._fetcher.fetch_page("/contacts", query.to_params(), Contact)

    async def get(self, user_id: int) -> Contact:
        return await self._fetcher.fetch_one(f"/contacts/{user_id}", Contact)

    async def get_by_email(self, email: str) -> Contact:
        return await self._fetcher.fetch_one(f"/contacts/{_segment(email)}", Contact)

    def iter_all(
        self,
        query: ContactQuery | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PageEnumerator[Contact]:
        return self._enumerate(self.list, query or ContactQuery(), cancel_event, on_progress)


class ContactGroupService(_Resource):
    label = "contact groups"

    async def list(self, query: ContactGroupQuery | None = None) -> Page[ContactGroup]:
        query = query or ContactGroupQuery()
        return await self._fetcher.fetch_page(
            "/contact_groups", query.to_params(), ContactGroup
        )

    async def get(self, contact_group_id: int) -> ContactGroup:
        return await self._fetcher.fetch_one(
            f"/contact_groups/{contact_group_id}", ContactGroup
        )

    async def get_by_name(self, name: str) -> ContactGroup:
        return await self._fetcher.fetch_one(
            f"/contact_groups/{_segment(name)}", ContactGroup
        )

    def iter_all(
        self,
        query: ContactGroupQuery | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PageEnumerator[ContactGroup]:
        return self._enumerate(
            self.list, query or ContactGroupQuery(), cancel_event, on_progress
        )

    async def list_contacts(
        self, contact_group_id: int, query: GroupContactsQuery | None = None
    ) -> Page[Contact]:
        """One page of the contacts belonging to a group."""
        query = query or GroupContactsQuery()
        return await self._fetcher.fetch_page(
            f"/contact_groups/{contact_group_id}/contacts", query.to_params(), Contact
        )

    def iter_contacts(
        self,
        contact_group_id: int,
        query: GroupContactsQuery | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PageEnumerator[Contact]:
        async def fetch(q: GroupContactsQuery) -> Page[Contact]:
            return await self.list_contacts(contact_group_id, q)

        return self._enumerate(
            fetch,
            query or GroupContactsQuery(),
            cancel_event,
            on_progress,
            label="contacts",
        )


# ---------------------------------------------------------------------------
# Field options
# ---------------------------------------------------------------------------


class FieldService(_Resource):
    label = "field options"

    async def list_options(
        self, api_name: str, query: FieldOptionQuery | None = None
    ) -> Page[FieldOption]:
        """Options of the dropdown field whose API name is *api_name*."""
        query = query or FieldOptionQuery()
        return await self._fetcher.fetch_page(
            f"/fields/collection/{api_name}/options", query.to_params(), FieldOption
        )

    def iter_options(
        self,
        api_name: str,
        query: FieldOptionQuery | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PageEnumerator[FieldOption]:
        async def fetch(q: FieldOptionQuery) -> Page[FieldOption]:
            return await self.list_options(api_name, q)

        return self._enumerate(fetch, query or FieldOptionQuery(), cancel_event, on_progress)
