"""Async HTTP client for the BoldDesk REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from bolddesk.config import Settings, settings
from bolddesk.sdk.models import DecodeOptions, RateLimitInfo
from bolddesk.sdk.rate_limit import latest_rate_limit
from bolddesk.sdk.resources import (
    AgentService,
    BrandService,
    ContactGroupService,
    ContactService,
    FieldService,
    TicketService,
    WorklogService,
)

logger = logging.getLogger(__name__)


def build_base_url(domain: str) -> str:
    """``acme.bolddesk.com`` -> ``https://acme.bolddesk.com/api/v1.0``."""
    host = domain.strip().rstrip("/")
    for scheme in ("https://", "http://"):
        if host.startswith(scheme):
            host = host[len(scheme):]
    return f"https://{host}/api/v1.0"


class AsyncBoldDeskClient:
    """Async client for the BoldDesk API (backed by ``httpx.AsyncClient``).

    Resource services hang off the client::

        async with AsyncBoldDeskClient("acme.bolddesk.com", api_key) as client:
            page = await client.tickets.list()
            async for worklog in client.worklogs.iter_all():
                ...
    """

    def __init__(
        self,
        domain: str,
        api_key: str,
        timeout: float | None = None,
        *,
        page_delay: float | None = None,
        decode_options: DecodeOptions | None = None,
        _transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not domain:
            raise ValueError("domain is required")
        if not api_key:
            raise ValueError("api_key is required")

        self.base_url = build_base_url(domain)
        kwargs: dict[str, Any] = {
            "base_url": self.base_url,
            "headers": {"x-api-key": api_key, "Accept": "application/json"},
            "timeout": settings.http_timeout_seconds if timeout is None else timeout,
        }
        if _transport is not None:
            kwargs["transport"] = _transport
        self._client = httpx.AsyncClient(**kwargs)
        self.decode_options = decode_options or DecodeOptions()

        shared = {"page_delay": page_delay}
        self.tickets = TicketService(self._client, self.decode_options, **shared)
        self.worklogs = WorklogService(self._client, self.decode_options, **shared)
        self.brands = BrandService(self._client, self.decode_options, **shared)
        self.agents = AgentService(self._client, self.decode_options, **shared)
        self.contacts = ContactService(self._client, self.decode_options, **shared)
        self.contact_groups = ContactGroupService(
            self._client, self.decode_options, **shared
        )
        self.fields = FieldService(self._client, self.decode_options, **shared)
        logger.debug("BoldDesk client created for %s", self.base_url)

    @classmethod
    def from_settings(
        cls,
        config: Settings | None = None,
        **kwargs: Any,
    ) -> AsyncBoldDeskClient:
        """Build a client from ``BOLDDESK_*`` settings."""
        config = config or settings
        return cls(
            config.domain,
            config.api_key,
            config.http_timeout_seconds,
            page_delay=config.page_delay_seconds,
            **kwargs,
        )

    # -- context manager -----------------------------------------------------

    async def __aenter__(self) -> AsyncBoldDeskClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    # -- rate limits ---------------------------------------------------------

    @property
    def last_rate_limit(self) -> RateLimitInfo | None:
        """The observed rate-limit window that resets furthest in the future."""
        return latest_rate_limit(
            service.last_rate_limit
            for service in (
                self.tickets,
                self.worklogs,
                self.brands,
                self.agents,
                self.contacts,
                self.contact_groups,
                self.fields,
            )
        )
