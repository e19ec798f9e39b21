from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from bolddesk.sdk import AsyncBoldDeskClient

DOMAIN = "acme.bolddesk.com"
API_KEY = "test-key"

RATE_HEADERS = {
    "x-rate-limit-limit": "100",
    "x-rate-limit-remaining": "97",
    "x-rate-limit-reset": "2030-01-01T00:01:00Z",
}


def json_response(
    body: object,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    hdrs = dict(RATE_HEADERS)
    if headers:
        hdrs.update(headers)
    return httpx.Response(
        status_code,
        content=json.dumps(body).encode(),
        headers={"content-type": "application/json", **hdrs},
    )


def envelope(items: list, count: int | None = None) -> dict:
    return {"result": items, "count": len(items) if count is None else count}


@pytest.fixture
async def make_client():
    """Build clients bound to a mock handler; all are closed after the test."""
    clients: list[AsyncBoldDeskClient] = []

    def factory(
        handler: Callable[[httpx.Request], httpx.Response], **kwargs
    ) -> AsyncBoldDeskClient:
        kwargs.setdefault("page_delay", 0)
        client = AsyncBoldDeskClient(
            DOMAIN, API_KEY, _transport=httpx.MockTransport(handler), **kwargs
        )
        clients.append(client)
        return client

    yield factory
    for client in clients:
        await client.close()
