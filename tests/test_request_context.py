"""Tests for request ID generation and scoping."""

from __future__ import annotations

import asyncio
import re

from bolddesk.services.request_context import (
    generate_request_id,
    get_request_id,
    request_scope,
)


def test_generate_request_id_is_hex():
    rid = generate_request_id()
    assert re.fullmatch(r"[0-9a-f]{32}", rid), f"Not 32 hex chars: {rid}"


def test_scope_generates_and_restores():
    assert get_request_id() == ""
    with request_scope() as rid:
        assert get_request_id() == rid
        assert len(rid) == 32
    assert get_request_id() == ""


def test_nested_scopes():
    with request_scope("outer"):
        with request_scope("inner"):
            assert get_request_id() == "inner"
        assert get_request_id() == "outer"


def test_scope_restored_on_error():
    try:
        with request_scope("failing"):
            raise RuntimeError
    except RuntimeError:
        pass
    assert get_request_id() == ""


async def test_concurrent_tasks_do_not_share_ids():
    async def worker() -> tuple[str, str]:
        with request_scope() as rid:
            await asyncio.sleep(0)
            return rid, get_request_id()

    results = await asyncio.gather(worker(), worker())
    assert all(bound == seen for bound, seen in results)
    assert results[0][0] != results[1][0]
