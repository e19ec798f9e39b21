"""Correlation IDs for outbound API calls, carried in a contextvar."""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("bolddesk_request_id", default="")


def generate_request_id() -> str:
    """Return a new 32-character hex request ID."""
    return uuid.uuid4().hex


def get_request_id() -> str:
    return request_id_var.get()


@contextmanager
def request_scope(request_id: str | None = None) -> Iterator[str]:
    """Bind a request ID for the duration of one API call.

    Log records emitted inside the block carry the ID; the previous value is
    restored on exit.
    """
    token = request_id_var.set(request_id or generate_request_id())
    try:
        yield request_id_var.get()
    finally:
        request_id_var.reset(token)
