"""Lazy, cancellable enumeration over paged list endpoints."""

from __future__ import annotations

import asyncio
import dataclasses
import enum
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from bolddesk.config import settings
from bolddesk.sdk.models import Page
from bolddesk.sdk.queries import clamp_per_page
from bolddesk.sdk.rate_limit import RateLimitTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")
Q = TypeVar("Q")


class EnumeratorState(str, enum.Enum):
    FETCHING = "fetching"
    YIELDING = "yielding"
    WAITING = "waiting"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


@dataclasses.dataclass(frozen=True)
class EnumerationProgress:
    """A progress notification.

    ``event`` is ``page_started`` before each fetch, ``page_completed`` once a
    page's items have all been yielded and ``completed`` when the enumeration
    ends, whether exhausted or cancelled.
    """

    event: str
    label: str
    page: int
    pages_fetched: int
    items_fetched: int
    state: EnumeratorState

    @property
    def message(self) -> str:
        if self.event == "page_started":
            return f"Fetching page {self.page}..."
        if self.event == "page_completed":
            return f"Fetched {self.items_fetched} {self.label} so far..."
        return f"Completed. Total {self.label} fetched: {self.items_fetched}"


ProgressCallback = Callable[[EnumerationProgress], Any]


class PageEnumerator(Generic[T]):
    """Async iterator yielding every item of a paged collection.

    Pages are requested one at a time through *fetch*, starting at the
    query's ``page``. A page holding fewer items than requested is the last
    one. Setting *cancel_event* stops the enumeration before the next fetch
    and interrupts any pending pause; items already fetched are still
    yielded. Each instance enumerates once::

        async for ticket in client.tickets.iter_all(TicketQuery(q="status:open")):
            ...
    """

    def __init__(
        self,
        fetch: Callable[[Q], Awaitable[Page[T]]],
        query: Q,
        *,
        tracker: RateLimitTracker | None = None,
        cancel_event: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
        page_delay: float | None = None,
        label: str = "items",
    ) -> None:
        self._fetch = fetch
        # private copy; only its page number changes
        self._query = dataclasses.replace(query)
        self._per_page = clamp_per_page(query.per_page)
        self._tracker = tracker or RateLimitTracker()
        self._cancel = cancel_event or asyncio.Event()
        self._on_progress = on_progress
        self._page_delay = (
            settings.page_delay_seconds if page_delay is None else page_delay
        )
        self._label = label

        self._buffer: deque[T] = deque()
        self._page_open = False
        self._last_page_seen = False
        self._current_page = self._query.page
        self.state = EnumeratorState.FETCHING
        self.pages_fetched = 0
        self.items_fetched = 0

    def __aiter__(self) -> PageEnumerator[T]:
        return self

    async def __anext__(self) -> T:
        while True:
            if self._buffer:
                self.state = EnumeratorState.YIELDING
                return self._buffer.popleft()

            if self._page_open:
                self._page_open = False
                self._notify("page_completed", self._current_page)

            if self.state in (EnumeratorState.EXHAUSTED, EnumeratorState.CANCELLED):
                raise StopAsyncIteration
            if self._last_page_seen:
                self._finish(EnumeratorState.EXHAUSTED)
                raise StopAsyncIteration
            if self._cancel.is_set():
                self._finish(EnumeratorState.CANCELLED)
                raise StopAsyncIteration

            if self.pages_fetched and self._page_delay > 0:
                if await self._pause(self._page_delay):
                    continue

            wait = self._tracker.should_wait()
            if wait > 0:
                logger.info(
                    "Rate limit nearly exhausted, waiting %.1fs before page %d",
                    wait,
                    self._query.page,
                )
                if await self._pause(wait):
                    continue

            await self._fetch_next()

    def cancel(self) -> None:
        """Request cancellation; takes effect before the next fetch."""
        self._cancel.set()

    # -- internal ------------------------------------------------------------

    async def _fetch_next(self) -> None:
        self.state = EnumeratorState.FETCHING
        self._current_page = self._query.page
        self._notify("page_started", self._current_page)

        page = await self._fetch(self._query)
        self.pages_fetched += 1
        self.items_fetched += len(page.items)

        if not page.items or len(page.items) < self._per_page:
            self._last_page_seen = True
        else:
            self._query = dataclasses.replace(self._query, page=self._query.page + 1)

        self._buffer.extend(page.items)
        self._page_open = True

    async def _pause(self, seconds: float) -> bool:
        """Sleep up to *seconds*; return True if cancelled meanwhile."""
        self.state = EnumeratorState.WAITING
        try:
            await asyncio.wait_for(self._cancel.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    def _finish(self, state: EnumeratorState) -> None:
        self.state = state
        logger.info(
            "Enumeration of %s %s after %d page(s), %d item(s)",
            self._label,
            state.value,
            self.pages_fetched,
            self.items_fetched,
        )
        self._notify("completed", self._current_page)

    def _notify(self, event: str, page: int) -> None:
        if self._on_progress is None:
            return
        progress = EnumerationProgress(
            event=event,
            label=self._label,
            page=page,
            pages_fetched=self.pages_fetched,
            items_fetched=self.items_fetched,
            state=self.state,
        )
        try:
            self._on_progress(progress)
        except Exception:
            logger.warning("Progress callback raised on %s", event, exc_info=True)
