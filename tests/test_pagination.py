"""Tests for the lazy page enumerator."""

from __future__ import annotations

import asyncio
import logging

import pytest

from bolddesk.sdk.exceptions import ServerError
from bolddesk.sdk.models import Page
from bolddesk.sdk.pagination import EnumerationProgress, EnumeratorState, PageEnumerator
from bolddesk.sdk.queries import TicketQuery


class _Pager:
    """Fake fetch function serving pages of the given sizes, then empty pages."""

    def __init__(self, sizes: list[int]) -> None:
        self.sizes = sizes
        self.calls: list[int] = []

    async def __call__(self, query: TicketQuery) -> Page[int]:
        self.calls.append(query.page)
        index = len(self.calls) - 1
        size = self.sizes[index] if index < len(self.sizes) else 0
        start = sum(self.sizes[:index])
        return Page(items=list(range(start, start + size)), total_count=sum(self.sizes))


class _FixedWait:
    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        self.calls = 0

    def should_wait(self, info=None, now=None) -> float:
        self.calls += 1
        return self.seconds


async def _drain(enumerator: PageEnumerator) -> list:
    return [item async for item in enumerator]


def _enumerator(pager, query=None, **kwargs) -> PageEnumerator:
    kwargs.setdefault("page_delay", 0)
    return PageEnumerator(pager, query or TicketQuery(per_page=100), **kwargs)


# ---------------------------------------------------------------------------
# Exhaustion
# ---------------------------------------------------------------------------


class TestExhaustion:
    async def test_full_full_short(self):
        pager = _Pager([100, 100, 37])
        enumerator = _enumerator(pager)
        items = await _drain(enumerator)
        assert len(items) == 237
        assert items == list(range(237))
        assert pager.calls == [1, 2, 3]
        assert enumerator.state is EnumeratorState.EXHAUSTED

    async def test_short_first_page(self):
        pager = _Pager([5])
        items = await _drain(_enumerator(pager))
        assert len(items) == 5
        assert pager.calls == [1]

    async def test_full_then_empty(self):
        pager = _Pager([100, 0])
        items = await _drain(_enumerator(pager))
        assert len(items) == 100
        assert pager.calls == [1, 2]

    async def test_empty_first_page(self):
        pager = _Pager([])
        enumerator = _enumerator(pager)
        assert await _drain(enumerator) == []
        assert pager.calls == [1]
        assert enumerator.state is EnumeratorState.EXHAUSTED

    async def test_starts_at_query_page_without_mutating_it(self):
        pager = _Pager([10, 3])
        query = TicketQuery(page=4, per_page=10)
        await _drain(_enumerator(pager, query))
        assert pager.calls == [4, 5]
        assert query.page == 4

    async def test_oversized_per_page_uses_clamped_size(self):
        pager = _Pager([100, 100, 1])
        await _drain(_enumerator(pager, TicketQuery(per_page=250)))
        assert pager.calls == [1, 2, 3]

    @pytest.mark.parametrize("per_page", [0, -5])
    async def test_empty_page_ends_enumeration_for_non_positive_per_page(self, per_page):
        pager = _Pager([])
        enumerator = _enumerator(pager, TicketQuery(per_page=per_page))
        assert await asyncio.wait_for(_drain(enumerator), timeout=2) == []
        assert pager.calls == [1]
        assert enumerator.state is EnumeratorState.EXHAUSTED

    async def test_exhausted_enumerator_stays_exhausted(self):
        pager = _Pager([2])
        enumerator = _enumerator(pager)
        await _drain(enumerator)
        assert await _drain(enumerator) == []
        assert pager.calls == [1]

    async def test_fetch_error_propagates(self):
        async def failing(query):
            raise ServerError("Unable to process your request. Please try again later", 503)

        with pytest.raises(ServerError):
            await _drain(_enumerator(failing))


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


class TestCancellation:
    async def test_cancelled_before_start(self):
        pager = _Pager([100, 100, 37])
        cancel = asyncio.Event()
        cancel.set()
        enumerator = _enumerator(pager, cancel_event=cancel)
        assert await _drain(enumerator) == []
        assert pager.calls == []
        assert enumerator.state is EnumeratorState.CANCELLED

    async def test_fetched_page_still_yielded(self):
        pager = _Pager([100, 100, 37])
        enumerator = _enumerator(pager)
        items = []
        async for item in enumerator:
            items.append(item)
            if len(items) == 1:
                enumerator.cancel()
        assert len(items) == 100
        assert pager.calls == [1]
        assert enumerator.state is EnumeratorState.CANCELLED

    async def test_cancel_interrupts_rate_limit_wait(self):
        pager = _Pager([3])
        cancel = asyncio.Event()
        enumerator = _enumerator(pager, tracker=_FixedWait(60), cancel_event=cancel)

        task = asyncio.create_task(_drain(enumerator))
        await asyncio.sleep(0.01)
        assert enumerator.state is EnumeratorState.WAITING
        cancel.set()
        items = await asyncio.wait_for(task, timeout=2)

        assert items == []
        assert pager.calls == []
        assert enumerator.state is EnumeratorState.CANCELLED

    async def test_cancel_interrupts_page_delay(self):
        pager = _Pager([100, 100])
        cancel = asyncio.Event()
        enumerator = _enumerator(pager, cancel_event=cancel, page_delay=60)

        async def consume():
            count = 0
            async for _ in enumerator:
                count += 1
            return count

        task = asyncio.create_task(consume())
        await asyncio.sleep(0.01)
        cancel.set()
        count = await asyncio.wait_for(task, timeout=2)

        assert count == 100
        assert pager.calls == [1]


# ---------------------------------------------------------------------------
# Pacing
# ---------------------------------------------------------------------------


class TestPacing:
    async def test_rate_limit_wait_then_fetch(self, caplog):
        pager = _Pager([2])
        tracker = _FixedWait(0.01)
        with caplog.at_level(logging.INFO, logger="bolddesk"):
            items = await _drain(_enumerator(pager, tracker=tracker))
        assert items == [0, 1]
        assert tracker.calls == 1
        assert "waiting" in caplog.text

    async def test_page_delay_between_pages(self):
        pager = _Pager([10, 1])
        items = await _drain(_enumerator(pager, TicketQuery(per_page=10), page_delay=0.01))
        assert len(items) == 11


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


class TestProgress:
    async def test_event_sequence(self):
        events: list[EnumerationProgress] = []
        pager = _Pager([100, 37])
        await _drain(_enumerator(pager, on_progress=events.append, label="tickets"))

        assert [(e.event, e.page) for e in events] == [
            ("page_started", 1),
            ("page_completed", 1),
            ("page_started", 2),
            ("page_completed", 2),
            ("completed", 2),
        ]
        assert events[1].items_fetched == 100
        assert events[-1].items_fetched == 137
        assert events[-1].state is EnumeratorState.EXHAUSTED
        assert events[0].message == "Fetching page 1..."
        assert events[1].message == "Fetched 100 tickets so far..."
        assert events[-1].message == "Completed. Total tickets fetched: 137"

    async def test_cancelled_run_reports_completion(self):
        events: list[EnumerationProgress] = []
        cancel = asyncio.Event()
        cancel.set()
        await _drain(_enumerator(_Pager([1]), cancel_event=cancel, on_progress=events.append))
        assert [e.event for e in events] == ["completed"]
        assert events[0].state is EnumeratorState.CANCELLED

    async def test_callback_failure_does_not_stop_enumeration(self, caplog):
        def broken(progress: EnumerationProgress) -> None:
            raise RuntimeError("observer bug")

        pager = _Pager([100, 100, 37])
        with caplog.at_level(logging.WARNING, logger="bolddesk"):
            items = await _drain(_enumerator(pager, on_progress=broken))
        assert len(items) == 237
        assert pager.calls == [1, 2, 3]
        assert "Progress callback raised" in caplog.text
