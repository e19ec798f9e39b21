"""Client-side tracking of the server's rate-limit window."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

from bolddesk.config import settings
from bolddesk.sdk.models import RateLimitInfo

logger = logging.getLogger(__name__)


class RateLimitTracker:
    """Records the most recent ``x-rate-limit-*`` headers and advises pauses.

    One tracker belongs to one resource service. It never blocks on its own;
    callers ask :meth:`should_wait` and sleep for the returned duration.
    """

    def __init__(
        self,
        min_remaining: int | None = None,
        max_wait_seconds: float | None = None,
    ) -> None:
        self._min_remaining = (
            settings.rate_limit_min_remaining if min_remaining is None else min_remaining
        )
        self._max_wait = (
            settings.rate_limit_max_wait_seconds
            if max_wait_seconds is None
            else max_wait_seconds
        )
        self.last: RateLimitInfo | None = None

    def observe(self, headers: Mapping[str, str]) -> RateLimitInfo:
        """Parse *headers* into a :class:`RateLimitInfo` and remember it."""
        info = RateLimitInfo.from_headers(headers)
        self.last = info
        return info

    def should_wait(
        self,
        info: RateLimitInfo | None = None,
        now: datetime | None = None,
    ) -> float:
        """Seconds to pause before the next request, or ``0.0``.

        A pause is advised only when the quota is nearly spent and the window
        resets soon; a reset in the past or far in the future means no wait.
        """
        info = info if info is not None else self.last
        if info is None or info.remaining > self._min_remaining:
            return 0.0
        now = now or datetime.now(timezone.utc)
        seconds = (info.reset - now).total_seconds()
        if 0 < seconds < self._max_wait:
            return seconds
        return 0.0

    def clear(self) -> None:
        self.last = None


def latest_rate_limit(infos: Iterable[RateLimitInfo | None]) -> RateLimitInfo | None:
    """Pick the observation whose window resets furthest in the future."""
    observed = [info for info in infos if info is not None]
    if not observed:
        return None
    return max(observed, key=lambda info: info.reset)
