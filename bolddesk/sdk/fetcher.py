"""Single-request GET helper shared by every resource service."""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

import httpx
import pydantic

from bolddesk.sdk.decoders import decode_nullable_int
from bolddesk.sdk.error_mapping import classify_error
from bolddesk.sdk.exceptions import (
    NetworkError,
    RequestTimeoutError,
    ResponseParseError,
)
from bolddesk.sdk.models import ApiModel, DecodeOptions, Page
from bolddesk.sdk.rate_limit import RateLimitTracker
from bolddesk.services.request_context import request_scope

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=ApiModel)

QueryParams = list[tuple[str, str]] | dict[str, Any] | None

_PARSE_HINT = "The API may have returned an unexpected format."


def _parse_failure(exc: Exception) -> ResponseParseError:
    return ResponseParseError(f"Failed to parse API response: {exc}. {_PARSE_HINT}")


def _envelope_value(payload: dict[str, Any], key: str, case_insensitive: bool) -> Any:
    if key in payload or not case_insensitive:
        return payload.get(key)
    for name, value in payload.items():
        if name.lower() == key:
            return value
    return None


class PageFetcher:
    """Issues GETs against one BoldDesk API and decodes the results.

    Every response updates *tracker* before its status is inspected, so a
    429 still records the window it was rejected in.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        decode_options: DecodeOptions,
        tracker: RateLimitTracker | None = None,
    ) -> None:
        self._client = client
        self.decode_options = decode_options
        self.tracker = tracker or RateLimitTracker()

    # -- transport -----------------------------------------------------------

    async def _get(self, path: str, params: QueryParams = None) -> httpx.Response:
        with request_scope():
            logger.debug("GET %s params=%s", path, params)
            try:
                response = await self._client.get(path, params=params)
            except httpx.TimeoutException as exc:
                raise RequestTimeoutError(f"API request timed out: {exc}") from exc
            except httpx.TransportError as exc:
                raise NetworkError(
                    f"Network error while calling BoldDesk API: {exc}"
                ) from exc
            except httpx.RequestError as exc:
                raise NetworkError(f"BoldDesk API request failed: {exc}") from exc

            info = self.tracker.observe(response.headers)
            logger.debug(
                "GET %s -> %d (rate limit remaining %d of %d)",
                path,
                response.status_code,
                info.remaining,
                info.limit,
            )
            if not response.is_success:
                classify_error(response.status_code, response.text, info)
            return response

    def _load_json(self, response: httpx.Response) -> Any:
        text = response.text
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except ValueError as exc:
            raise _parse_failure(exc) from exc

    def _decode(self, model: type[M], item: Any) -> M:
        return model.model_validate(item, context=self.decode_options.as_context())

    # -- public --------------------------------------------------------------

    async def fetch_page(
        self,
        path: str,
        params: QueryParams,
        model: type[M],
    ) -> Page[M]:
        """GET *path* and decode a ``{result, count}`` envelope or a bare array.

        An empty body or a ``null`` payload yields an empty page.
        """
        response = await self._get(path, params)
        payload = self._load_json(response)
        if payload is None:
            return Page()

        case_insensitive = self.decode_options.case_insensitive
        if isinstance(payload, list):
            raw_items, raw_count = payload, None
        elif isinstance(payload, dict):
            raw_items = _envelope_value(payload, "result", case_insensitive)
            raw_count = _envelope_value(payload, "count", case_insensitive)
        else:
            raise _parse_failure(
                TypeError(f"expected an object or array, got {type(payload).__name__}")
            )

        if raw_items is None:
            raw_items = []
        if not isinstance(raw_items, list):
            raise _parse_failure(
                TypeError(f"expected 'result' to be an array, got {type(raw_items).__name__}")
            )

        try:
            items = [self._decode(model, item) for item in raw_items]
            total = decode_nullable_int(raw_count)
        except (pydantic.ValidationError, ValueError) as exc:
            raise _parse_failure(exc) from exc
        return Page(items=items, total_count=total or 0)

    async def fetch_one(self, path: str, model: type[M]) -> M:
        """GET a single entity at *path*."""
        response = await self._get(path)
        payload = self._load_json(response)
        if payload is None:
            raise ResponseParseError(
                f"Failed to parse API response: empty body from {path}. {_PARSE_HINT}"
            )
        try:
            return self._decode(model, payload)
        except pydantic.ValidationError as exc:
            raise _parse_failure(exc) from exc
