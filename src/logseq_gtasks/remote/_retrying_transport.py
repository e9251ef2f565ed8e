"""httpx async transport wrapper with retry, backoff, and rate-limit handling."""

from __future__ import annotations

import asyncio
import logging
import random
import time

import httpx

_LOG = logging.getLogger(__name__)

# Google answers quota exhaustion with 429 and transient backend trouble with 5xx.
_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class RetryingTransport(httpx.AsyncBaseTransport):
    """Wraps an httpx async transport with automatic retry on transient failures.

    - Exponential backoff with jitter, up to *max_retries* extra attempts.
    - HTTP 429 pauses **all** requests sharing this transport until the
      ``Retry-After`` delay has elapsed, so concurrent per-list fetches back
      off together instead of hammering the quota.
    - Connection-level ``httpx.TransportError`` is retried the same way.

    Authorization failures (401/403) are returned immediately; they are not
    transient.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 3,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries

        self._pause_lock = asyncio.Lock()
        self._resume = asyncio.Event()
        self._resume.set()
        self._paused_until = 0.0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            await self._resume.wait()

            try:
                response = await self._transport.handle_async_request(request)
            except httpx.TransportError as exc:
                if attempt >= self._max_retries:
                    raise
                _LOG.warning("%s %s failed (%s), retrying", request.method, request.url.path, exc)
                await self._sleep_backoff(attempt)
                attempt += 1
                continue

            if response.status_code not in _RETRYABLE_STATUS_CODES or attempt >= self._max_retries:
                return response

            await response.aclose()
            delay = self._retry_after(response)
            _LOG.warning(
                "%s %s answered %d, retrying in %.1fs", request.method, request.url.path, response.status_code, delay
            )
            if response.status_code == 429:
                await self._pause_all(delay)
            elif delay > 0:
                await asyncio.sleep(delay)
            await self._sleep_backoff(attempt)
            attempt += 1

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def _pause_all(self, delay: float) -> None:
        async with self._pause_lock:
            until = time.monotonic() + max(0.0, delay)
            if until <= self._paused_until:
                return
            self._paused_until = until
            self._resume.clear()

        await asyncio.sleep(max(0.0, self._paused_until - time.monotonic()))

        async with self._pause_lock:
            if time.monotonic() >= self._paused_until:
                self._resume.set()

    @staticmethod
    def _retry_after(response: httpx.Response) -> float:
        raw = response.headers.get("Retry-After")
        if raw is None:
            return 1.0
        try:
            return max(0.0, float(raw))
        except ValueError:
            return 1.0

    @staticmethod
    async def _sleep_backoff(attempt: int) -> None:
        await asyncio.sleep(min(8.0, float(2**attempt)) + random.uniform(0.0, 0.25))
