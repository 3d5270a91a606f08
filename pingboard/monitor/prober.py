"""HTTP prober — one GET per endpoint, classified into a StatusRecord.

Never raises: every failure mode ends up inside the returned record.
The timeout bounds the whole request (connect, headers and body), not each
individual read.
"""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

from .models import Endpoint, StatusRecord, utcnow

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class Prober:
    """Issues health probes with a fixed timeout.

    ``probe`` is blocking and runs its own event loop, so it is meant for
    worker threads (the scheduler's pool) or plain scripts, not for code
    already running inside an event loop.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._transport = transport  # injectable for tests

    def probe(self, endpoint: Endpoint) -> StatusRecord:
        t0 = time.perf_counter()
        try:
            status_code = asyncio.run(self._fetch(endpoint.url))
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            return self._failure(t0, f"{type(e).__name__}: timed out after {self.timeout:g}s")
        except httpx.HTTPError as e:
            return self._failure(t0, str(e) or type(e).__name__)
        except Exception as e:
            return self._failure(t0, f"{type(e).__name__}: {e}")

        latency = time.perf_counter() - t0
        if status_code < 400:
            return StatusRecord(timestamp=utcnow(), is_up=True, response_time=latency, status_code=status_code)
        return StatusRecord(timestamp=utcnow(), is_up=False, response_time=latency, status_code=status_code)

    async def _fetch(self, url: str) -> int:
        async with httpx.AsyncClient(
            timeout=self.timeout, follow_redirects=True, transport=self._transport,
        ) as client:
            return await asyncio.wait_for(self._get(client, url), self.timeout)

    @staticmethod
    async def _get(client: httpx.AsyncClient, url: str) -> int:
        """GET ``url``, read and discard the body, return the status code."""
        async with client.stream("GET", url) as resp:
            async for _ in resp.aiter_bytes():
                pass
            return resp.status_code

    @staticmethod
    def _failure(t0: float, message: str) -> StatusRecord:
        return StatusRecord(
            timestamp=utcnow(), is_up=False,
            response_time=time.perf_counter() - t0, error=message,
        )
