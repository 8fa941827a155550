"""
HTTP client with bounded exponential-backoff retry for transport failures.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp
import structlog

from toonstats.config.config import CrawlerConfig
from toonstats.errors import FetchExhaustedError
from toonstats.observability.metrics import METRICS

logger = structlog.get_logger(__name__)

# Errors that mean no response was received at all.
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


@dataclass
class CrawlerResponse:
    """A received response, whatever its status."""

    status: int
    headers: Dict[str, str]
    text: str
    url: str
    final_url: str
    attempts: int
    start_ts: float
    end_ts: float

    @property
    def ok(self) -> bool:
        return self.status == 200


class HttpClient:
    """GET-only client shared by the harvester and the detail crawler."""

    def __init__(self, config: CrawlerConfig):
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None
        self._is_initialized = False
        self._in_flight_requests = 0
        self._retries = 0

    async def initialize(self) -> None:
        """Initialize the HTTP client session."""
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": self.config.user_agent, "Referer": self.config.referer},
            )
            self._is_initialized = True
            logger.debug(
                "HTTP client session initialized",
                max_retries=self.config.max_retries,
                backoff_base=self.config.backoff_base,
            )

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        if self.session:
            await self.session.close()
            self.session = None
        self._is_initialized = False
        logger.debug("HTTP client closed")

    async def __aenter__(self) -> "HttpClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _calculate_backoff_delay(self, attempt: int) -> float:
        """Delay after the failed 0-based ``attempt``: base, 2*base, 4*base, ..."""
        return self.config.backoff_base * 2**attempt

    async def _perform_request(self, url: str) -> CrawlerResponse:
        """Perform a single GET and read the whole body."""
        if not self._is_initialized:
            raise RuntimeError("HTTP client not initialized")

        assert self.session is not None
        start_time = time.time()
        async with self.session.get(url) as response:
            text = await response.text(errors="replace")
            return CrawlerResponse(
                status=response.status,
                headers=dict(response.headers),
                text=text,
                url=url,
                final_url=str(response.url),
                attempts=1,
                start_ts=start_time,
                end_ts=time.time(),
            )

    async def fetch(self, url: str, *, max_retries: Optional[int] = None) -> CrawlerResponse:
        """
        Fetch ``url``, retrying transport failures with exponential backoff.

        Any received response is returned as is, including non-2xx statuses;
        interpreting the status is up to the caller.

        Args:
            url: URL to fetch
            max_retries: Retries after the first attempt (None = use config default)

        Returns:
            CrawlerResponse with status, headers, body text and attempt count

        Raises:
            FetchExhaustedError: every attempt failed without a response
        """
        if not self._is_initialized:
            raise RuntimeError("HTTP client not initialized. Call initialize() first.")

        if max_retries is None:
            max_retries = self.config.max_retries

        start_time = time.time()
        last_error: Optional[BaseException] = None
        self._in_flight_requests += 1
        try:
            for attempt in range(max_retries + 1):
                try:
                    response = await self._perform_request(url)
                except TRANSPORT_ERRORS as e:
                    last_error = e
                    if attempt == max_retries:
                        break

                    delay = self._calculate_backoff_delay(attempt)
                    self._retries += 1
                    METRICS["fetch_retries"].inc()
                    logger.warning(
                        "Request failed, retrying",
                        url=url,
                        attempt=attempt + 1,
                        max_retries=max_retries,
                        delay=delay,
                        error=repr(e),
                    )
                    await asyncio.sleep(delay)
                    continue

                response.attempts = attempt + 1
                response.start_ts = start_time
                METRICS["fetch_latency"].observe(response.end_ts - start_time)
                return response
        finally:
            self._in_flight_requests -= 1

        METRICS["fetch_exhausted"].inc()
        logger.error("All retries exhausted", url=url, attempts=max_retries + 1, error=repr(last_error))
        raise FetchExhaustedError(url, max_retries + 1, last_error)

    def get_stats(self) -> Dict[str, Any]:
        """Get current client statistics."""
        return {
            "in_flight_requests": self._in_flight_requests,
            "retries": self._retries,
        }
