"""
Tests for HTTP client retry behavior.

Only transport failures are retried; every received response is handed back
to the caller whatever its status.
"""

from unittest.mock import AsyncMock, patch

import aiohttp
import pytest
from aioresponses import aioresponses
from toonstats.config import CrawlerConfig
from toonstats.crawler.http_client import HttpClient
from toonstats.errors import FetchExhaustedError
from toonstats.observability.metrics import METRICS

from tests.helpers.metric_delta import histogram_observes, metric_delta

URL = "https://example.com/page"


@pytest.mark.unit
class TestHttpClientRetryBehavior:
    """Test retry behavior via public API."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, http_client):
        with aioresponses() as m:
            m.get(URL, status=200, body="<html>ok</html>")

            response = await http_client.fetch(URL)

        assert response.status == 200
        assert response.ok
        assert response.text == "<html>ok</html>"
        assert response.attempts == 1

    @pytest.mark.asyncio
    async def test_non_success_status_returned_without_retry(self, http_client):
        """HTTP errors are the caller's concern, not a reason to retry."""
        for status in (404, 500, 503):
            with aioresponses() as m:
                m.get(URL, status=status, body=f"Error {status}")

                response = await http_client.fetch(URL)

            assert response.status == status
            assert not response.ok
            assert response.attempts == 1

    @pytest.mark.asyncio
    async def test_network_error_then_success(self, http_client):
        with aioresponses() as m:
            m.get(URL, exception=aiohttp.ClientConnectionError("connection reset"))
            m.get(URL, status=200, body="Success!")

            with metric_delta(METRICS["fetch_retries"], 1):
                response = await http_client.fetch(URL)

        assert response.status == 200
        assert response.text == "Success!"
        assert response.attempts == 2

    @pytest.mark.asyncio
    async def test_timeout_then_success(self, http_client):
        with aioresponses() as m:
            m.get(URL, exception=TimeoutError("Request timed out"))
            m.get(URL, status=200, body="Success!")

            response = await http_client.fetch(URL)

        assert response.attempts == 2

    @pytest.mark.asyncio
    async def test_retries_exhausted_raises(self, http_client):
        with aioresponses() as m:
            m.get(URL, exception=aiohttp.ClientConnectionError("unreachable"), repeat=True)

            with metric_delta(METRICS["fetch_exhausted"], 1):
                with pytest.raises(FetchExhaustedError) as exc_info:
                    await http_client.fetch(URL)

        assert exc_info.value.url == URL
        assert exc_info.value.attempts == 6  # 1 initial + 5 retries
        assert isinstance(exc_info.value.last_error, aiohttp.ClientConnectionError)
        assert URL in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_exponential_backoff_delays(self):
        """Default settings wait 1, 2, 4, 8 and 16 seconds between attempts."""
        sleep = AsyncMock()
        async with HttpClient(CrawlerConfig()) as client:
            with aioresponses() as m, patch("toonstats.crawler.http_client.asyncio.sleep", sleep):
                m.get(URL, exception=aiohttp.ClientConnectionError("unreachable"), repeat=True)

                with pytest.raises(FetchExhaustedError):
                    await client.fetch(URL)

        assert [call.args[0] for call in sleep.await_args_list] == [1, 2, 4, 8, 16]

    @pytest.mark.asyncio
    async def test_backoff_scales_with_base(self):
        sleep = AsyncMock()
        async with HttpClient(CrawlerConfig(backoff_base=0.5, max_retries=3)) as client:
            with aioresponses() as m, patch("toonstats.crawler.http_client.asyncio.sleep", sleep):
                m.get(URL, exception=aiohttp.ClientConnectionError("unreachable"), repeat=True)

                with pytest.raises(FetchExhaustedError) as exc_info:
                    await client.fetch(URL)

        assert [call.args[0] for call in sleep.await_args_list] == [0.5, 1.0, 2.0]
        assert exc_info.value.attempts == 4

    @pytest.mark.asyncio
    async def test_custom_max_retries(self, http_client):
        with aioresponses() as m:
            m.get(URL, exception=aiohttp.ClientConnectionError("unreachable"), repeat=True)

            with metric_delta(METRICS["fetch_retries"], 2):
                with pytest.raises(FetchExhaustedError) as exc_info:
                    await http_client.fetch(URL, max_retries=2)

        assert exc_info.value.attempts == 3

    @pytest.mark.asyncio
    async def test_zero_retries_fails_immediately(self, http_client):
        sleep = AsyncMock()
        with aioresponses() as m, patch("toonstats.crawler.http_client.asyncio.sleep", sleep):
            m.get(URL, exception=aiohttp.ClientConnectionError("unreachable"), repeat=True)

            with pytest.raises(FetchExhaustedError) as exc_info:
                await http_client.fetch(URL, max_retries=0)

        assert exc_info.value.attempts == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_latency_recorded(self, http_client):
        with histogram_observes(METRICS["fetch_latency"]):
            with aioresponses() as m:
                m.get(URL, status=200, body="ok")
                await http_client.fetch(URL)

    @pytest.mark.asyncio
    async def test_stats_track_retries(self, http_client):
        with aioresponses() as m:
            m.get(URL, exception=aiohttp.ClientConnectionError("reset"))
            m.get(URL, status=200, body="ok")
            await http_client.fetch(URL)

        stats = http_client.get_stats()
        assert stats["retries"] == 1
        assert stats["in_flight_requests"] == 0

    @pytest.mark.asyncio
    async def test_fetch_requires_initialization(self, crawler_config):
        client = HttpClient(crawler_config)
        with pytest.raises(RuntimeError, match="not initialized"):
            await client.fetch(URL)
