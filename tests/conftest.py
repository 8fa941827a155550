"""
Shared fixtures for the toonstats test suite.
"""

# Standard library imports
from typing import AsyncGenerator

# Third-party imports
import pytest
import pytest_asyncio
import structlog

# Local imports
from toonstats.config import Config, CrawlerConfig
from toonstats.crawler.http_client import HttpClient
from toonstats.extractor import WebtoonExtractor

from tests.helpers.pages import BASE, EPISODE_URL

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any logging configuration a test performed."""
    yield
    structlog.reset_defaults()


# ============================================================================
# Configuration and client fixtures
# ============================================================================


@pytest.fixture
def crawler_config() -> CrawlerConfig:
    """Crawler settings with backoff scaled down for tests."""
    return CrawlerConfig(
        timeout=5.0,
        max_retries=5,
        backoff_base=0.001,
        jitter_choices=(0.0,),
        user_agent="TestBot/1.0",
    )


@pytest.fixture
def config(crawler_config, tmp_path) -> Config:
    config = Config()
    config.crawler = crawler_config
    config.series.title_no = 95
    config.series.filename = "true-beauty"
    config.series.page_url = BASE + "/list?title_no={title_no}"
    config.series.episode_url = EPISODE_URL
    config.output.path = tmp_path / "output"
    return config


@pytest_asyncio.fixture
async def http_client(crawler_config) -> AsyncGenerator[HttpClient, None]:
    async with HttpClient(crawler_config) as client:
        yield client


@pytest.fixture
def extractor() -> WebtoonExtractor:
    return WebtoonExtractor()
