"""
Harvests publish dates from the paginated episode list.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import structlog

from toonstats.errors import CrawlAbortedError, ExtractionError, FetchExhaustedError
from toonstats.extractor.protocols import FieldExtractor, FieldKind
from toonstats.models import ChapterListEntry, SeriesListing
from toonstats.observability import increment

from .http_client import HttpClient
from .pool import run_all
from .rate_limiter import JitterRateLimiter

logger = structlog.get_logger(__name__)


def page_url(base_url: str, page: int) -> str:
    return f"{base_url}&page={page}"


class ChapterListHarvester:
    """Builds the chapter number -> publish date map used to backfill chapter records."""

    def __init__(self, client: HttpClient, extractor: FieldExtractor, rate_limiter: JitterRateLimiter):
        self.client = client
        self.extractor = extractor
        self.rate_limiter = rate_limiter

    async def harvest(self, last_page: int, base_url: str) -> Mapping[int, str]:
        """
        Fetch list pages ``1..=last_page`` concurrently and merge their entries.

        A page that cannot be parsed contributes nothing. When two pages list the
        same chapter the higher page number wins.

        Returns:
            Read-only mapping of chapter number to ISO publish date

        Raises:
            CrawlAbortedError: a page could not be fetched at all
        """
        listing = await self.harvest_series(last_page, base_url)
        return listing.publish_map

    async def harvest_series(self, last_page: int, base_url: str) -> SeriesListing:
        """Like ``harvest``, and also reads the series title from the first page."""
        if last_page < 1:
            return SeriesListing(title=None, publish_map=MappingProxyType({}))

        try:
            pages = await run_all(self._page(base_url, page) for page in range(1, last_page + 1))
        except FetchExhaustedError as e:
            raise CrawlAbortedError(e.url, e.attempts) from e

        publish_map: Dict[int, str] = {}
        for entries, _ in pages:
            for entry in entries:
                publish_map[entry.number] = entry.date
        title = pages[0][1]

        logger.info("Harvested episode list", pages=last_page, chapters=len(publish_map), title=title)
        return SeriesListing(title=title, publish_map=MappingProxyType(publish_map))

    async def _page(self, base_url: str, page: int) -> Tuple[List[ChapterListEntry], Optional[str]]:
        url = page_url(base_url, page)
        await self.rate_limiter.delay()
        response = await self.client.fetch(url)

        if not response.ok:
            logger.error("Unexpected status for list page", page=page, url=url, status=response.status)
            increment("list_pages", labels={"outcome": "failed"})
            return [], None

        document = self.extractor.parse(response.text)
        title = self._title(document, url) if page == 1 else None
        try:
            entries = self.extractor.extract(document, FieldKind.CHAPTER_LIST)
        except ExtractionError as e:
            logger.error("Failed to parse list page", page=page, url=url, error=str(e))
            increment("list_pages", labels={"outcome": "failed"})
            return [], title

        increment("list_pages", labels={"outcome": "parsed"})
        return entries, title

    def _title(self, document, url: str) -> Optional[str]:
        try:
            return self.extractor.extract(document, FieldKind.SERIES_TITLE)
        except ExtractionError as e:
            logger.warning("Series title not found", url=url, error=str(e))
            return None