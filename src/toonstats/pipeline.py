"""
Pipeline orchestration: harvest publish dates, then crawl chapter statistics.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import structlog

from toonstats.aggregator import ProgressCallback
from toonstats.classifiers import from_series
from toonstats.config.config import Config
from toonstats.crawler import ChapterListHarvester, DetailCrawler, HttpClient, JitterRateLimiter, WorkerPool
from toonstats.extractor import FieldExtractor, WebtoonExtractor
from toonstats.models import ChapterRecord, Classifiers, CrawlRequest, SkipPredicate

logger = structlog.get_logger(__name__)


async def parse_chapters(
    start: int,
    end: int,
    pages: int,
    config: Config,
    *,
    classifiers: Optional[Classifiers] = None,
    skip: Optional[SkipPredicate] = None,
    extractor: Optional[FieldExtractor] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> List[ChapterRecord]:
    """
    Crawl chapters ``start..=end`` of the configured series.

    The episode list (``pages`` pages) is harvested first; its publish dates
    fill ``ChapterRecord.published``. Classifiers and the skip predicate default
    to the ones described by ``config.series``.

    Raises:
        CrawlAbortedError: a page could not be fetched after all retries
    """
    _, records = await crawl_series(
        start,
        end,
        pages,
        config,
        classifiers=classifiers,
        skip=skip,
        extractor=extractor,
        on_progress=on_progress,
    )
    return records


async def crawl_series(
    start: int,
    end: int,
    pages: int,
    config: Config,
    *,
    classifiers: Optional[Classifiers] = None,
    skip: Optional[SkipPredicate] = None,
    extractor: Optional[FieldExtractor] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> Tuple[str, List[ChapterRecord]]:
    """
    Same crawl as ``parse_chapters``, also returning the series title.

    The title is ``config.series.title`` when set, otherwise the one shown on
    the first episode list page, otherwise ``config.series.filename``.
    """
    series = config.series
    default_classifiers, default_skip = from_series(series)
    request = CrawlRequest(
        start=start,
        end=end,
        series_id=series.title_no,
        classifiers=classifiers or default_classifiers,
        skip=skip or default_skip,
    )
    extractor = extractor or WebtoonExtractor()

    with structlog.contextvars.bound_contextvars(series_id=series.title_no):
        async with HttpClient(config.crawler) as client:
            harvester = ChapterListHarvester(client, extractor, JitterRateLimiter(config.crawler.jitter_choices))
            listing = await harvester.harvest_series(pages, series.list_url)

            crawler = DetailCrawler(
                client,
                extractor,
                listing.publish_map,
                episode_url=series.episode_url,
                episode_url_offset=series.episode_url_offset,
            )
            records = await crawler.crawl(request, WorkerPool(config.crawler.max_workers), on_progress)

    title = series.title or listing.title or series.filename
    return title, records
