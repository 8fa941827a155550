"""
Fetches every chapter viewer page of a range and builds one record per chapter.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, List, Mapping, Optional

import structlog

from toonstats.aggregator import ProgressCallback, ResultAggregator
from toonstats.config.config import DEFAULT_EPISODE_URL
from toonstats.errors import CrawlAbortedError, ExtractionError, FetchExhaustedError
from toonstats.extractor.protocols import FieldExtractor, FieldKind
from toonstats.models import ChapterRecord, Classifier, CommentSummary, CrawlRequest

from .http_client import HttpClient
from .pool import WorkerPool

logger = structlog.get_logger(__name__)


class DetailCrawler:
    """
    Crawls an inclusive chapter range with a bounded worker pool.

    Per chapter outcome:

    - skipped: the skip predicate matched, or the viewer answered with a non-200 status
    - dropped: a required field (likes, length, chapter number, classifiers) failed
    - emitted: a record was built; a failed comment section degrades to a placeholder

    A fetch that runs out of retries aborts the whole crawl.
    """

    def __init__(
        self,
        client: HttpClient,
        extractor: FieldExtractor,
        publish_map: Mapping[int, str] = MappingProxyType({}),
        *,
        episode_url: str = DEFAULT_EPISODE_URL,
        episode_url_offset: int = 0,
    ):
        self.client = client
        self.extractor = extractor
        self.publish_map = publish_map
        self.episode_url = episode_url
        self.episode_url_offset = episode_url_offset

    def chapter_url(self, series_id: int, number: int) -> str:
        """Viewer URL of chapter ``number``; the site's episode number is shifted by ``episode_url_offset``."""
        return self.episode_url.format(series_id=series_id, number=number + self.episode_url_offset)

    async def crawl(
        self,
        request: CrawlRequest,
        pool: Optional[WorkerPool] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[ChapterRecord]:
        """
        Crawl ``request.start..=request.end``.

        Returns:
            Emitted records ascending by chapter number

        Raises:
            CrawlAbortedError: a viewer page could not be fetched at all
        """
        pool = pool or WorkerPool()
        aggregator = ResultAggregator(len(request), on_progress)

        async def handle(number: int) -> None:
            await self._chapter(request, number, aggregator)

        logger.info("Crawling chapters", start=request.start, end=request.end, workers=pool.size)
        try:
            await pool.run(request.numbers, handle)
        except FetchExhaustedError as e:
            logger.error("Crawl aborted", url=e.url, processed=aggregator.processed, total=aggregator.total)
            raise CrawlAbortedError(e.url, e.attempts) from e

        progress = aggregator.progress
        logger.info(
            "Crawl finished",
            emitted=progress.emitted,
            skipped=progress.skipped,
            dropped=progress.dropped,
        )
        return aggregator.results()

    async def _chapter(self, request: CrawlRequest, number: int, aggregator: ResultAggregator) -> None:
        if request.skip(number):
            logger.debug("Skipping chapter", chapter=number)
            aggregator.skip(number)
            return

        url = self.chapter_url(request.series_id, number)
        response = await self.client.fetch(url)

        if not response.ok:
            logger.debug("Chapter not available", chapter=number, status=response.status, url=url)
            aggregator.skip(number)
            return

        try:
            record = self._build_record(request, number, response.text, url)
        except ExtractionError as e:
            logger.error("Failed to extract chapter", chapter=number, url=url, field=e.field, reason=e.reason)
            aggregator.drop(number, str(e))
            return

        aggregator.emit(record)

    def _build_record(self, request: CrawlRequest, number: int, html: str, url: str) -> ChapterRecord:
        document = self.extractor.parse(html)

        likes = self.extractor.extract(document, FieldKind.LIKES)
        length = self.extractor.extract(document, FieldKind.LENGTH)
        shown = self.extractor.extract(document, FieldKind.CHAPTER_NUMBER)
        if shown != number:
            logger.warning("Viewer shows a different chapter number", chapter=number, shown=shown, url=url)

        try:
            summary: CommentSummary = self.extractor.extract(document, FieldKind.COMMENTS)
        except ExtractionError as e:
            logger.error("Failed to parse comments", chapter=number, url=url, reason=e.reason)
            summary = CommentSummary.degraded()

        classifiers = request.classifiers
        return ChapterRecord(
            number=number,
            likes=likes,
            length=length,
            comments=summary.comments,
            replies=summary.replies,
            season=_classify(classifiers.season, "season", document, shown),
            season_chapter=_classify(classifiers.season_chapter, "season_chapter", document, shown),
            arc=_classify(classifiers.arc, "arc", document, shown),
            user_comments=summary.user_comments,
            published=self.publish_map.get(number),
        )


def _classify(classifier: Classifier, name: str, document: Any, number: int) -> Any:
    # Classifiers must be total; one that raises means the page looks different than expected.
    try:
        return classifier(document, number)
    except Exception as e:
        raise ExtractionError(name, f"classifier raised {e!r}") from e
