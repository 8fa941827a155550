"""
Collects chapter outcomes that arrive in completion order and returns them
ordered by chapter number.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import structlog

from toonstats.models import ChapterRecord
from toonstats.observability import increment

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CrawlProgress:
    processed: int
    total: int
    emitted: int
    skipped: int
    dropped: int

    @property
    def fraction(self) -> float:
        return self.processed / self.total if self.total else 1.0


ProgressCallback = Callable[[CrawlProgress], None]


class ResultAggregator:
    """
    Receives one outcome per requested chapter.

    Every ``emit``, ``skip`` or ``drop`` call advances ``processed`` by one.
    All calls happen on the event loop thread, so no locking is needed.
    """

    def __init__(self, total: int, on_progress: Optional[ProgressCallback] = None):
        if total < 0:
            raise ValueError("total must be >= 0")
        self.total = total
        self.on_progress = on_progress
        self._records: Dict[int, ChapterRecord] = {}
        self._skipped: List[int] = []
        self._dropped: Dict[int, str] = {}

    @property
    def processed(self) -> int:
        return len(self._records) + len(self._skipped) + len(self._dropped)

    @property
    def dropped(self) -> Dict[int, str]:
        """Chapter number -> reason, for chapters whose page could not be extracted."""
        return dict(self._dropped)

    @property
    def skipped(self) -> List[int]:
        return sorted(self._skipped)

    @property
    def progress(self) -> CrawlProgress:
        return CrawlProgress(
            processed=self.processed,
            total=self.total,
            emitted=len(self._records),
            skipped=len(self._skipped),
            dropped=len(self._dropped),
        )

    def _advance(self, outcome: str) -> None:
        if self.processed > self.total:
            raise ValueError(f"received {self.processed} outcomes for {self.total} chapters")
        increment("chapters", labels={"outcome": outcome})
        if self.on_progress is not None:
            self.on_progress(self.progress)

    def emit(self, record: ChapterRecord) -> None:
        if record.number in self._records:
            raise ValueError(f"chapter {record.number} emitted twice")
        self._records[record.number] = record
        self._advance("emitted")

    def skip(self, number: int) -> None:
        self._skipped.append(number)
        self._advance("skipped")

    def drop(self, number: int, reason: str) -> None:
        self._dropped[number] = reason
        self._advance("dropped")

    def results(self) -> List[ChapterRecord]:
        """Emitted records, ascending by chapter number."""
        ordered = [self._records[number] for number in sorted(self._records)]
        logger.debug("Aggregated chapters", **vars(self.progress))
        return ordered
