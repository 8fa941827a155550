"""
Protocol for pluggable field extraction from fetched pages.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, runtime_checkable


class FieldKind(str, Enum):
    """Fields the crawler asks an extractor for."""

    CHAPTER_LIST = "chapter_list"  # list page -> list[ChapterListEntry]
    SERIES_TITLE = "series_title"  # list page -> str
    LIKES = "likes"  # viewer page -> int
    LENGTH = "length"  # viewer page -> int
    CHAPTER_NUMBER = "chapter_number"  # viewer page -> int
    COMMENTS = "comments"  # viewer page -> CommentSummary


@runtime_checkable
class FieldExtractor(Protocol):
    """Turns page markup into typed values."""

    name: str

    def parse(self, html: str) -> Any:
        """Parse raw markup into the document object handed back to ``extract``."""
        ...

    def extract(self, document: Any, kind: FieldKind) -> Any:
        """Return one field of ``document``.

        Raises:
            ExtractionError: the field is missing or malformed
        """
        ...
