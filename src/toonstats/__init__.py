"""
toonstats - chapter statistics crawler for serialized web comics.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .models import ChapterRecord, Classifiers, CrawlRequest, UserComment
from .pipeline import crawl_series, parse_chapters

__all__ = [
    "__version__",
    "Config",
    "ChapterRecord",
    "Classifiers",
    "CrawlRequest",
    "UserComment",
    "crawl_series",
    "parse_chapters",
]
