"""
toonstats crawler module.

- ``HttpClient``: GET with exponential-backoff retry for transport failures
- ``JitterRateLimiter``: randomized delay before episode list requests
- ``ChapterListHarvester``: chapter number -> publish date from the episode list
- ``DetailCrawler``: per-chapter statistics from viewer pages, at most 8 in flight
"""

from .chapter import DetailCrawler
from .chapter_list import ChapterListHarvester
from .http_client import CrawlerResponse, HttpClient
from .pool import WorkerPool
from .rate_limiter import JitterRateLimiter

__all__ = [
    "ChapterListHarvester",
    "CrawlerResponse",
    "DetailCrawler",
    "HttpClient",
    "JitterRateLimiter",
    "WorkerPool",
]
