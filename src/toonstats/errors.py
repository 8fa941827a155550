"""
Exception hierarchy for toonstats.
"""

from __future__ import annotations

from typing import Optional


class ToonStatsError(Exception):
    """Base class for all toonstats errors."""


class FetchExhaustedError(ToonStatsError):
    """Raised when every retry of a single GET failed at the transport level."""

    def __init__(self, url: str, attempts: int, last_error: Optional[BaseException] = None):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Cannot connect after {attempts} attempts. Check URL: {url}")


class ExtractionError(ToonStatsError):
    """A single field could not be located or parsed in a fetched document."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Failed to extract {field}: {reason}")


class CrawlAbortedError(ToonStatsError):
    """A crawl run stopped because a resource became unreachable."""

    def __init__(self, url: str, attempts: int):
        self.url = url
        self.attempts = attempts
        super().__init__(f"Crawl aborted, {url} unreachable after {attempts} attempts")
