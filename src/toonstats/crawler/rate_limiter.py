"""
Jittered delay inserted before episode list requests.

The list pages are fetched concurrently; drawing each delay from a small
discrete set spreads the requests out so they do not hit the site in one burst.
"""

from __future__ import annotations

import asyncio
import random
from typing import Optional, Sequence

import structlog

logger = structlog.get_logger(__name__)


class JitterRateLimiter:
    """Sleeps a randomly chosen delay before each request."""

    def __init__(self, choices: Sequence[float] = (0.5, 1.0, 1.5), rng: Optional[random.Random] = None):
        if not choices:
            raise ValueError("choices must contain at least one delay")
        self.choices = tuple(choices)
        self._rng = rng or random.Random()

    async def delay(self) -> float:
        """
        Sleep for one of the configured delays.

        Returns:
            Delay applied in seconds
        """
        seconds = self._rng.choice(self.choices)
        logger.debug("Applying request jitter", delay=seconds)
        await asyncio.sleep(seconds)
        return seconds
