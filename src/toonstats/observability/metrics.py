"""
Defines Prometheus metrics for the crawl.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Reloading this module (as the test suite does) must not register the same
# collector twice.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing

        try:
            return metric_cls(name, documentation, *args, **kwargs)
        except ValueError:
            # Registration lost the race, fall back to the now-existing collector.
            return _PROM_REGISTRY._names_to_collectors[name]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)
Histogram = _duplicate_safe_factory(_OrigHistogram)


def _create_metrics() -> Dict[str, Any]:
    return {
        "fetch_retries": Counter(
            "toonstats_fetch_retries_total",
            "GET attempts that failed at the transport level and were retried",
        ),
        "fetch_exhausted": Counter(
            "toonstats_fetch_exhausted_total",
            "GET calls that ran out of retries",
        ),
        "fetch_latency": Histogram(
            "toonstats_fetch_latency_seconds",
            "Time from the first attempt to a received response",
            buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10, 30, 60),
        ),
        "chapters": Counter(
            "toonstats_chapters_total",
            "Chapters processed by the detail crawler",
            ["outcome"],
        ),
        "list_pages": Counter(
            "toonstats_list_pages_total",
            "Episode list pages processed by the harvester",
            ["outcome"],
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()
