"""Configuration for toonstats."""

from .config import (
    MAX_WORKERS,
    Config,
    CrawlerConfig,
    MonitoringConfig,
    OutputConfig,
    SeasonRule,
    SeriesConfig,
    settings,
)

__all__ = [
    "MAX_WORKERS",
    "Config",
    "CrawlerConfig",
    "MonitoringConfig",
    "OutputConfig",
    "SeasonRule",
    "SeriesConfig",
    "settings",
]
