"""Output sinks for crawled chapters."""

from .csv_writer import write_csv

__all__ = ["write_csv"]
