"""Utility modules for toonstats."""

from .atomic import atomic_write_text
from .paths import create_date_folder, current_utc_date

__all__ = ["atomic_write_text", "create_date_folder", "current_utc_date"]
