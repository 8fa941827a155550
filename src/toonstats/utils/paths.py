"""
Date-stamped output locations.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union


def current_utc_date(now: Optional[datetime] = None) -> str:
    """Today's UTC date as ``YYYY-MM-DD``."""
    now = now or datetime.now(timezone.utc)
    return now.date().isoformat()


def create_date_folder(base: Union[str, Path], now: Optional[datetime] = None) -> Path:
    """Create ``base/YYYY-MM-DD`` if missing and return it."""
    path = Path(base) / current_utc_date(now)
    path.mkdir(parents=True, exist_ok=True)
    return path
