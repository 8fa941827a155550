"""
CSV export of crawled chapters.

One row per user comment; chapter columns repeat on each of its rows. A chapter
without listed comments still gets one row with empty comment columns.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import structlog

from toonstats.models import ChapterRecord, UserComment
from toonstats.utils import atomic_write_text, create_date_folder, current_utc_date

logger = structlog.get_logger(__name__)

HEADER: Sequence[str] = (
    "title",
    "chapter",
    "season",
    "season_chapter",
    "arc",
    "length",
    "comments",
    "replies",
    "likes",
    "published",
    "user",
    "comment_replies",
    "upvotes",
    "downvotes",
    "comment_contents",
    "profile_type",
    "auth_provider",
    "country",
    "post_date",
    "scrape_date",
)


def _cell(value: object) -> object:
    return "" if value is None else value


def rows(records: Iterable[ChapterRecord], title: str, scrape_date: str) -> List[List[object]]:
    table: List[List[object]] = []
    for record in records:
        chapter = [
            title,
            record.number,
            _cell(record.season),
            _cell(record.season_chapter),
            _cell(record.arc),
            record.length,
            record.comments,
            record.replies,
            record.likes,
            _cell(record.published),
        ]
        comments: Sequence[Optional[UserComment]] = record.user_comments or (None,)
        for comment in comments:
            if comment is None:
                table.append(chapter + [""] * 9 + [scrape_date])
                continue
            table.append(
                chapter
                + [
                    comment.username,
                    comment.replies,
                    comment.upvotes,
                    comment.downvotes,
                    comment.contents,
                    comment.profile_type,
                    comment.auth_provider,
                    comment.country,
                    comment.post_date,
                    scrape_date,
                ]
            )
    return table


def write_csv(
    output: Union[str, Path],
    records: Sequence[ChapterRecord],
    title: str,
    filename: str,
    now: Optional[datetime] = None,
) -> Path:
    """
    Write ``records`` to ``output/YYYY-MM-DD/filename.csv``.

    Returns:
        Path of the written file
    """
    folder = create_date_folder(output, now)
    target = folder / f"{filename}.csv"

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(HEADER)
    writer.writerows(rows(records, title, current_utc_date(now)))
    atomic_write_text(target, buffer.getvalue())

    logger.info("Wrote CSV", path=str(target), chapters=len(records))
    return target
