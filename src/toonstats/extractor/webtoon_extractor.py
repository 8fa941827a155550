"""
selectolax-based field extractor for webtoons.com episode list and viewer pages.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Callable, Dict, List, Optional

import structlog
from dateutil import parser as dateutil_parser
from selectolax.lexbor import LexborHTMLParser, LexborNode

from toonstats.errors import ExtractionError
from toonstats.models import ChapterListEntry, CommentSummary, UserComment

from .protocols import FieldExtractor, FieldKind

logger = structlog.get_logger(__name__)

_DIGITS = re.compile(r"\d[\d,]*")
_DEFAULT_A = datetime(2001, 1, 1)
_DEFAULT_B = datetime(2002, 2, 2)

# Episode list
LIST_ITEM = "ul#_listUl > li"
NUMBER = "span.tx"
LIST_LIKES = "span.like_area"
LIST_DATE = "span.date"
SERIES_TITLE = "div.info h1.subj"

# Viewer
PANELS = "#_imageList img"
VIEWER_LIKES = "span._likeCount"

# Comment section
COMMENT_AREA = "#_commentArea"
COMMENT_TOTAL = "span.u_cbox_count"
COMMENT_ITEM = "li.u_cbox_comment"
COMMENT_NICK = "span.u_cbox_nick"
COMMENT_CONTENTS = "span.u_cbox_contents"
COMMENT_DATE = "span.u_cbox_date"
COMMENT_REPLIES = "span.u_cbox_reply_cnt"
COMMENT_UPVOTES = "em.u_cbox_cnt_recomm"
COMMENT_DOWNVOTES = "em.u_cbox_cnt_unrecomm"


def parse_count(text: Optional[str], field: str) -> int:
    """Parse the first number in ``text``, ignoring thousands separators: ``like7,779`` -> 7779."""
    if text is None:
        raise ExtractionError(field, "element not found")
    match = _DIGITS.search(text)
    if match is None:
        raise ExtractionError(field, f"no number in {text.strip()!r}")
    return int(match.group().replace(",", ""))


def parse_date(text: Optional[str], field: str = "date") -> str:
    """Normalize a list page date such as ``Nov 20, 2022`` to ISO 8601."""
    if not text or not text.strip():
        raise ExtractionError(field, "element not found")
    raw = text.strip()
    try:
        # Parsing against two different defaults exposes any component the text leaves out
        first = dateutil_parser.parse(raw, default=_DEFAULT_A)
        second = dateutil_parser.parse(raw, default=_DEFAULT_B)
    except (ValueError, OverflowError) as e:
        raise ExtractionError(field, f"cannot parse {raw!r} to a date") from e
    if first.date() != second.date():
        raise ExtractionError(field, f"{raw!r} is not a complete date")
    return first.date().isoformat()


def _text(node: LexborNode, selector: str) -> Optional[str]:
    found = node.css_first(selector)
    if found is None:
        return None
    return found.text(deep=True)


def _chapter_number(node: LexborNode) -> int:
    raw = _text(node, NUMBER)
    if raw is None:
        raise ExtractionError(FieldKind.CHAPTER_NUMBER.value, "no chapter number to parse")
    cleaned = raw.strip().replace("#", "")
    try:
        return int(cleaned)
    except ValueError as e:
        raise ExtractionError(FieldKind.CHAPTER_NUMBER.value, f"cannot parse {cleaned!r} to an integer") from e


class WebtoonExtractor(FieldExtractor):
    """Extracts statistics from webtoons.com markup."""

    name = "webtoon"

    def __init__(self) -> None:
        self._handlers: Dict[FieldKind, Callable[[LexborHTMLParser], object]] = {
            FieldKind.CHAPTER_LIST: self.chapter_list,
            FieldKind.SERIES_TITLE: self.series_title,
            FieldKind.LIKES: self.likes,
            FieldKind.LENGTH: self.length,
            FieldKind.CHAPTER_NUMBER: self.chapter_number,
            FieldKind.COMMENTS: self.comments,
        }

    def parse(self, html: str) -> LexborHTMLParser:
        return LexborHTMLParser(html)

    def extract(self, document: LexborHTMLParser, kind: FieldKind) -> object:
        try:
            handler = self._handlers[kind]
        except KeyError:
            raise ExtractionError(str(kind), "unsupported field") from None
        return handler(document)

    # --- Episode list ---

    def chapter_list(self, document: LexborHTMLParser) -> List[ChapterListEntry]:
        """All (number, likes, date) entries of one list page, in page order."""
        entries = []
        for item in document.css(LIST_ITEM):
            entries.append(
                ChapterListEntry(
                    number=_chapter_number(item),
                    likes=parse_count(_text(item, LIST_LIKES), FieldKind.LIKES.value),
                    date=parse_date(_text(item, LIST_DATE)),
                )
            )
        return entries

    def series_title(self, document: LexborHTMLParser) -> str:
        title = _text(document.root, SERIES_TITLE)
        if title is None or not title.strip():
            raise ExtractionError(FieldKind.SERIES_TITLE.value, "series title not found")
        return " ".join(title.split())

    # --- Viewer ---

    def likes(self, document: LexborHTMLParser) -> int:
        return parse_count(_text(document.root, VIEWER_LIKES), FieldKind.LIKES.value)

    def length(self, document: LexborHTMLParser) -> int:
        panels = document.css(PANELS)
        if not panels:
            raise ExtractionError(FieldKind.LENGTH.value, "no panels found")
        return len(panels)

    def chapter_number(self, document: LexborHTMLParser) -> int:
        return _chapter_number(document.root)

    def comments(self, document: LexborHTMLParser) -> CommentSummary:
        """Comment and reply totals plus the comments shown on the page.

        ``replies`` is the sum of the reply counters of the listed comments.
        """
        area = document.css_first(COMMENT_AREA)
        if area is None:
            raise ExtractionError(FieldKind.COMMENTS.value, "comment section not found")

        user_comments = tuple(self._user_comment(item) for item in area.css(COMMENT_ITEM))
        total = _text(area, COMMENT_TOTAL)
        comments = parse_count(total, FieldKind.COMMENTS.value) if total is not None else len(user_comments)
        replies = sum(comment.replies for comment in user_comments)

        return CommentSummary(comments=comments, replies=replies, user_comments=user_comments)

    def _user_comment(self, item: LexborNode) -> UserComment:
        field = FieldKind.COMMENTS.value
        username = _text(item, COMMENT_NICK)
        if username is None:
            raise ExtractionError(field, "comment without author")

        date_node = item.css_first(COMMENT_DATE)
        post_date = ""
        if date_node is not None:
            post_date = date_node.attributes.get("data-value") or date_node.text(strip=True)

        replies = _text(item, COMMENT_REPLIES)
        attrs = item.attributes
        return UserComment(
            username=username.strip(),
            replies=parse_count(replies, field) if replies is not None else 0,
            upvotes=parse_count(_text(item, COMMENT_UPVOTES), field),
            downvotes=parse_count(_text(item, COMMENT_DOWNVOTES), field),
            contents=(_text(item, COMMENT_CONTENTS) or "").strip(),
            profile_type=attrs.get("data-profile-type") or "",
            auth_provider=attrs.get("data-auth-provider") or "",
            country=attrs.get("data-country") or "",
            post_date=post_date,
        )
