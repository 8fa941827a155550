"""
Data models shared by the harvester, the detail crawler and the output sinks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Tuple

# A classifier receives the parsed viewer page and the confirmed chapter number.
Classifier = Callable[[Any, int], Any]
SkipPredicate = Callable[[int], bool]


def _never_skip(number: int) -> bool:
    return False


def _unclassified(document: Any, number: int) -> Any:
    return None


@dataclass(slots=True, frozen=True)
class UserComment:
    """Metadata of a single top-level user comment."""

    username: str
    replies: int
    upvotes: int
    downvotes: int
    contents: str
    profile_type: str
    auth_provider: str
    country: str
    post_date: str

    @classmethod
    def placeholder(cls) -> UserComment:
        """Sentinel used when the comment section could not be read."""
        return cls(
            username="",
            replies=0,
            upvotes=0,
            downvotes=0,
            contents="",
            profile_type="",
            auth_provider="",
            country="",
            post_date="",
        )


@dataclass(slots=True, frozen=True)
class CommentSummary:
    comments: int
    replies: int
    user_comments: Tuple[UserComment, ...]

    @classmethod
    def degraded(cls) -> CommentSummary:
        return cls(comments=0, replies=0, user_comments=(UserComment.placeholder(),))


@dataclass(slots=True, frozen=True)
class ChapterListEntry:
    """One row of the paginated episode list."""

    number: int
    likes: int
    date: str  # ISO 8601, e.g. 2022-11-20


@dataclass(frozen=True)
class SeriesListing:
    """What the episode list says about a series: its title and when each chapter was published."""

    title: Optional[str]
    publish_map: Mapping[int, str]


@dataclass(slots=True, frozen=True)
class ChapterRecord:
    """Finalized statistics for one chapter."""

    number: int
    likes: int
    length: int
    comments: int
    replies: int
    season: Any
    season_chapter: Any
    arc: Any
    user_comments: Tuple[UserComment, ...] = ()
    published: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the record."""
        for name in ("likes", "length", "comments", "replies"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")


@dataclass(slots=True, frozen=True)
class Classifiers:
    """Pure, total functions deriving season information from a viewer page."""

    season: Classifier = _unclassified
    season_chapter: Classifier = _unclassified
    arc: Classifier = _unclassified


@dataclass(frozen=True)
class CrawlRequest:
    """Immutable input of a detail crawl: an inclusive chapter range of one series."""

    start: int
    end: int
    series_id: int
    classifiers: Classifiers = field(default_factory=Classifiers)
    skip: SkipPredicate = _never_skip

    def __post_init__(self) -> None:
        if self.start < 1:
            raise ValueError(f"start must be >= 1, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) must not be smaller than start ({self.start})")

    @property
    def numbers(self) -> range:
        return range(self.start, self.end + 1)

    def __len__(self) -> int:
        return self.end - self.start + 1
