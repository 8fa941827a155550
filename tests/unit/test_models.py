"""
Tests for the shared data models.
"""

import dataclasses

import pytest
from toonstats.models import ChapterRecord, Classifiers, CommentSummary, CrawlRequest, UserComment


def record(**overrides):
    values = dict(number=1, likes=10, length=3, comments=0, replies=0, season=None, season_chapter=None, arc=None)
    values.update(overrides)
    return ChapterRecord(**values)


@pytest.mark.unit
class TestCrawlRequest:
    def test_numbers_inclusive(self):
        request = CrawlRequest(3, 7, 95)
        assert list(request.numbers) == [3, 4, 5, 6, 7]
        assert len(request) == 5

    def test_single_chapter(self):
        assert list(CrawlRequest(4, 4, 95).numbers) == [4]

    @pytest.mark.parametrize("start,end", [(0, 3), (5, 4)])
    def test_invalid_range(self, start, end):
        with pytest.raises(ValueError):
            CrawlRequest(start, end, 95)

    def test_defaults(self):
        request = CrawlRequest(1, 2, 95)
        assert request.skip(1) is False
        assert request.classifiers.season(None, 1) is None

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            CrawlRequest(1, 2, 95).end = 5


@pytest.mark.unit
class TestChapterRecord:
    @pytest.mark.parametrize("field", ["likes", "length", "comments", "replies"])
    def test_negative_counter_rejected(self, field):
        with pytest.raises(ValueError, match=field):
            record(**{field: -1})

    def test_defaults(self):
        r = record()
        assert r.user_comments == ()
        assert r.published is None


@pytest.mark.unit
def test_degraded_summary():
    summary = CommentSummary.degraded()
    assert (summary.comments, summary.replies) == (0, 0)
    assert summary.user_comments == (UserComment.placeholder(),)


@pytest.mark.unit
def test_classifiers_default_to_none():
    classifiers = Classifiers()
    assert classifiers.season_chapter(object(), 3) is None
    assert classifiers.arc(object(), 3) is None
