"""
Tests for the CSV sink and date-stamped output folders.
"""

import csv
from datetime import datetime, timezone

import pytest
from toonstats.models import ChapterRecord, UserComment
from toonstats.output.csv_writer import HEADER, rows, write_csv
from toonstats.utils import create_date_folder, current_utc_date

NOW = datetime(2022, 11, 21, 8, 30, tzinfo=timezone.utc)


def user_comment(username="reader", **overrides):
    values = dict(
        username=username,
        replies=1,
        upvotes=5,
        downvotes=0,
        contents="nice",
        profile_type="USER",
        auth_provider="EMAIL",
        country="US",
        post_date="2022-11-20T10:00:00",
    )
    values.update(overrides)
    return UserComment(**values)


def chapter(number, user_comments=()):
    return ChapterRecord(
        number=number,
        likes=100,
        length=20,
        comments=len(user_comments),
        replies=sum(c.replies for c in user_comments),
        season=1,
        season_chapter=number,
        arc=None,
        user_comments=tuple(user_comments),
        published="2022-11-20",
    )


@pytest.mark.unit
class TestRows:
    def test_one_row_per_comment(self):
        table = rows([chapter(1, [user_comment("a"), user_comment("b")])], "True Beauty", "2022-11-21")

        assert len(table) == 2
        assert [row[10] for row in table] == ["a", "b"]
        assert all(row[:2] == ["True Beauty", 1] for row in table)
        assert all(len(row) == len(HEADER) for row in table)

    def test_chapter_without_comments(self):
        (row,) = rows([chapter(2)], "True Beauty", "2022-11-21")

        assert row[1] == 2
        assert row[4] == ""  # arc
        assert row[10:19] == [""] * 9
        assert row[-1] == "2022-11-21"

    def test_placeholder_comment_written_blank(self):
        (row,) = rows([chapter(3, [UserComment.placeholder()])], "t", "2022-11-21")
        assert row[10] == ""
        assert row[11] == 0


@pytest.mark.unit
class TestWriteCsv:
    def test_date_folder(self, tmp_path):
        folder = create_date_folder(tmp_path, NOW)
        assert folder == tmp_path / "2022-11-21"
        assert folder.is_dir()
        # existing folder is reused
        assert create_date_folder(tmp_path, NOW) == folder

    def test_current_utc_date(self):
        assert current_utc_date(NOW) == "2022-11-21"

    def test_write(self, tmp_path):
        records = [chapter(1, [user_comment()]), chapter(2)]

        path = write_csv(tmp_path, records, "True Beauty", "true-beauty", now=NOW)

        assert path == tmp_path / "2022-11-21" / "true-beauty.csv"
        with open(path, newline="", encoding="utf-8") as f:
            content = list(csv.reader(f))
        assert content[0] == list(HEADER)
        assert [line[1] for line in content[1:]] == ["1", "2"]
        assert content[1][-1] == "2022-11-21"

    def test_empty_result(self, tmp_path):
        path = write_csv(tmp_path, [], "True Beauty", "true-beauty", now=NOW)
        with open(path, newline="", encoding="utf-8") as f:
            assert list(csv.reader(f)) == [list(HEADER)]

    def test_overwrites_previous_run(self, tmp_path):
        write_csv(tmp_path, [chapter(1), chapter(2)], "t", "t", now=NOW)
        path = write_csv(tmp_path, [chapter(3)], "t", "t", now=NOW)
        with open(path, newline="", encoding="utf-8") as f:
            assert len(list(csv.reader(f))) == 2
