from datetime import date, datetime

import pytest

from app.cms.utils import parse_bool, parse_date, parse_datetime, parse_list, slugify, youtube_id


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Knee Replacement (TKR)", "knee-replacement-tkr"),
        ("  Café São Paulo  ", "cafe-sao-paulo"),
        ("---", ""),
        (None, ""),
    ],
)
def test_slugify(raw, expected):
    assert slugify(raw) == expected


def test_slugify_truncates_without_trailing_dash():
    assert slugify("ab " * 100, max_length=10) == "ab-ab-ab-a"
    assert not slugify("abcd efgh", max_length=5).endswith("-")


def test_parse_list_forms():
    assert parse_list(["JCI", "", None, "NABH"]) == ["JCI", "NABH"]
    assert parse_list('["English", "Hindi"]') == ["English", "Hindi"]
    assert parse_list("JCI, NABH\nISO") == ["JCI", "NABH", "ISO"]
    assert parse_list("") == []


def test_parse_bool():
    assert parse_bool("on") is True
    assert parse_bool("0") is False
    assert parse_bool(None) is False
    assert parse_bool(1) is True


def test_parse_dates():
    assert parse_date("2024-05-06T10:00:00") == date(2024, 5, 6)
    assert parse_datetime("2024-05-06T10:00:00Z") == datetime(2024, 5, 6, 10, 0, 0)
    with pytest.raises(ValueError):
        parse_date("06/05/2024")


def test_youtube_id():
    assert youtube_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=5") == "dQw4w9WgXcQ"
    assert youtube_id("https://youtu.be/dQw4w9WgXcQ") == "dQw4w9WgXcQ"
    assert youtube_id("https://www.youtube.com/shorts/dQw4w9WgXcQ") == "dQw4w9WgXcQ"
    assert youtube_id("https://vimeo.com/123") is None
