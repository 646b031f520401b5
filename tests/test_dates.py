from datetime import datetime, timezone

import pytest

from blogsite.dates import format_date, format_edited, parse_timestamp


def test_parse_compact_offset():
    parsed = parse_timestamp("2021-03-25T19:25:28+0000")
    assert parsed == datetime(2021, 3, 25, 19, 25, 28, tzinfo=timezone.utc)


def test_parse_zulu_and_naive_timestamps():
    assert parse_timestamp("2021-03-25T19:25:28Z").tzinfo is not None
    assert parse_timestamp("2021-03-25T19:25:28").tzinfo == timezone.utc
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None


def test_parse_rejects_garbage():
    with pytest.raises(ValueError):
        parse_timestamp("yesterday")


def test_format_date_uses_pt_br_months():
    assert format_date(parse_timestamp("2021-03-15T10:00:00+0000")) == "15 mar 2021"
    assert format_date(parse_timestamp("2020-12-01T10:00:00+0000"), "UTC") == "01 dez 2020"
    assert format_date(None) == ""


def test_format_date_converts_timezone():
    value = parse_timestamp("2021-04-01T01:30:00+0000")
    assert format_date(value, "America/Sao_Paulo") == "31 mar 2021"


def test_format_edited():
    value = parse_timestamp("2021-03-19T15:49:00+0000")
    assert format_edited(value) == "* editado em 19 mar 2021, às 15:49"
