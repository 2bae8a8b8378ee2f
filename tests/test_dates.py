"""Tests for moment-style date formats."""

from datetime import datetime

from portus.dates import format_date, parse_date

WHEN = datetime(2026, 3, 4, 15, 7, 9)


def test_format_numeric():
    assert format_date(WHEN, "YYYY-MM-DD HH:mm") == "2026-03-04 15:07"
    assert format_date(WHEN, "D/M/YY") == "4/3/26"


def test_format_names_and_ordinals():
    assert format_date(WHEN, "dddd, Do MMMM YYYY") == "Wednesday, 4th March 2026"
    assert format_date(datetime(2026, 1, 1), "Do") == "1st"
    assert format_date(datetime(2026, 1, 12), "Do") == "12th"
    assert format_date(datetime(2026, 1, 22), "Do") == "22nd"


def test_format_12_hour():
    assert format_date(WHEN, "h:mm A") == "3:07 PM"
    assert format_date(datetime(2026, 1, 1, 0, 5), "hh:mm a") == "12:05 am"


def test_format_escaped_literal():
    assert format_date(WHEN, "YYYY [at] HH") == "2026 at 15"


def test_parse_round_trips_format():
    assert parse_date("2026-03-04", "YYYY-MM-DD") == datetime(2026, 3, 4)
    assert parse_date("04/03/2026 15:07", "DD/MM/YYYY HH:mm") == datetime(2026, 3, 4, 15, 7)


def test_parse_12_hour():
    assert parse_date("3:07 PM", "h:mm A") == datetime(1900, 1, 1, 15, 7)
    assert parse_date("12:30 am", "h:mm a") == datetime(1900, 1, 1, 0, 30)


def test_parse_month_name():
    assert parse_date("4 March 2026", "D MMMM YYYY") == datetime(2026, 3, 4)


def test_parse_mismatch_returns_none():
    assert parse_date("03/04/2026", "YYYY-MM-DD") is None
    assert parse_date("2026-02-30", "YYYY-MM-DD") is None
