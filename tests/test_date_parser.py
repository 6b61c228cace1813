"""Tests for date parser with relative dates."""

import pytest
from datetime import date
from retailmetrics.utils.date_parser import REPORT_PERIODS, parse_date, get_date_range

# A Wednesday
TODAY = date(2024, 3, 13)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    assert parse_date("today") == date.today()
    assert parse_date(" Today ", today=TODAY) == TODAY


def test_parse_yesterday():
    """Test parsing 'yesterday'."""
    assert parse_date("yesterday", today=TODAY) == date(2024, 3, 12)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("this month", date(2024, 3, 1)),
        ("last month", date(2024, 2, 1)),
        ("this year", date(2024, 1, 1)),
        ("last year", date(2023, 1, 1)),
        ("this week", date(2024, 3, 11)),
        ("last week", date(2024, 3, 4)),
    ],
)
def test_parse_relative_period_start(text, expected):
    """Relative periods resolve to their first day."""
    assert parse_date(text, today=TODAY) == expected


def test_parse_invalid_date():
    """Test parsing invalid date raises ValueError."""
    with pytest.raises(ValueError):
        parse_date("not a date")


@pytest.mark.parametrize(
    "period, expected",
    [
        ("this-month", (date(2024, 3, 1), TODAY)),
        ("last-month", (date(2024, 2, 1), date(2024, 2, 29))),
        ("this-year", (date(2024, 1, 1), TODAY)),
        ("last-year", (date(2023, 1, 1), date(2023, 12, 31))),
        ("this-week", (date(2024, 3, 11), TODAY)),
        ("last-week", (date(2024, 3, 4), date(2024, 3, 10))),
    ],
)
def test_get_date_range(period, expected):
    assert get_date_range(period, today=TODAY) == expected


def test_last_month_in_january():
    assert get_date_range("last-month", today=date(2024, 1, 20)) == (
        date(2023, 12, 1),
        date(2023, 12, 31),
    )


def test_every_report_period_is_supported():
    for period in REPORT_PERIODS:
        start, end = get_date_range(period, today=TODAY)
        assert start <= end <= TODAY


def test_unknown_period():
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("next-month")
