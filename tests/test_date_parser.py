"""Tests for date parser with relative dates."""

import pytest
from datetime import date, timedelta
from dateutil.relativedelta import relativedelta
from clientledger.utils.date_parser import PERIODS, parse_date, get_date_range


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


def test_parse_fixed_relative_days():
    today = date.today()
    assert parse_date("today") == today
    assert parse_date(" Yesterday ") == today - timedelta(days=1)
    assert parse_date("tomorrow") == today + timedelta(days=1)


def test_parse_last_month():
    """Test parsing 'last month'."""
    expected = (date.today() - relativedelta(months=1)).replace(day=1)
    assert parse_date("last month") == expected


def test_parse_week_starts_on_monday():
    today = date.today()
    this_monday = today - timedelta(days=today.weekday())

    assert parse_date("this week") == this_monday
    assert parse_date("last week") == this_monday - timedelta(days=7)
    assert parse_date("next week") == this_monday + timedelta(days=7)


def test_parse_years():
    today = date.today()
    assert parse_date("this year") == date(today.year, 1, 1)
    assert parse_date("last year") == date(today.year - 1, 1, 1)
    assert parse_date("next year") == date(today.year + 1, 1, 1)


def test_parse_last_weekday_is_strictly_before_today():
    result = parse_date("last friday")
    today = date.today()

    assert result.weekday() == 4
    assert 1 <= (today - result).days <= 7


def test_parse_invalid_date():
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("not a date at all")


class TestGetDateRange:
    """Tests for named periods."""

    def test_this_month(self):
        start, end = get_date_range("this-month")
        assert start == date.today().replace(day=1)
        assert end == date.today()

    def test_last_month_covers_whole_month(self):
        start, end = get_date_range("last-month")
        assert start.day == 1
        assert end + timedelta(days=1) == date.today().replace(day=1)

    def test_last_week_is_monday_to_sunday(self):
        start, end = get_date_range("last-week")
        assert start.weekday() == 0
        assert end.weekday() == 6
        assert (end - start).days == 6

    def test_last_year(self):
        start, end = get_date_range("last-year")
        year = date.today().year - 1
        assert (start, end) == (date(year, 1, 1), date(year, 12, 31))

    @pytest.mark.parametrize("period", PERIODS)
    def test_every_period_is_ordered(self, period):
        start, end = get_date_range(period)
        assert start <= end

    def test_unknown_period(self):
        with pytest.raises(ValueError, match="Unknown period"):
            get_date_range("next-decade")
