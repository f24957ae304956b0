"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = ("this-month", "this-year", "this-week", "last-month", "last-year", "last-week")

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _year_start(day: date) -> date:
    return day.replace(month=1, day=1)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Accepts absolute dates ("2024-01-15", "15 Jan 2024") and a few relative
    forms: "today", "yesterday", "tomorrow", and "last/this/next" followed by
    "week", "month" or "year". "last <weekday>" gives the most recent such day
    before today.

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    fixed = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in fixed:
        return fixed[text]

    relative, _, unit = text.partition(" ")
    if relative in ("last", "this", "next") and unit:
        step = {"last": -1, "this": 0, "next": 1}[relative]
        if unit == "week":
            return _week_start(today) + timedelta(weeks=step)
        if unit == "month":
            return _month_start(today) + relativedelta(months=step)
        if unit == "year":
            return _year_start(today) + relativedelta(years=step)
        if relative == "last" and unit in WEEKDAYS:
            days_ago = (today.weekday() - WEEKDAYS.index(unit)) % 7 or 7
            return today - timedelta(days=days_ago)

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates (both inclusive) for a named period.

    "this-*" periods end today; "last-*" periods cover the whole previous
    week, month or year.

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-week":
        return _week_start(today), today
    if period == "this-month":
        return _month_start(today), today
    if period == "this-year":
        return _year_start(today), today
    if period == "last-week":
        start = _week_start(today) - timedelta(weeks=1)
        return start, start + timedelta(days=6)
    if period == "last-month":
        end = _month_start(today) - timedelta(days=1)
        return _month_start(end), end
    if period == "last-year":
        end = _year_start(today) - timedelta(days=1)
        return _year_start(end), end

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
