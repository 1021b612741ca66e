"""Date parsing and calendar utilities."""

from datetime import date, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "last month", "this month", "next month"

    Args:
        date_str: Date string in various formats
        today: Reference date for relative dates (defaults to the current date)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "last month": start_of_month(today - relativedelta(months=1)),
        "this month": start_of_month(today),
        "next month": start_of_month(today + relativedelta(months=1)),
        "this year": today.replace(month=1, day=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def start_of_month(day: date) -> date:
    """Return the first day of ``day``'s month."""
    return day.replace(day=1)


def end_of_month(day: date) -> date:
    """Return the last day of ``day``'s month."""
    return start_of_month(day) + relativedelta(months=1) - timedelta(days=1)


def add_months(day: date, months: int) -> date:
    """Shift by calendar months, clamping the day at month end (Jan 31 + 1 = Feb 28/29)."""
    return day + relativedelta(months=months)


def month_key(day: date) -> str:
    """Return the ``YYYY-MM`` key for ``day``."""
    return f"{day.year:04d}-{day.month:02d}"


def month_label(day: date) -> str:
    """Return a display label such as ``January 2024``."""
    return day.strftime("%B %Y")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a budget timeframe or reporting period.

    Args:
        period: One of weekly, monthly, yearly, this-month, last-month, this-year
        today: Reference date (defaults to the current date)

    Returns:
        Tuple of (start_date, end_date) for the specified period

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "weekly":
        return (today, today + timedelta(days=7))

    elif period in ("monthly", "this-month"):
        return (start_of_month(today), end_of_month(today))

    elif period in ("yearly", "this-year"):
        return (today.replace(month=1, day=1), today.replace(month=12, day=31))

    elif period == "last-month":
        previous = today - relativedelta(months=1)
        return (start_of_month(previous), end_of_month(previous))

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: weekly, monthly, yearly, "
            "this-month, last-month, this-year"
        )
