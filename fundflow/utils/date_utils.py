"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple


def add_months(from_date: date, months: int = 1) -> date:
    """Same day N months later, clamped to the last day of a shorter month"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return from_date.replace(year=year, month=month, day=day)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """UTC start (inclusive) and end (exclusive) of a calendar day"""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def month_bounds(month: str) -> Tuple[date, date]:
    """First and last date of a YYYY-MM month key"""
    parsed = datetime.strptime(month, "%Y-%m")
    last_day = calendar.monthrange(parsed.year, parsed.month)[1]
    return date(parsed.year, parsed.month, 1), date(parsed.year, parsed.month, last_day)


def month_key(day: date | None = None) -> str:
    return (day or date.today()).strftime("%Y-%m")
