"""Date manipulation utilities"""

import calendar
from datetime import date
from typing import List, Optional


def current_year(as_of: Optional[date] = None) -> int:
    """Calendar year of as_of (default: today)"""
    return (as_of or date.today()).year


def years_between(start: date, end: date) -> int:
    """Whole years elapsed from start to end (birthday-style)"""
    years = end.year - start.year
    if (end.month, end.day) < (start.month, start.day):
        years -= 1
    return years


def add_months(from_date: date, months: int) -> date:
    """Same day N months later, clamped to the last day of short months"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def generate_monthly_dates(start: date, count: int) -> List[date]:
    """count monthly dates beginning at start (inclusive)"""
    return [add_months(start, i) for i in range(count)]
