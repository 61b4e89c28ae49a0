"""Calendar month arithmetic"""

import calendar
from datetime import date
from typing import List


def add_months(from_date: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length"""
    month_index = from_date.year * 12 + (from_date.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def subtract_months(from_date: date, months: int) -> date:
    return add_months(from_date, -months)


def month_label(day: date) -> str:
    """YYYY-MM label used for monthly grouping"""
    return f"{day.year:04d}-{day.month:02d}"


def next_month_labels(from_date: date, count: int) -> List[str]:
    """Labels for the `count` months following from_date's month"""
    first = from_date.replace(day=1)
    return [month_label(add_months(first, i)) for i in range(1, count + 1)]
