"""
Calendar helpers shared by the product filters and the analytics series.
"""

import calendar
from datetime import datetime


def shift_months(value: datetime, months: int) -> datetime:
    """
    Move ``value`` by a number of calendar months.

    The day is clamped to the length of the target month, so March 31st
    shifted back one month is the last day of February.
    """
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def month_key(value: datetime) -> str:
    """YYYY-MM key of the month containing ``value``"""
    return f"{value.year:04d}-{value.month:02d}"
