"""Calendar helpers working on naive local datetimes.

All functions are pure. Month arithmetic clamps the day of month to the
length of the target month instead of rolling over into the next one.
"""

import calendar
import datetime

from app.core.constants import SECONDS_PER_DAY


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month (28-31)."""
    return calendar.monthrange(year, month)[1]


def start_of_day(moment: datetime.datetime) -> datetime.datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime.datetime) -> datetime.datetime:
    """Last whole second of the calendar day (23:59:59)."""
    return start_of_day(moment) + datetime.timedelta(seconds=SECONDS_PER_DAY - 1)


def all_days_of_month(moment: datetime.datetime) -> list[datetime.datetime]:
    """
    Return the start of every calendar day in the month containing ``moment``.

    Args:
        moment: Any instant within the month

    Returns:
        Ascending list of day-start datetimes, one per day (28-31 entries)
    """
    first = start_of_day(moment).replace(day=1)
    return [first + datetime.timedelta(days=offset) for offset in range(days_in_month(first.year, first.month))]


def is_same_calendar_day(a: datetime.datetime, b: datetime.datetime) -> bool:
    return a.date() == b.date()


def add_days(moment: datetime.datetime, days: int) -> datetime.datetime:
    return moment + datetime.timedelta(days=days)


def add_weeks(moment: datetime.datetime, weeks: int) -> datetime.datetime:
    return moment + datetime.timedelta(weeks=weeks)


def add_months(moment, months: int):
    """
    Add calendar months to a date or datetime.

    The day of month is clamped to the last valid day of the target month,
    so January 31 plus one month is February 28 (or 29 in leap years) and
    never March 2 or 3.
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, days_in_month(year, month))
    return moment.replace(year=year, month=month, day=day)


def month_bounds(year: int, month: int) -> tuple[datetime.datetime, datetime.datetime]:
    """Return (first instant of month, first instant of next month)."""
    start = datetime.datetime(year, month, 1)
    return start, add_months(start, 1)


def is_in_month(moment: datetime.datetime, year: int, month: int) -> bool:
    return moment.year == year and moment.month == month


def whole_days_between(start: datetime.datetime, end: datetime.datetime) -> int:
    """
    Elapsed whole days from ``start`` to ``end``.

    Negative when ``end`` is before ``start``. Partial days are truncated
    toward zero, so ten hours in either direction counts as 0.
    """
    return int((end - start).total_seconds() / SECONDS_PER_DAY)


def combine_date_with_time_of(day: datetime.date, moment: datetime.datetime) -> datetime.datetime:
    """Place ``day`` at the time of day carried by ``moment``."""
    return datetime.datetime.combine(day, moment.time())
