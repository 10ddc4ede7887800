"""List and calendar views over the shift collection."""

import datetime
from collections.abc import Iterable

from app.core.constants import WEEKDAY_NAMES
from app.core.models import CalendarDay, ShiftRead
from app.core.time_utils import all_days_of_month, is_same_calendar_day
from app.database.database import Shift, ShiftStatus


def _by_start(shifts: Iterable[Shift], reverse: bool = False) -> list[Shift]:
    return sorted(shifts, key=lambda shift: shift.start_at, reverse=reverse)


def month_overview(shifts: Iterable[Shift], moment: datetime.datetime, now: datetime.datetime) -> list[CalendarDay]:
    """
    One entry per calendar day of the month containing ``moment``.

    Returns:
        Days in order, each with the shifts starting on it sorted by start
    """
    ordered = _by_start(shifts)
    days = []
    for day_start in all_days_of_month(moment):
        day_shifts = [shift for shift in ordered if is_same_calendar_day(shift.start_at, day_start)]
        days.append(
            CalendarDay(
                date=day_start.date(),
                weekday_name=WEEKDAY_NAMES[day_start.weekday()],
                is_today=is_same_calendar_day(day_start, now),
                shifts=[ShiftRead.model_validate(shift) for shift in day_shifts],
            )
        )
    return days


def upcoming_shifts(shifts: Iterable[Shift], now: datetime.datetime, limit: int | None = None) -> list[Shift]:
    """Shifts starting after ``now`` that the user still works, soonest first."""
    upcoming = _by_start(shift for shift in shifts if shift.start_at > now and shift.status != ShiftStatus.SWAPPED_OUT)
    return upcoming if limit is None else upcoming[:limit]


def agenda_shifts(shifts: Iterable[Shift], now: datetime.datetime) -> list[Shift]:
    """Still ahead: not started, not marked done and not handed away."""
    return _by_start(
        shift
        for shift in shifts
        if shift.start_at >= now and not shift.is_work_done and shift.status != ShiftStatus.SWAPPED_OUT
    )


def history_shifts(shifts: Iterable[Shift], now: datetime.datetime) -> list[Shift]:
    """Started, done, or involved in a swap. Newest first."""
    return _by_start(
        (
            shift
            for shift in shifts
            if shift.start_at < now
            or shift.is_work_done
            or shift.status in (ShiftStatus.SWAPPED_OUT, ShiftStatus.SWAPPED_IN)
        ),
        reverse=True,
    )
