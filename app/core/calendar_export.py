"""Generation of iCal feeds that mirror the shift collection into a calendar app."""

import datetime
from collections.abc import Iterable
from zoneinfo import ZoneInfo

from icalendar import Alarm, Calendar, Event

from app.core.config import REMINDER_SOON_HOURS
from app.core.models import Settings
from app.database.database import Shift, ShiftStatus


def calendar_event_uid(shift: Shift) -> str:
    """Stable UID so re-importing the feed updates events instead of duplicating them."""
    return f"{shift.id}@shiftbook"


def _event_title(shift: Shift) -> str:
    if shift.is_commitment:
        return shift.location_name
    return f"Shift: {shift.location_name}"


def _event_description(shift: Shift, settings: Settings) -> str:
    parts = [
        f"Status: {'Completed' if shift.is_work_done else 'Scheduled'}",
        f"Duration: {shift.duration_hours}h",
    ]
    if not shift.is_commitment:
        value = shift.swap_value if shift.status == ShiftStatus.SWAPPED_IN else shift.amount
        parts.append(f"Value: {value:.2f} {settings.currency}")
    if shift.notes:
        parts.append(shift.notes)
    return "\n".join(parts)


def _create_shift_event(shift: Shift, settings: Settings, tz: ZoneInfo) -> Event:
    """
    Build a VEVENT for one shift.

    Args:
        shift: Shift to mirror
        settings: User settings (currency)
        tz: Zone the naive local start time belongs to

    Returns:
        icalendar Event object
    """
    event = Event()
    event.add("summary", _event_title(shift))
    event.add("uid", calendar_event_uid(shift))

    if shift.is_all_day:
        event.add("dtstart", shift.start_at.date())
        event.add("dtend", shift.start_at.date() + datetime.timedelta(days=1))
    else:
        event.add("dtstart", shift.start_at.replace(tzinfo=tz))
        event.add("dtend", shift.end_at.replace(tzinfo=tz))

    event.add("location", shift.location_name)
    if shift.latitude is not None and shift.longitude is not None:
        event.add("geo", (shift.latitude, shift.longitude))

    event.add("description", _event_description(shift, settings))
    event.add("dtstamp", datetime.datetime.now(datetime.timezone.utc))

    alarm = Alarm()
    alarm.add("action", "DISPLAY")
    alarm.add("description", _event_title(shift))
    alarm.add("trigger", datetime.timedelta(hours=-REMINDER_SOON_HOURS))
    event.add_component(alarm)

    return event


def generate_ical(shifts: Iterable[Shift], settings: Settings) -> str:
    """
    Render shifts as an iCal feed.

    Shifts handed to a colleague are left out; they are no longer on the
    user's personal agenda.

    Returns:
        iCal formatted string
    """
    tz = ZoneInfo(settings.timezone)

    cal = Calendar()
    cal.add("prodid", "-//Shiftbook//shiftbook.app//")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", f"Shifts - {settings.owner_name}")
    cal.add("x-wr-timezone", settings.timezone)

    for shift in sorted(shifts, key=lambda s: s.start_at):
        if shift.status == ShiftStatus.SWAPPED_OUT:
            continue
        cal.add_component(_create_shift_event(shift, settings, tz))

    return cal.to_ical().decode("utf-8")
