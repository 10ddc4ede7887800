import datetime
from zoneinfo import ZoneInfo

import pytest
from icalendar import Calendar

from app.core.calendar_export import _create_shift_event, calendar_event_uid, generate_ical
from app.core.models import Settings
from app.database.database import ShiftStatus


@pytest.fixture
def settings():
    return Settings(owner_name="Dr. Silva", currency="BRL", timezone="America/Sao_Paulo")


def _events(ical: str):
    return list(Calendar.from_ical(ical).walk("VEVENT"))


class TestCalendarExport:
    def test_generate_ical_is_valid(self, make_shift, settings):
        """Generated iCal parses and holds one VEVENT per shift."""
        shifts = [
            make_shift(datetime.datetime(2024, 6, 20, 7, 0), amount=1000.0),
            make_shift(datetime.datetime(2024, 6, 21, 19, 0), amount=1200.0),
        ]

        ical = generate_ical(shifts, settings)

        assert "BEGIN:VCALENDAR" in ical
        assert "PRODID:-//Shiftbook//shiftbook.app//" in ical
        assert len(_events(ical)) == 2

    def test_swapped_out_shifts_are_skipped(self, make_shift, settings):
        kept = make_shift(datetime.datetime(2024, 6, 20, 7, 0))
        given_away = make_shift(datetime.datetime(2024, 6, 21, 7, 0), status=ShiftStatus.SWAPPED_OUT)

        events = _events(generate_ical([kept, given_away], settings))

        assert [str(event["uid"]) for event in events] == [calendar_event_uid(kept)]

    def test_empty_shift_list(self, settings):
        """An empty collection still gives a valid calendar."""
        ical = generate_ical([], settings)

        assert "BEGIN:VCALENDAR" in ical
        assert _events(ical) == []


class TestShiftEvent:
    def test_timed_event_carries_zone_location_and_alarm(self, make_shift, settings):
        shift = make_shift(datetime.datetime(2024, 6, 20, 7, 0), amount=1000.0, notes="Bring badge")

        event = _events(generate_ical([shift], settings))[0]

        start = event.decoded("dtstart")
        end = event.decoded("dtend")
        assert start.replace(tzinfo=None) == datetime.datetime(2024, 6, 20, 7, 0)
        assert start.utcoffset() == datetime.timedelta(hours=-3)
        assert end - start == datetime.timedelta(hours=12)
        assert str(event["summary"]) == "Shift: Hospital Central"
        assert str(event["location"]) == "Hospital Central"
        assert "GEO" in event
        description = str(event["description"])
        assert "Value: 1000.00 BRL" in description
        assert "Bring badge" in description
        assert len(event.walk("VALARM")) == 1

    def test_all_day_commitment_uses_dates(self, make_shift, settings):
        shift = make_shift(
            datetime.datetime(2024, 6, 22, 0, 0),
            is_all_day=True,
            is_commitment=True,
            location_name="Birthday",
            latitude=None,
            longitude=None,
        )

        event = _create_shift_event(shift, settings, ZoneInfo(settings.timezone))

        assert event.decoded("dtstart") == datetime.date(2024, 6, 22)
        assert event.decoded("dtend") == datetime.date(2024, 6, 23)
        assert str(event["summary"]) == "Birthday"
        assert "GEO" not in event
        assert "Value" not in str(event["description"])

    def test_uid_is_stable(self, make_shift):
        shift = make_shift(datetime.datetime(2024, 6, 20, 7, 0))

        assert calendar_event_uid(shift) == f"{shift.id}@shiftbook"
