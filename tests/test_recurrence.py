"""
Unit tests for recurrence expansion, estimation and validation.
"""

import datetime
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from app.core.models import RecurrenceKind, RecurrenceRule, ShiftDraft
from app.core.schedule import estimate_occurrences, expand_recurrence, plan_series
from app.core.validators import (
    EmptyWeekdaySelection,
    InvalidDateRange,
    InvalidDuration,
    MissingGeolocation,
    MissingRequiredField,
    RecurrenceVolumeWarning,
    validate_shift_draft,
)


def _draft(start_at: datetime.datetime, **fields) -> ShiftDraft:
    fields.setdefault("location_name", "Hospital Central")
    fields.setdefault("latitude", -23.55)
    fields.setdefault("longitude", -46.63)
    fields.setdefault("amount", 1200.0)
    return ShiftDraft(start_at=start_at, **fields)


class TestExpansion:
    def test_no_recurrence_gives_single_shift_without_series(self):
        shifts = expand_recurrence(_draft(datetime.datetime(2024, 3, 4, 7, 0)), RecurrenceRule())

        assert len(shifts) == 1
        assert shifts[0].recurrence_id is None
        assert shifts[0].start_at == datetime.datetime(2024, 3, 4, 7, 0)

    def test_monthly_on_31st_clamps_each_month(self):
        """Jan 31 repeats as Feb 29 in a leap year and returns to Mar 31."""
        rule = RecurrenceRule(kind=RecurrenceKind.MONTHLY, until=datetime.date(2024, 3, 31))
        shifts = expand_recurrence(_draft(datetime.datetime(2024, 1, 31, 19, 0)), rule)

        assert [shift.start_at.date() for shift in shifts] == [
            datetime.date(2024, 1, 31),
            datetime.date(2024, 2, 29),
            datetime.date(2024, 3, 31),
        ]

    def test_specific_weekdays_over_two_weeks(self):
        """Mon and Wed over two full weeks gives exactly four instances."""
        rule = RecurrenceRule(
            kind=RecurrenceKind.SPECIFIC_WEEKDAYS,
            until=datetime.date(2024, 3, 17),  # Sunday of the second week
            weekdays={0, 2},
        )
        shifts = expand_recurrence(_draft(datetime.datetime(2024, 3, 4, 7, 0)), rule)  # Monday

        assert [shift.start_at.date() for shift in shifts] == [
            datetime.date(2024, 3, 4),
            datetime.date(2024, 3, 6),
            datetime.date(2024, 3, 11),
            datetime.date(2024, 3, 13),
        ]

    @pytest.mark.parametrize(
        "kind,until",
        [
            (RecurrenceKind.DAILY, datetime.date(2024, 3, 10)),
            (RecurrenceKind.WEEKLY, datetime.date(2024, 5, 1)),
            (RecurrenceKind.BIWEEKLY, datetime.date(2024, 6, 30)),
            (RecurrenceKind.MONTHLY, datetime.date(2024, 12, 31)),
        ],
    )
    def test_instances_stay_in_range_and_keep_time(self, kind, until):
        start = datetime.datetime(2024, 3, 4, 19, 30)
        shifts = expand_recurrence(_draft(start), RecurrenceRule(kind=kind, until=until))

        assert len(shifts) >= 1
        assert all(start.date() <= shift.start_at.date() <= until for shift in shifts)
        assert all(shift.start_at.time() == start.time() for shift in shifts)
        assert len({shift.recurrence_id for shift in shifts}) == 1
        assert len({shift.id for shift in shifts}) == len(shifts)

    def test_until_date_is_inclusive(self):
        rule = RecurrenceRule(kind=RecurrenceKind.WEEKLY, until=datetime.date(2024, 3, 18))
        shifts = expand_recurrence(_draft(datetime.datetime(2024, 3, 4, 23, 0)), rule)

        assert [shift.start_at.date() for shift in shifts] == [
            datetime.date(2024, 3, 4),
            datetime.date(2024, 3, 11),
            datetime.date(2024, 3, 18),
        ]

    def test_commitment_instances_carry_no_money_or_coordinates(self):
        draft = _draft(datetime.datetime(2024, 3, 4, 9, 0), is_commitment=True, amount=500.0)
        shifts = expand_recurrence(draft, RecurrenceRule(kind=RecurrenceKind.DAILY, until=datetime.date(2024, 3, 5)))

        assert all(shift.amount == 0.0 for shift in shifts)
        assert all(shift.latitude is None and shift.longitude is None for shift in shifts)

    def test_all_day_instances_last_24_hours(self):
        draft = _draft(datetime.datetime(2024, 3, 4, 0, 0), is_all_day=True, duration_hours=6)
        shift = expand_recurrence(draft, RecurrenceRule())[0]

        assert shift.duration_hours == 24
        assert shift.end_at == datetime.datetime(2024, 3, 5, 0, 0)


class TestEstimate:
    def test_estimate_is_rough(self):
        start = datetime.datetime(2024, 1, 31, 7, 0)
        rule = RecurrenceRule(kind=RecurrenceKind.MONTHLY, until=datetime.date(2024, 3, 31))

        # 60 days // 30 = 2 although three shifts are created
        assert estimate_occurrences(start, rule) == 2
        assert len(expand_recurrence(_draft(start), rule)) == 3

    def test_estimate_per_kind(self):
        start = datetime.datetime(2024, 1, 1, 7, 0)
        until = datetime.date(2024, 3, 1)  # 60 days later

        assert estimate_occurrences(start, RecurrenceRule(kind=RecurrenceKind.DAILY, until=until)) == 60
        assert estimate_occurrences(start, RecurrenceRule(kind=RecurrenceKind.WEEKLY, until=until)) == 8
        assert estimate_occurrences(start, RecurrenceRule(kind=RecurrenceKind.BIWEEKLY, until=until)) == 4
        rule = RecurrenceRule(kind=RecurrenceKind.SPECIFIC_WEEKDAYS, until=until, weekdays={0, 2, 4})
        assert estimate_occurrences(start, rule) == 24

    def test_estimate_never_below_one(self):
        start = datetime.datetime(2024, 1, 1, 7, 0)
        rule = RecurrenceRule(kind=RecurrenceKind.MONTHLY, until=datetime.date(2024, 1, 10))

        assert estimate_occurrences(start, rule) == 1


class TestValidation:
    def test_empty_location_is_rejected_first(self):
        draft = _draft(datetime.datetime(2024, 3, 4, 7, 0), location_name="  ", latitude=None, duration_hours=0)

        with pytest.raises(MissingRequiredField):
            validate_shift_draft(draft, RecurrenceRule())

    def test_work_shift_needs_coordinates(self):
        draft = _draft(datetime.datetime(2024, 3, 4, 7, 0), latitude=None)

        with pytest.raises(MissingGeolocation):
            validate_shift_draft(draft, RecurrenceRule())

    def test_commitment_needs_no_coordinates(self):
        draft = _draft(datetime.datetime(2024, 3, 4, 7, 0), is_commitment=True, latitude=None, longitude=None)

        validate_shift_draft(draft, RecurrenceRule())

    def test_zero_duration_rejected_unless_all_day(self):
        with pytest.raises(InvalidDuration):
            validate_shift_draft(_draft(datetime.datetime(2024, 3, 4, 7, 0), duration_hours=0), RecurrenceRule())

        validate_shift_draft(
            _draft(datetime.datetime(2024, 3, 4, 7, 0), duration_hours=0, is_all_day=True),
            RecurrenceRule(),
        )

    def test_until_must_be_after_start(self):
        rule = RecurrenceRule(kind=RecurrenceKind.DAILY, until=datetime.date(2024, 3, 4))

        with pytest.raises(InvalidDateRange):
            validate_shift_draft(_draft(datetime.datetime(2024, 3, 4, 7, 0)), rule)

    def test_specific_weekdays_needs_a_selection(self):
        rule = RecurrenceRule(kind=RecurrenceKind.SPECIFIC_WEEKDAYS, until=datetime.date(2024, 3, 30))

        with pytest.raises(EmptyWeekdaySelection):
            validate_shift_draft(_draft(datetime.datetime(2024, 3, 4, 7, 0)), rule)

    def test_specific_weekdays_outside_short_range(self):
        # Monday to Tuesday, only Friday selected
        rule = RecurrenceRule(kind=RecurrenceKind.SPECIFIC_WEEKDAYS, until=datetime.date(2024, 3, 5), weekdays={4})

        with pytest.raises(EmptyWeekdaySelection):
            validate_shift_draft(_draft(datetime.datetime(2024, 3, 4, 7, 0)), rule)

    def test_errors_are_value_errors_with_codes(self):
        with pytest.raises(ValueError) as excinfo:
            validate_shift_draft(_draft(datetime.datetime(2024, 3, 4, 7, 0), latitude=None), RecurrenceRule())

        assert excinfo.value.code == "missing_geolocation"
        assert excinfo.value.blocking is True


class TestPlanSeries:
    def test_large_series_needs_confirmation(self):
        draft = _draft(datetime.datetime(2024, 1, 1, 7, 0))
        rule = RecurrenceRule(kind=RecurrenceKind.DAILY, until=datetime.date(2024, 12, 31))

        with pytest.raises(RecurrenceVolumeWarning) as excinfo:
            plan_series(draft, rule)

        assert excinfo.value.estimated_count == 365
        assert excinfo.value.blocking is False

        shifts = plan_series(draft, rule, confirmed=True)
        assert len(shifts) == 366

    def test_series_at_threshold_needs_no_confirmation(self):
        draft = _draft(datetime.datetime(2024, 1, 1, 7, 0))
        rule = RecurrenceRule(kind=RecurrenceKind.DAILY, until=datetime.date(2024, 4, 10))  # 100 days

        assert len(plan_series(draft, rule)) == 101
