"""
Tests for deleting shifts of a recurrence series.
"""

import datetime
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from app.core.models import RecurrenceKind, RecurrenceRule, ShiftDraft
from app.core.schedule import DeleteScope, delete_selection, expand_recurrence, select_for_deletion
from app.core.storage import add_shifts, get_agreement, get_shift, list_series
from app.database.database import SwapAgreement, SwapDirection


def _weekly_series():
    """Five weekly shifts W1..W5 starting Monday 2024-07-01."""
    draft = ShiftDraft(
        location_name="Hospital Central",
        start_at=datetime.datetime(2024, 7, 1, 7, 0),
        latitude=-23.55,
        longitude=-46.63,
        amount=1000.0,
    )
    rule = RecurrenceRule(kind=RecurrenceKind.WEEKLY, until=datetime.date(2024, 7, 29))
    return expand_recurrence(draft, rule)


class TestSelectForDeletion:
    def test_series_has_five_weeks(self):
        assert len(_weekly_series()) == 5

    def test_future_scope_takes_trigger_and_later(self):
        series = _weekly_series()

        selected = select_for_deletion(series, series[2], DeleteScope.FUTURE)

        assert selected == series[2:]

    def test_single_scope_takes_only_trigger(self):
        series = _weekly_series()

        assert select_for_deletion(series, series[2], DeleteScope.SINGLE) == [series[2]]

    def test_series_scope_takes_everything(self):
        series = _weekly_series()

        assert select_for_deletion(series, series[2], DeleteScope.SERIES) == series

    def test_other_series_are_untouched(self):
        series = _weekly_series()
        other = _weekly_series()

        selected = select_for_deletion(series + other, series[0], DeleteScope.SERIES)

        assert selected == series

    def test_standalone_shift_only_selects_itself(self, make_shift):
        shift = make_shift(datetime.datetime(2024, 7, 1, 7, 0))
        neighbour = make_shift(datetime.datetime(2024, 7, 8, 7, 0))

        assert select_for_deletion([shift, neighbour], shift, DeleteScope.SERIES) == [shift]


class TestDeleteSelection:
    def test_deletes_and_cancels_reminders(self, test_db, reminder_scheduler):
        series = add_shifts(test_db, _weekly_series())
        for shift in series:
            reminder_scheduler.schedule_reminders(shift)
        assert len(reminder_scheduler.pending) == 10

        selected = select_for_deletion(series, series[2], DeleteScope.FUTURE)
        deleted_ids = delete_selection(test_db, selected, reminder_scheduler)

        assert deleted_ids == [shift.id for shift in selected]
        remaining = list_series(test_db, series[0].recurrence_id)
        assert [shift.id for shift in remaining] == [shift.id for shift in series[:2]]
        for shift_id in deleted_ids:
            assert reminder_scheduler.reminders_for(shift_id) == []
        assert len(reminder_scheduler.pending) == 4

    def test_linked_agreement_survives_deletion(self, test_db, reminder_scheduler):
        [shift] = add_shifts(test_db, _weekly_series()[:1])
        agreement = SwapAgreement(
            shift_id=shift.id,
            direction=SwapDirection.OUT,
            colleague_name="Ana",
            agreed_payment_date=datetime.date(2024, 7, 10),
        )
        test_db.add(agreement)
        test_db.commit()

        delete_selection(test_db, [shift], reminder_scheduler)

        assert get_shift(test_db, shift.id) is None
        assert get_agreement(test_db, agreement.id) is not None
