"""
Unit tests for swap agreements and fiscal notes.
"""

import datetime
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from app.core.schedule import (
    InvoiceError,
    SwapError,
    change_status,
    create_fiscal_note,
    invoiceable_shifts,
    mirror_settlement,
    mirror_swap_terms,
    register_swap,
    settle_agreement,
)
from app.database.database import SettlementMethod, ShiftStatus, SwapAgreement, SwapDirection


class TestRegisterSwap:
    def test_giving_a_shift_away(self, make_shift):
        shift = make_shift(datetime.datetime(2024, 7, 1, 7, 0), amount=1000.0, is_work_done=True)

        agreement = register_swap(
            shift,
            SwapDirection.OUT,
            "Ana",
            datetime.date(2024, 7, 10),
            agreed_amount=300.0,
            your_name="Me",
        )

        assert shift.status == ShiftStatus.SWAPPED_OUT
        assert shift.is_work_done is False
        assert shift.swap_value == 300.0
        assert shift.swap_payment_date == datetime.date(2024, 7, 10)
        assert shift.swap_agreement_id == agreement.id
        assert agreement.shift_id == shift.id
        assert agreement.original_shift_value == 1000.0
        assert agreement.is_settled is False

    def test_taking_a_shift_uses_existing_swap_value(self, make_shift):
        shift = make_shift(datetime.datetime(2024, 7, 1, 7, 0), swap_value=450.0)

        agreement = register_swap(shift, SwapDirection.IN, "Bruno", datetime.date(2024, 7, 5))

        assert shift.status == ShiftStatus.SWAPPED_IN
        assert agreement.agreed_amount == 450.0

    def test_commitments_cannot_be_swapped(self, make_shift):
        commitment = make_shift(datetime.datetime(2024, 7, 1, 9, 0), is_commitment=True)

        with pytest.raises(SwapError):
            register_swap(commitment, SwapDirection.OUT, "Ana", datetime.date(2024, 7, 10))

        with pytest.raises(SwapError):
            change_status(commitment, ShiftStatus.SWAPPED_IN)

    def test_colleague_name_is_required(self, make_shift):
        shift = make_shift(datetime.datetime(2024, 7, 1, 7, 0))

        with pytest.raises(SwapError):
            register_swap(shift, SwapDirection.OUT, "   ", datetime.date(2024, 7, 10))

        assert shift.status == ShiftStatus.SCHEDULED


class TestSettleAgreement:
    def test_settling_updates_agreement_and_shift(self, make_shift, now):
        shift = make_shift(datetime.datetime(2024, 6, 1, 7, 0))
        agreement = register_swap(shift, SwapDirection.OUT, "Ana", datetime.date(2024, 6, 10), agreed_amount=300.0)

        settle_agreement(agreement, shift, now, SettlementMethod.CASH)

        assert agreement.is_settled is True
        assert agreement.effective_payment_date == now
        assert agreement.payment_method == SettlementMethod.CASH
        assert shift.swap_is_settled is True

    def test_agreement_of_deleted_shift_can_still_be_settled(self, now):
        agreement = SwapAgreement(
            shift_id="gone",
            direction=SwapDirection.IN,
            colleague_name="Bruno",
            agreed_payment_date=datetime.date(2024, 6, 10),
        )

        settle_agreement(agreement, None, now)

        assert agreement.is_settled is True
        assert agreement.payment_method == SettlementMethod.PIX

    def test_mirror_copies_shift_state_to_agreement(self, make_shift, now):
        shift = make_shift(datetime.datetime(2024, 6, 1, 7, 0))
        agreement = register_swap(shift, SwapDirection.OUT, "Ana", datetime.date(2024, 6, 10), agreed_amount=300.0)
        orphan = make_shift(datetime.datetime(2024, 6, 2, 7, 0), swap_agreement_id="missing", swap_is_settled=True)
        shift.swap_is_settled = True

        changed = mirror_settlement([shift, orphan], {agreement.id: agreement}, now)

        assert changed == [agreement.id]
        assert agreement.is_settled is True
        assert agreement.effective_payment_date == now

    def test_edited_swap_terms_are_copied_to_agreement(self, make_shift):
        shift = make_shift(datetime.datetime(2024, 7, 1, 7, 0))
        agreement = register_swap(shift, SwapDirection.OUT, "Ana", datetime.date(2024, 7, 10), agreed_amount=300.0)
        shift.swap_value = 350.0
        shift.swap_payment_date = datetime.date(2024, 7, 12)

        assert mirror_swap_terms(shift, agreement) is True
        assert agreement.agreed_amount == 350.0
        assert agreement.agreed_payment_date == datetime.date(2024, 7, 12)
        assert mirror_swap_terms(shift, agreement) is False
        assert mirror_swap_terms(shift, None) is False


class TestFiscalNotes:
    def test_invoiceable_shifts(self, make_shift, now):
        past = make_shift(datetime.datetime(2024, 6, 1, 7, 0), amount=1000.0)
        shifts = [
            make_shift(datetime.datetime(2024, 6, 20, 7, 0)),
            make_shift(datetime.datetime(2024, 6, 2, 7, 0), is_paid=True),
            make_shift(datetime.datetime(2024, 6, 3, 7, 0), fiscal_note_ids=["note-1"]),
            make_shift(datetime.datetime(2024, 6, 4, 9, 0), is_commitment=True),
            past,
        ]

        assert invoiceable_shifts(shifts, now) == [past]

    def test_note_covering_two_shifts_is_consolidated(self, make_shift, now):
        shifts = [
            make_shift(datetime.datetime(2024, 6, 1, 7, 0), amount=1000.0),
            make_shift(datetime.datetime(2024, 6, 2, 7, 0), amount=800.5),
        ]

        note = create_fiscal_note(shifts, " Hospital Norte ", note_number="NF-42")

        assert note.is_consolidated is True
        assert note.total_amount == 1800.5
        assert note.hospital_name == "Hospital Norte"
        assert note.linked_shift_ids == [shift.id for shift in shifts]
        for shift in shifts:
            assert shift.fiscal_note_ids == [note.id]
            assert shift.hospital_name == "Hospital Norte"
        assert invoiceable_shifts(shifts, now) == []

    def test_single_shift_note_with_explicit_total(self, make_shift):
        shift = make_shift(datetime.datetime(2024, 6, 1, 7, 0), amount=1000.0)

        note = create_fiscal_note([shift], "Hospital Central", total_amount=950.0)

        assert note.is_consolidated is False
        assert note.total_amount == 950.0

    @pytest.mark.parametrize(
        "hospital_name,is_commitment,with_shift",
        [("", False, True), ("H", False, False), ("H", True, True)],
    )
    def test_rejected_notes(self, make_shift, hospital_name, is_commitment, with_shift):
        shifts = [make_shift(datetime.datetime(2024, 6, 1, 7, 0), is_commitment=is_commitment)] if with_shift else []

        with pytest.raises(InvoiceError):
            create_fiscal_note(shifts, hospital_name)
