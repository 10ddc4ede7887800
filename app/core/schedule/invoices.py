"""Fiscal notes (invoices) issued to hospitals."""

import datetime
import logging
from collections.abc import Iterable

from app.database.database import FiscalNote, Shift

logger = logging.getLogger(__name__)


class InvoiceError(ValueError):
    """An invoice request that cannot be issued."""

    pass


def invoiceable_shifts(shifts: Iterable[Shift], now: datetime.datetime) -> list[Shift]:
    """Past, unpaid work shifts that no fiscal note covers yet."""
    return sorted(
        (
            shift
            for shift in shifts
            if not shift.is_commitment and not shift.is_paid and not shift.fiscal_note_ids and shift.start_at < now
        ),
        key=lambda shift: shift.start_at,
    )


def create_fiscal_note(
    shifts: list[Shift],
    hospital_name: str,
    note_number: str | None = None,
    total_amount: float | None = None,
) -> FiscalNote:
    """
    Issue a fiscal note covering ``shifts``.

    Each shift gets the note id appended to ``fiscal_note_ids`` and its
    ``hospital_name`` set. A note covering more than one shift is
    consolidated. The total defaults to the sum of the shift amounts.

    Raises:
        InvoiceError: No hospital, no shifts, or a commitment among them
    """
    hospital_name = hospital_name.strip()
    if not hospital_name:
        raise InvoiceError("A hospital name is required")
    if not shifts:
        raise InvoiceError("Select at least one shift")
    if any(shift.is_commitment for shift in shifts):
        raise InvoiceError("Commitments cannot be invoiced")

    if total_amount is None:
        total_amount = round(sum(shift.amount for shift in shifts), 2)

    note = FiscalNote(
        note_number=note_number or None,
        total_amount=total_amount,
        hospital_name=hospital_name,
        linked_shift_ids=[shift.id for shift in shifts],
    )

    for shift in shifts:
        if note.id not in shift.fiscal_note_ids:
            # Reassign so the JSON column is flagged as changed
            shift.fiscal_note_ids = [*shift.fiscal_note_ids, note.id]
        shift.hospital_name = hospital_name

    logger.info("Fiscal note %s for %s covers %d shift(s)", note.note_number or note.id, hospital_name, len(shifts))
    return note
