"""
Financial aggregation over the shift collection.

Two views are kept apart on purpose:

- accrual: gross income, swap expenses and net income as agreed, whether or
  not any money has moved yet;
- realized cash: what was actually received from hospitals and colleagues
  minus what was actually paid to colleagues.

Commitments are ignored everywhere, whatever amounts they happen to store.
All functions here are pure except ``settle_shifts``, which flips flags on
the shifts it is given and leaves committing to the caller.
"""

import datetime
import logging
from collections.abc import Iterable

from app.core.models import HospitalForecast, MonthlyStatistics, PendingItems, SettlementResult, ShiftRead
from app.core.time_utils import is_in_month
from app.database.database import Hospital, Shift, ShiftStatus

logger = logging.getLogger(__name__)

SWAP_STATUSES = (ShiftStatus.SWAPPED_OUT, ShiftStatus.SWAPPED_IN)


def _money(value: float) -> float:
    return round(value, 2)


def _is_worked(shift: Shift, now: datetime.datetime) -> bool:
    return shift.status != ShiftStatus.SWAPPED_OUT and (shift.start_at < now or shift.is_work_done)


def _gross(shift: Shift) -> float:
    if shift.status == ShiftStatus.SWAPPED_IN:
        return shift.swap_value
    # swapped out: the hospital still owes the full amount
    return shift.amount


def _expense(shift: Shift) -> float:
    return shift.swap_value if shift.status == ShiftStatus.SWAPPED_OUT else 0.0


def _received(shift: Shift) -> float:
    if shift.status == ShiftStatus.SWAPPED_IN:
        return shift.swap_value if shift.swap_is_settled else 0.0
    return shift.amount if shift.is_paid else 0.0


def _paid_out(shift: Shift) -> float:
    if shift.status == ShiftStatus.SWAPPED_OUT and shift.swap_is_settled:
        return shift.swap_value
    return 0.0


def summarize_month(shifts: Iterable[Shift], year: int, month: int, now: datetime.datetime) -> MonthlyStatistics:
    """
    Accrual and realized-cash statistics for one month.

    Only non-commitment shifts starting in the month are counted.

    Args:
        shifts: Any shift collection; filtering happens here
        year: Target year
        month: Target month (1-12)
        now: Current instant, decides which hours count as worked

    Returns:
        MonthlyStatistics with hours, accrual figures and cash figures
    """
    stats = MonthlyStatistics(year=year, month=month)

    worked_hours = 0.0
    hours_to_work = 0.0
    gross = expenses = received = paid_out = 0.0

    for shift in shifts:
        if shift.is_commitment or not is_in_month(shift.start_at, year, month):
            continue

        stats.shift_count += 1
        if _is_worked(shift, now):
            worked_hours += shift.duration_hours
        elif shift.status != ShiftStatus.SWAPPED_OUT:
            hours_to_work += shift.duration_hours

        gross += _gross(shift)
        expenses += _expense(shift)
        received += _received(shift)
        paid_out += _paid_out(shift)

    planned_hours = worked_hours + hours_to_work
    stats.worked_hours = worked_hours
    stats.hours_to_work = hours_to_work
    stats.planned_hours = planned_hours
    stats.progress = worked_hours / planned_hours if planned_hours > 0 else 0.0

    stats.gross_income = _money(gross)
    stats.swap_expenses = _money(expenses)
    stats.net_income = _money(gross - expenses)
    stats.cash_received = _money(received)
    stats.cash_paid_out = _money(paid_out)
    stats.cash_on_hand = _money(received - paid_out)
    stats.amount_outstanding = _money(stats.net_income - stats.cash_on_hand)
    return stats


def _is_active(shift: Shift, now: datetime.datetime) -> bool:
    """Started, marked done, or handed to a colleague."""
    return shift.start_at < now or shift.is_work_done or shift.status == ShiftStatus.SWAPPED_OUT


def is_receivable(shift: Shift, now: datetime.datetime) -> bool:
    """Money is still owed to the user for this shift."""
    if shift.is_commitment or not _is_active(shift, now):
        return False
    if shift.status == ShiftStatus.SWAPPED_IN:
        return not shift.swap_is_settled
    # scheduled, completed and swapped out all wait on the hospital
    return not shift.is_paid


def is_payable(shift: Shift, now: datetime.datetime) -> bool:
    """The user still owes a colleague for taking this shift."""
    if shift.is_commitment or not _is_active(shift, now):
        return False
    return shift.status == ShiftStatus.SWAPPED_OUT and not shift.swap_is_settled


def receivable_amount(shift: Shift) -> float:
    return shift.swap_value if shift.status == ShiftStatus.SWAPPED_IN else shift.amount


def pending_items(shifts: Iterable[Shift], now: datetime.datetime) -> PendingItems:
    """Receivable and payable shifts across all months, oldest first."""
    ordered = sorted(shifts, key=lambda shift: shift.start_at)
    receivable = [shift for shift in ordered if is_receivable(shift, now)]
    payable = [shift for shift in ordered if is_payable(shift, now)]
    return PendingItems(
        receivable=[ShiftRead.model_validate(shift) for shift in receivable],
        payable=[ShiftRead.model_validate(shift) for shift in payable],
        total_receivable=_money(sum(receivable_amount(shift) for shift in receivable)),
        total_payable=_money(sum(shift.swap_value for shift in payable)),
    )


def settle_shifts(shifts: Iterable[Shift], shift_ids: Iterable[str], now: datetime.datetime) -> SettlementResult:
    """
    Mark the selected pending items as settled.

    For each id:
    - receivable swapped-in shift: the colleague paid, ``swap_is_settled``;
    - any other receivable shift: the hospital paid, ``is_paid``. A swapped-out
      shift that is payable too also gets ``swap_is_settled``, so both legs
      close in one call;
    - payable only: ``swap_is_settled``;
    - neither, but swapped in: ``swap_is_settled``.

    Unknown ids are reported in ``unknown``. The caller commits.
    """
    by_id = {shift.id: shift for shift in shifts}
    result = SettlementResult()

    for shift_id in dict.fromkeys(shift_ids):
        shift = by_id.get(shift_id)
        if shift is None:
            result.unknown.append(shift_id)
            continue

        receivable = is_receivable(shift, now)
        payable = is_payable(shift, now)

        if receivable and shift.status == ShiftStatus.SWAPPED_IN:
            shift.swap_is_settled = True
            result.marked_settled.append(shift.id)
        elif receivable:
            shift.is_paid = True
            result.marked_paid.append(shift.id)
            if payable:
                shift.swap_is_settled = True
                result.marked_settled.append(shift.id)
        elif payable or shift.status == ShiftStatus.SWAPPED_IN:
            shift.swap_is_settled = True
            result.marked_settled.append(shift.id)

    if result.unknown:
        logger.warning("Settlement skipped %d unknown shift id(s)", len(result.unknown))
    return result


def average_shift_value(shifts: Iterable[Shift], payer_name: str) -> float:
    """Mean amount of the work shifts paid by ``payer_name`` (0 when none)."""
    amounts = [shift.amount for shift in shifts if not shift.is_commitment and shift.payer_name == payer_name]
    if not amounts:
        return 0.0
    return _money(sum(amounts) / len(amounts))


def forecast_hospital_payments(
    shifts: Iterable[Shift],
    hospitals: Iterable[Hospital],
    now: datetime.datetime,
) -> list[HospitalForecast]:
    """
    Next expected payment per hospital and the unpaid amount it should cover.

    Shifts are matched to hospitals by payer name (hospital name, falling
    back to location name).
    """
    unpaid_by_payer: dict[str, list[Shift]] = {}
    for shift in shifts:
        if shift.is_commitment or shift.is_paid:
            continue
        unpaid_by_payer.setdefault(shift.payer_name, []).append(shift)

    forecasts = []
    for hospital in hospitals:
        pending = unpaid_by_payer.get(hospital.name, [])
        forecasts.append(
            HospitalForecast(
                hospital_id=hospital.id,
                hospital_name=hospital.name,
                next_payment_date=hospital.next_payment_date(now),
                expected_amount=_money(sum(shift.amount for shift in pending)),
                pending_shift_count=len(pending),
            )
        )
    return forecasts
