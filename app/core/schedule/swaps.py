"""Swapping shifts with colleagues and settling what is owed."""

import datetime
import logging
from collections.abc import Iterable, Mapping

from app.core.logging_config import LogContext
from app.database.database import (
    AgreementType,
    SettlementMethod,
    Shift,
    ShiftStatus,
    SwapAgreement,
    SwapDirection,
)

logger = logging.getLogger(__name__)

STATUS_FOR_DIRECTION = {
    SwapDirection.OUT: ShiftStatus.SWAPPED_OUT,
    SwapDirection.IN: ShiftStatus.SWAPPED_IN,
}


class SwapError(ValueError):
    """A swap request that cannot be applied to the given shift."""

    pass


def change_status(shift: Shift, status: ShiftStatus) -> None:
    """
    Set a shift's status.

    Handing a shift to a colleague means the user will not work it, so
    ``is_work_done`` is cleared.
    """
    if shift.is_commitment and status in STATUS_FOR_DIRECTION.values():
        raise SwapError("Commitments cannot be swapped")

    shift.status = status
    if status == ShiftStatus.SWAPPED_OUT:
        shift.is_work_done = False


def register_swap(
    shift: Shift,
    direction: SwapDirection,
    colleague_name: str,
    agreed_payment_date: datetime.date,
    agreed_amount: float | None = None,
    agreement_type: AgreementType = AgreementType.PAID_VALUE,
    your_name: str | None = None,
    notes: str | None = None,
) -> SwapAgreement:
    """
    Record a swap agreement for a shift and update the shift to match.

    The agreed amount defaults to the swap value already on the shift. The
    shift gets the agreement id, the swap value, the payment date and the
    swapped status for ``direction``.

    Raises:
        SwapError: The shift is a commitment or the colleague name is empty
    """
    if shift.is_commitment:
        raise SwapError("Commitments cannot be swapped")
    if not colleague_name.strip():
        raise SwapError("A colleague name is required")

    amount = shift.swap_value if agreed_amount is None else agreed_amount
    agreement = SwapAgreement(
        shift_id=shift.id,
        direction=direction,
        your_name=your_name,
        colleague_name=colleague_name.strip(),
        agreement_type=agreement_type,
        agreed_amount=amount,
        original_shift_value=shift.amount,
        agreed_payment_date=agreed_payment_date,
        notes=notes,
    )

    shift.swap_agreement_id = agreement.id
    shift.swap_value = amount
    shift.swap_payment_date = agreed_payment_date
    shift.swap_is_settled = False
    change_status(shift, STATUS_FOR_DIRECTION[direction])

    with LogContext(shift_id=shift.id):
        logger.info("Registered swap %s with %s", direction.value, agreement.colleague_name)
    return agreement


def settle_agreement(
    agreement: SwapAgreement,
    shift: Shift | None,
    now: datetime.datetime,
    method: SettlementMethod = SettlementMethod.PIX,
) -> None:
    """
    Mark an agreement as paid and mirror it onto its shift.

    ``shift`` may be None when the shift was deleted after the agreement was
    made; the agreement is still settled.
    """
    agreement.is_settled = True
    agreement.effective_payment_date = now
    agreement.payment_method = method

    if shift is not None:
        shift.swap_is_settled = True


def mirror_settlement(
    shifts: Iterable[Shift],
    agreements: Mapping[str, SwapAgreement],
    now: datetime.datetime,
) -> list[str]:
    """
    Copy ``swap_is_settled`` from shifts onto their linked agreements.

    Used after a bulk settlement so both records agree. Shifts without an
    agreement, or whose agreement no longer exists, are skipped.

    Returns:
        Ids of the agreements that changed
    """
    changed = []
    for shift in shifts:
        agreement = agreements.get(shift.swap_agreement_id) if shift.swap_agreement_id else None
        if agreement is None or agreement.is_settled == shift.swap_is_settled:
            continue

        agreement.is_settled = shift.swap_is_settled
        if shift.swap_is_settled:
            agreement.effective_payment_date = now
            agreement.payment_method = agreement.payment_method or SettlementMethod.PIX
        else:
            agreement.effective_payment_date = None
        changed.append(agreement.id)
    return changed


def mirror_swap_terms(shift: Shift, agreement: SwapAgreement | None) -> bool:
    """
    Copy an edited swap value or payment date from a shift onto its agreement.

    Returns whether the agreement changed.
    """
    if agreement is None:
        return False

    changed = False
    if shift.swap_value is not None and agreement.agreed_amount != shift.swap_value:
        agreement.agreed_amount = shift.swap_value
        changed = True
    if shift.swap_payment_date is not None and agreement.agreed_payment_date != shift.swap_payment_date:
        agreement.agreed_payment_date = shift.swap_payment_date
        changed = True
    return changed
