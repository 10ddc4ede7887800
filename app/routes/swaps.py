# app/routes/swaps.py
"""Swap agreement routes - register swaps with colleagues and settle them."""

import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.models import SwapAgreementRead, SwapCreate, SwapSettle
from app.core.reminders import ReminderScheduler, get_reminder_scheduler
from app.core.request_logging import log_finance_event
from app.core.schedule import register_swap, settle_agreement
from app.core.storage import commit, get_agreement, get_shift, list_agreements
from app.core.utils import get_now
from app.database.database import get_db
from app.routes.shared import get_settings, get_shift_or_404

router = APIRouter(prefix="/api/swaps", tags=["swaps"])


@router.post("", response_model=SwapAgreementRead, status_code=201)
async def create_swap(
    payload: SwapCreate,
    db: Session = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminder_scheduler),
):
    """Record a swap for a shift; the shift's status and swap fields follow."""
    shift = get_shift_or_404(db, payload.shift_id)
    agreement = register_swap(
        shift,
        direction=payload.direction,
        colleague_name=payload.colleague_name,
        agreed_payment_date=payload.agreed_payment_date,
        agreed_amount=payload.agreed_amount,
        agreement_type=payload.agreement_type,
        your_name=get_settings().owner_name,
        notes=payload.notes,
    )
    db.add(agreement)
    commit(db, "swap registration")
    db.refresh(agreement)

    # A swapped-out shift no longer needs reminders
    reminders.schedule_reminders(shift)
    return agreement


@router.get("", response_model=list[SwapAgreementRead])
async def get_swaps(pending_only: bool = False, db: Session = Depends(get_db)):
    return list_agreements(db, include_settled=not pending_only)


@router.get("/{agreement_id}", response_model=SwapAgreementRead)
async def get_swap(agreement_id: str, db: Session = Depends(get_db)):
    agreement = get_agreement(db, agreement_id)
    if agreement is None:
        raise HTTPException(status_code=404, detail=f"Swap agreement {agreement_id} not found")
    return agreement


@router.post("/{agreement_id}/settle", response_model=SwapAgreementRead)
async def settle_swap(
    agreement_id: str,
    payload: SwapSettle | None = None,
    db: Session = Depends(get_db),
    now: datetime.datetime = Depends(get_now),
    reminders: ReminderScheduler = Depends(get_reminder_scheduler),
):
    """Mark an agreement paid. The linked shift, if it still exists, is marked settled too."""
    agreement = get_agreement(db, agreement_id)
    if agreement is None:
        raise HTTPException(status_code=404, detail=f"Swap agreement {agreement_id} not found")

    method = (payload or SwapSettle()).method
    shift = get_shift(db, agreement.shift_id)
    settle_agreement(agreement, shift, now, method)
    commit(db, "swap settlement")
    db.refresh(agreement)
    if shift is not None:
        reminders.schedule_reminders(shift)

    log_finance_event("swap_settled", {"agreement_id": agreement.id, "method": method.value})
    return agreement
