# app/routes/finance.py
"""Finance routes - monthly statistics, pending items, settlement, alerts and forecasts."""

import datetime

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.core.models import (
    FinancialAlert,
    HospitalForecast,
    MonthlyStatistics,
    PendingItems,
    SettlementRequest,
    SettlementResult,
)
from app.core.reminders import ReminderScheduler, get_reminder_scheduler
from app.core.request_logging import log_finance_event
from app.core.schedule import (
    derive_alerts,
    forecast_hospital_payments,
    mirror_settlement,
    pending_items,
    settle_shifts,
    summarize_month,
)
from app.core.storage import agreements_by_id, commit, list_agreements, list_hospitals, list_shifts
from app.core.utils import get_now
from app.database.database import get_db

router = APIRouter(prefix="/api/finance", tags=["finance"])


@router.get("/summary/{year}/{month}", response_model=MonthlyStatistics)
async def get_month_summary(
    year: int = Path(ge=1900, le=9999),
    month: int = Path(ge=1, le=12),
    db: Session = Depends(get_db),
    now: datetime.datetime = Depends(get_now),
):
    """Accrual and realized-cash figures for one month."""
    return summarize_month(list_shifts(db, year, month), year, month, now)


@router.get("/pending", response_model=PendingItems)
async def get_pending(db: Session = Depends(get_db), now: datetime.datetime = Depends(get_now)):
    """What hospitals and colleagues still owe the user, and what the user owes colleagues."""
    return pending_items(list_shifts(db), now)


@router.post("/settle", response_model=SettlementResult)
async def settle(
    payload: SettlementRequest,
    db: Session = Depends(get_db),
    now: datetime.datetime = Depends(get_now),
    reminders: ReminderScheduler = Depends(get_reminder_scheduler),
):
    """
    Mark selected pending items as settled.

    Settled swap legs are copied onto their agreements, and everything is
    committed before the response so the next summary sees it.
    """
    shifts = list_shifts(db)
    result = settle_shifts(shifts, payload.shift_ids, now)

    changed = [shift for shift in shifts if shift.id in result.changed_ids]
    agreements = agreements_by_id(db, (shift.swap_agreement_id for shift in changed))
    mirrored = mirror_settlement(changed, agreements, now)

    commit(db, "settlement")
    for shift in changed:
        reminders.schedule_reminders(shift)

    log_finance_event(
        "settlement",
        {
            "marked_paid": len(result.marked_paid),
            "marked_settled": len(result.marked_settled),
            "agreements": len(mirrored),
            "unknown": len(result.unknown),
        },
    )
    return result


@router.get("/alerts", response_model=list[FinancialAlert])
async def get_alerts(db: Session = Depends(get_db), now: datetime.datetime = Depends(get_now)):
    """Alert list for the finance overview; never empty."""
    return derive_alerts(list_shifts(db), list_agreements(db), list_hospitals(db), now)


@router.get("/forecast", response_model=list[HospitalForecast])
async def get_forecast(db: Session = Depends(get_db), now: datetime.datetime = Depends(get_now)):
    """Expected next payment per hospital."""
    return forecast_hospital_payments(list_shifts(db), list_hospitals(db), now)
