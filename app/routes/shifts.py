# app/routes/shifts.py
"""Shift routes - create series, list, update and delete shifts."""

import datetime
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.calendar_export import calendar_event_uid
from app.core.config import RECURRENCE_VOLUME_WARNING_THRESHOLD
from app.core.logging_config import LogContext
from app.core.models import ShiftCreate, ShiftImport, ShiftRead, ShiftUpdate
from app.core.reminders import ReminderScheduler, get_reminder_scheduler
from app.core.schedule import (
    DeleteScope,
    agenda_shifts,
    change_status,
    delete_selection,
    estimate_occurrences,
    history_shifts,
    mirror_settlement,
    mirror_swap_terms,
    plan_series,
    select_for_deletion,
    upcoming_shifts,
)
from app.core.storage import add_shifts, agreements_by_id, commit, list_series, list_shifts
from app.core.utils import get_now
from app.core.validators import validate_shift_draft
from app.database.database import Shift, get_db
from app.routes.shared import get_shift_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/shifts", tags=["shifts"])


@router.post("", response_model=list[ShiftRead], status_code=201)
async def create_shifts(
    payload: ShiftCreate,
    db: Session = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminder_scheduler),
):
    """
    Create one shift or a whole recurring series.

    A series estimated above the volume threshold is refused with 409 until
    the request is repeated with ``confirm_large_series``.
    """
    shifts = plan_series(payload.draft, payload.recurrence, confirmed=payload.confirm_large_series)
    for shift in shifts:
        shift.calendar_event_id = calendar_event_uid(shift)

    shifts = add_shifts(db, shifts)
    for shift in shifts:
        reminders.schedule_reminders(shift)

    with LogContext(recurrence_id=shifts[0].recurrence_id):
        logger.info("Created %d shift(s) at %s", len(shifts), payload.draft.location_name)
    return shifts


@router.post("/estimate")
async def estimate_series(payload: ShiftCreate):
    """Approximate instance count for a draft series, before anything is created."""
    validate_shift_draft(payload.draft, payload.recurrence)
    estimated = estimate_occurrences(payload.draft.start_at, payload.recurrence)
    return {
        "estimated_count": estimated,
        "approximate": True,
        "requires_confirmation": estimated > RECURRENCE_VOLUME_WARNING_THRESHOLD,
    }


@router.post("/import", response_model=list[ShiftRead], status_code=201)
async def import_shifts(
    records: list[ShiftImport],
    db: Session = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminder_scheduler),
):
    """
    Import shift records from an older export as they are.

    Records are not re-validated; an unknown status string is rejected with 422.
    """
    shifts = add_shifts(db, [Shift(**record.model_dump(exclude_none=True)) for record in records])
    for shift in shifts:
        reminders.schedule_reminders(shift)
    logger.info("Imported %d shift(s)", len(shifts))
    return shifts


@router.get("", response_model=list[ShiftRead])
async def get_shifts(
    year: int | None = Query(default=None, ge=1900, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    """All shifts ordered by start, or only those of one month."""
    if (year is None) != (month is None):
        raise HTTPException(status_code=400, detail="year and month must be given together")
    return list_shifts(db, year, month)


@router.get("/upcoming", response_model=list[ShiftRead])
async def get_upcoming(
    limit: int = Query(default=3, ge=1, le=100),
    db: Session = Depends(get_db),
    now: datetime.datetime = Depends(get_now),
):
    return upcoming_shifts(list_shifts(db), now, limit)


@router.get("/agenda", response_model=list[ShiftRead])
async def get_agenda(db: Session = Depends(get_db), now: datetime.datetime = Depends(get_now)):
    return agenda_shifts(list_shifts(db), now)


@router.get("/history", response_model=list[ShiftRead])
async def get_history(db: Session = Depends(get_db), now: datetime.datetime = Depends(get_now)):
    return history_shifts(list_shifts(db), now)


@router.get("/series/{recurrence_id}", response_model=list[ShiftRead])
async def get_series(recurrence_id: str, db: Session = Depends(get_db)):
    shifts = list_series(db, recurrence_id)
    if not shifts:
        raise HTTPException(status_code=404, detail=f"Series {recurrence_id} not found")
    return shifts


@router.get("/{shift_id}", response_model=ShiftRead)
async def get_one_shift(shift_id: str, db: Session = Depends(get_db)):
    return get_shift_or_404(db, shift_id)


@router.patch("/{shift_id}", response_model=ShiftRead)
async def update_shift(
    shift_id: str,
    payload: ShiftUpdate,
    db: Session = Depends(get_db),
    now: datetime.datetime = Depends(get_now),
    reminders: ReminderScheduler = Depends(get_reminder_scheduler),
):
    """Update status, amounts and flags of one shift."""
    shift = get_shift_or_404(db, shift_id)
    changes = payload.model_dump(exclude_unset=True)

    status = changes.pop("status", None)
    if status is not None:
        change_status(shift, status)

    for field, value in changes.items():
        setattr(shift, field, value)

    # The linked agreement drives alerts, so it must follow the shift
    if shift.swap_agreement_id:
        agreements = agreements_by_id(db, [shift.swap_agreement_id])
        mirror_swap_terms(shift, agreements.get(shift.swap_agreement_id))
        mirror_settlement([shift], agreements, now)

    commit(db, "shift update")
    db.refresh(shift)
    reminders.schedule_reminders(shift)

    with LogContext(shift_id=shift.id):
        logger.info("Updated shift fields: %s", sorted(payload.model_fields_set))
    return shift


@router.delete("/{shift_id}")
async def delete_shift(
    shift_id: str,
    scope: DeleteScope = DeleteScope.SINGLE,
    db: Session = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminder_scheduler),
):
    """
    Delete a shift, the rest of its series, or the whole series.

    Swap agreements and fiscal notes that reference the deleted shifts are kept.
    """
    trigger = get_shift_or_404(db, shift_id)
    candidates = list_series(db, trigger.recurrence_id) if trigger.recurrence_id else [trigger]
    selected = select_for_deletion(candidates, trigger, scope)
    deleted_ids = delete_selection(db, selected, reminders)
    return {"deleted": deleted_ids, "scope": scope.value}
