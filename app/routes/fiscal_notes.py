# app/routes/fiscal_notes.py
"""Fiscal note routes - invoice shifts to hospitals."""

import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.models import FiscalNoteCreate, FiscalNoteRead, ShiftRead
from app.core.request_logging import log_finance_event
from app.core.schedule import create_fiscal_note, invoiceable_shifts
from app.core.storage import commit, get_fiscal_note, get_shifts_by_ids, list_fiscal_notes, list_shifts
from app.core.utils import get_now
from app.database.database import get_db

router = APIRouter(prefix="/api/fiscal-notes", tags=["fiscal_notes"])


@router.get("", response_model=list[FiscalNoteRead])
async def get_fiscal_notes(db: Session = Depends(get_db)):
    return list_fiscal_notes(db)


@router.get("/invoiceable", response_model=list[ShiftRead])
async def get_invoiceable(db: Session = Depends(get_db), now: datetime.datetime = Depends(get_now)):
    """Past, unpaid shifts without a fiscal note."""
    return invoiceable_shifts(list_shifts(db), now)


@router.get("/{note_id}", response_model=FiscalNoteRead)
async def get_one_fiscal_note(note_id: str, db: Session = Depends(get_db)):
    note = get_fiscal_note(db, note_id)
    if note is None:
        raise HTTPException(status_code=404, detail=f"Fiscal note {note_id} not found")
    return note


@router.post("", response_model=FiscalNoteRead, status_code=201)
async def issue_fiscal_note(payload: FiscalNoteCreate, db: Session = Depends(get_db)):
    """Issue a note covering the given shifts; every shift id must exist."""
    shift_ids = list(dict.fromkeys(payload.shift_ids))
    shifts = get_shifts_by_ids(db, shift_ids)
    missing = set(shift_ids) - {shift.id for shift in shifts}
    if missing:
        raise HTTPException(status_code=404, detail=f"Unknown shift ids: {sorted(missing)}")

    note = create_fiscal_note(shifts, payload.hospital_name, payload.note_number, payload.total_amount)
    db.add(note)
    commit(db, "fiscal note")
    db.refresh(note)

    log_finance_event("fiscal_note", {"note_id": note.id, "shift_count": len(shifts)})
    return note
