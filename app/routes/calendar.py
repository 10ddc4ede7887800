# app/routes/calendar.py
"""Calendar routes - month grid and iCal feed."""

import datetime

from fastapi import APIRouter, Depends, Path
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.calendar_export import generate_ical
from app.core.models import Settings
from app.core.schedule import month_overview
from app.core.storage import list_shifts
from app.core.utils import get_now, month_navigation
from app.database.database import get_db
from app.routes.shared import get_settings

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


@router.get("/shifts.ics")
async def export_ical(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """iCal feed of all shifts, for subscribing from a calendar app."""
    ical = generate_ical(list_shifts(db), settings)
    return Response(
        content=ical,
        media_type="text/calendar",
        headers={"Content-Disposition": 'attachment; filename="shifts.ics"'},
    )


@router.get("/{year}/{month}")
async def get_month(
    year: int = Path(ge=1900, le=9999),
    month: int = Path(ge=1, le=12),
    db: Session = Depends(get_db),
    now: datetime.datetime = Depends(get_now),
):
    """One entry per day of the month, with navigation to the neighbouring months."""
    first = datetime.datetime(year, month, 1)
    return {
        "year": year,
        "month": month,
        "days": month_overview(list_shifts(db, year, month), first, now),
        "navigation": month_navigation(year, month),
    }
