# app/routes/hospitals.py
"""Hospital routes - payer profiles and received payments."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.models import HospitalCreate, HospitalPayment, HospitalRead, HospitalUpdate
from app.core.request_logging import log_finance_event
from app.core.schedule import average_shift_value
from app.core.storage import commit, get_hospital, get_hospital_by_name, list_hospitals, list_shifts
from app.database.database import Hospital, get_db

router = APIRouter(prefix="/api/hospitals", tags=["hospitals"])

CLEARABLE_FIELDS = {"payment_day_of_month", "custom_interval_days", "last_payment_date"}


def _get_hospital_or_404(db: Session, hospital_id: str) -> Hospital:
    hospital = get_hospital(db, hospital_id)
    if hospital is None:
        raise HTTPException(status_code=404, detail=f"Hospital {hospital_id} not found")
    return hospital


def _refresh_average(db: Session, hospitals: list[Hospital]) -> None:
    """Recompute ``average_shift_value`` from the current shifts."""
    shifts = list_shifts(db)
    for hospital in hospitals:
        hospital.average_shift_value = average_shift_value(shifts, hospital.name)


@router.post("", response_model=HospitalRead, status_code=201)
async def create_hospital(payload: HospitalCreate, db: Session = Depends(get_db)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=422, detail="Hospital name is required")
    if get_hospital_by_name(db, name) is not None:
        raise HTTPException(status_code=409, detail=f"Hospital {name!r} already exists")

    hospital = Hospital(**payload.model_dump(exclude={"name"}), name=name)
    _refresh_average(db, [hospital])
    db.add(hospital)
    commit(db, "hospital creation")
    db.refresh(hospital)
    return hospital


@router.get("", response_model=list[HospitalRead])
async def get_hospitals(db: Session = Depends(get_db)):
    hospitals = list_hospitals(db)
    _refresh_average(db, hospitals)
    commit(db, "hospital averages")
    return hospitals


@router.get("/{hospital_id}", response_model=HospitalRead)
async def get_one_hospital(hospital_id: str, db: Session = Depends(get_db)):
    return _get_hospital_or_404(db, hospital_id)


@router.patch("/{hospital_id}", response_model=HospitalRead)
async def update_hospital(hospital_id: str, payload: HospitalUpdate, db: Session = Depends(get_db)):
    """Change the payment rule, tolerance or alert toggle of a hospital."""
    hospital = _get_hospital_or_404(db, hospital_id)
    changes = payload.model_dump(exclude_unset=True)

    if "name" in changes:
        name = (changes.pop("name") or "").strip()
        if not name:
            raise HTTPException(status_code=422, detail="Hospital name is required")
        existing = get_hospital_by_name(db, name)
        if existing is not None and existing.id != hospital.id:
            raise HTTPException(status_code=409, detail=f"Hospital {name!r} already exists")
        hospital.name = name

    for field, value in changes.items():
        # Only the optional rule fields may be cleared
        if value is None and field not in CLEARABLE_FIELDS:
            continue
        setattr(hospital, field, value)

    commit(db, "hospital update")
    db.refresh(hospital)
    return hospital


@router.post("/{hospital_id}/payments", response_model=HospitalRead)
async def record_payment(hospital_id: str, payload: HospitalPayment, db: Session = Depends(get_db)):
    """
    Record that a hospital paid.

    The next expected payment date, and with it the late-payment alert,
    is computed from this date.
    """
    hospital = _get_hospital_or_404(db, hospital_id)
    hospital.last_payment_date = payload.paid_on
    commit(db, "hospital payment")
    db.refresh(hospital)

    log_finance_event("hospital_payment", {"hospital_id": hospital.id, "paid_on": payload.paid_on.isoformat()})
    return hospital
