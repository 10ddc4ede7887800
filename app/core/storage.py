# app\core\storage.py
"""
Data loading and persistence layer.

Settings come from a JSON file; shifts, swap agreements, hospitals and fiscal
notes live in the SQLAlchemy database. Every write goes through ``commit`` so
a failed transaction is rolled back, logged and surfaced as StorageError.
"""

import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.models import Settings
from app.core.sentry_config import capture_exception
from app.core.time_utils import month_bounds
from app.database.database import FiscalNote, Hospital, Shift, SwapAgreement

logger = logging.getLogger(__name__)

DATA_DIR = Path(os.getenv("SHIFTBOOK_DATA_DIR", "data"))


class StorageError(Exception):
    """General error type for problems loading or persisting data."""

    pass


def _load_json(file_path: Path) -> list[Any] | dict[str, Any]:
    """
    Read and parse JSON with robust error handling.
    Args:
        file_path: Path to the JSON file
    Returns:
        Parsed JSON data as list or dict
    Raises:
        StorageError: If file cannot be read or JSON is invalid
    """
    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.exception("Failed to read JSON file %s", file_path)
        raise StorageError(f"Could not read JSON file {file_path}: {e}") from e

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.exception("Invalid JSON in file %s", file_path)
        raise StorageError(f"Invalid JSON in file {file_path}: {e}") from e


def load_settings() -> Settings:
    """
    Load user preferences from data file.

    A missing file yields the defaults; a malformed one is an error.

    Raises:
        StorageError: If file cannot be parsed
    """
    file_path = DATA_DIR / "settings.json"
    if not file_path.exists():
        logger.warning("Settings file %s not found, using defaults", file_path)
        return Settings()

    data = _load_json(file_path)
    try:
        if not isinstance(data, dict):
            raise TypeError("Expected settings dict")
        settings = Settings(**data)
    except (TypeError, ValidationError) as e:
        logger.exception("Failed to parse settings from %s", file_path)
        raise StorageError(f"Could not parse settings from {file_path}: {e}") from e
    return settings


def commit(db: Session, action: str) -> None:
    """
    Commit the current transaction.

    Writes are never retried: on failure the session is rolled back and the
    error is raised to the caller.

    Raises:
        StorageError: If the database rejects the transaction
    """
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Database commit failed during %s", action)
        capture_exception(e, action=action)
        raise StorageError(f"Could not persist {action}: {e}") from e


# === Shifts ===


def add_shifts(db: Session, shifts: Iterable[Shift]) -> list[Shift]:
    """Insert shifts in one transaction and return them refreshed."""
    shifts = list(shifts)
    db.add_all(shifts)
    commit(db, "shift creation")
    for shift in shifts:
        db.refresh(shift)
    logger.info("Stored %d shift(s)", len(shifts))
    return shifts


def get_shift(db: Session, shift_id: str) -> Shift | None:
    return db.get(Shift, shift_id)


def get_shifts_by_ids(db: Session, shift_ids: Iterable[str]) -> list[Shift]:
    """Shifts for the given ids, ordered by start. Unknown ids are ignored."""
    ids = list(shift_ids)
    if not ids:
        return []
    return db.query(Shift).filter(Shift.id.in_(ids)).order_by(Shift.start_at).all()


def list_shifts(db: Session, year: int | None = None, month: int | None = None) -> list[Shift]:
    """All shifts ordered by start, optionally restricted to one month."""
    query = db.query(Shift)
    if year is not None and month is not None:
        start, end = month_bounds(year, month)
        query = query.filter(Shift.start_at >= start, Shift.start_at < end)
    return query.order_by(Shift.start_at).all()


def list_series(db: Session, recurrence_id: str) -> list[Shift]:
    return db.query(Shift).filter(Shift.recurrence_id == recurrence_id).order_by(Shift.start_at).all()


def delete_shifts(db: Session, shifts: Iterable[Shift]) -> list[str]:
    """
    Delete shifts atomically.

    Linked swap agreements and fiscal notes are left untouched.

    Returns:
        Ids of the deleted shifts
    """
    deleted_ids = []
    for shift in shifts:
        deleted_ids.append(shift.id)
        db.delete(shift)
    commit(db, "shift deletion")
    logger.info("Deleted %d shift(s)", len(deleted_ids))
    return deleted_ids


# === Swap agreements ===


def list_agreements(db: Session, include_settled: bool = True) -> list[SwapAgreement]:
    query = db.query(SwapAgreement)
    if not include_settled:
        query = query.filter(SwapAgreement.is_settled.is_(False))
    return query.order_by(SwapAgreement.agreed_payment_date).all()


def get_agreement(db: Session, agreement_id: str) -> SwapAgreement | None:
    return db.get(SwapAgreement, agreement_id)


def agreements_by_id(db: Session, agreement_ids: Iterable[str]) -> dict[str, SwapAgreement]:
    """Id-indexed lookup of agreements. Dangling ids are simply absent."""
    ids = [agreement_id for agreement_id in agreement_ids if agreement_id]
    if not ids:
        return {}
    rows = db.query(SwapAgreement).filter(SwapAgreement.id.in_(ids)).all()
    return {row.id: row for row in rows}


# === Hospitals ===


def list_hospitals(db: Session) -> list[Hospital]:
    return db.query(Hospital).order_by(Hospital.name).all()


def get_hospital(db: Session, hospital_id: str) -> Hospital | None:
    return db.get(Hospital, hospital_id)


def get_hospital_by_name(db: Session, name: str) -> Hospital | None:
    return db.query(Hospital).filter(Hospital.name == name).first()


# === Fiscal notes ===


def list_fiscal_notes(db: Session) -> list[FiscalNote]:
    return db.query(FiscalNote).order_by(FiscalNote.created_at.desc()).all()


def get_fiscal_note(db: Session, note_id: str) -> FiscalNote | None:
    return db.get(FiscalNote, note_id)
