# app/routes/shared.py
"""
Shared dependencies and error handlers for route modules.
"""

import logging
from functools import lru_cache

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.models import Settings
from app.core.schedule import InvoiceError, SwapError
from app.core.storage import StorageError, get_shift, load_settings
from app.core.validators import RecurrenceVolumeWarning, ShiftValidationError
from app.database.database import Shift

logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    """User settings, read once per process."""
    return load_settings()


def get_shift_or_404(db: Session, shift_id: str) -> Shift:
    shift = get_shift(db, shift_id)
    if shift is None:
        raise HTTPException(status_code=404, detail=f"Shift {shift_id} not found")
    return shift


# ============ Exception handlers ============


async def shift_validation_handler(request: Request, exc: ShiftValidationError) -> JSONResponse:
    """Blocking validation errors become 422; an unconfirmed large series becomes 409."""
    if isinstance(exc, RecurrenceVolumeWarning):
        return JSONResponse(
            status_code=409,
            content={
                "error": exc.code,
                "detail": str(exc),
                "estimated_count": exc.estimated_count,
                "threshold": exc.threshold,
            },
        )
    return JSONResponse(status_code=422, content={"error": exc.code, "detail": str(exc)})


async def domain_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    code = "invalid_swap" if isinstance(exc, SwapError) else "invalid_invoice"
    return JSONResponse(status_code=422, content={"error": code, "detail": str(exc)})


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"error": "storage_unavailable", "detail": str(exc)})


EXCEPTION_HANDLERS = {
    ShiftValidationError: shift_validation_handler,
    SwapError: domain_error_handler,
    InvoiceError: domain_error_handler,
    StorageError: storage_error_handler,
}
