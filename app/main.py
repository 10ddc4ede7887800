# app/main.py
"""
Shiftbook API.

Run with ``uvicorn app.main:app``. Logging and Sentry are configured at
import time so that anything logged while routers load is captured too.
"""

import json
import os
import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.logging_config import get_logger, setup_logging
from app.core.request_logging import RequestLoggingMiddleware
from app.core.sentry_config import init_sentry
from app.core.storage import DATA_DIR
from app.database.database import create_tables, get_db
from app.routes.calendar import router as calendar_router
from app.routes.finance import router as finance_router
from app.routes.fiscal_notes import router as fiscal_notes_router
from app.routes.hospitals import router as hospitals_router
from app.routes.shared import EXCEPTION_HANDLERS
from app.routes.shifts import router as shifts_router
from app.routes.swaps import router as swaps_router

setup_logging()
logger = get_logger(__name__)

sentry_enabled = init_sentry()

APP_VERSION = "0.1.0"
IS_PRODUCTION = os.getenv("PRODUCTION", "false").lower() == "true"

# Missing is fine, malformed is not
OPTIONAL_DATA_FILES = ("settings.json",)

ROUTERS = (
    shifts_router,
    finance_router,
    swaps_router,
    hospitals_router,
    fiscal_notes_router,
    calendar_router,
)


def validate_data_files():
    """Fail startup on a data file with broken JSON rather than on first use."""
    for name in OPTIONAL_DATA_FILES:
        path = DATA_DIR / name
        if not path.exists():
            logger.warning(f"{path} not found, defaults apply")
            continue
        try:
            json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Invalid JSON in {path}: {e}") from e

    logger.info("Data files validated")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Shiftbook starting",
        extra={"extra_fields": {"production": IS_PRODUCTION, "python_version": sys.version, "sentry": sentry_enabled}},
    )

    try:
        validate_data_files()
        create_tables()
    except Exception as e:
        logger.error(f"Startup aborted: {e}", exc_info=True)
        raise
    logger.info("Database schema ready")

    yield

    logger.info("Shiftbook stopped")


def _cors_options() -> dict:
    """Open CORS in development; in production only the origins listed in CORS_ORIGINS."""
    if not IS_PRODUCTION:
        logger.info("CORS open to all origins (development)")
        return {"allow_origins": ["*"], "allow_credentials": False, "allow_methods": ["*"]}

    origins = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin.strip()]
    if not origins:
        logger.warning("CORS_ORIGINS is empty; browsers on other origins will be refused")
    else:
        logger.info(f"CORS origins: {origins}")
    return {
        "allow_origins": origins,
        "allow_credentials": True,
        "allow_methods": ["GET", "POST", "PATCH", "DELETE"],
    }


app = FastAPI(
    title="Shiftbook",
    description="Shift scheduling, swaps and income tracking for shift-based healthcare workers",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(CORSMiddleware, allow_headers=["*"], expose_headers=["X-Request-ID"], **_cors_options())
app.add_middleware(RequestLoggingMiddleware)

for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)

for router in ROUTERS:
    app.include_router(router)


@app.get("/health", tags=["health"])
async def health_check(db: Session = Depends(get_db)):
    """200 when the database answers, 503 otherwise."""
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check: database unreachable: {e}", exc_info=True)
        raise HTTPException(
            status_code=503,
            detail={"status": "unhealthy", "service": "shiftbook", "database": "unreachable"},
        ) from e

    return {"status": "healthy", "service": "shiftbook", "version": APP_VERSION, "database": "ok"}
