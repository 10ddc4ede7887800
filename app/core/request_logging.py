# app/core/request_logging.py
"""
Per-request access logging and the finance audit trail.

Every response carries an ``X-Request-ID`` header matching the log line, so a
user reporting a wrong total can be traced to the request that produced it.
"""

import logging
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging_config import get_logger

logger = get_logger(__name__)

# Polled by monitoring; kept out of INFO
QUIET_PATHS = ("/health",)


def _level_for(status_code: int, path: str) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    if path in QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of each request under a fresh request id."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        def log(status_code: int, error: Exception | None = None) -> None:
            duration_ms = (time.perf_counter() - started) * 1000
            fields = {
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "duration": round(duration_ms, 2),
            }
            summary = f"{request.method} {request.url.path} - {status_code} ({duration_ms:.2f}ms)"
            if error is not None:
                logger.error(f"{summary} - ERROR: {error}", extra={"extra_fields": fields}, exc_info=True)
            else:
                logger.log(_level_for(status_code, request.url.path), summary, extra={"extra_fields": fields})

        try:
            response = await call_next(request)
        except Exception as e:
            log(500, e)
            raise

        log(response.status_code)
        response.headers["X-Request-ID"] = request_id
        return response


def log_finance_event(event_type: str, details: dict | None = None) -> None:
    """
    Record a financial change the user asserted (payment marked, swap settled, note issued).

    Nothing is verified against a bank; this log is the only trail of who
    marked what as paid and when.
    """
    logger.info(
        f"Finance event: {event_type}",
        extra={"extra_fields": {"event_type": event_type, **(details or {})}},
    )
