# app/core/sentry_config.py
"""
Error reporting to Sentry.

Only active when ``PRODUCTION=true`` and ``SENTRY_DSN`` is set. Until then
``capture_exception`` and ``add_breadcrumb`` go to an uninitialized SDK and
do nothing, so callers never need to check whether reporting is on.

Shift notes, colleague names and amounts are personal data: request bodies
and credentials are stripped from every event before it leaves the process.
"""

import logging
import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

logger = logging.getLogger(__name__)

FILTERED = "[Filtered]"
SENSITIVE_HEADERS = ("cookie", "authorization", "x-api-key")
DEFAULT_RELEASE = "shiftbook@0.1.0"


def _integrations() -> list:
    return [
        FastApiIntegration(),
        StarletteIntegration(),
        # INFO records become breadcrumbs, ERROR records become events
        LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
    ]


def init_sentry() -> bool:
    """Start the SDK if configured. Returns whether reporting is active."""
    if os.getenv("PRODUCTION", "false").lower() != "true":
        logger.info("Sentry disabled outside production")
        return False

    dsn = os.getenv("SENTRY_DSN", "").strip()
    if not dsn:
        logger.warning("PRODUCTION is set but SENTRY_DSN is empty; errors will not be reported")
        return False

    environment = os.getenv("SENTRY_ENVIRONMENT", "production")
    try:
        sentry_sdk.init(
            dsn=dsn,
            integrations=_integrations(),
            traces_sample_rate=0.1,
            sample_rate=1.0,
            release=os.getenv("RELEASE_VERSION", DEFAULT_RELEASE),
            environment=environment,
            send_default_pii=False,
            attach_stacktrace=True,
            before_send=before_send_hook,
        )
    except Exception as e:
        logger.error("Sentry initialization failed: %s", e, exc_info=True)
        return False

    logger.info("Sentry reporting to environment %s", environment)
    return True


def before_send_hook(event, hint):
    """Scrub credentials and request bodies from an outgoing event."""
    request = event.get("request") or {}

    headers = request.get("headers") or {}
    for name in SENSITIVE_HEADERS:
        if name in headers:
            headers[name] = FILTERED

    if "data" in request:
        request["data"] = FILTERED

    return event


def capture_exception(error: Exception, **context):
    """Report ``error`` with ``context`` attached under a "shiftbook" section."""
    with sentry_sdk.new_scope() as scope:
        if context:
            scope.set_context("shiftbook", context)
        sentry_sdk.capture_exception(error)


def add_breadcrumb(message: str, category: str = "default", level: str = "info", data: dict | None = None):
    sentry_sdk.add_breadcrumb(message=message, category=category, level=level, data=data or {})
