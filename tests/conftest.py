"""
Pytest configuration and shared fixtures for testing.

Provides reusable test fixtures:
- test_db: In-memory SQLite database for isolated testing
- now: Fixed "current time" used by the engines and the API
- reminder_scheduler: In-memory scheduler with a pinned clock
- test_client: FastAPI TestClient with database, clock and scheduler overrides
- make_shift: Factory for transient Shift objects
"""

import datetime
import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Keep the app from touching a real database or log directory on import
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "shiftbook-test-logs"))

# ruff: noqa: E402
from app.core.models import Settings
from app.core.reminders import InMemoryReminderScheduler, get_reminder_scheduler
from app.core.utils import get_now
from app.database.database import Base, Shift, get_db
from app.main import app

FIXED_NOW = datetime.datetime(2024, 6, 15, 12, 0)


@pytest.fixture
def test_db():
    """Fresh in-memory database per test, shared with the TestClient thread through StaticPool."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autoflush=False, bind=engine)()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def now():
    """Current time as seen by the code under test (2024-06-15 12:00)."""
    return FIXED_NOW


@pytest.fixture
def reminder_scheduler(now):
    """Reminder scheduler with notifications on and the clock pinned to ``now``."""
    return InMemoryReminderScheduler(settings=Settings(), clock=lambda: now)


@pytest.fixture
def test_client(test_db, now, reminder_scheduler):
    """TestClient bound to the test database, the pinned clock and the in-memory scheduler."""

    def override_get_db():
        yield test_db

    overrides = {
        get_db: override_get_db,
        get_now: lambda: now,
        get_reminder_scheduler: lambda: reminder_scheduler,
    }
    app.dependency_overrides.update(overrides)
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_shift():
    """
    Factory for transient shifts.

    Work shifts get coordinates and a 12h duration unless told otherwise.
    """

    def _make(start_at: datetime.datetime, **fields) -> Shift:
        fields.setdefault("location_name", "Hospital Central")
        fields.setdefault("latitude", -23.55)
        fields.setdefault("longitude", -46.63)
        return Shift(start_at=start_at, **fields)

    return _make
