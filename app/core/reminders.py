"""
Reminder scheduling collaborator.

Routes call ``schedule_reminders`` after a shift is created or changed and
``cancel_reminders`` before it is deleted. Delivery is somebody else's job:
the default scheduler only keeps the planned reminders in memory so they can
be listed and replaced.
"""

import datetime
import logging
from collections.abc import Callable
from typing import Protocol

from app.core.config import REMINDER_DAY_BEFORE_HOURS, REMINDER_SOON_HOURS
from app.core.models import Settings
from app.core.storage import load_settings
from app.core.types import PlannedReminder, ReminderKey, ShiftId
from app.core.utils import get_now
from app.database.database import Shift, ShiftStatus

logger = logging.getLogger(__name__)

REMINDER_SUFFIXES = ("24h", "2h")


class ReminderScheduler(Protocol):
    def schedule_reminders(self, shift: Shift) -> None: ...

    def cancel_reminders(self, shift_id: str) -> None: ...


def reminder_key(shift_id: str, suffix: str) -> ReminderKey:
    return ReminderKey(f"{shift_id}-{suffix}")


def plan_reminders(shift: Shift, now: datetime.datetime, settings: Settings) -> list[PlannedReminder]:
    """
    Work out which reminders a shift should get.

    - Nothing for shifts already started, for swapped-out shifts, or when
      notifications are disabled.
    - One reminder 24 hours before when ``notify_24h_before`` is set.
    - One reminder 2 hours before when ``notify_on_day`` is set, except for
      all-day entries.
    - A reminder whose fire time has already passed is skipped.
    """
    if not settings.notifications_enabled:
        return []
    if shift.start_at < now or shift.status == ShiftStatus.SWAPPED_OUT:
        return []

    title = "Commitment" if shift.is_commitment else "Shift"
    planned: list[PlannedReminder] = []

    if settings.notify_24h_before:
        fire_at = shift.start_at - datetime.timedelta(hours=REMINDER_DAY_BEFORE_HOURS)
        if fire_at > now:
            planned.append(
                PlannedReminder(
                    key=reminder_key(shift.id, "24h"),
                    shift_id=ShiftId(shift.id),
                    fire_at=fire_at,
                    title=title,
                    body=f"Tomorrow: {shift.location_name}",
                )
            )

    if settings.notify_on_day and not shift.is_all_day:
        fire_at = shift.start_at - datetime.timedelta(hours=REMINDER_SOON_HOURS)
        if fire_at > now:
            if shift.is_commitment:
                body = f"Starts in {REMINDER_SOON_HOURS} hours: {shift.location_name}"
            else:
                body = f"In {REMINDER_SOON_HOURS} hours: {shift.duration_hours}h shift at {shift.location_name}"
            planned.append(
                PlannedReminder(
                    key=reminder_key(shift.id, "2h"),
                    shift_id=ShiftId(shift.id),
                    fire_at=fire_at,
                    title=title,
                    body=body,
                )
            )

    return planned


class InMemoryReminderScheduler:
    """Keeps planned reminders keyed by ``<shift id>-<suffix>``."""

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], datetime.datetime] = get_now,
    ):
        self.settings = settings or Settings()
        self.clock = clock
        self.pending: dict[ReminderKey, PlannedReminder] = {}

    def schedule_reminders(self, shift: Shift) -> None:
        # Replace whatever was planned before; a disabled or past shift ends up with none
        self.cancel_reminders(shift.id)
        for reminder in plan_reminders(shift, self.clock(), self.settings):
            self.pending[reminder["key"]] = reminder
        logger.debug("Reminders for shift %s: %d pending", shift.id, len(self.reminders_for(shift.id)))

    def cancel_reminders(self, shift_id: str) -> None:
        for suffix in REMINDER_SUFFIXES:
            self.pending.pop(reminder_key(shift_id, suffix), None)

    def reminders_for(self, shift_id: str) -> list[PlannedReminder]:
        keys = [reminder_key(shift_id, suffix) for suffix in REMINDER_SUFFIXES]
        return [self.pending[key] for key in keys if key in self.pending]

    def upcoming(self) -> list[PlannedReminder]:
        return sorted(self.pending.values(), key=lambda reminder: reminder["fire_at"])


_scheduler: InMemoryReminderScheduler | None = None


def get_reminder_scheduler() -> ReminderScheduler:
    """FastAPI dependency returning the process-wide scheduler."""
    global _scheduler
    if _scheduler is None:
        _scheduler = InMemoryReminderScheduler(settings=load_settings())
    return _scheduler
