# app\core\types.py

"""
Custom type definitions for improved type safety across the application.

NewType wrappers keep the different string ids apart (a shift id is not a
reminder key even though both are plain strings).
"""

from datetime import datetime
from typing import NewType, TypedDict

ShiftId = NewType("ShiftId", str)
ReminderKey = NewType("ReminderKey", str)


class PlannedReminder(TypedDict):
    """A reminder the scheduler should fire for a shift."""

    key: ReminderKey
    shift_id: ShiftId
    fire_at: datetime
    title: str
    body: str
