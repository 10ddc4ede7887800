"""
Input validation for shift creation.

All checks run before anything is written. Every failure blocks the request
except RecurrenceVolumeWarning, which only asks for an explicit confirmation.
"""

import logging

from app.core.config import RECURRENCE_VOLUME_WARNING_THRESHOLD
from app.core.constants import DAYS_PER_WEEK, MIN_DURATION_HOURS
from app.core.models import RecurrenceKind, RecurrenceRule, ShiftDraft

logger = logging.getLogger(__name__)


class ShiftValidationError(ValueError):
    """Base class for rejected shift input."""

    code = "invalid_shift"
    blocking = True


class MissingRequiredField(ShiftValidationError):
    code = "missing_required_field"


class MissingGeolocation(ShiftValidationError):
    code = "missing_geolocation"


class InvalidDuration(ShiftValidationError):
    code = "invalid_duration"


class InvalidDateRange(ShiftValidationError):
    code = "invalid_date_range"


class EmptyWeekdaySelection(ShiftValidationError):
    code = "empty_weekday_selection"


class RecurrenceVolumeWarning(ShiftValidationError):
    """The series is large enough that the user has to confirm it."""

    code = "recurrence_volume_warning"
    blocking = False

    def __init__(self, estimated_count: int, threshold: int = RECURRENCE_VOLUME_WARNING_THRESHOLD):
        self.estimated_count = estimated_count
        self.threshold = threshold
        super().__init__(
            f"This will create about {estimated_count} shifts (more than {threshold}). Confirm to continue."
        )


def validate_shift_draft(draft: ShiftDraft, rule: RecurrenceRule) -> None:
    """
    Check a draft and its recurrence rule.

    Order: name, geolocation, duration, date range, weekday selection.

    Raises:
        ShiftValidationError: The first failing check
    """
    if not draft.location_name.strip():
        raise MissingRequiredField("A location or title is required")

    if not draft.is_commitment and (draft.latitude is None or draft.longitude is None):
        raise MissingGeolocation("Work shifts need a location with resolved coordinates")

    if not draft.is_all_day and draft.duration_hours < MIN_DURATION_HOURS:
        raise InvalidDuration("Duration must be greater than zero")

    if rule.kind != RecurrenceKind.NONE:
        if rule.until is None or rule.until <= draft.start_at.date():
            raise InvalidDateRange("The repeat-until date must be after the start date")

    if rule.kind == RecurrenceKind.SPECIFIC_WEEKDAYS:
        if not rule.weekdays:
            raise EmptyWeekdaySelection("Select at least one weekday")
        span = min((rule.until - draft.start_at.date()).days, DAYS_PER_WEEK - 1)
        first = draft.start_at.weekday()
        covered = {(first + offset) % DAYS_PER_WEEK for offset in range(span + 1)}
        if not covered & set(rule.weekdays):
            raise EmptyWeekdaySelection("None of the selected weekdays falls within the date range")


def check_recurrence_volume(
    estimated_count: int,
    confirmed: bool,
    threshold: int = RECURRENCE_VOLUME_WARNING_THRESHOLD,
) -> None:
    """Raise RecurrenceVolumeWarning for an unconfirmed series above the threshold."""
    if estimated_count > threshold and not confirmed:
        logger.info("Series of ~%d shifts needs confirmation (threshold %d)", estimated_count, threshold)
        raise RecurrenceVolumeWarning(estimated_count, threshold)
