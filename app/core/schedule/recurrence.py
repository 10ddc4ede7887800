"""Expansion of a shift draft and its recurrence rule into shift instances."""

import datetime
import logging

from app.core.config import (
    ESTIMATE_DAYS_PER_FORTNIGHT,
    ESTIMATE_DAYS_PER_MONTH,
    ESTIMATE_DAYS_PER_WEEK,
    RECURRENCE_VOLUME_WARNING_THRESHOLD,
)
from app.core.constants import HOURS_PER_DAY
from app.core.logging_config import LogContext
from app.core.models import RecurrenceKind, RecurrenceRule, ShiftDraft
from app.core.time_utils import add_days, add_months, add_weeks, combine_date_with_time_of, days_in_month, end_of_day
from app.core.validators import check_recurrence_volume, validate_shift_draft
from app.database.database import Shift, new_id

logger = logging.getLogger(__name__)


def _cursor(anchor: datetime.datetime, kind: RecurrenceKind, step: int) -> datetime.datetime:
    """
    The k-th candidate instant of a series.

    Every cursor is computed from the anchor rather than from the previous
    cursor, so a monthly series on the 31st returns to the 31st after a
    short month instead of drifting to the 29th.
    """
    if kind == RecurrenceKind.WEEKLY:
        return add_weeks(anchor, step)
    if kind == RecurrenceKind.BIWEEKLY:
        return add_weeks(anchor, 2 * step)
    if kind == RecurrenceKind.MONTHLY:
        return add_months(anchor, step)
    # daily and specific weekdays walk one day at a time
    return add_days(anchor, step)


def _occurs_on(cursor: datetime.datetime, anchor: datetime.datetime, rule: RecurrenceRule) -> bool:
    if rule.kind == RecurrenceKind.SPECIFIC_WEEKDAYS:
        return cursor.weekday() in rule.weekdays
    if rule.kind == RecurrenceKind.MONTHLY:
        return cursor.day == min(anchor.day, days_in_month(cursor.year, cursor.month))
    return True


def _instance(draft: ShiftDraft, start_at: datetime.datetime, recurrence_id: str | None) -> Shift:
    """Build one Shift from the draft. Commitments never carry money or coordinates."""
    is_commitment = draft.is_commitment
    return Shift(
        start_at=start_at,
        duration_hours=HOURS_PER_DAY if draft.is_all_day else draft.duration_hours,
        is_all_day=draft.is_all_day,
        location_name=draft.location_name.strip(),
        latitude=None if is_commitment else draft.latitude,
        longitude=None if is_commitment else draft.longitude,
        is_commitment=is_commitment,
        amount=0.0 if is_commitment else draft.amount,
        notes=draft.notes,
        recurrence_id=recurrence_id,
        hospital_id=None if is_commitment else draft.hospital_id,
        hospital_name=None if is_commitment else draft.hospital_name,
    )


def expand_recurrence(draft: ShiftDraft, rule: RecurrenceRule) -> list[Shift]:
    """
    Expand a draft into the shifts of its series.

    Args:
        draft: Template copied into every instance
        rule: Recurrence kind, inclusive end date and weekday selection

    Returns:
        Shifts ordered by start. A non-recurring rule gives exactly one shift
        without recurrence id. Otherwise every instance shares one new
        recurrence id and keeps the anchor's time of day.
    """
    anchor = draft.start_at

    if rule.kind == RecurrenceKind.NONE or rule.until is None:
        return [_instance(draft, anchor, None)]

    recurrence_id = new_id()
    limit = end_of_day(combine_date_with_time_of(rule.until, anchor))

    shifts = []
    step = 0
    cursor = anchor
    while cursor <= limit:
        if _occurs_on(cursor, anchor, rule):
            shifts.append(_instance(draft, cursor, recurrence_id))
        step += 1
        cursor = _cursor(anchor, rule.kind, step)

    with LogContext(recurrence_id=recurrence_id):
        logger.debug("Expanded %s series into %d shifts", rule.kind.value, len(shifts))
    return shifts


def estimate_occurrences(start_at: datetime.datetime, rule: RecurrenceRule) -> int:
    """
    Rough instance count shown before a series is created.

    This is an approximation (a month counts as 30 days) and may differ
    from what expand_recurrence actually produces.
    """
    if rule.kind == RecurrenceKind.NONE or rule.until is None:
        return 1

    days = (rule.until - start_at.date()).days

    if rule.kind == RecurrenceKind.DAILY:
        count = days
    elif rule.kind == RecurrenceKind.WEEKLY:
        count = days // ESTIMATE_DAYS_PER_WEEK
    elif rule.kind == RecurrenceKind.BIWEEKLY:
        count = days // ESTIMATE_DAYS_PER_FORTNIGHT
    elif rule.kind == RecurrenceKind.MONTHLY:
        count = days // ESTIMATE_DAYS_PER_MONTH
    else:
        count = (days // ESTIMATE_DAYS_PER_WEEK) * len(rule.weekdays)

    return max(1, count)


def plan_series(
    draft: ShiftDraft,
    rule: RecurrenceRule,
    confirmed: bool = False,
    threshold: int = RECURRENCE_VOLUME_WARNING_THRESHOLD,
) -> list[Shift]:
    """
    Validate a creation request and expand it.

    Raises:
        ShiftValidationError: Invalid input
        RecurrenceVolumeWarning: Large series that has not been confirmed
    """
    validate_shift_draft(draft, rule)
    check_recurrence_volume(estimate_occurrences(draft.start_at, rule), confirmed, threshold)
    return expand_recurrence(draft, rule)
