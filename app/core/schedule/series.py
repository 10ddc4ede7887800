"""Deleting shifts that belong to a recurrence series."""

import enum
from collections.abc import Iterable

from sqlalchemy.orm import Session

from app.core.logging_config import LogContext
from app.core.reminders import ReminderScheduler
from app.core.sentry_config import add_breadcrumb
from app.core.storage import delete_shifts
from app.database.database import Shift


class DeleteScope(str, enum.Enum):
    SINGLE = "single"  # only the selected shift
    FUTURE = "future"  # the selected shift and later ones in its series
    SERIES = "series"  # every shift in the series


def select_for_deletion(shifts: Iterable[Shift], trigger: Shift, scope: DeleteScope) -> list[Shift]:
    """
    Pick the shifts a delete request applies to.

    Args:
        shifts: Candidate shifts (usually the trigger's series or everything)
        trigger: The shift the user chose to delete
        scope: How far the deletion reaches

    Returns:
        Shifts to delete, ordered by start. The trigger is always included.
        A shift without recurrence id only ever selects itself.
    """
    if scope == DeleteScope.SINGLE or trigger.recurrence_id is None:
        return [trigger]

    selected = [
        shift
        for shift in shifts
        if shift.recurrence_id == trigger.recurrence_id
        and (scope == DeleteScope.SERIES or shift.start_at >= trigger.start_at)
    ]
    if trigger not in selected:
        selected.append(trigger)
    return sorted(selected, key=lambda shift: shift.start_at)


def delete_selection(db: Session, shifts: list[Shift], reminders: ReminderScheduler) -> list[str]:
    """
    Cancel reminders for the selected shifts and delete them in one commit.

    Reminders go first so no reminder outlives its shift. Linked swap
    agreements and fiscal notes are kept.

    Raises:
        StorageError: The deletion could not be committed
    """
    for shift in shifts:
        reminders.cancel_reminders(shift.id)

    recurrence_ids = sorted({shift.recurrence_id for shift in shifts if shift.recurrence_id})
    add_breadcrumb(
        "Deleting shifts",
        category="shifts",
        data={"count": len(shifts), "recurrence_ids": recurrence_ids},
    )

    with LogContext(recurrence_id=",".join(recurrence_ids) or None):
        return delete_shifts(db, shifts)
