# app\core\utils.py
import datetime

from app.core.time_utils import add_months


def get_now() -> datetime.datetime:
    """
    Current naive local time, truncated to whole seconds.

    Routes take ``now`` from this dependency so tests can pin the clock.
    """
    return datetime.datetime.now().replace(microsecond=0)


def month_navigation(year: int, month: int) -> dict[str, int]:
    """Year and month of the neighbouring months, for prev/next links in the calendar view."""
    first = datetime.date(year, month, 1)
    previous = add_months(first, -1)
    following = add_months(first, 1)
    return {
        "prev_year": previous.year,
        "prev_month": previous.month,
        "next_year": following.year,
        "next_month": following.month,
    }
