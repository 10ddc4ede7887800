# app/core/constants.py
from typing import Final

# ==========================
# Week structure / dates
# ==========================

#: Days per week. Used in loops instead of a literal 7.
DAYS_PER_WEEK: Final[int] = 7

#: Hours per day. All-day entries are stored with this duration.
HOURS_PER_DAY: Final[int] = 24

#: Seconds per day. Used for elapsed-day arithmetic.
SECONDS_PER_DAY: Final[int] = 86400

#: English weekday names, indexed like datetime.weekday().
WEEKDAY_NAMES: Final[tuple[str, ...]] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


# ==========================
# Shifts
# ==========================

#: Shortest allowed duration for a shift that is not all-day.
MIN_DURATION_HOURS: Final[int] = 1


# ==========================
# Legacy status strings
# ==========================

#: Display strings used as raw status values by older exports.
#: Only accepted when importing; new records store the enum value.
LEGACY_STATUS_STRINGS: Final[dict[str, str]] = {
    "Agendado": "scheduled",
    "Realizado": "completed",
    "Troquei (Saí)": "swapped_out",
    "Troquei (Entrei)": "swapped_in",
}


# ==========================
# Presentation
# ==========================

#: Default currency code used when no settings file overrides it.
DEFAULT_CURRENCY: Final[str] = "BRL"
