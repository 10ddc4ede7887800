# app/core/config.py

from typing import Final


# ==========================
# Recurrence
# ==========================

#: Estimated series size above which creation needs an explicit confirmation.
#: The value 100 matches the warning threshold users already know from the app.
RECURRENCE_VOLUME_WARNING_THRESHOLD: Final[int] = 100

#: Day counts used by the rough recurrence estimate.
#: Monthly series are approximated as one instance per 30 days.
ESTIMATE_DAYS_PER_WEEK: Final[int] = 7
ESTIMATE_DAYS_PER_FORTNIGHT: Final[int] = 14
ESTIMATE_DAYS_PER_MONTH: Final[int] = 30


# ==========================
# Financial alerts
# ==========================

#: An unsettled swap transfer older than this many days raises a critical alert.
LATE_TRANSFER_DAYS: Final[int] = 7

#: A swap transfer due within this many days (inclusive) raises a warning.
TRANSFER_DUE_SOON_DAYS: Final[int] = 2

#: Number of uninvoiced past shifts that triggers the "pending invoices" warning.
PENDING_INVOICES_MIN_COUNT: Final[int] = 3


# ==========================
# Hospitals (payers)
# ==========================

#: Default latency tolerance for a hospital payment, in days.
DEFAULT_LATENCY_TOLERANCE_DAYS: Final[int] = 5

#: Default payment day of month for new hospital profiles.
DEFAULT_PAYMENT_DAY_OF_MONTH: Final[int] = 5

#: Interval used for "custom" payment frequencies when none is configured.
DEFAULT_CUSTOM_INTERVAL_DAYS: Final[int] = 30


# ==========================
# Reminders
# ==========================

#: Hours before the shift start for the "tomorrow" reminder.
REMINDER_DAY_BEFORE_HOURS: Final[int] = 24

#: Hours before the shift start for the "starting soon" reminder.
#: Not used for all-day entries (they start at midnight).
REMINDER_SOON_HOURS: Final[int] = 2

