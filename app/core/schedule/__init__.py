"""
Schedule module - shift series, finance and alerts.

Re-exports the public functions of the submodules.
"""

from .agenda import agenda_shifts, history_shifts, month_overview, upcoming_shifts
from .alerts import derive_alerts
from .finance import (
    average_shift_value,
    forecast_hospital_payments,
    is_payable,
    is_receivable,
    pending_items,
    receivable_amount,
    settle_shifts,
    summarize_month,
)
from .invoices import InvoiceError, create_fiscal_note, invoiceable_shifts
from .recurrence import estimate_occurrences, expand_recurrence, plan_series
from .series import DeleteScope, delete_selection, select_for_deletion
from .swaps import (
    SwapError,
    change_status,
    mirror_settlement,
    mirror_swap_terms,
    register_swap,
    settle_agreement,
)

__all__ = [
    # recurrence
    "expand_recurrence",
    "estimate_occurrences",
    "plan_series",
    # series
    "DeleteScope",
    "select_for_deletion",
    "delete_selection",
    # finance
    "summarize_month",
    "is_receivable",
    "is_payable",
    "receivable_amount",
    "pending_items",
    "settle_shifts",
    "average_shift_value",
    "forecast_hospital_payments",
    # alerts
    "derive_alerts",
    # swaps
    "SwapError",
    "change_status",
    "register_swap",
    "settle_agreement",
    "mirror_settlement",
    "mirror_swap_terms",
    # invoices
    "InvoiceError",
    "invoiceable_shifts",
    "create_fiscal_note",
    # agenda
    "month_overview",
    "upcoming_shifts",
    "agenda_shifts",
    "history_shifts",
]
