"""Financial alerts derived from shifts, swap agreements and hospitals."""

import datetime
from collections.abc import Iterable

from app.core.config import LATE_TRANSFER_DAYS, PENDING_INVOICES_MIN_COUNT, TRANSFER_DUE_SOON_DAYS
from app.core.models import AlertSeverity, AlertType, FinancialAlert
from app.core.time_utils import whole_days_between
from app.database.database import Hospital, Shift, SwapAgreement


def _agreement_alert(agreement: SwapAgreement, now: datetime.datetime) -> FinancialAlert | None:
    if agreement.is_overdue(now) and agreement.days_overdue(now) > LATE_TRANSFER_DAYS:
        days = agreement.days_overdue(now)
        return FinancialAlert(
            severity=AlertSeverity.CRITICAL,
            type=AlertType.LATE_TRANSFER,
            title="Late transfer",
            message=f"{agreement.colleague_name} • {days} days overdue",
            shift_id=agreement.shift_id,
            due_date=agreement.agreed_payment_date,
        )

    days_left = agreement.days_until_due(now)
    if 0 <= days_left <= TRANSFER_DUE_SOON_DAYS:
        return FinancialAlert(
            severity=AlertSeverity.WARNING,
            type=AlertType.TRANSFER_DUE_SOON,
            title="Transfer due soon",
            message=f"{agreement.colleague_name} • due in {days_left} day(s)",
            shift_id=agreement.shift_id,
            due_date=agreement.agreed_payment_date,
        )
    return None


def _needs_invoice(shift: Shift, now: datetime.datetime) -> bool:
    return not shift.is_commitment and not shift.is_paid and not shift.fiscal_note_ids and shift.start_at < now


def _hospital_alert(hospital: Hospital, now: datetime.datetime) -> FinancialAlert | None:
    next_date = hospital.next_payment_date(now)
    if next_date is None:
        return None

    days_late = whole_days_between(datetime.datetime.combine(next_date, datetime.time()), now)
    if days_late <= hospital.latency_tolerance_days:
        return None

    return FinancialAlert(
        severity=AlertSeverity.CRITICAL,
        type=AlertType.LATE_HOSPITAL_PAYMENT,
        title="Late payment",
        message=f"{hospital.name} • {days_late} days",
        due_date=next_date,
    )


def derive_alerts(
    shifts: Iterable[Shift],
    agreements: Iterable[SwapAgreement],
    hospitals: Iterable[Hospital],
    now: datetime.datetime,
) -> list[FinancialAlert]:
    """
    Build the alert list for the finance overview.

    Returns:
        Alerts ordered critical, warning, info. Never empty: with nothing to
        report a single informational all-clear alert is returned.
    """
    alerts: list[FinancialAlert] = []

    for agreement in agreements:
        if agreement.is_settled:
            continue
        alert = _agreement_alert(agreement, now)
        if alert is not None:
            alerts.append(alert)

    without_invoice = sum(1 for shift in shifts if _needs_invoice(shift, now))
    if without_invoice >= PENDING_INVOICES_MIN_COUNT:
        alerts.append(
            FinancialAlert(
                severity=AlertSeverity.WARNING,
                type=AlertType.PENDING_INVOICES,
                title="Pending invoices",
                message=f"{without_invoice} shifts without a fiscal note",
            )
        )

    for hospital in hospitals:
        if not hospital.alerts_enabled:
            continue
        alert = _hospital_alert(hospital, now)
        if alert is not None:
            alerts.append(alert)

    if not alerts:
        alerts.append(
            FinancialAlert(
                severity=AlertSeverity.INFO,
                type=AlertType.ALL_CLEAR,
                title="No critical alerts",
                message="Everything is up to date.",
            )
        )

    # sorted() is stable, so equal severities keep their discovery order
    return sorted(alerts, key=lambda alert: alert.severity.priority, reverse=True)
