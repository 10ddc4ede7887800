import datetime
import enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.constants import DEFAULT_CURRENCY
from app.database.database import (
    AgreementType,
    PaymentFrequency,
    SettlementMethod,
    ShiftStatus,
    SwapDirection,
)


class Settings(BaseModel):
    """User preferences loaded from data/settings.json."""
    owner_name: str = "Me"
    currency: str = DEFAULT_CURRENCY
    timezone: str = "America/Sao_Paulo"
    default_amount: float = 0.0
    default_duration_hours: int = 12
    notifications_enabled: bool = True
    notify_24h_before: bool = True
    notify_on_day: bool = True


class RecurrenceKind(str, enum.Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    SPECIFIC_WEEKDAYS = "specific_weekdays"


class RecurrenceRule(BaseModel):
    """How a draft repeats. Weekdays use datetime.weekday() numbering (0 = Monday)."""
    kind: RecurrenceKind = RecurrenceKind.NONE
    until: datetime.date | None = None
    weekdays: set[Annotated[int, Field(ge=0, le=6)]] = Field(default_factory=set)


class ShiftDraft(BaseModel):
    """Template for one shift or for every instance of a series."""
    location_name: str
    start_at: datetime.datetime
    duration_hours: int = 12
    is_all_day: bool = False
    is_commitment: bool = False
    amount: float = 0.0
    notes: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    hospital_id: str | None = None
    hospital_name: str | None = None


class ShiftCreate(BaseModel):
    draft: ShiftDraft
    recurrence: RecurrenceRule = Field(default_factory=RecurrenceRule)
    confirm_large_series: bool = False


class ShiftImport(BaseModel):
    """A shift record from an older export. Statuses may use the legacy display strings."""
    id: str | None = None
    start_at: datetime.datetime
    duration_hours: int = 12
    is_all_day: bool = False
    location_name: str
    latitude: float | None = None
    longitude: float | None = None
    is_commitment: bool = False
    status: ShiftStatus = ShiftStatus.SCHEDULED
    recurrence_id: str | None = None
    notes: str | None = None
    amount: float = 0.0
    is_paid: bool = False
    swap_value: float = 0.0
    swap_payment_date: datetime.date | None = None
    swap_is_settled: bool = False
    hospital_name: str | None = None
    is_work_done: bool = False

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        if isinstance(value, str):
            return ShiftStatus.parse(value)
        return value


class ShiftRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    start_at: datetime.datetime
    end_at: datetime.datetime
    duration_hours: int
    is_all_day: bool
    location_name: str
    latitude: float | None = None
    longitude: float | None = None
    is_commitment: bool
    status: ShiftStatus
    recurrence_id: str | None = None
    notes: str | None = None
    amount: float
    is_paid: bool
    swap_value: float
    swap_payment_date: datetime.date | None = None
    swap_is_settled: bool
    swap_agreement_id: str | None = None
    fiscal_note_ids: list[str] = Field(default_factory=list)
    hospital_id: str | None = None
    hospital_name: str | None = None
    is_work_done: bool
    net_income: float


class ShiftUpdate(BaseModel):
    """Partial update of the user-editable flags and amounts of a shift."""
    status: ShiftStatus | None = None
    amount: float | None = None
    is_paid: bool | None = None
    swap_value: float | None = None
    swap_payment_date: datetime.date | None = None
    swap_is_settled: bool | None = None
    is_work_done: bool | None = None
    notes: str | None = None


class MonthlyStatistics(BaseModel):
    """Accrual and realized-cash figures for one month."""
    year: int
    month: int
    shift_count: int = 0
    worked_hours: float = 0.0
    hours_to_work: float = 0.0
    planned_hours: float = 0.0
    progress: float = 0.0
    gross_income: float = 0.0
    swap_expenses: float = 0.0
    net_income: float = 0.0
    cash_received: float = 0.0
    cash_paid_out: float = 0.0
    cash_on_hand: float = 0.0
    amount_outstanding: float = 0.0


class PendingItems(BaseModel):
    receivable: list[ShiftRead]
    payable: list[ShiftRead]
    total_receivable: float
    total_payable: float


class SettlementRequest(BaseModel):
    shift_ids: list[str]


class SettlementResult(BaseModel):
    marked_paid: list[str] = Field(default_factory=list)
    marked_settled: list[str] = Field(default_factory=list)
    unknown: list[str] = Field(default_factory=list)

    @property
    def changed_ids(self) -> set[str]:
        return set(self.marked_paid) | set(self.marked_settled)


class SwapCreate(BaseModel):
    shift_id: str
    direction: SwapDirection
    colleague_name: str
    agreed_amount: float | None = None
    agreed_payment_date: datetime.date
    agreement_type: AgreementType = AgreementType.PAID_VALUE
    notes: str | None = None


class SwapSettle(BaseModel):
    method: SettlementMethod = SettlementMethod.PIX


class SwapAgreementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    shift_id: str
    direction: SwapDirection
    your_name: str | None = None
    colleague_name: str
    agreement_type: AgreementType
    agreed_amount: float
    original_shift_value: float
    agreed_payment_date: datetime.date
    is_settled: bool
    effective_payment_date: datetime.datetime | None = None
    payment_method: SettlementMethod | None = None
    notes: str | None = None


class HospitalCreate(BaseModel):
    name: str
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    payment_day_of_month: int | None = Field(default=None, ge=1, le=31)
    pays_on_last_day: bool = False
    custom_interval_days: int | None = Field(default=None, ge=1)
    latency_tolerance_days: int = Field(default=5, ge=0)
    alerts_enabled: bool = True
    last_payment_date: datetime.date | None = None


class HospitalUpdate(BaseModel):
    """Partial update of a payer profile. Unset fields are left alone."""
    name: str | None = None
    payment_frequency: PaymentFrequency | None = None
    payment_day_of_month: int | None = Field(default=None, ge=1, le=31)
    pays_on_last_day: bool | None = None
    custom_interval_days: int | None = Field(default=None, ge=1)
    latency_tolerance_days: int | None = Field(default=None, ge=0)
    alerts_enabled: bool | None = None
    last_payment_date: datetime.date | None = None


class HospitalPayment(BaseModel):
    """A payment received from a hospital."""
    paid_on: datetime.date


class HospitalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    payment_frequency: PaymentFrequency
    payment_day_of_month: int | None = None
    pays_on_last_day: bool
    custom_interval_days: int | None = None
    latency_tolerance_days: int
    average_shift_value: float
    alerts_enabled: bool
    last_payment_date: datetime.date | None = None


class HospitalForecast(BaseModel):
    hospital_id: str
    hospital_name: str
    next_payment_date: datetime.date | None = None
    expected_amount: float = 0.0
    pending_shift_count: int = 0


class FiscalNoteCreate(BaseModel):
    hospital_name: str
    shift_ids: list[str]
    note_number: str | None = None
    total_amount: float | None = None


class FiscalNoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    note_number: str | None = None
    total_amount: float
    hospital_name: str
    linked_shift_ids: list[str]
    is_consolidated: bool
    created_at: datetime.datetime | None = None


class AlertSeverity(str, enum.Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def priority(self) -> int:
        return {"critical": 3, "warning": 2, "info": 1}[self.value]


class AlertType(str, enum.Enum):
    LATE_TRANSFER = "late_transfer"
    TRANSFER_DUE_SOON = "transfer_due_soon"
    PENDING_INVOICES = "pending_invoices"
    LATE_HOSPITAL_PAYMENT = "late_hospital_payment"
    ALL_CLEAR = "all_clear"


class FinancialAlert(BaseModel):
    severity: AlertSeverity
    type: AlertType
    title: str
    message: str
    shift_id: str | None = None
    due_date: datetime.date | None = None


class CalendarDay(BaseModel):
    date: datetime.date
    weekday_name: str
    is_today: bool
    shifts: list[ShiftRead]
