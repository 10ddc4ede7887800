# app/database/database.py
"""
SQLAlchemy database setup and models.

Shifts are the root entity. Swap agreements and fiscal notes point at shifts
by id only (no foreign keys, no cascade): deleting a shift keeps the financial
history that referenced it.
"""

import datetime
import enum
import os
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import (
    DEFAULT_CUSTOM_INTERVAL_DAYS,
    DEFAULT_LATENCY_TOLERANCE_DAYS,
    DEFAULT_PAYMENT_DAY_OF_MONTH,
)
from app.core.constants import DAYS_PER_WEEK, HOURS_PER_DAY, LEGACY_STATUS_STRINGS
from app.core.time_utils import add_months, days_in_month

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./shiftbook.db")

engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def new_id() -> str:
    """Generate a new entity id. Ids are never reused."""
    return str(uuid.uuid4())


def _enum_type(enum_cls):
    """Store enum members by value ("swapped_out"), not by member name."""
    return SQLEnum(enum_cls, values_callable=lambda members: [member.value for member in members])


class ShiftStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    SWAPPED_OUT = "swapped_out"  # I gave my shift to a colleague
    SWAPPED_IN = "swapped_in"  # I took a colleague's shift

    @classmethod
    def parse(cls, raw: str) -> "ShiftStatus":
        """
        Decode a stored status.

        Accepts enum values and the legacy display strings of older exports.
        Anything else raises ValueError instead of falling back to scheduled.
        """
        value = LEGACY_STATUS_STRINGS.get(raw, raw)
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown shift status: {raw!r}") from None


class SwapDirection(str, enum.Enum):
    OUT = "out"
    IN = "in"


class AgreementType(str, enum.Enum):
    PAID_VALUE = "paid_value"
    SHIFT_EXCHANGE = "shift_exchange"


class SettlementMethod(str, enum.Enum):
    PIX = "pix"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    OTHER = "other"


class PaymentFrequency(str, enum.Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class Shift(Base):
    """A work shift or a personal commitment occupying a time interval."""

    __tablename__ = "shifts"

    id = Column(String(36), primary_key=True, default=new_id)
    start_at = Column(DateTime, nullable=False, index=True)
    duration_hours = Column(Integer, nullable=False, default=12)
    is_all_day = Column(Boolean, nullable=False, default=False)
    location_name = Column(String(200), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    is_commitment = Column(Boolean, nullable=False, default=False)
    status = Column(_enum_type(ShiftStatus), nullable=False, default=ShiftStatus.SCHEDULED)
    recurrence_id = Column(String(36), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    # Hospital payment
    amount = Column(Float, nullable=False, default=0.0)
    is_paid = Column(Boolean, nullable=False, default=False)
    hospital_id = Column(String(36), nullable=True)
    hospital_name = Column(String(200), nullable=True)
    fiscal_note_ids = Column(JSON, nullable=False, default=list)

    # Swap with a colleague
    swap_value = Column(Float, nullable=False, default=0.0)
    swap_payment_date = Column(Date, nullable=True)
    swap_is_settled = Column(Boolean, nullable=False, default=False)
    swap_agreement_id = Column(String(36), nullable=True)

    is_work_done = Column(Boolean, nullable=False, default=False)
    calendar_event_id = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    def __init__(self, **kwargs):
        # Column defaults only apply on INSERT; transient shifts fed to the
        # engines need the same values.
        kwargs.setdefault("id", new_id())
        kwargs.setdefault("duration_hours", 12)
        kwargs.setdefault("is_all_day", False)
        kwargs.setdefault("is_commitment", False)
        kwargs.setdefault("status", ShiftStatus.SCHEDULED)
        kwargs.setdefault("amount", 0.0)
        kwargs.setdefault("is_paid", False)
        kwargs.setdefault("fiscal_note_ids", [])
        kwargs.setdefault("swap_value", 0.0)
        kwargs.setdefault("swap_is_settled", False)
        kwargs.setdefault("is_work_done", False)
        super().__init__(**kwargs)

    @property
    def end_at(self) -> datetime.datetime:
        hours = HOURS_PER_DAY if self.is_all_day else self.duration_hours
        return self.start_at + datetime.timedelta(hours=hours)

    @property
    def net_income(self) -> float:
        """Accrual-basis earnings for this shift after swap expenses."""
        if self.is_commitment:
            return 0.0
        if self.status == ShiftStatus.SWAPPED_OUT:
            return self.amount - self.swap_value
        if self.status == ShiftStatus.SWAPPED_IN:
            return self.swap_value
        return self.amount

    @property
    def payer_name(self) -> str:
        return self.hospital_name or self.location_name

    def __repr__(self):
        return f"<Shift(id={self.id}, start_at={self.start_at}, location={self.location_name!r}, status={self.status})>"


class SwapAgreement(Base):
    """Detailed record of a swap and the payment owed between colleagues."""

    __tablename__ = "swap_agreements"

    id = Column(String(36), primary_key=True, default=new_id)
    shift_id = Column(String(36), nullable=False, index=True)
    direction = Column(_enum_type(SwapDirection), nullable=False)
    your_name = Column(String(100), nullable=True)
    colleague_name = Column(String(100), nullable=False)
    agreement_type = Column(_enum_type(AgreementType), nullable=False, default=AgreementType.PAID_VALUE)
    agreed_amount = Column(Float, nullable=False, default=0.0)
    original_shift_value = Column(Float, nullable=False, default=0.0)
    agreed_payment_date = Column(Date, nullable=False)
    is_settled = Column(Boolean, nullable=False, default=False)
    effective_payment_date = Column(DateTime, nullable=True)
    payment_method = Column(_enum_type(SettlementMethod), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    def __init__(self, **kwargs):
        kwargs.setdefault("id", new_id())
        kwargs.setdefault("agreement_type", AgreementType.PAID_VALUE)
        kwargs.setdefault("agreed_amount", 0.0)
        kwargs.setdefault("original_shift_value", 0.0)
        kwargs.setdefault("is_settled", False)
        super().__init__(**kwargs)

    def is_overdue(self, now: datetime.datetime) -> bool:
        """Unsettled and the agreed payment day has passed."""
        return not self.is_settled and self.agreed_payment_date < now.date()

    def days_overdue(self, now: datetime.datetime) -> int:
        return max(0, (now.date() - self.agreed_payment_date).days)

    def days_until_due(self, now: datetime.datetime) -> int:
        return (self.agreed_payment_date - now.date()).days

    def __repr__(self):
        return (
            f"<SwapAgreement(id={self.id}, shift_id={self.shift_id}, direction={self.direction}, "
            f"amount={self.agreed_amount}, settled={self.is_settled})>"
        )


class Hospital(Base):
    """Payer profile used for payment predictions and late-payment alerts."""

    __tablename__ = "hospitals"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False, unique=True, index=True)
    payment_frequency = Column(_enum_type(PaymentFrequency), nullable=False, default=PaymentFrequency.MONTHLY)
    payment_day_of_month = Column(Integer, nullable=True)
    pays_on_last_day = Column(Boolean, nullable=False, default=False)
    custom_interval_days = Column(Integer, nullable=True)
    latency_tolerance_days = Column(Integer, nullable=False, default=DEFAULT_LATENCY_TOLERANCE_DAYS)
    average_shift_value = Column(Float, nullable=False, default=0.0)
    alerts_enabled = Column(Boolean, nullable=False, default=True)
    last_payment_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    def __init__(self, **kwargs):
        kwargs.setdefault("id", new_id())
        kwargs.setdefault("payment_frequency", PaymentFrequency.MONTHLY)
        kwargs.setdefault("pays_on_last_day", False)
        kwargs.setdefault("latency_tolerance_days", DEFAULT_LATENCY_TOLERANCE_DAYS)
        kwargs.setdefault("average_shift_value", 0.0)
        kwargs.setdefault("alerts_enabled", True)
        super().__init__(**kwargs)

    def payment_day_in(self, year: int, month: int) -> datetime.date:
        """Payment day for a month, clamped to the month length."""
        last_day = days_in_month(year, month)
        if self.pays_on_last_day:
            day = last_day
        else:
            day = min(self.payment_day_of_month or DEFAULT_PAYMENT_DAY_OF_MONTH, last_day)
        return datetime.date(year, month, day)

    def next_payment_date(self, now: datetime.datetime) -> datetime.date | None:
        """
        Predict the next expected payment.

        Without a recorded payment the prediction is relative to today. With
        one it is the first scheduled date after that payment, which may lie
        in the past when the hospital is late.
        """
        if self.payment_frequency == PaymentFrequency.MONTHLY:
            if self.last_payment_date is None:
                reference = now.date()
                candidate = self.payment_day_in(reference.year, reference.month)
                if candidate < reference:
                    following = add_months(reference.replace(day=1), 1)
                    candidate = self.payment_day_in(following.year, following.month)
                return candidate

            reference = self.last_payment_date
            candidate = self.payment_day_in(reference.year, reference.month)
            if candidate <= reference:
                following = add_months(reference.replace(day=1), 1)
                candidate = self.payment_day_in(following.year, following.month)
            return candidate

        if self.last_payment_date is None:
            return None

        interval = {
            PaymentFrequency.WEEKLY: DAYS_PER_WEEK,
            PaymentFrequency.BIWEEKLY: 2 * DAYS_PER_WEEK,
        }.get(self.payment_frequency, self.custom_interval_days or DEFAULT_CUSTOM_INTERVAL_DAYS)
        return self.last_payment_date + datetime.timedelta(days=interval)

    def __repr__(self):
        return f"<Hospital(id={self.id}, name={self.name!r}, frequency={self.payment_frequency})>"


class FiscalNote(Base):
    """Invoice issued to a hospital covering one or more shifts."""

    __tablename__ = "fiscal_notes"

    id = Column(String(36), primary_key=True, default=new_id)
    note_number = Column(String(50), nullable=True)
    total_amount = Column(Float, nullable=False, default=0.0)
    hospital_name = Column(String(200), nullable=False)
    file_name = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=False, default=0)
    linked_shift_ids = Column(JSON, nullable=False, default=list)
    is_consolidated = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    def __init__(self, **kwargs):
        kwargs.setdefault("id", new_id())
        kwargs.setdefault("total_amount", 0.0)
        kwargs.setdefault("file_size", 0)
        kwargs.setdefault("linked_shift_ids", [])
        kwargs.setdefault("is_consolidated", len(kwargs["linked_shift_ids"]) > 1)
        super().__init__(**kwargs)

    def __repr__(self):
        return f"<FiscalNote(id={self.id}, hospital={self.hospital_name!r}, total={self.total_amount})>"


def create_tables():
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
