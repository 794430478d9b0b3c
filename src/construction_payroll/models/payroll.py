"""Site and office payroll record models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import JSON, CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from construction_payroll.models.base import Base, TimestampMixin

# JSONB on Postgres, plain JSON elsewhere (tests run on SQLite).
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class PayrollStatus(str, Enum):
    """Payroll record status. Any status may follow any other."""

    PENDING = "Pending"
    PROCESSING = "Processing"
    PAID = "Paid"
    ON_HOLD = "On Hold"


class PayrollType(str, Enum):
    SITE = "Site"
    OFFICE = "Office"


_STATUS_CHECK = "status IN ('Pending', 'Processing', 'Paid', 'On Hold')"


class PayrollRecordMixin:
    """Columns shared by site and office payroll records."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Employee snapshot at the time of the run
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    employee_code: Mapped[str] = mapped_column(String(50), nullable=False)
    position: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    pay_period_start: Mapped[date] = mapped_column(Date, nullable=False)
    pay_period_end: Mapped[date] = mapped_column(Date, nullable=False)

    daily_rate: Mapped[Decimal] = mapped_column(nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(nullable=False)

    # Computed amounts
    basic_salary: Mapped[Decimal] = mapped_column(nullable=False)
    overtime_pay: Mapped[Decimal] = mapped_column(nullable=False)
    late_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    gross_pay: Mapped[Decimal] = mapped_column(nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(nullable=False)

    # Deductions entered for this run
    cash_advance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    others_deduction: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PayrollStatus.PENDING.value
    )


class SitePayroll(PayrollRecordMixin, Base, TimestampMixin):
    """Payroll record for a site worker, with a Monday-Saturday breakdown."""

    __tablename__ = "payrolls"

    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payroll_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PayrollType.SITE.value
    )
    working_days: Mapped[int] = mapped_column(Integer, nullable=False)
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    late_minutes: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)

    # Per-day documents keyed by weekday name (monday..saturday)
    daily_attendance: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    daily_overtime: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    daily_late: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    daily_site_address: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)

    __table_args__ = (
        CheckConstraint(_STATUS_CHECK, name="payroll_status_check"),
        CheckConstraint("pay_period_end >= pay_period_start", name="payroll_period_check"),
        CheckConstraint(
            "working_days >= 0 AND working_days <= 7", name="payroll_working_days_check"
        ),
        Index("payroll_period_idx", "pay_period_start", "pay_period_end"),
    )


class OfficePayroll(PayrollRecordMixin, Base, TimestampMixin):
    """Payroll record for an office worker, computed from monthly totals."""

    __tablename__ = "office_payrolls"

    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_group: Mapped[str | None] = mapped_column(String(255), nullable=True)
    total_working_days: Mapped[int] = mapped_column(Integer, nullable=False)
    total_late_minutes: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    total_overtime_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)

    __table_args__ = (
        CheckConstraint(_STATUS_CHECK, name="office_payroll_status_check"),
        CheckConstraint(
            "pay_period_end >= pay_period_start", name="office_payroll_period_check"
        ),
        CheckConstraint(
            "total_working_days >= 0 AND total_working_days <= 31",
            name="office_payroll_working_days_check",
        ),
        Index("office_payroll_period_idx", "pay_period_start", "pay_period_end"),
    )
