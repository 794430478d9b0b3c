"""Payroll run requests as seen by the workflows.

The HTTP layer parses payloads into these once; the workflows validate them
again before any ledger access so that non-HTTP callers get the same checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from construction_payroll.calculators.types import WEEKDAYS, WeeklyTimesheet
from construction_payroll.errors import ValidationError
from construction_payroll.models.payroll import PayrollStatus

ZERO = Decimal("0")

# Largest values the record columns hold: Numeric(10, 2) for money,
# Numeric(8, 2) for hours and minutes.
MAX_AMOUNT = Decimal("99999999.99")
MAX_QUANTITY = Decimal("999999.99")


def to_decimal(value: Any, field_name: str) -> Decimal:
    """Parse a numeric input strictly, rejecting booleans and non-numbers."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be a finite number", field=field_name)
    return result


def require_non_negative(
    value: Any, field_name: str, maximum: Decimal = MAX_AMOUNT
) -> Decimal:
    result = to_decimal(value, field_name)
    if result < ZERO:
        raise ValidationError(f"{field_name} must be at least 0", field=field_name)
    if result > maximum:
        raise ValidationError(f"{field_name} must be at most {maximum}", field=field_name)
    return result


def require_int_range(value: Any, field_name: str, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer", field=field_name)
    if not low <= value <= high:
        raise ValidationError(
            f"{field_name} must be between {low} and {high}", field=field_name
        )
    return value


def _check_period(start: date | None, end: date | None) -> None:
    if start is None:
        raise ValidationError("pay_period_start is required", field="pay_period_start")
    if end is None:
        raise ValidationError("pay_period_end is required", field="pay_period_end")
    if end < start:
        raise ValidationError(
            "pay_period_end must be on or after pay_period_start", field="pay_period_end"
        )


def _check_daily_keys(name: str, mapping: dict[str, Any] | None) -> None:
    if not mapping:
        return
    allowed = {d.value for d in WEEKDAYS}
    unknown = sorted(set(mapping) - allowed)
    if unknown:
        raise ValidationError(
            f"{name} has unknown day(s): {', '.join(unknown)}", field=name
        )


@dataclass
class AdvanceRequest:
    """Optional ECA/ED pair to open during a run."""

    emergency_cash_advance: Decimal | None = None
    emergency_deduction: Decimal | None = None

    @property
    def opens_pair(self) -> bool:
        return bool(self.emergency_cash_advance) and bool(self.emergency_deduction)

    def validate(self) -> None:
        eca = self.emergency_cash_advance
        ed = self.emergency_deduction
        if eca is not None:
            self.emergency_cash_advance = require_non_negative(eca, "emergency_cash_advance")
        if ed is not None:
            self.emergency_deduction = require_non_negative(ed, "emergency_deduction")
        # A lone amount cannot open a pair: the ECA and ED are created together.
        if bool(self.emergency_cash_advance) != bool(self.emergency_deduction):
            missing = "emergency_deduction" if self.emergency_cash_advance else "emergency_cash_advance"
            raise ValidationError(
                "emergency_cash_advance and emergency_deduction must be provided together",
                field=missing,
            )


@dataclass
class SitePayrollRequest:
    """Site payroll submission."""

    employee_id: int
    pay_period_start: date
    pay_period_end: date
    working_days: int = 0
    overtime_hours: Decimal = ZERO
    late_minutes: Decimal = ZERO
    cash_advance: Decimal = ZERO
    others_deduction: Decimal = ZERO
    daily_attendance: dict[str, bool] | None = None
    daily_overtime: dict[str, Decimal] | None = None
    daily_late: dict[str, Decimal] | None = None
    daily_site_address: dict[str, str] | None = None
    advance: AdvanceRequest = field(default_factory=AdvanceRequest)

    @property
    def has_daily_breakdown(self) -> bool:
        return any(
            m is not None
            for m in (
                self.daily_attendance,
                self.daily_overtime,
                self.daily_late,
                self.daily_site_address,
            )
        )

    def validate(self) -> None:
        _check_period(self.pay_period_start, self.pay_period_end)
        self.working_days = require_int_range(self.working_days, "working_days", 0, 7)
        self.overtime_hours = require_non_negative(
            self.overtime_hours, "overtime_hours", MAX_QUANTITY
        )
        self.late_minutes = require_non_negative(self.late_minutes, "late_minutes", MAX_QUANTITY)
        self.cash_advance = require_non_negative(self.cash_advance, "cash_advance")
        self.others_deduction = require_non_negative(self.others_deduction, "others_deduction")

        for name in ("daily_attendance", "daily_overtime", "daily_late", "daily_site_address"):
            _check_daily_keys(name, getattr(self, name))
        if self.daily_attendance:
            for day, present in self.daily_attendance.items():
                if present is not None and not isinstance(present, bool):
                    raise ValidationError(
                        f"daily_attendance.{day} must be true or false",
                        field=f"daily_attendance.{day}",
                    )
        if self.daily_site_address:
            for day, address in self.daily_site_address.items():
                if address is not None and not isinstance(address, str):
                    raise ValidationError(
                        f"daily_site_address.{day} must be text",
                        field=f"daily_site_address.{day}",
                    )
        if self.daily_overtime:
            self.daily_overtime = {
                day: require_non_negative(v or 0, f"daily_overtime.{day}", MAX_QUANTITY)
                for day, v in self.daily_overtime.items()
            }
        if self.daily_late:
            self.daily_late = {
                day: require_non_negative(v or 0, f"daily_late.{day}", MAX_QUANTITY)
                for day, v in self.daily_late.items()
            }

        # The weekly totals are stored too, so they share the per-field limit.
        timesheet = self.timesheet()
        if timesheet.total_overtime_hours > MAX_QUANTITY:
            raise ValidationError(
                f"daily_overtime must total at most {MAX_QUANTITY}", field="daily_overtime"
            )
        if timesheet.total_late_minutes > MAX_QUANTITY:
            raise ValidationError(
                f"daily_late must total at most {MAX_QUANTITY}", field="daily_late"
            )
        self.advance.validate()

    def timesheet(self) -> WeeklyTimesheet:
        return WeeklyTimesheet.from_maps(
            attendance=self.daily_attendance,
            overtime=self.daily_overtime,
            late=self.daily_late,
            site_address=self.daily_site_address,
        )


@dataclass
class OfficePayrollRequest:
    """Office payroll submission."""

    employee_id: int
    pay_period_start: date
    pay_period_end: date
    total_working_days: int = 0
    total_late_minutes: Decimal = ZERO
    total_overtime_hours: Decimal = ZERO
    cash_advance: Decimal = ZERO
    others_deduction: Decimal = ZERO
    advance: AdvanceRequest = field(default_factory=AdvanceRequest)

    def validate(self) -> None:
        _check_period(self.pay_period_start, self.pay_period_end)
        self.total_working_days = require_int_range(
            self.total_working_days, "total_working_days", 0, 31
        )
        self.total_late_minutes = require_non_negative(
            self.total_late_minutes, "total_late_minutes", MAX_QUANTITY
        )
        self.total_overtime_hours = require_non_negative(
            self.total_overtime_hours, "total_overtime_hours", MAX_QUANTITY
        )
        self.cash_advance = require_non_negative(self.cash_advance, "cash_advance")
        self.others_deduction = require_non_negative(self.others_deduction, "others_deduction")
        self.advance.validate()


@dataclass
class PayrollPatch:
    """Partial update of a stored record. None means "leave unchanged"."""

    status: str | None = None
    cash_advance: Decimal | None = None
    others_deduction: Decimal | None = None

    @property
    def changes_deductions(self) -> bool:
        return self.cash_advance is not None or self.others_deduction is not None

    def validate(self) -> None:
        if self.status is not None:
            allowed = [s.value for s in PayrollStatus]
            if self.status not in allowed:
                raise ValidationError(
                    f"status must be one of: {', '.join(allowed)}", field="status"
                )
        if self.cash_advance is not None:
            self.cash_advance = require_non_negative(self.cash_advance, "cash_advance")
        if self.others_deduction is not None:
            self.others_deduction = require_non_negative(
                self.others_deduction, "others_deduction"
            )
