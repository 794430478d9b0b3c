"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from construction_payroll.services.requests import (
    MAX_AMOUNT,
    MAX_QUANTITY,
    AdvanceRequest,
    OfficePayrollRequest,
    PayrollPatch,
    SitePayrollRequest,
)

StatusValue = Literal["Pending", "Processing", "Paid", "On Hold"]


# ============================================================================
# Employee schemas
# ============================================================================


class EmployeeResponse(BaseModel):
    """Schema for an employee directory entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_code: str
    name: str
    position: str
    group: str | None = None
    classification: str
    daily_rate: Decimal
    hourly_rate: Decimal


class EmployeeListResponse(BaseModel):
    items: list[EmployeeResponse]
    total: int


# ============================================================================
# Emergency advance schemas
# ============================================================================


class EmergencyCashAdvanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    amount: Decimal
    remaining_balance: Decimal
    status: str
    created_at: datetime
    updated_at: datetime


class EmergencyDeductionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    cash_advance_id: int
    amount: Decimal
    status: str
    created_at: datetime
    updated_at: datetime


class ActiveAdvanceResponse(BaseModel):
    """Active ECA/ED of an employee, as a payroll form needs it."""

    eca: EmergencyCashAdvanceResponse | None = None
    ed: EmergencyDeductionResponse | None = None
    has_active_eca: bool
    has_active_ed: bool
    auto_cash_advance: Decimal
    is_readonly: bool


class AdvanceHistoryItem(BaseModel):
    eca: EmergencyCashAdvanceResponse
    ed: EmergencyDeductionResponse | None = None


class AdvanceHistoryResponse(BaseModel):
    employee_id: int
    items: list[AdvanceHistoryItem]


# ============================================================================
# Payroll request schemas
# ============================================================================


class DailyAttendance(BaseModel):
    model_config = ConfigDict(extra="forbid")

    monday: bool | None = None
    tuesday: bool | None = None
    wednesday: bool | None = None
    thursday: bool | None = None
    friday: bool | None = None
    saturday: bool | None = None


class DailyAmounts(BaseModel):
    """Per-day overtime hours or late minutes."""

    model_config = ConfigDict(extra="forbid")

    monday: Decimal | None = Field(default=None, ge=0, le=MAX_QUANTITY)
    tuesday: Decimal | None = Field(default=None, ge=0, le=MAX_QUANTITY)
    wednesday: Decimal | None = Field(default=None, ge=0, le=MAX_QUANTITY)
    thursday: Decimal | None = Field(default=None, ge=0, le=MAX_QUANTITY)
    friday: Decimal | None = Field(default=None, ge=0, le=MAX_QUANTITY)
    saturday: Decimal | None = Field(default=None, ge=0, le=MAX_QUANTITY)


class DailySiteAddress(BaseModel):
    model_config = ConfigDict(extra="forbid")

    monday: str | None = None
    tuesday: str | None = None
    wednesday: str | None = None
    thursday: str | None = None
    friday: str | None = None
    saturday: str | None = None


class _PayrollCreateBase(BaseModel):
    employee_id: int
    pay_period_start: date
    pay_period_end: date
    cash_advance: Decimal = Field(ge=0, le=MAX_AMOUNT)
    others_deduction: Decimal = Field(ge=0, le=MAX_AMOUNT)
    emergency_cash_advance: Decimal | None = Field(default=None, ge=0, le=MAX_AMOUNT)
    emergency_deduction: Decimal | None = Field(default=None, ge=0, le=MAX_AMOUNT)

    @model_validator(mode="after")
    def check_period(self):
        if self.pay_period_end < self.pay_period_start:
            raise ValueError("pay_period_end must be on or after pay_period_start")
        return self

    def _advance(self) -> AdvanceRequest:
        return AdvanceRequest(
            emergency_cash_advance=self.emergency_cash_advance,
            emergency_deduction=self.emergency_deduction,
        )


def _days(model: BaseModel | None) -> dict[str, Any] | None:
    if model is None:
        return None
    return model.model_dump(exclude_none=True)


class SitePayrollCreate(_PayrollCreateBase):
    """Schema for submitting a site payroll run."""

    working_days: int = Field(ge=0, le=7)
    overtime_hours: Decimal = Field(ge=0, le=MAX_QUANTITY)
    late_minutes: Decimal = Field(ge=0, le=MAX_QUANTITY)
    daily_attendance: DailyAttendance | None = None
    daily_overtime: DailyAmounts | None = None
    daily_late: DailyAmounts | None = None
    daily_site_address: DailySiteAddress | None = None

    def to_request(self) -> SitePayrollRequest:
        return SitePayrollRequest(
            employee_id=self.employee_id,
            pay_period_start=self.pay_period_start,
            pay_period_end=self.pay_period_end,
            working_days=self.working_days,
            overtime_hours=self.overtime_hours,
            late_minutes=self.late_minutes,
            cash_advance=self.cash_advance,
            others_deduction=self.others_deduction,
            daily_attendance=_days(self.daily_attendance),
            daily_overtime=_days(self.daily_overtime),
            daily_late=_days(self.daily_late),
            daily_site_address=_days(self.daily_site_address),
            advance=self._advance(),
        )


class OfficePayrollCreate(_PayrollCreateBase):
    """Schema for submitting an office payroll run."""

    total_working_days: int = Field(ge=0, le=31)
    total_late_minutes: Decimal = Field(ge=0, le=MAX_QUANTITY)
    total_overtime_hours: Decimal = Field(ge=0, le=MAX_QUANTITY)

    def to_request(self) -> OfficePayrollRequest:
        return OfficePayrollRequest(
            employee_id=self.employee_id,
            pay_period_start=self.pay_period_start,
            pay_period_end=self.pay_period_end,
            total_working_days=self.total_working_days,
            total_late_minutes=self.total_late_minutes,
            total_overtime_hours=self.total_overtime_hours,
            cash_advance=self.cash_advance,
            others_deduction=self.others_deduction,
            advance=self._advance(),
        )


class PayrollUpdate(BaseModel):
    """Partial update: status and/or deductions."""

    status: StatusValue | None = None
    cash_advance: Decimal | None = Field(default=None, ge=0, le=MAX_AMOUNT)
    others_deduction: Decimal | None = Field(default=None, ge=0, le=MAX_AMOUNT)

    def to_patch(self) -> PayrollPatch:
        return PayrollPatch(
            status=self.status,
            cash_advance=self.cash_advance,
            others_deduction=self.others_deduction,
        )


class StatusUpdate(BaseModel):
    status: StatusValue


# ============================================================================
# Payroll response schemas
# ============================================================================


class _PayrollResponseBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    employee_name: str
    employee_code: str
    position: str
    pay_period_start: date
    pay_period_end: date
    daily_rate: Decimal
    hourly_rate: Decimal
    basic_salary: Decimal
    overtime_pay: Decimal
    late_deduction: Decimal
    cash_advance: Decimal
    others_deduction: Decimal
    gross_pay: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    status: str
    created_at: datetime
    updated_at: datetime


class SitePayrollResponse(_PayrollResponseBase):
    payroll_type: str
    working_days: int
    overtime_hours: Decimal
    late_minutes: Decimal
    daily_attendance: dict[str, bool]
    daily_overtime: dict[str, Decimal]
    daily_late: dict[str, Decimal]
    daily_site_address: dict[str, str]


class OfficePayrollResponse(_PayrollResponseBase):
    employee_group: str | None = None
    total_working_days: int
    total_late_minutes: Decimal
    total_overtime_hours: Decimal


class SitePayrollListResponse(BaseModel):
    items: list[SitePayrollResponse]
    total: int


class OfficePayrollListResponse(BaseModel):
    items: list[OfficePayrollResponse]
    total: int


class AttendanceDayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    day: str
    present: bool
    overtime: str
    late: str
    site_address: str


class AttendanceDetailsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_info: dict[str, Any]
    attendance_data: list[AttendanceDayResponse]
    summary: dict[str, Any]


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None
