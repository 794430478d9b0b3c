"""Site payroll workflow: daily attendance, overtime and lateness per weekday."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from construction_payroll.calculators.types import WeeklyTimesheet
from construction_payroll.models import (
    Classification,
    Employee,
    PayrollStatus,
    PayrollType,
    SitePayroll,
)
from construction_payroll.services.payroll_workflow import PayrollWorkflow
from construction_payroll.services.requests import SitePayrollRequest


@dataclass(frozen=True)
class AttendanceDay:
    day: str
    present: bool
    overtime: str
    late: str
    site_address: str


@dataclass(frozen=True)
class AttendanceDetails:
    """Per-day breakdown of a stored site payroll record."""

    employee_info: dict[str, Any]
    attendance_data: list[AttendanceDay]
    summary: dict[str, Any]


class SitePayrollWorkflow(PayrollWorkflow[SitePayroll]):
    """Processes payroll for Site employees."""

    classification = Classification.SITE.value
    record_model = SitePayroll

    async def process_payroll(self, request: SitePayrollRequest) -> SitePayroll:
        """Run payroll for one site employee and persist a Pending record.

        Raises:
            ValidationError: Invalid input or employee is not a Site employee
            NotFoundError: Employee does not exist
            ConflictError: A new ECA/ED pair was requested while one is active
            PersistenceFault: The store failed; nothing was written
        """
        request.validate()
        employee = await self._load_employee(request.employee_id)

        return await self._run(
            employee, request, lambda: self._build_record(employee, request)
        )

    def _build_record(self, employee: Employee, request: SitePayrollRequest) -> SitePayroll:
        timesheet = request.timesheet()
        rates = self._rates(employee)

        if request.has_daily_breakdown:
            breakdown = self.calculator.calculate_site(
                rates,
                timesheet,
                cash_advance=request.cash_advance,
                others_deduction=request.others_deduction,
            )
            working_days = timesheet.days_present
            overtime_hours = timesheet.total_overtime_hours
            late_minutes = timesheet.total_late_minutes
        else:
            # No per-day data submitted: fall back to the weekly totals.
            working_days = request.working_days
            overtime_hours = request.overtime_hours
            late_minutes = request.late_minutes
            breakdown = self.calculator.calculate_totals(
                rates,
                working_days=working_days,
                overtime_hours=overtime_hours,
                late_minutes=late_minutes,
                cash_advance=request.cash_advance,
                others_deduction=request.others_deduction,
            )

        return SitePayroll(
            employee_id=employee.id,
            employee_name=employee.name,
            employee_code=employee.employee_code,
            position=employee.position,
            payroll_type=PayrollType.SITE.value,
            pay_period_start=request.pay_period_start,
            pay_period_end=request.pay_period_end,
            daily_rate=employee.daily_rate,
            hourly_rate=employee.hourly_rate,
            working_days=working_days,
            overtime_hours=overtime_hours,
            late_minutes=late_minutes,
            cash_advance=request.cash_advance,
            others_deduction=request.others_deduction,
            status=PayrollStatus.PENDING.value,
            **timesheet.to_documents(),
            **breakdown.as_dict(),
        )

    async def attendance_details(self, record_id: int) -> AttendanceDetails:
        """Employee info, one row per weekday, and a summary for a record."""
        record = await self.store.get(record_id)
        timesheet = timesheet_from_record(record)

        rows = [
            AttendanceDay(
                day=day.value.capitalize(),
                present=entry.present,
                overtime=_plain(entry.overtime_hours),
                late=_plain(entry.late_minutes),
                site_address=entry.site_address,
            )
            for day, entry in timesheet.items()
        ]
        return AttendanceDetails(
            employee_info={
                "id": record.employee_id,
                "name": record.employee_name,
                "employee_id": record.employee_code,
                "position": record.position,
                "department": record.payroll_type,
                "pay_period": f"{record.pay_period_start} to {record.pay_period_end}",
            },
            attendance_data=rows,
            summary={
                "days_present": timesheet.days_present,
                "total_overtime": timesheet.total_overtime_hours,
                "total_late": timesheet.total_late_minutes,
                "net_pay": record.net_pay,
            },
        )


def timesheet_from_record(record: SitePayroll) -> WeeklyTimesheet:
    """Rebuild the weekly timesheet from a record's stored JSON documents."""
    return WeeklyTimesheet.from_maps(
        attendance=record.daily_attendance,
        overtime=record.daily_overtime,
        late=record.daily_late,
        site_address=record.daily_site_address,
    )


def _plain(value: Decimal) -> str:
    """Render 2.00 as "2" and 1.50 as "1.5"."""
    return format(value.normalize(), "f")
