"""Office payroll workflow: monthly aggregate totals."""

from __future__ import annotations

from construction_payroll.models import (
    Classification,
    Employee,
    OfficePayroll,
    PayrollStatus,
)
from construction_payroll.services.payroll_workflow import PayrollWorkflow
from construction_payroll.services.requests import OfficePayrollRequest


class OfficePayrollWorkflow(PayrollWorkflow[OfficePayroll]):
    """Processes payroll for Office employees."""

    classification = Classification.OFFICE.value
    record_model = OfficePayroll

    async def process_payroll(self, request: OfficePayrollRequest) -> OfficePayroll:
        """Run payroll for one office employee and persist a Pending record.

        Raises:
            ValidationError: Invalid input or employee is not an Office employee
            NotFoundError: Employee does not exist
            ConflictError: A new ECA/ED pair was requested while one is active
            PersistenceFault: The store failed; nothing was written
        """
        request.validate()
        employee = await self._load_employee(request.employee_id)

        return await self._run(
            employee, request, lambda: self._build_record(employee, request)
        )

    def _build_record(
        self, employee: Employee, request: OfficePayrollRequest
    ) -> OfficePayroll:
        breakdown = self.calculator.calculate_office(
            self._rates(employee),
            total_working_days=request.total_working_days,
            total_late_minutes=request.total_late_minutes,
            total_overtime_hours=request.total_overtime_hours,
            cash_advance=request.cash_advance,
            others_deduction=request.others_deduction,
        )

        return OfficePayroll(
            employee_id=employee.id,
            employee_name=employee.name,
            employee_group=employee.group,
            employee_code=employee.employee_code,
            position=employee.position,
            pay_period_start=request.pay_period_start,
            pay_period_end=request.pay_period_end,
            daily_rate=employee.daily_rate,
            hourly_rate=employee.hourly_rate,
            total_working_days=request.total_working_days,
            total_late_minutes=request.total_late_minutes,
            total_overtime_hours=request.total_overtime_hours,
            cash_advance=request.cash_advance,
            others_deduction=request.others_deduction,
            status=PayrollStatus.PENDING.value,
            **breakdown.as_dict(),
        )
