"""Tests for the site payroll workflow."""

from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from construction_payroll.errors import (
    ConflictError,
    NotFoundError,
    PersistenceFault,
    ValidationError,
)
from construction_payroll.models import EmergencyCashAdvance, Employee, SitePayroll
from construction_payroll.services import (
    AdvanceRequest,
    EmergencyAdvanceLedger,
    EmployeeLocks,
    PayrollPatch,
    SitePayrollRequest,
    SitePayrollWorkflow,
)

WEEK = {
    "monday": True,
    "tuesday": True,
    "wednesday": True,
    "thursday": True,
    "friday": True,
    "saturday": False,
}


def site_request(employee_id: int, **overrides) -> SitePayrollRequest:
    values = dict(
        employee_id=employee_id,
        pay_period_start=date(2026, 3, 2),
        pay_period_end=date(2026, 3, 7),
        cash_advance=Decimal("200"),
        others_deduction=Decimal("0"),
        daily_attendance=dict(WEEK),
        daily_overtime={"monday": Decimal("2")},
        daily_late={"tuesday": Decimal("30")},
        daily_site_address={"monday": "Lot 4, Riverside"},
    )
    values.update(overrides)
    return SitePayrollRequest(**values)


@pytest.fixture
def workflow(session: AsyncSession, calculator, locks: EmployeeLocks) -> SitePayrollWorkflow:
    return SitePayrollWorkflow(session, calculator=calculator, locks=locks)


async def count_rows(session: AsyncSession, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


class TestProcessPayroll:
    """Test running site payroll."""

    async def test_weekly_run_is_stored_pending(
        self, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        record = await workflow.process_payroll(site_request(site_employee.id))

        assert record.id is not None
        assert record.status == "Pending"
        assert record.payroll_type == "Site"
        assert record.working_days == 5
        assert record.basic_salary == Decimal("2500.00")
        assert record.overtime_pay == Decimal("125.00")
        assert record.late_deduction == Decimal("31.25")
        assert record.gross_pay == Decimal("2625.00")
        assert record.total_deductions == Decimal("231.25")
        assert record.net_pay == Decimal("2393.75")
        assert record.employee_name == site_employee.name
        assert record.employee_code == site_employee.employee_code
        assert record.daily_attendance["saturday"] is False
        assert record.daily_site_address["monday"] == "Lot 4, Riverside"

    async def test_read_after_write(
        self, session_factory, calculator, locks, site_employee: Employee
    ):
        """A record read in a new session matches what the run returned."""
        async with session_factory() as session:
            created = await SitePayrollWorkflow(
                session, calculator=calculator, locks=locks
            ).process_payroll(site_request(site_employee.id))

        async with session_factory() as session:
            stored = await SitePayrollWorkflow(session, calculator=calculator).get_record(
                created.id
            )

        assert stored.net_pay == created.net_pay
        assert stored.gross_pay == created.gross_pay
        assert stored.total_deductions == created.total_deductions
        assert stored.daily_attendance == created.daily_attendance

    async def test_aggregate_totals_without_daily_maps(
        self, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        record = await workflow.process_payroll(
            site_request(
                site_employee.id,
                working_days=6,
                overtime_hours=Decimal("1"),
                late_minutes=Decimal("0"),
                cash_advance=Decimal("0"),
                daily_attendance=None,
                daily_overtime=None,
                daily_late=None,
                daily_site_address=None,
            )
        )

        assert record.working_days == 6
        assert record.basic_salary == Decimal("3000.00")
        assert record.overtime_pay == Decimal("62.50")
        assert record.net_pay == Decimal("3062.50")

    async def test_office_employee_rejected_without_side_effects(
        self, session: AsyncSession, workflow: SitePayrollWorkflow, office_employee: Employee
    ):
        with pytest.raises(ValidationError) as exc_info:
            await workflow.process_payroll(
                site_request(
                    office_employee.id,
                    advance=AdvanceRequest(Decimal("1000"), Decimal("200")),
                )
            )

        assert exc_info.value.message == "Employee must be of Site type for site payroll"
        assert await count_rows(session, SitePayroll) == 0
        assert await count_rows(session, EmergencyCashAdvance) == 0

    async def test_unknown_employee(self, workflow: SitePayrollWorkflow, site_employee: Employee):
        with pytest.raises(NotFoundError):
            await workflow.process_payroll(site_request(9999))

    async def test_invalid_input_rejected(
        self, session: AsyncSession, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        with pytest.raises(ValidationError):
            await workflow.process_payroll(
                site_request(site_employee.id, cash_advance=Decimal("-1"))
            )
        assert await count_rows(session, SitePayroll) == 0

    async def test_string_attendance_is_not_a_day_present(
        self, session: AsyncSession, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        """"false" as text is rejected rather than counted as a paid day."""
        with pytest.raises(ValidationError) as exc_info:
            await workflow.process_payroll(
                site_request(site_employee.id, daily_attendance={"monday": "false"})
            )

        assert exc_info.value.field == "daily_attendance.monday"
        assert await count_rows(session, SitePayroll) == 0

    async def test_advance_rounding_to_zero_writes_nothing(
        self, session: AsyncSession, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        with pytest.raises(ValidationError) as exc_info:
            await workflow.process_payroll(
                site_request(
                    site_employee.id,
                    advance=AdvanceRequest(Decimal("0.004"), Decimal("100")),
                )
            )

        assert exc_info.value.field == "emergency_cash_advance"
        assert await count_rows(session, SitePayroll) == 0
        assert await count_rows(session, EmergencyCashAdvance) == 0


class TestEmergencyAdvances:
    """Test ECA/ED handling during a site run."""

    async def test_open_and_deduct_in_same_run(
        self, session: AsyncSession, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        """The new pair is deducted by the same run's cash advance."""
        record = await workflow.process_payroll(
            site_request(
                site_employee.id,
                cash_advance=Decimal("250"),
                advance=AdvanceRequest(Decimal("1000"), Decimal("250")),
            )
        )

        pair = await EmergencyAdvanceLedger(session).get_active_pair(site_employee.id)
        assert pair.is_active
        assert pair.eca.remaining_balance == Decimal("750.00")
        assert record.cash_advance == Decimal("250")

    async def test_run_completes_advance(
        self, session: AsyncSession, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        await workflow.process_payroll(
            site_request(
                site_employee.id,
                cash_advance=Decimal("500"),
                advance=AdvanceRequest(Decimal("500"), Decimal("500")),
            )
        )

        history = await EmergencyAdvanceLedger(session).list_history(site_employee.id)
        assert history[0].eca.status == "completed"
        assert history[0].eca.remaining_balance == Decimal("0")
        assert history[0].ed.status == "completed"

    async def test_cash_advance_without_active_pair_leaves_ledger_alone(
        self, session: AsyncSession, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        record = await workflow.process_payroll(site_request(site_employee.id))

        assert record.cash_advance == Decimal("200")
        assert await count_rows(session, EmergencyCashAdvance) == 0

    async def test_second_advance_conflicts_and_writes_nothing(
        self, session: AsyncSession, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        # The rollback expires loaded objects, so keep the id.
        employee_id = site_employee.id
        await workflow.process_payroll(
            site_request(
                employee_id,
                cash_advance=Decimal("100"),
                advance=AdvanceRequest(Decimal("1000"), Decimal("100")),
            )
        )

        with pytest.raises(ConflictError):
            await workflow.process_payroll(
                site_request(
                    employee_id,
                    cash_advance=Decimal("100"),
                    advance=AdvanceRequest(Decimal("400"), Decimal("100")),
                )
            )

        assert await count_rows(session, SitePayroll) == 1
        pair = await EmergencyAdvanceLedger(session).get_active_pair(employee_id)
        assert pair.eca.remaining_balance == Decimal("900.00")

    async def test_failed_insert_rolls_back_ledger(
        self,
        session: AsyncSession,
        workflow: SitePayrollWorkflow,
        site_employee: Employee,
        monkeypatch,
    ):
        """A store failure after the ledger step leaves no advance behind."""

        async def failing_insert(record):
            raise OperationalError("INSERT INTO payrolls", {}, Exception("disk I/O error"))

        monkeypatch.setattr(workflow.store, "insert", failing_insert)

        with pytest.raises(PersistenceFault):
            await workflow.process_payroll(
                site_request(
                    site_employee.id,
                    cash_advance=Decimal("100"),
                    advance=AdvanceRequest(Decimal("1000"), Decimal("100")),
                )
            )

        assert await count_rows(session, EmergencyCashAdvance) == 0
        assert await count_rows(session, SitePayroll) == 0

    async def test_concurrent_runs_deduct_serially(
        self, calculator, site_employee_file_db
    ):
        """Two runs for one employee never lose a deduction."""
        session_factory, employee_id = site_employee_file_db
        locks = EmployeeLocks()

        async with session_factory() as session:
            await EmergencyAdvanceLedger(session, locks=locks).open_pair(
                employee_id, Decimal("1000"), Decimal("300")
            )
            await session.commit()

        async def run_once():
            async with session_factory() as session:
                workflow = SitePayrollWorkflow(session, calculator=calculator, locks=locks)
                return await workflow.process_payroll(
                    site_request(employee_id, cash_advance=Decimal("300"))
                )

        await asyncio.gather(run_once(), run_once())

        async with session_factory() as session:
            pair = await EmergencyAdvanceLedger(session).get_active_pair(employee_id)
        assert pair.eca.remaining_balance == Decimal("400.00")


class TestRecordMaintenance:
    """Test get/list/update/delete of site records."""

    async def test_update_deductions_recomputes_net(
        self, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        record = await workflow.process_payroll(site_request(site_employee.id))

        updated = await workflow.update_record(
            record.id,
            PayrollPatch(cash_advance=Decimal("300"), others_deduction=Decimal("50")),
        )

        assert updated.gross_pay == Decimal("2625.00")
        assert updated.late_deduction == Decimal("31.25")
        assert updated.total_deductions == Decimal("381.25")
        assert updated.net_pay == Decimal("2243.75")

    async def test_update_does_not_touch_ledger(
        self, session: AsyncSession, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        record = await workflow.process_payroll(
            site_request(
                site_employee.id,
                cash_advance=Decimal("100"),
                advance=AdvanceRequest(Decimal("1000"), Decimal("100")),
            )
        )

        await workflow.update_record(record.id, PayrollPatch(cash_advance=Decimal("600")))

        pair = await EmergencyAdvanceLedger(session).get_active_pair(site_employee.id)
        assert pair.eca.remaining_balance == Decimal("900.00")

    @pytest.mark.parametrize("status", ["Processing", "Paid", "On Hold", "Pending"])
    async def test_any_status_transition(
        self, workflow: SitePayrollWorkflow, site_employee: Employee, status
    ):
        record = await workflow.process_payroll(site_request(site_employee.id))

        updated = await workflow.update_status(record.id, status)

        assert updated.status == status
        assert updated.net_pay == record.net_pay

    async def test_unknown_status_rejected(
        self, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        record = await workflow.process_payroll(site_request(site_employee.id))

        with pytest.raises(ValidationError):
            await workflow.update_status(record.id, "Cancelled")

    async def test_list_newest_first(
        self, workflow: SitePayrollWorkflow, site_employee: Employee
    ):
        first = await workflow.process_payroll(site_request(site_employee.id))
        second = await workflow.process_payroll(site_request(site_employee.id))

        records = await workflow.list_records()

        assert [r.id for r in records] == [second.id, first.id]

    async def test_delete(self, workflow: SitePayrollWorkflow, site_employee: Employee):
        record = await workflow.process_payroll(site_request(site_employee.id))

        await workflow.delete_record(record.id)

        with pytest.raises(NotFoundError):
            await workflow.get_record(record.id)

    async def test_missing_record(self, workflow: SitePayrollWorkflow):
        with pytest.raises(NotFoundError):
            await workflow.update_record(42, PayrollPatch(status="Paid"))


class TestAttendanceDetails:
    """Test the per-day breakdown of a stored record."""

    async def test_rows_and_summary(self, workflow: SitePayrollWorkflow, site_employee: Employee):
        record = await workflow.process_payroll(site_request(site_employee.id))

        details = await workflow.attendance_details(record.id)

        assert [row.day for row in details.attendance_data] == [
            "Monday",
            "Tuesday",
            "Wednesday",
            "Thursday",
            "Friday",
            "Saturday",
        ]
        monday = details.attendance_data[0]
        assert monday.present is True
        assert monday.overtime == "2"
        assert monday.site_address == "Lot 4, Riverside"
        assert details.attendance_data[1].late == "30"
        assert details.attendance_data[5].present is False
        assert details.summary["days_present"] == 5
        assert details.summary["total_overtime"] == Decimal("2")
        assert details.summary["total_late"] == Decimal("30")
        assert details.summary["net_pay"] == Decimal("2393.75")
        assert details.employee_info["employee_id"] == site_employee.employee_code
        assert details.employee_info["pay_period"] == "2026-03-02 to 2026-03-07"
