"""Shared orchestration for site and office payroll runs."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Generic

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from construction_payroll.calculators.engine import PayrollCalculator
from construction_payroll.calculators.types import PayRates
from construction_payroll.config import get_settings
from construction_payroll.errors import NotFoundError, PersistenceFault, ValidationError
from construction_payroll.models import Employee
from construction_payroll.services.directory import EmployeeDirectory
from construction_payroll.services.ledger_service import (
    DeductionResult,
    EmergencyAdvanceLedger,
    EmployeeLocks,
)
from construction_payroll.services.record_store import PayrollRecordStore, RecordT
from construction_payroll.services.requests import (
    AdvanceRequest,
    OfficePayrollRequest,
    PayrollPatch,
    SitePayrollRequest,
)

logger = logging.getLogger(__name__)


class PayrollWorkflow(Generic[RecordT]):
    """Base workflow: employee checks, ledger interaction, record maintenance.

    Run pipeline (subclasses supply steps 5-6 as the record builder):
    1) employee must exist
    2) classification must match the workflow
    3) open a new ECA/ED pair if the request asks for one
    4) deduct the run's cash advance from an active pair
    5) calculate pay
    6) persist the record as Pending

    Steps 3-6 run under the per-employee ledger lock in one transaction.
    """

    classification: str
    record_model: type[RecordT]

    def __init__(
        self,
        session: AsyncSession,
        calculator: PayrollCalculator | None = None,
        locks: EmployeeLocks | None = None,
    ):
        self.session = session
        self.directory = EmployeeDirectory(session)
        self.ledger = EmergencyAdvanceLedger(session, locks=locks)
        self.store: PayrollRecordStore[RecordT] = PayrollRecordStore(session, self.record_model)
        self.calculator = calculator or PayrollCalculator(
            overtime_multiplier=get_settings().overtime_multiplier
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        """Commit on success; roll back everything on any failure."""
        try:
            yield
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Payroll transaction failed")
            raise PersistenceFault("Failed to save payroll changes") from e
        except Exception:
            await self.session.rollback()
            raise

    # ------------------------------------------------------------------
    # Run steps
    # ------------------------------------------------------------------

    async def _load_employee(self, employee_id: int) -> Employee:
        employee = await self.directory.find_by_id(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        if employee.classification != self.classification:
            raise ValidationError(
                f"Employee must be of {self.classification} type for "
                f"{self.classification.lower()} payroll",
                field="employee_id",
                context={"classification": employee.classification},
            )
        return employee

    async def _apply_advances(
        self,
        employee_id: int,
        advance: AdvanceRequest,
        cash_advance: Decimal,
    ) -> DeductionResult | None:
        """Open a requested ECA/ED pair, then deduct this run's cash advance."""
        if advance.opens_pair:
            await self.ledger.open_pair(
                employee_id,
                advance.emergency_cash_advance,
                advance.emergency_deduction,
            )

        if cash_advance > 0:
            pair = await self.ledger.get_active_pair(employee_id, for_update=True)
            if pair.is_active:
                return await self.ledger.apply_deduction(employee_id, cash_advance)
        return None

    @staticmethod
    def _rates(employee: Employee) -> PayRates:
        return PayRates(daily_rate=employee.daily_rate, hourly_rate=employee.hourly_rate)

    async def _run(
        self,
        employee: Employee,
        request: SitePayrollRequest | OfficePayrollRequest,
        build_record: Callable[[], RecordT],
    ) -> RecordT:
        # The lock is released only after commit or rollback.
        async with self.ledger.lock_employee(employee.id):
            async with self._transaction():
                await self.ledger.lock_employee_row(employee.id)
                deduction = await self._apply_advances(
                    employee.id, request.advance, request.cash_advance
                )
                record = build_record()
                await self.store.insert(record)

        logger.info(
            "Processed %s payroll %s for employee %s: gross=%s net=%s%s",
            self.classification.lower(),
            record.id,
            employee.id,
            record.gross_pay,
            record.net_pay,
            f" (advance balance {deduction.new_balance})" if deduction else "",
        )
        return record

    # ------------------------------------------------------------------
    # Record maintenance
    # ------------------------------------------------------------------

    async def get_record(self, record_id: int) -> RecordT:
        return await self.store.get(record_id)

    async def list_records(self) -> list[RecordT]:
        """All records, newest first."""
        return await self.store.list_all(newest_first=True)

    async def update_record(self, record_id: int, patch: PayrollPatch) -> RecordT:
        """Update status and/or deductions of a stored record.

        Amending cash advance or others deduction recomputes total deductions
        and net pay from the stored late deduction and gross pay. Basic
        salary and gross pay are never recomputed. The ledger is untouched.
        """
        patch.validate()

        async with self._transaction():
            record = await self.store.get(record_id)
            changes: dict[str, object] = {}

            if patch.status is not None:
                changes["status"] = patch.status

            if patch.changes_deductions:
                cash_advance = (
                    patch.cash_advance if patch.cash_advance is not None else record.cash_advance
                )
                others = (
                    patch.others_deduction
                    if patch.others_deduction is not None
                    else record.others_deduction
                )
                totals = self.calculator.recompute_deductions(
                    gross_pay=record.gross_pay,
                    late_deduction=record.late_deduction,
                    cash_advance=cash_advance,
                    others_deduction=others,
                )
                changes.update(
                    cash_advance=cash_advance,
                    others_deduction=others,
                    total_deductions=totals.total_deductions,
                    net_pay=totals.net_pay,
                )

            record = await self.store.update(record_id, changes)

        return record

    async def update_status(self, record_id: int, status: str) -> RecordT:
        """Set the status; any of the four statuses may follow any other."""
        if status is None:
            raise ValidationError("status is required", field="status")
        return await self.update_record(record_id, PayrollPatch(status=status))

    async def delete_record(self, record_id: int) -> None:
        async with self._transaction():
            await self.store.delete(record_id)
        logger.info("Deleted %s payroll %s", self.classification.lower(), record_id)
