"""Emergency advance ledger - ECA/ED pairing and amortization.

Maintains, per employee:
- at most one active emergency cash advance (ECA) and its paired emergency
  deduction (ED), created together and completed together
- a remaining balance that only ever decreases and is clamped at zero
- completion exactly once; completed pairs are never reactivated

Mutations flush but never commit. Callers run open/deduct inside
``lock_employee`` and commit once, so concurrent runs for the same employee
serialize and a failed run leaves no partial ledger change.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from construction_payroll.calculators.engine import money
from construction_payroll.errors import (
    ConflictError,
    NotFoundError,
    PersistenceFault,
    ValidationError,
)
from construction_payroll.models import (
    AdvanceStatus,
    EmergencyCashAdvance,
    EmergencyDeduction,
    Employee,
)
from construction_payroll.services.record_store import persistence_guard

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

ACTIVE_ADVANCE_CONFLICT = "Employee already has an active emergency cash advance"

ACTIVE_ADVANCE_INDEX = "eca_one_active_per_employee"


def _violates_one_active_rule(error: IntegrityError) -> bool:
    """True if the error comes from the one-active-advance unique index.

    Postgres names the index; SQLite names the indexed column.
    """
    message = str(error.orig)
    return (
        ACTIVE_ADVANCE_INDEX in message
        or "emergency_cash_advances.employee_id" in message
    )


class EmployeeLocks:
    """In-process mutual exclusion keyed by employee id.

    Locks are held weakly, so an employee's lock disappears once no run is
    holding or waiting on it.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def get(self, employee_id: int) -> asyncio.Lock:
        lock = self._locks.get(employee_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[employee_id] = lock
        return lock


default_employee_locks = EmployeeLocks()


@dataclass(frozen=True)
class ActivePair:
    """The active ECA/ED of an employee; both None when nothing is active."""

    eca: EmergencyCashAdvance | None
    ed: EmergencyDeduction | None

    @property
    def is_active(self) -> bool:
        return self.eca is not None and self.ed is not None

    @property
    def auto_cash_advance(self) -> Decimal:
        """Per-period amount a payroll form should pre-fill as cash advance."""
        return self.ed.amount if self.ed is not None else ZERO

    @property
    def is_readonly(self) -> bool:
        """An advance still being repaid locks the cash advance field."""
        return self.eca is not None and self.eca.remaining_balance > ZERO


@dataclass(frozen=True)
class DeductionResult:
    """Outcome of applying one payroll deduction to an active ECA."""

    cash_advance_id: int
    new_balance: Decimal
    completed: bool


@dataclass(frozen=True)
class AdvanceHistoryEntry:
    eca: EmergencyCashAdvance
    ed: EmergencyDeduction | None


class EmergencyAdvanceLedger:
    """Owns ECA/ED rows for the payroll workflows."""

    def __init__(self, session: AsyncSession, locks: EmployeeLocks | None = None):
        self.session = session
        self.locks = locks or default_employee_locks

    @asynccontextmanager
    async def lock_employee(self, employee_id: int) -> AsyncIterator[None]:
        """Serialize ledger work for one employee within this process.

        Keep the transaction (including its commit) inside the block.
        """
        async with self.locks.get(employee_id):
            yield

    async def lock_employee_row(self, employee_id: int) -> None:
        """Row-lock the employee until the current transaction ends.

        SELECT ... FOR UPDATE serializes runs across processes on Postgres;
        SQLite ignores it.
        """
        with persistence_guard("lock employee"):
            await self.session.execute(
                select(Employee.id).where(Employee.id == employee_id).with_for_update()
            )

    async def get_active_pair(
        self, employee_id: int, for_update: bool = False
    ) -> ActivePair:
        """Return the employee's active ECA and its paired ED."""
        query = select(EmergencyCashAdvance).where(
            EmergencyCashAdvance.employee_id == employee_id,
            EmergencyCashAdvance.status == AdvanceStatus.ACTIVE.value,
        )
        if for_update:
            query = query.with_for_update()

        with persistence_guard("load active emergency cash advance"):
            eca = (await self.session.execute(query)).scalar_one_or_none()
            if eca is None:
                return ActivePair(eca=None, ed=None)

            ed_query = select(EmergencyDeduction).where(
                EmergencyDeduction.cash_advance_id == eca.id,
                EmergencyDeduction.status == AdvanceStatus.ACTIVE.value,
            )
            if for_update:
                ed_query = ed_query.with_for_update()
            ed = (await self.session.execute(ed_query)).scalar_one_or_none()

        return ActivePair(eca=eca, ed=ed)

    async def open_pair(
        self,
        employee_id: int,
        eca_amount: Decimal,
        ed_amount: Decimal,
    ) -> ActivePair:
        """Open a new ECA with its paired ED.

        Raises:
            ValidationError: If either amount is not positive once rounded to cents
            ConflictError: If the employee already has an active ECA
        """
        eca_amount = None if eca_amount is None else money(eca_amount)
        ed_amount = None if ed_amount is None else money(ed_amount)
        if eca_amount is None or eca_amount <= ZERO:
            raise ValidationError(
                "Emergency cash advance must be greater than 0",
                field="emergency_cash_advance",
            )
        if ed_amount is None or ed_amount <= ZERO:
            raise ValidationError(
                "Emergency deduction must be greater than 0",
                field="emergency_deduction",
            )

        existing = await self.get_active_pair(employee_id, for_update=True)
        if existing.eca is not None:
            logger.warning(
                "Rejected new emergency cash advance for employee %s: "
                "advance %s is still active",
                employee_id,
                existing.eca.id,
            )
            raise ConflictError(
                ACTIVE_ADVANCE_CONFLICT,
                {"employee_id": employee_id, "cash_advance_id": existing.eca.id},
            )

        eca = EmergencyCashAdvance(
            employee_id=employee_id,
            amount=eca_amount,
            remaining_balance=eca_amount,
            status=AdvanceStatus.ACTIVE.value,
        )
        try:
            self.session.add(eca)
            await self.session.flush()

            ed = EmergencyDeduction(
                employee_id=employee_id,
                cash_advance_id=eca.id,
                amount=ed_amount,
                status=AdvanceStatus.ACTIVE.value,
            )
            self.session.add(ed)
            await self.session.flush()
        except IntegrityError as e:
            if not _violates_one_active_rule(e):
                logger.exception(
                    "Failed to open emergency cash advance for employee %s", employee_id
                )
                raise PersistenceFault("Failed to open emergency cash advance") from e
            # Unique partial index on active advances lost a race.
            raise ConflictError(
                ACTIVE_ADVANCE_CONFLICT, {"employee_id": employee_id}
            ) from e

        logger.info(
            "Opened emergency cash advance %s for employee %s: amount=%s deduction=%s",
            eca.id,
            employee_id,
            eca.amount,
            ed.amount,
        )
        return ActivePair(eca=eca, ed=ed)

    async def apply_deduction(self, employee_id: int, amount: Decimal) -> DeductionResult:
        """Deduct a payroll cash advance from the active ECA balance.

        A zero amount is a no-op. When the balance would reach zero or below,
        the balance is clamped to zero and both ECA and ED are completed.

        Raises:
            ValidationError: If amount is negative
            NotFoundError: If the employee has no active ECA
        """
        if amount is None or amount < ZERO:
            raise ValidationError("Deduction amount must be at least 0", field="cash_advance")

        pair = await self.get_active_pair(employee_id, for_update=True)
        eca = pair.eca
        if eca is None:
            raise NotFoundError(
                "Emergency cash advance",
                employee_id,
                f"Employee {employee_id} has no active emergency cash advance",
            )

        amount = money(amount)
        if amount == ZERO:
            return DeductionResult(
                cash_advance_id=eca.id, new_balance=eca.remaining_balance, completed=False
            )

        new_balance = money(eca.remaining_balance - amount)
        if new_balance <= ZERO:
            eca.remaining_balance = ZERO
            eca.status = AdvanceStatus.COMPLETED.value
            if pair.ed is not None:
                pair.ed.status = AdvanceStatus.COMPLETED.value
            completed = True
        else:
            eca.remaining_balance = new_balance
            completed = False

        with persistence_guard("update emergency cash advance"):
            await self.session.flush()

        if completed:
            logger.info(
                "Emergency cash advance %s for employee %s fully repaid",
                eca.id,
                employee_id,
            )
        else:
            logger.info(
                "Deducted %s from emergency cash advance %s (employee %s), remaining %s",
                amount,
                eca.id,
                employee_id,
                eca.remaining_balance,
            )

        return DeductionResult(
            cash_advance_id=eca.id,
            new_balance=eca.remaining_balance,
            completed=completed,
        )

    async def list_history(self, employee_id: int) -> list[AdvanceHistoryEntry]:
        """All advances of an employee, newest first, with their deductions."""
        with persistence_guard("load emergency cash advance history"):
            result = await self.session.execute(
                select(EmergencyCashAdvance, EmergencyDeduction)
                .outerjoin(
                    EmergencyDeduction,
                    EmergencyDeduction.cash_advance_id == EmergencyCashAdvance.id,
                )
                .where(EmergencyCashAdvance.employee_id == employee_id)
                .order_by(EmergencyCashAdvance.created_at.desc(), EmergencyCashAdvance.id.desc())
            )
            return [AdvanceHistoryEntry(eca=eca, ed=ed) for eca, ed in result.all()]
