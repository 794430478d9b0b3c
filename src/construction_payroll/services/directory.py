"""Employee directory lookups."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from construction_payroll.errors import ValidationError
from construction_payroll.models import Classification, Employee
from construction_payroll.services.record_store import persistence_guard


class EmployeeDirectory:
    """Read-only access to employee identity, rates and classification."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, employee_id: int) -> Employee | None:
        """Return the employee, or None if no such employee exists."""
        with persistence_guard("load employee"):
            return await self.session.get(Employee, employee_id)

    async def list_by_classification(self, kind: str) -> list[Employee]:
        """List employees of one classification (Site or Office), by name."""
        try:
            classification = Classification(kind)
        except ValueError:
            raise ValidationError(
                f"Unknown classification '{kind}', expected Site or Office",
                field="classification",
            )

        with persistence_guard("list employees"):
            result = await self.session.execute(
                select(Employee)
                .where(Employee.classification == classification.value)
                .order_by(Employee.name.asc())
            )
            return list(result.scalars().all())
