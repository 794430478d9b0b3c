"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from construction_payroll.database import init_db
from construction_payroll.services import (
    EmergencyAdvanceLedger,
    EmployeeDirectory,
    OfficePayrollWorkflow,
    SitePayrollWorkflow,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_site_workflow(db: DbSession) -> SitePayrollWorkflow:
    return SitePayrollWorkflow(db)


def get_office_workflow(db: DbSession) -> OfficePayrollWorkflow:
    return OfficePayrollWorkflow(db)


def get_directory(db: DbSession) -> EmployeeDirectory:
    return EmployeeDirectory(db)


def get_ledger(db: DbSession) -> EmergencyAdvanceLedger:
    return EmergencyAdvanceLedger(db)


# Type aliases for cleaner dependency injection
SiteWorkflow = Annotated[SitePayrollWorkflow, Depends(get_site_workflow)]
OfficeWorkflow = Annotated[OfficePayrollWorkflow, Depends(get_office_workflow)]
Directory = Annotated[EmployeeDirectory, Depends(get_directory)]
Ledger = Annotated[EmergencyAdvanceLedger, Depends(get_ledger)]
