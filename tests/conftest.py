"""Pytest fixtures for construction payroll tests."""

from __future__ import annotations

from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from construction_payroll.api.app import create_app
from construction_payroll.api.dependencies import get_db_session
from construction_payroll.calculators.engine import PayrollCalculator
from construction_payroll.database import create_schema, make_session_factory
from construction_payroll.models import Classification, Employee
from construction_payroll.services import EmployeeLocks

# In-memory SQLite shared by every session of a test (single static connection)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    """Create a fresh test database per test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def calculator() -> PayrollCalculator:
    return PayrollCalculator(overtime_multiplier=Decimal("1"))


@pytest.fixture
def locks() -> EmployeeLocks:
    return EmployeeLocks()


async def add_employee(session: AsyncSession, **overrides) -> Employee:
    values = {
        "employee_code": "EMP-0001",
        "name": "Ramon Dela Cruz",
        "position": "Mason",
        "group": None,
        "classification": Classification.SITE.value,
        "daily_rate": Decimal("500.00"),
        "hourly_rate": Decimal("62.50"),
    }
    values.update(overrides)
    employee = Employee(**values)
    session.add(employee)
    await session.commit()
    return employee


@pytest.fixture
async def site_employee(session: AsyncSession) -> Employee:
    """Site employee: daily 500, hourly 62.50."""
    return await add_employee(session)


@pytest.fixture
async def office_employee(session: AsyncSession) -> Employee:
    """Office employee: daily 800, hourly 100."""
    return await add_employee(
        session,
        employee_code="OFF-0001",
        name="Carmela Santos",
        position="Accountant",
        group="Finance",
        classification=Classification.OFFICE.value,
        daily_rate=Decimal("800.00"),
        hourly_rate=Decimal("100.00"),
    )


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the test database."""
    app = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def site_employee_file_db(tmp_path):
    """File-backed database with one site employee, for multi-connection tests.

    Yields (session factory, employee id).
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'payroll.db'}", echo=False)
    await create_schema(engine)
    factory = make_session_factory(engine)
    async with factory() as session:
        employee = await add_employee(session)
        employee_id = employee.id

    yield factory, employee_id

    await engine.dispose()
