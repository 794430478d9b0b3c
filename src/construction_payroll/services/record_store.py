"""Generic persistence for site and office payroll records."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from construction_payroll.errors import NotFoundError, PersistenceFault
from construction_payroll.models import OfficePayroll, SitePayroll

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", SitePayroll, OfficePayroll)


@contextmanager
def persistence_guard(operation: str) -> Iterator[None]:
    """Translate database failures into PersistenceFault."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.exception("Database failure during %s", operation)
        raise PersistenceFault(f"Failed to {operation}") from e


class PayrollRecordStore(Generic[RecordT]):
    """Insert/find/update/delete/list for one payroll record table.

    Methods flush but never commit; the calling workflow owns the transaction.
    """

    # Columns an update may touch. Everything else is fixed at creation.
    MUTABLE_FIELDS = frozenset(
        {"status", "cash_advance", "others_deduction", "total_deductions", "net_pay"}
    )

    def __init__(self, session: AsyncSession, model: type[RecordT]):
        self.session = session
        self.model = model
        self.entity = "Office payroll record" if model is OfficePayroll else "Payroll record"

    async def insert(self, record: RecordT) -> int:
        """Persist a new record and return its id."""
        with persistence_guard(f"insert {self.model.__tablename__} row"):
            self.session.add(record)
            await self.session.flush()
        return record.id

    async def find_by_id(self, record_id: int) -> RecordT | None:
        with persistence_guard(f"load {self.model.__tablename__} row"):
            return await self.session.get(self.model, record_id)

    async def get(self, record_id: int) -> RecordT:
        """Like find_by_id, but a missing record is a NotFoundError."""
        record = await self.find_by_id(record_id)
        if record is None:
            raise NotFoundError(self.entity, record_id)
        return record

    async def update(self, record_id: int, patch: dict[str, Any]) -> RecordT:
        """Apply a patch of mutable fields to a stored record."""
        illegal = set(patch) - self.MUTABLE_FIELDS
        if illegal:
            raise ValueError(f"Fields are immutable after creation: {sorted(illegal)}")

        record = await self.get(record_id)
        for name, value in patch.items():
            setattr(record, name, value)
        with persistence_guard(f"update {self.model.__tablename__} row"):
            await self.session.flush()
        return record

    async def delete(self, record_id: int) -> None:
        record = await self.get(record_id)
        with persistence_guard(f"delete {self.model.__tablename__} row"):
            await self.session.delete(record)
            await self.session.flush()

    async def list_all(self, newest_first: bool = True) -> list[RecordT]:
        """List every record ordered by creation time."""
        if newest_first:
            order = (self.model.created_at.desc(), self.model.id.desc())
        else:
            order = (self.model.created_at.asc(), self.model.id.asc())
        with persistence_guard(f"list {self.model.__tablename__} rows"):
            result = await self.session.execute(select(self.model).order_by(*order))
            return list(result.scalars().all())
