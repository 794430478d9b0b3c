"""Employee directory model."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from construction_payroll.models.base import Base, TimestampMixin


class Classification(str, Enum):
    """Employment classification; decides which payroll workflow applies."""

    SITE = "Site"
    OFFICE = "Office"


class Employee(Base, TimestampMixin):
    """Employee record, read-only to the payroll core."""

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    group: Mapped[str | None] = mapped_column(String(255), nullable=True)
    classification: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    daily_rate: Mapped[Decimal] = mapped_column(nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(nullable=False)

    __table_args__ = (
        CheckConstraint(
            "classification IN ('Site', 'Office')",
            name="employee_classification_check",
        ),
        CheckConstraint("daily_rate >= 0", name="employee_daily_rate_check"),
        CheckConstraint("hourly_rate >= 0", name="employee_hourly_rate_check"),
    )

    def __repr__(self) -> str:
        return f"<Employee {self.employee_code} {self.classification}>"
