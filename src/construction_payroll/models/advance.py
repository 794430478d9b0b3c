"""Emergency cash advance (ECA) and emergency deduction (ED) models.

An ED row always belongs to exactly one ECA row and shares its status.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from construction_payroll.models.base import Base, TimestampMixin


class AdvanceStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class EmergencyCashAdvance(Base, TimestampMixin):
    """Lump sum advanced to an employee, repaid through payroll deductions."""

    __tablename__ = "emergency_cash_advances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    remaining_balance: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AdvanceStatus.ACTIVE.value
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="eca_amount_positive"),
        CheckConstraint(
            "remaining_balance >= 0 AND remaining_balance <= amount",
            name="eca_balance_range",
        ),
        CheckConstraint("status IN ('active', 'completed')", name="eca_status_check"),
        # At most one active advance per employee.
        Index(
            "eca_one_active_per_employee",
            "employee_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )


class EmergencyDeduction(Base, TimestampMixin):
    """Per-period withholding paired with an emergency cash advance."""

    __tablename__ = "emergency_deductions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    cash_advance_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("emergency_cash_advances.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AdvanceStatus.ACTIVE.value
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ed_amount_positive"),
        CheckConstraint("status IN ('active', 'completed')", name="ed_status_check"),
    )
