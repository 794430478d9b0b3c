"""Type definitions for the calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any


class Weekday(str, Enum):
    """Working days of a site week. Sunday is never worked."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"


WEEKDAYS: tuple[Weekday, ...] = tuple(Weekday)


@dataclass(frozen=True)
class DayEntry:
    """One weekday slot of a site timesheet."""

    present: bool = False
    overtime_hours: Decimal = Decimal("0")
    late_minutes: Decimal = Decimal("0")
    site_address: str = ""


@dataclass(frozen=True)
class WeeklyTimesheet:
    """Fixed six-slot Monday-Saturday timesheet."""

    monday: DayEntry = field(default_factory=DayEntry)
    tuesday: DayEntry = field(default_factory=DayEntry)
    wednesday: DayEntry = field(default_factory=DayEntry)
    thursday: DayEntry = field(default_factory=DayEntry)
    friday: DayEntry = field(default_factory=DayEntry)
    saturday: DayEntry = field(default_factory=DayEntry)

    @classmethod
    def from_maps(
        cls,
        attendance: dict[str, bool] | None = None,
        overtime: dict[str, Decimal] | None = None,
        late: dict[str, Decimal] | None = None,
        site_address: dict[str, str] | None = None,
    ) -> WeeklyTimesheet:
        """Build a timesheet from per-day maps; missing days are absent/zero/blank."""
        attendance = attendance or {}
        overtime = overtime or {}
        late = late or {}
        site_address = site_address or {}

        slots = {
            day.value: DayEntry(
                present=attendance.get(day.value) is True,
                overtime_hours=Decimal(overtime.get(day.value) or 0),
                late_minutes=Decimal(late.get(day.value) or 0),
                site_address=site_address.get(day.value) or "",
            )
            for day in WEEKDAYS
        }
        return cls(**slots)

    def day(self, weekday: Weekday) -> DayEntry:
        return getattr(self, weekday.value)

    def items(self) -> list[tuple[Weekday, DayEntry]]:
        return [(d, self.day(d)) for d in WEEKDAYS]

    @property
    def days_present(self) -> int:
        return sum(1 for _, entry in self.items() if entry.present)

    @property
    def total_overtime_hours(self) -> Decimal:
        # Summed over every day, present or not.
        return sum((entry.overtime_hours for _, entry in self.items()), Decimal("0"))

    @property
    def total_late_minutes(self) -> Decimal:
        return sum((entry.late_minutes for _, entry in self.items()), Decimal("0"))

    def to_documents(self) -> dict[str, dict[str, Any]]:
        """Serialize into the four per-day JSON documents stored on a record."""
        return {
            "daily_attendance": {d.value: e.present for d, e in self.items()},
            "daily_overtime": {d.value: str(e.overtime_hours) for d, e in self.items()},
            "daily_late": {d.value: str(e.late_minutes) for d, e in self.items()},
            "daily_site_address": {d.value: e.site_address for d, e in self.items()},
        }


@dataclass(frozen=True)
class PayRates:
    """Employee pay rates used by a calculation."""

    daily_rate: Decimal
    hourly_rate: Decimal


@dataclass(frozen=True)
class PayBreakdown:
    """The six computed amounts of a payroll record, rounded to cents."""

    basic_salary: Decimal
    overtime_pay: Decimal
    late_deduction: Decimal
    gross_pay: Decimal
    total_deductions: Decimal
    net_pay: Decimal

    def as_dict(self) -> dict[str, Decimal]:
        return {
            "basic_salary": self.basic_salary,
            "overtime_pay": self.overtime_pay,
            "late_deduction": self.late_deduction,
            "gross_pay": self.gross_pay,
            "total_deductions": self.total_deductions,
            "net_pay": self.net_pay,
        }


@dataclass(frozen=True)
class DeductionTotals:
    """Recomputed totals after deductions are amended on a stored record."""

    total_deductions: Decimal
    net_pay: Decimal
