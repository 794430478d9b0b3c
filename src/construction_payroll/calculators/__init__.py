"""Payroll calculation engine."""

from construction_payroll.calculators.engine import PayrollCalculator, money
from construction_payroll.calculators.types import (
    WEEKDAYS,
    DayEntry,
    DeductionTotals,
    PayBreakdown,
    PayRates,
    WeeklyTimesheet,
    Weekday,
)

__all__ = [
    "PayrollCalculator",
    "money",
    "WEEKDAYS",
    "DayEntry",
    "DeductionTotals",
    "PayBreakdown",
    "PayRates",
    "WeeklyTimesheet",
    "Weekday",
]
