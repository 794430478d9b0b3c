"""Payroll calculation engine.

Pure arithmetic over Decimal inputs: no sessions, no I/O. Validation of the
inputs (non-negative, numeric) belongs to the workflows.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from construction_payroll.calculators.types import (
    DeductionTotals,
    PayBreakdown,
    PayRates,
    WeeklyTimesheet,
)

CENT = Decimal("0.01")
MINUTES_PER_HOUR = Decimal("60")


def money(amount: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


class PayrollCalculator:
    """Computes basic salary, overtime, lateness and the derived totals.

    Calculation order (both entry points):
    1) basic salary, overtime pay and late deduction, each rounded to cents
    2) gross = basic + overtime
    3) total deductions = late + cash advance + others
    4) net = gross - total deductions

    Totals are summed from the already rounded components, so
    gross = basic + overtime and net = gross - deductions hold exactly.
    """

    def __init__(self, overtime_multiplier: Decimal = Decimal("1")):
        self.overtime_multiplier = Decimal(overtime_multiplier)

    def calculate_site(
        self,
        rates: PayRates,
        timesheet: WeeklyTimesheet,
        cash_advance: Decimal = Decimal("0"),
        others_deduction: Decimal = Decimal("0"),
    ) -> PayBreakdown:
        """Calculate a site payroll from a Monday-Saturday timesheet."""
        return self.calculate_totals(
            rates,
            working_days=timesheet.days_present,
            overtime_hours=timesheet.total_overtime_hours,
            late_minutes=timesheet.total_late_minutes,
            cash_advance=cash_advance,
            others_deduction=others_deduction,
        )

    def calculate_office(
        self,
        rates: PayRates,
        total_working_days: int,
        total_late_minutes: Decimal,
        total_overtime_hours: Decimal,
        cash_advance: Decimal = Decimal("0"),
        others_deduction: Decimal = Decimal("0"),
    ) -> PayBreakdown:
        """Calculate an office payroll from monthly aggregate totals."""
        return self.calculate_totals(
            rates,
            working_days=total_working_days,
            overtime_hours=total_overtime_hours,
            late_minutes=total_late_minutes,
            cash_advance=cash_advance,
            others_deduction=others_deduction,
        )

    def calculate_totals(
        self,
        rates: PayRates,
        working_days: int,
        overtime_hours: Decimal,
        late_minutes: Decimal,
        cash_advance: Decimal = Decimal("0"),
        others_deduction: Decimal = Decimal("0"),
    ) -> PayBreakdown:
        """Calculate from already aggregated working days, overtime and lateness."""
        basic_salary = money(rates.daily_rate * working_days)
        overtime_pay = money(
            rates.hourly_rate * self.overtime_multiplier * Decimal(overtime_hours)
        )
        late_deduction = money(rates.hourly_rate * Decimal(late_minutes) / MINUTES_PER_HOUR)

        gross_pay = money(basic_salary + overtime_pay)
        totals = self.recompute_deductions(
            gross_pay=gross_pay,
            late_deduction=late_deduction,
            cash_advance=cash_advance,
            others_deduction=others_deduction,
        )

        return PayBreakdown(
            basic_salary=basic_salary,
            overtime_pay=overtime_pay,
            late_deduction=late_deduction,
            gross_pay=gross_pay,
            total_deductions=totals.total_deductions,
            net_pay=totals.net_pay,
        )

    @staticmethod
    def recompute_deductions(
        gross_pay: Decimal,
        late_deduction: Decimal,
        cash_advance: Decimal,
        others_deduction: Decimal,
    ) -> DeductionTotals:
        """Recompute total deductions and net pay.

        Used both by a fresh calculation and when the deductions of a stored
        record are amended (gross pay and late deduction stay as stored).
        """
        total_deductions = money(
            money(late_deduction) + money(cash_advance) + money(others_deduction)
        )
        net_pay = money(money(gross_pay) - total_deductions)
        return DeductionTotals(total_deductions=total_deductions, net_pay=net_pay)
