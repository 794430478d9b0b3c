"""ORM models."""

from construction_payroll.models.base import Base, TimestampMixin
from construction_payroll.models.employee import Classification, Employee
from construction_payroll.models.advance import (
    AdvanceStatus,
    EmergencyCashAdvance,
    EmergencyDeduction,
)
from construction_payroll.models.payroll import (
    OfficePayroll,
    PayrollRecordMixin,
    PayrollStatus,
    PayrollType,
    SitePayroll,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "Classification",
    "Employee",
    "AdvanceStatus",
    "EmergencyCashAdvance",
    "EmergencyDeduction",
    "OfficePayroll",
    "PayrollRecordMixin",
    "PayrollStatus",
    "PayrollType",
    "SitePayroll",
]
