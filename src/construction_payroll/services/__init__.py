"""Payroll services."""

from construction_payroll.services.directory import EmployeeDirectory
from construction_payroll.services.ledger_service import (
    ActivePair,
    DeductionResult,
    EmergencyAdvanceLedger,
    EmployeeLocks,
)
from construction_payroll.services.office_payroll import OfficePayrollWorkflow
from construction_payroll.services.record_store import PayrollRecordStore
from construction_payroll.services.requests import (
    AdvanceRequest,
    OfficePayrollRequest,
    PayrollPatch,
    SitePayrollRequest,
)
from construction_payroll.services.site_payroll import SitePayrollWorkflow

__all__ = [
    "EmployeeDirectory",
    "ActivePair",
    "DeductionResult",
    "EmergencyAdvanceLedger",
    "EmployeeLocks",
    "OfficePayrollWorkflow",
    "PayrollRecordStore",
    "AdvanceRequest",
    "OfficePayrollRequest",
    "PayrollPatch",
    "SitePayrollRequest",
    "SitePayrollWorkflow",
]
