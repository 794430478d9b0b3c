"""API routes."""

from construction_payroll.api.routes.employees import router as employees_router
from construction_payroll.api.routes.health import router as health_router
from construction_payroll.api.routes.office_payrolls import router as office_payrolls_router
from construction_payroll.api.routes.site_payrolls import router as site_payrolls_router

__all__ = [
    "employees_router",
    "health_router",
    "office_payrolls_router",
    "site_payrolls_router",
]
