"""Construction payroll service: site and office payroll with ECA/ED amortization."""

__version__ = "0.1.0"
