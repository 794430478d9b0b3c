"""HTTP API for the construction payroll service."""
