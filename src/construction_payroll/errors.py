"""Error taxonomy for payroll runs.

Client-fixable failures (ValidationError, NotFoundError, ConflictError) are
kept apart from PersistenceFault so callers can tell "fix your input" from
"try again later".
"""

from __future__ import annotations

from typing import Any


class PayrollError(Exception):
    """Base class for all payroll domain errors."""

    code = "PAYROLL_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        self.message = message
        self.context = context
        super().__init__(message)


class ValidationError(PayrollError):
    """Malformed or out-of-range input, including a classification mismatch."""

    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.field = field
        if field is not None:
            context = {"field": field, **(context or {})}
        super().__init__(message, context)


class NotFoundError(PayrollError):
    """Referenced employee, payroll record or active advance does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any, message: str | None = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            message or f"{entity} {entity_id} not found",
            {"entity": entity, "id": str(entity_id)},
        )


class ConflictError(PayrollError):
    """Ledger invariant violation, e.g. a second active cash advance."""

    code = "CONFLICT"


class PersistenceFault(PayrollError):
    """Underlying store unavailable or a write failed."""

    code = "PERSISTENCE_FAULT"
