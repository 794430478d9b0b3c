"""Employee directory and emergency advance endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path

from construction_payroll.api.dependencies import Directory, Ledger
from construction_payroll.api.schemas import (
    ActiveAdvanceResponse,
    AdvanceHistoryItem,
    AdvanceHistoryResponse,
    EmployeeListResponse,
    EmployeeResponse,
    EmergencyCashAdvanceResponse,
    EmergencyDeductionResponse,
    ErrorResponse,
)
from construction_payroll.errors import NotFoundError

router = APIRouter(prefix="/employees", tags=["employees"])


async def _require_employee(directory: Directory, employee_id: int) -> None:
    if await directory.find_by_id(employee_id) is None:
        raise NotFoundError("Employee", employee_id)


@router.get(
    "/status/{classification}",
    response_model=EmployeeListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def list_employees_by_classification(
    directory: Directory,
    classification: Annotated[str, Path()],
) -> EmployeeListResponse:
    """List Site or Office employees, ordered by name."""
    employees = await directory.list_by_classification(classification)
    return EmployeeListResponse(
        items=[EmployeeResponse.model_validate(e) for e in employees],
        total=len(employees),
    )


@router.get(
    "/{employee_id}/eca-ed",
    response_model=ActiveAdvanceResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_active_advance(
    directory: Directory,
    ledger: Ledger,
    employee_id: Annotated[int, Path()],
) -> ActiveAdvanceResponse:
    """Active ECA/ED of an employee plus the cash advance a form should pre-fill."""
    await _require_employee(directory, employee_id)
    pair = await ledger.get_active_pair(employee_id)

    return ActiveAdvanceResponse(
        eca=EmergencyCashAdvanceResponse.model_validate(pair.eca) if pair.eca else None,
        ed=EmergencyDeductionResponse.model_validate(pair.ed) if pair.ed else None,
        has_active_eca=pair.eca is not None,
        has_active_ed=pair.ed is not None,
        auto_cash_advance=pair.auto_cash_advance,
        is_readonly=pair.is_readonly,
    )


@router.get(
    "/{employee_id}/eca-history",
    response_model=AdvanceHistoryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_advance_history(
    directory: Directory,
    ledger: Ledger,
    employee_id: Annotated[int, Path()],
) -> AdvanceHistoryResponse:
    """Every advance an employee has taken, newest first."""
    await _require_employee(directory, employee_id)
    history = await ledger.list_history(employee_id)

    return AdvanceHistoryResponse(
        employee_id=employee_id,
        items=[
            AdvanceHistoryItem(
                eca=EmergencyCashAdvanceResponse.model_validate(entry.eca),
                ed=EmergencyDeductionResponse.model_validate(entry.ed) if entry.ed else None,
            )
            for entry in history
        ],
    )
