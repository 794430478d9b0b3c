"""Office payroll endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Response, status

from construction_payroll.api.dependencies import OfficeWorkflow
from construction_payroll.api.schemas import (
    ErrorResponse,
    OfficePayrollCreate,
    OfficePayrollListResponse,
    OfficePayrollResponse,
    PayrollUpdate,
    StatusUpdate,
)

router = APIRouter(prefix="/office-payrolls", tags=["office-payrolls"])


@router.post(
    "",
    response_model=OfficePayrollResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_office_payroll(
    workflow: OfficeWorkflow,
    payload: OfficePayrollCreate,
) -> OfficePayrollResponse:
    """Process payroll for an Office employee and store it as Pending."""
    record = await workflow.process_payroll(payload.to_request())
    return OfficePayrollResponse.model_validate(record)


@router.get("", response_model=OfficePayrollListResponse)
async def list_office_payrolls(workflow: OfficeWorkflow) -> OfficePayrollListResponse:
    records = await workflow.list_records()
    return OfficePayrollListResponse(
        items=[OfficePayrollResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.get(
    "/{payroll_id}",
    response_model=OfficePayrollResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_office_payroll(
    workflow: OfficeWorkflow,
    payroll_id: Annotated[int, Path()],
) -> OfficePayrollResponse:
    record = await workflow.get_record(payroll_id)
    return OfficePayrollResponse.model_validate(record)


@router.put(
    "/{payroll_id}",
    response_model=OfficePayrollResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_office_payroll(
    workflow: OfficeWorkflow,
    payroll_id: Annotated[int, Path()],
    payload: PayrollUpdate,
) -> OfficePayrollResponse:
    record = await workflow.update_record(payroll_id, payload.to_patch())
    return OfficePayrollResponse.model_validate(record)


@router.patch(
    "/{payroll_id}/status",
    response_model=OfficePayrollResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_office_payroll_status(
    workflow: OfficeWorkflow,
    payroll_id: Annotated[int, Path()],
    payload: StatusUpdate,
) -> OfficePayrollResponse:
    record = await workflow.update_status(payroll_id, payload.status)
    return OfficePayrollResponse.model_validate(record)


@router.delete(
    "/{payroll_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_office_payroll(
    workflow: OfficeWorkflow,
    payroll_id: Annotated[int, Path()],
) -> Response:
    await workflow.delete_record(payroll_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
