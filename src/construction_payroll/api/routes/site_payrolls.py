"""Site payroll endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Response, status

from construction_payroll.api.dependencies import SiteWorkflow
from construction_payroll.api.schemas import (
    AttendanceDetailsResponse,
    ErrorResponse,
    PayrollUpdate,
    SitePayrollCreate,
    SitePayrollListResponse,
    SitePayrollResponse,
    StatusUpdate,
)

router = APIRouter(prefix="/payrolls", tags=["site-payrolls"])


# ============================================================================
# Payroll runs
# ============================================================================


@router.post(
    "",
    response_model=SitePayrollResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_site_payroll(
    workflow: SiteWorkflow,
    payload: SitePayrollCreate,
) -> SitePayrollResponse:
    """Process payroll for a Site employee and store it as Pending."""
    record = await workflow.process_payroll(payload.to_request())
    return SitePayrollResponse.model_validate(record)


@router.get("", response_model=SitePayrollListResponse)
async def list_site_payrolls(workflow: SiteWorkflow) -> SitePayrollListResponse:
    """List site payroll records, newest first."""
    records = await workflow.list_records()
    return SitePayrollListResponse(
        items=[SitePayrollResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.get(
    "/{payroll_id}",
    response_model=SitePayrollResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_site_payroll(
    workflow: SiteWorkflow,
    payroll_id: Annotated[int, Path()],
) -> SitePayrollResponse:
    record = await workflow.get_record(payroll_id)
    return SitePayrollResponse.model_validate(record)


@router.get(
    "/{payroll_id}/attendance",
    response_model=AttendanceDetailsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_site_payroll_attendance(
    workflow: SiteWorkflow,
    payroll_id: Annotated[int, Path()],
) -> AttendanceDetailsResponse:
    """Per-weekday attendance, overtime and lateness of a record."""
    details = await workflow.attendance_details(payroll_id)
    return AttendanceDetailsResponse.model_validate(details)


# ============================================================================
# Record maintenance
# ============================================================================


@router.put(
    "/{payroll_id}",
    response_model=SitePayrollResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_site_payroll(
    workflow: SiteWorkflow,
    payroll_id: Annotated[int, Path()],
    payload: PayrollUpdate,
) -> SitePayrollResponse:
    """Update status and/or deductions; net pay is recomputed."""
    record = await workflow.update_record(payroll_id, payload.to_patch())
    return SitePayrollResponse.model_validate(record)


@router.patch(
    "/{payroll_id}/status",
    response_model=SitePayrollResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_site_payroll_status(
    workflow: SiteWorkflow,
    payroll_id: Annotated[int, Path()],
    payload: StatusUpdate,
) -> SitePayrollResponse:
    record = await workflow.update_status(payroll_id, payload.status)
    return SitePayrollResponse.model_validate(record)


@router.delete(
    "/{payroll_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_site_payroll(
    workflow: SiteWorkflow,
    payroll_id: Annotated[int, Path()],
) -> Response:
    """Delete a record. Ledger balances already deducted are not restored."""
    await workflow.delete_record(payroll_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
