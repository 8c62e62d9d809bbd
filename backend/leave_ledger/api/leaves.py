# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, Response, status

from leave_ledger.api.deps import AdminDep, ApproverDep, AuthDep
from leave_ledger.db import SessionDep
from leave_ledger.exceptions import AppError
from leave_ledger.models.enums import LeaveStatus, Quarter
from leave_ledger.schemas.leave import (
    BulkCarryForwardPayload,
    BulkCarryForwardResponse,
    CarryForwardPayload,
    CarryForwardResponse,
    CreateLeavePayload,
    LeaveListResponse,
    LeaveResponse,
    UnpaidImpactPayload,
    UnpaidImpactResponse,
    UpdateLeavePayload,
)
from leave_ledger.schemas.ledger import QuarterlyBalanceResponse, QuarterlyLedgerListResponse
from leave_ledger.services import balance as balance_service
from leave_ledger.services import carry_forward as carry_forward_service
from leave_ledger.services import leave as leave_service
from leave_ledger.services.fiscal import FiscalQuarter
from leave_ledger.services.payroll import calculate_unpaid_impact

leaves_router = APIRouter(prefix="/leaves", tags=["leaves"])


@leaves_router.post("", response_model=LeaveResponse, status_code=status.HTTP_201_CREATED)
async def create_leave(
    payload: CreateLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """File a new leave request."""
    return await leave_service.create_leave(session, auth, payload)


@leaves_router.get("", response_model=LeaveListResponse)
async def list_leaves(
    session: SessionDep,
    auth: AuthDep,
    employee_id: uuid.UUID | None = Query(default=None),
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveListResponse:
    """List leave requests with optional filters."""
    return await leave_service.list_leaves(session, employee_id, status_filter, offset, limit)


@leaves_router.post("/test-carry-forward", response_model=CarryForwardResponse)
async def carry_forward_employee(
    payload: CarryForwardPayload,
    session: SessionDep,
    auth: ApproverDep,
) -> CarryForwardResponse:
    """Carry one employee's unused leave into the next quarter."""
    source = FiscalQuarter(payload.from_year, payload.from_quarter)
    return await carry_forward_service.carry_forward(session, payload.employee_id, source)


@leaves_router.post("/carry-forward", response_model=BulkCarryForwardResponse)
async def carry_forward_all(
    payload: BulkCarryForwardPayload,
    session: SessionDep,
    auth: AdminDep,
) -> BulkCarryForwardResponse:
    """Carry forward every employee with a ledger row in the source quarter (admin only)."""
    result = await carry_forward_service.run_carry_forward(
        session, FiscalQuarter(payload.from_year, payload.from_quarter)
    )
    return BulkCarryForwardResponse(
        from_year=result.source.fiscal_year,
        from_quarter=result.source.quarter,
        to_year=result.target.fiscal_year,
        to_quarter=result.target.quarter,
        processed=result.processed,
        errors=result.errors,
    )


@leaves_router.post("/calculate-unpaid-impact", response_model=UnpaidImpactResponse)
async def unpaid_impact(
    payload: UnpaidImpactPayload,
    auth: AuthDep,
) -> UnpaidImpactResponse:
    """Salary deduction that unpaid leave would cause in a month."""
    return await calculate_unpaid_impact(payload)


# Older clients still request the balance under its pre-quarterly name.
@leaves_router.get("/{employee_id}/quarterly-balance", response_model=QuarterlyBalanceResponse)
@leaves_router.get("/{employee_id}/financial-year-balance", response_model=QuarterlyBalanceResponse)
async def get_quarterly_balance(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    fiscal_year: int | None = Query(default=None, ge=2000, le=2100),
    quarter: Quarter | None = Query(default=None),
) -> QuarterlyBalanceResponse:
    """Balance breakdown for the current quarter, or the one given by ``fiscal_year``/``quarter``."""
    if (fiscal_year is None) != (quarter is None):
        raise AppError("fiscal_year and quarter must be given together", status_code=400)
    period = FiscalQuarter(fiscal_year, quarter) if fiscal_year is not None and quarter is not None else None
    return await balance_service.get_quarterly_balance(session, employee_id, period)


@leaves_router.get("/{employee_id}/quarterly-ledger", response_model=QuarterlyLedgerListResponse)
async def get_quarterly_ledger(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> QuarterlyLedgerListResponse:
    """Every ledger row of an employee, newest quarter first."""
    return await balance_service.list_quarterly_ledger(session, employee_id)


@leaves_router.get("/{leave_id}", response_model=LeaveResponse)
async def get_leave(
    leave_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """Get a single leave request."""
    return await leave_service.get_leave(session, leave_id)


@leaves_router.put("/{leave_id}", response_model=LeaveResponse)
async def update_leave(
    leave_id: uuid.UUID,
    payload: UpdateLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """Edit a pending request, or approve/reject it (approvers only)."""
    return await leave_service.update_leave(session, auth, leave_id, payload)


@leaves_router.delete("/{leave_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_leave(
    leave_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> Response:
    """Delete a pending request."""
    await leave_service.delete_leave(session, auth, leave_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
