# ruff: noqa: TC001
from __future__ import annotations

from fastapi import APIRouter

from leave_ledger.api.deps import AdminDep, AuthDep
from leave_ledger.db import SessionDep
from leave_ledger.schemas.allocation import (
    ApplyAllocationResponse,
    LeaveAllocationPayload,
    LeaveAllocationResponse,
)
from leave_ledger.services import allocation as allocation_service

allocations_router = APIRouter(prefix="/leave-allocations", tags=["allocations"])


@allocations_router.get("", response_model=LeaveAllocationResponse)
async def get_allocation(
    session: SessionDep,
    auth: AuthDep,
) -> LeaveAllocationResponse:
    """Days granted per quarter for each leave type."""
    return await allocation_service.read_allocation(session)


@allocations_router.put("", response_model=LeaveAllocationResponse)
async def update_allocation(
    payload: LeaveAllocationPayload,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveAllocationResponse:
    """Change the per-quarter allocation used for new ledger rows (admin only)."""
    return await allocation_service.update_allocation(session, payload)


@allocations_router.post("/apply-to-current-quarter", response_model=ApplyAllocationResponse)
@allocations_router.post("/apply-to-future", response_model=ApplyAllocationResponse)
async def apply_to_current_quarter(
    session: SessionDep,
    auth: AdminDep,
) -> ApplyAllocationResponse:
    """Push the allocation onto every ledger row of the current quarter (admin only)."""
    return await allocation_service.apply_allocation_to_current_quarter(session)
