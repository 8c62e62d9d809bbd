from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from leave_ledger.models.enums import Quarter
from leave_ledger.schemas.base import RequestPayload


class LeaveAllocationPayload(RequestPayload):
    """Request body for updating the per-quarter allocation."""

    sick: int = Field(ge=0, le=30)
    casual: int = Field(ge=0, le=30)
    paid: int = Field(ge=0, le=30)


class LeaveAllocationResponse(BaseModel):
    """Days granted per quarter for each ledgered leave type."""

    sick: int
    casual: int
    paid: int
    updated_at: datetime | None


class ApplyAllocationResponse(BaseModel):
    """Result of pushing the allocation onto the current quarter's ledger rows."""

    fiscal_year: int
    quarter: Quarter
    updated: int
    allocation: LeaveAllocationResponse
