# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leave_ledger.models.enums import LeaveStatus, LeaveType, Quarter
from leave_ledger.schemas.base import RequestPayload
from leave_ledger.schemas.ledger import LeaveCounts

_EDIT_FIELDS = frozenset({"employee_id", "leave_type", "start_date", "end_date", "reason"})

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateLeavePayload(RequestPayload):
    """Request body for filing a new leave request."""

    employee_id: uuid.UUID
    leave_type: LeaveType = Field(alias="type")
    start_date: date = Field(alias="from")
    end_date: date = Field(alias="to")
    reason: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "'to' must not be before 'from'"
            raise ValueError(msg)
        return self


class UpdateLeavePayload(RequestPayload):
    """Request body for ``PUT /leaves/{id}``.

    Carries either requester edit fields or the approver's ``status``,
    never both.
    """

    employee_id: uuid.UUID | None = None
    leave_type: LeaveType | None = Field(default=None, alias="type")
    start_date: date | None = Field(default=None, alias="from")
    end_date: date | None = Field(default=None, alias="to")
    reason: str | None = Field(default=None, max_length=1000)
    status: LeaveStatus | None = None

    @model_validator(mode="after")
    def _validate_shape(self) -> Self:
        edits = _EDIT_FIELDS & self.model_fields_set
        if self.status is not None and edits:
            msg = "status cannot be changed together with request fields"
            raise ValueError(msg)
        if self.status is None and not edits:
            msg = "nothing to update"
            raise ValueError(msg)
        if self.start_date is not None and self.end_date is not None and self.end_date < self.start_date:
            msg = "'to' must not be before 'from'"
            raise ValueError(msg)
        return self


class CarryForwardPayload(RequestPayload):
    """Request body for carrying one employee's balance into the next quarter."""

    employee_id: uuid.UUID
    from_year: int = Field(ge=2000, le=2100)
    from_quarter: Quarter


class BulkCarryForwardPayload(RequestPayload):
    """Request body for carrying every employee's balance out of a quarter."""

    from_year: int = Field(ge=2000, le=2100)
    from_quarter: Quarter


class UnpaidImpactPayload(RequestPayload):
    """Request body for the unpaid-leave salary impact calculation."""

    employee_id: uuid.UUID
    days: int = Field(ge=0, le=31)
    month: str | None = Field(default=None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: LeaveType
    start_date: date
    end_date: date
    days: int
    reason: str | None
    status: LeaveStatus
    fiscal_year: int
    quarter: Quarter
    decided_at: datetime | None
    decided_by: uuid.UUID | None
    created_at: datetime


class LeaveListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveResponse]
    total: int


class CarryForwardResponse(BaseModel):
    """Outcome of carrying one employee's balance forward."""

    employee_id: uuid.UUID
    from_year: int
    from_quarter: Quarter
    to_year: int
    to_quarter: Quarter
    carried_forward: LeaveCounts


class BulkCarryForwardResponse(BaseModel):
    """Counts for a carry-forward run across employees."""

    from_year: int
    from_quarter: Quarter
    to_year: int
    to_quarter: Quarter
    processed: int
    errors: int


class UnpaidImpactResponse(BaseModel):
    """Salary deduction caused by unpaid leave in a month."""

    employee_id: uuid.UUID
    employee_name: str
    month: str
    unpaid_leave_days: int
    monthly_salary: float
    per_day_salary: float
    salary_deduction: float
    net_salary_after_deduction: float
