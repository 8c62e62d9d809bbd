# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field

from leave_ledger.schemas.base import RequestPayload


class UpsertEmployeeRequest(RequestPayload):
    """Request body for upserting an employee in the directory."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=1, max_length=255)
    department: str | None = Field(default=None, max_length=100)
    position: str | None = Field(default=None, max_length=100)
    role: str = Field(default="employee", pattern=r"^(employee|manager|admin)$")
    monthly_salary: float = Field(default=0, ge=0)
    start_date: date | None = None


class EmployeeResponse(BaseModel):
    """Response schema for an employee."""

    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    department: str | None
    position: str | None
    role: str
    monthly_salary: float
    start_date: date | None


class EmployeeListResponse(BaseModel):
    """List of employees."""

    items: list[EmployeeResponse]
    total: int
