# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase
from leave_ledger.models.enums import LeaveStatus


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """An employee's leave request, filed against the fiscal quarter of its start date."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_request_employee_status", "employee_id", "status"),
        sa.CheckConstraint("quarter IN ('Q1', 'Q2', 'Q3', 'Q4')", name="ck_leave_request_quarter"),
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_request_range"),
    )

    employee_id: uuid.UUID = Field(index=True)
    leave_type: str = Field(max_length=20)
    start_date: date
    end_date: date
    days: int
    reason: str | None = None
    status: str = Field(
        default=LeaveStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "Pending"}
    )
    fiscal_year: int
    quarter: str = Field(max_length=2)
    decided_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    decided_by: uuid.UUID | None = None
