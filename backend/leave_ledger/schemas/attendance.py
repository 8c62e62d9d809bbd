# ruff: noqa: TC001, TC003
from __future__ import annotations

import datetime
import uuid

from pydantic import BaseModel

from leave_ledger.models.enums import AttendanceStatus


class AttendanceResponse(BaseModel):
    """A single attendance mark."""

    id: uuid.UUID
    employee_id: uuid.UUID
    date: datetime.date
    status: AttendanceStatus
    source_leave_id: uuid.UUID | None


class AttendanceListResponse(BaseModel):
    """Attendance marks for an employee, oldest first."""

    items: list[AttendanceResponse]
    total: int
