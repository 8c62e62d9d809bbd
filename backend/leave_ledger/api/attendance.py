# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query

from leave_ledger.api.deps import AuthDep
from leave_ledger.db import SessionDep
from leave_ledger.exceptions import AppError
from leave_ledger.schemas.attendance import AttendanceListResponse
from leave_ledger.services import attendance as attendance_service
from leave_ledger.services.employee import require_employee

attendance_router = APIRouter(prefix="/attendance", tags=["attendance"])


@attendance_router.get("/{employee_id}", response_model=AttendanceListResponse)
async def list_attendance(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
) -> AttendanceListResponse:
    """Attendance marks for an employee within an optional date window."""
    if start is not None and end is not None and end < start:
        raise AppError("end must not be before start", status_code=400)
    await require_employee(employee_id)
    return await attendance_service.list_attendance(session, employee_id, start, end)
